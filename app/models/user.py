from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AdminUser(Base):
    __tablename__ = "AdminUser"
    AdminID = Column(Integer, primary_key=True, autoincrement=True)
    Username = Column(String(100), nullable=False, unique=True)
    Email = Column(String(255), nullable=False, unique=True)
    HashedPassword = Column(String(255), nullable=False)
    Role = Column(String(16), nullable=False, default="admin")  # admin | manager | staff
    IsActive = Column(Boolean, default=True)
    LastLoginAt = Column(DateTime, nullable=True)
    CreatedAt = Column(DateTime, server_default=func.now())
    UpdatedAt = Column(DateTime, server_default=func.now(), onupdate=func.now())
