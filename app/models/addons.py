from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.models.user import Base


class Addon(Base):
    __tablename__ = "Addon"
    __table_args__ = (UniqueConstraint("EventID", "Code", name="uq_addon_event_code"),)
    AddonID = Column(Integer, primary_key=True, autoincrement=True)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=False)
    Code = Column(String(50), nullable=False)
    Name = Column(String(120), nullable=False)
    Description = Column(Text, nullable=True)
    Price = Column(Numeric(10, 2), nullable=False, default=0)
    Category = Column(String(32), nullable=False, default="merchandise")
    # 'simple' | 'sized' | 'transport'; NULL rows are resolved when the catalog loads
    Kind = Column(String(16), nullable=True)
    Options = Column(JSON, nullable=True)  # e.g. {"sizes": ["S", "M"]} or {"icon": "mug"}
    IsActive = Column(Boolean, default=True)
    CreatedAt = Column(DateTime, server_default=func.now())
    UpdatedAt = Column(DateTime, server_default=func.now(), onupdate=func.now())
