from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.models.user import Base


class GalaTable(Base):
    __tablename__ = "GalaTable"
    __table_args__ = (UniqueConstraint("EventID", "TableNumber", name="uq_galatable_event_number"),)
    TableID = Column(Integer, primary_key=True, autoincrement=True)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=False)
    TableNumber = Column(Integer, nullable=False)
    TotalSeats = Column(Integer, nullable=False, default=6)
    OccupiedSeats = Column(Integer, nullable=False, default=0)
    IsVip = Column(Boolean, default=False)
    Price = Column(Numeric(10, 2), nullable=False)
    EarlyBirdPrice = Column(Numeric(10, 2), default=0)
    EarlyBirdEndDate = Column(DateTime, nullable=True)
    IsActive = Column(Boolean, default=True)


class SeatingLayout(Base):
    """Opaque seating-canvas document; nothing in pricing reads it."""

    __tablename__ = "SeatingLayout"
    LayoutID = Column(Integer, primary_key=True, autoincrement=True)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=True, unique=True)
    Layout = Column(JSON, nullable=False)
    CreatedAt = Column(DateTime, server_default=func.now())
    UpdatedAt = Column(DateTime, server_default=func.now(), onupdate=func.now())
