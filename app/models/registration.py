import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from app.models.user import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Registration(Base):
    """Frozen copy of a submitted selection. Only payment fields change afterwards."""

    __tablename__ = "Registration"
    RegistrationID = Column(String(36), primary_key=True, default=_new_id)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=False)
    PackageType = Column(String(64), nullable=False)
    Role = Column(String(16), nullable=False)
    LeaderInfo = Column(JSON, nullable=True)
    FollowerInfo = Column(JSON, nullable=True)
    WorkshopIDs = Column(JSON, nullable=False, default=list)
    MilongaIDs = Column(JSON, nullable=False, default=list)
    SelectedTableNumber = Column(Integer, nullable=True)
    WantsWorkshops = Column(Boolean, nullable=True)
    Addons = Column(JSON, nullable=False, default=list)
    PriceBreakdown = Column(JSON, nullable=False, default=list)
    TotalAmount = Column(Numeric(10, 2), nullable=False)
    Currency = Column(String(8), nullable=False, default="AED")
    PaymentMethod = Column(String(16), nullable=True)  # stripe | offline
    PaymentStatus = Column(String(16), nullable=False, default="pending")
    StripePaymentIntentID = Column(String(255), nullable=True)
    CreatedAt = Column(DateTime, server_default=func.now())
    PaidAt = Column(DateTime, nullable=True)
