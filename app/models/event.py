from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from app.models.user import Base


class Event(Base):
    """A festival edition. Package prices live on the event row."""

    __tablename__ = "Event"
    EventID = Column(Integer, primary_key=True, autoincrement=True)
    Name = Column(String(255), nullable=False)
    Year = Column(Integer, nullable=False, unique=True)
    StartDate = Column(DateTime, nullable=False)
    EndDate = Column(DateTime, nullable=False)
    RegistrationOpenDate = Column(DateTime, nullable=False)
    RegistrationCloseDate = Column(DateTime, nullable=False)
    Description = Column(Text, nullable=True)
    Venue = Column(String(255), nullable=False)
    IsActive = Column(Boolean, default=True)
    # Only one event should be current at a time; see event_service.set_current_event
    IsCurrent = Column(Boolean, default=False)

    # Workshop pricing (overrides per-workshop price when set)
    WorkshopStandardPrice = Column(Numeric(10, 2), default=0)
    WorkshopEarlyBirdPrice = Column(Numeric(10, 2), default=0)
    WorkshopEarlyBirdEndDate = Column(DateTime, nullable=True)

    # Full package
    FullPackageStandardPrice = Column(Numeric(10, 2), default=0)
    FullPackageEarlyBirdPrice = Column(Numeric(10, 2), default=0)
    FullPackageEarlyBirdEndDate = Column(DateTime, nullable=True)
    FullPackage24HourPrice = Column(Numeric(10, 2), default=0)
    FullPackage24HourStartDate = Column(DateTime, nullable=True)
    FullPackage24HourEndDate = Column(DateTime, nullable=True)

    # Evening package
    EveningPackageStandardPrice = Column(Numeric(10, 2), default=0)
    EveningPackageEarlyBirdPrice = Column(Numeric(10, 2), default=0)
    EveningPackageEarlyBirdEndDate = Column(DateTime, nullable=True)
    EveningPackage24HourPrice = Column(Numeric(10, 2), default=0)
    EveningPackage24HourStartDate = Column(DateTime, nullable=True)
    EveningPackage24HourEndDate = Column(DateTime, nullable=True)

    # Premium package + 4 nights accommodation
    Accommodation4NightsSinglePrice = Column(Numeric(10, 2), default=0)
    Accommodation4NightsDoublePrice = Column(Numeric(10, 2), default=0)
    Accommodation4NightsEarlyBirdSinglePrice = Column(Numeric(10, 2), default=0)
    Accommodation4NightsEarlyBirdDoublePrice = Column(Numeric(10, 2), default=0)
    Accommodation4NightsEarlyBirdEndDate = Column(DateTime, nullable=True)

    # Premium package + 3 nights accommodation
    Accommodation3NightsSinglePrice = Column(Numeric(10, 2), default=0)
    Accommodation3NightsDoublePrice = Column(Numeric(10, 2), default=0)
    Accommodation3NightsEarlyBirdSinglePrice = Column(Numeric(10, 2), default=0)
    Accommodation3NightsEarlyBirdDoublePrice = Column(Numeric(10, 2), default=0)
    Accommodation3NightsEarlyBirdEndDate = Column(DateTime, nullable=True)

    CreatedAt = Column(DateTime, server_default=func.now())
    UpdatedAt = Column(DateTime, server_default=func.now(), onupdate=func.now())
