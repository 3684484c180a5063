from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from app.models.user import Base


class Workshop(Base):
    __tablename__ = "Workshop"
    WorkshopID = Column(Integer, primary_key=True, autoincrement=True)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=False)
    Title = Column(String(255), nullable=False)
    Instructor = Column(String(255), nullable=False)
    Level = Column(String(32), nullable=False)  # beginner | intermediate | advanced | professional
    Description = Column(Text, nullable=True)
    Date = Column(DateTime, nullable=False)
    Time = Column(String(32), nullable=False)
    Price = Column(Numeric(10, 2), nullable=False, default=0)
    Capacity = Column(Integer, nullable=False)
    Enrolled = Column(Integer, nullable=False, default=0)
    LeaderCapacity = Column(Integer, nullable=False, default=0)
    FollowerCapacity = Column(Integer, nullable=False, default=0)
    LeadersEnrolled = Column(Integer, nullable=False, default=0)
    FollowersEnrolled = Column(Integer, nullable=False, default=0)


class Milonga(Base):
    __tablename__ = "Milonga"
    MilongaID = Column(Integer, primary_key=True, autoincrement=True)
    EventID = Column(Integer, ForeignKey("Event.EventID"), nullable=False)
    Name = Column(String(255), nullable=False)
    Description = Column(Text, nullable=True)
    Date = Column(DateTime, nullable=False)
    Time = Column(String(32), nullable=False)
    Venue = Column(String(255), nullable=False)
    Price = Column(Numeric(10, 2), nullable=False, default=0)
    EarlyBirdPrice = Column(Numeric(10, 2), default=0)
    EarlyBirdEndDate = Column(DateTime, nullable=True)
    Type = Column(String(16), nullable=False, default="regular")  # regular | gala | desert
    Capacity = Column(Integer, nullable=False)
    Enrolled = Column(Integer, nullable=False, default=0)
