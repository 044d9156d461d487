import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float, Enum as SQLEnum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class TripStatus(enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Trip(Base):
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("current_participants <= max_participants", name="ck_trip_capacity"),
        CheckConstraint("current_participants >= 1", name="ck_trip_min_participants"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    destination = Column(String(100), nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, default=1, nullable=False)
    estimated_cost = Column(Float, default=0, nullable=False)
    mode = Column(String(20), default="Bus", nullable=False)
    trip_type = Column("type", String(20), default="Leisure", nullable=False)
    status = Column(SQLEnum(TripStatus), default=TripStatus.UPCOMING, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    organizer = relationship("User", back_populates="trips_created", lazy="joined")
    members = relationship("TripMember", back_populates="trip", cascade="all, delete-orphan", order_by="TripMember.id")
    join_requests = relationship(
        "JoinRequest", back_populates="trip", cascade="all, delete-orphan", order_by="JoinRequest.id.desc()"
    )
    messages = relationship("Message", back_populates="trip", cascade="all, delete-orphan")

    @property
    def participants(self):
        return [m.user for m in self.members]

    @property
    def participant_ids(self):
        return {m.user_id for m in self.members}

    @property
    def current_status(self) -> TripStatus:
        from services.trips import derive_status
        return derive_status(None, self)

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    @property
    def available_seats(self) -> int:
        return self.max_participants - self.current_participants
