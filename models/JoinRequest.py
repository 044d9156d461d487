from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum, func, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from database import Base
import enum


class RequestStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JoinRequest(Base):
    __tablename__ = "join_requests"
    __table_args__ = (
        # one request per (trip, user), whatever its status
        UniqueConstraint("trip_id", "user_id", name="uq_join_request"),
        Index("ix_join_requests_trip_status", "trip_id", "status"),
        Index("ix_join_requests_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(500), nullable=False)
    status = Column(SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    trip = relationship("Trip", back_populates="join_requests")
    user = relationship("User")
