from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import relationship
from database import Base


def initials_from_name(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:2]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    branch = Column(String(100), default="", nullable=False)
    year = Column(String(20), default="", nullable=False)
    avatar = Column(String(500), nullable=True)  # initials when no image is set
    bio = Column(Text, default="", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    trips_created = relationship("Trip", back_populates="organizer")
    memberships = relationship("TripMember", back_populates="user", cascade="all, delete-orphan")
