from .User import User
from .Trip import Trip, TripStatus
from .TripMember import TripMember
from .JoinRequest import JoinRequest, RequestStatus
from .Message import Message

__all__ = [
    "User",
    "Trip",
    "TripStatus",
    "TripMember",
    "JoinRequest",
    "RequestStatus",
    "Message",
]
