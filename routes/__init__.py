from . import auth
from . import users
from . import trips
from . import join_requests
from . import messages

__all__ = [
    "auth",
    "users",
    "trips",
    "join_requests",
    "messages",
]
