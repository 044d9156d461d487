"""Per-trip chat log.

Sending does not check that the sender holds a seat on the trip; any
authenticated user may post. Listing degrades to an empty result for
unknown trips (see routes/messages.py).
"""
import logging
from typing import List

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from models.Message import Message
from models.User import User
from services.errors import ForbiddenError, NotFoundError, ServiceError, UnavailableError

logger = logging.getLogger(__name__)


def list_for_trip(db: Session, raw_trip_id) -> List[Message]:
    try:
        trip_id = int(raw_trip_id)
    except (TypeError, ValueError):
        raise NotFoundError("Trip not found")

    try:
        return (
            db.query(Message)
            .options(joinedload(Message.sender))
            .filter(Message.trip_id == trip_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
    except OperationalError as exc:
        raise UnavailableError("Database unavailable") from exc


def send_message(db: Session, trip_id: int, sender: User, content: str) -> Message:
    message = Message(trip_id=trip_id, sender_id=sender.id, content=content)
    db.add(message)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to store message for trip %s: %s", trip_id, exc)
        raise ServiceError("Failed to send message") from exc

    db.refresh(message)
    return message


def delete_message(db: Session, message_id: int, caller: User) -> None:
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise NotFoundError("Message not found")
    if message.sender_id != caller.id:
        raise ForbiddenError("Not authorized to delete this message")

    db.delete(message)
    db.commit()
