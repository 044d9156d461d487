import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from database import get_db
from models.User import User
from schemas import EmptyEnvelope, Envelope, ListEnvelope, MessageRead, MessageWrite
from services import messages as message_service
from services.errors import NotFoundError, UnavailableError
from utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["Messages"])


# =====================================================
#                 LIST MESSAGES
# =====================================================
@router.get("/trip/{trip_id}", response_model=ListEnvelope[MessageRead])
def list_messages(
    trip_id: str,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        messages = message_service.list_for_trip(db, trip_id)
    except (NotFoundError, UnavailableError) as exc:
        logger.info("Messages for trip %s unavailable (%s); returning empty list", trip_id, exc.message)
        messages = []

    response.headers["Cache-Control"] = "public, max-age=60"
    return {"count": len(messages), "data": messages}


# =====================================================
#                 POST MESSAGE
# =====================================================
@router.post("", response_model=Envelope[MessageRead], status_code=status.HTTP_201_CREATED)
def post_message(
    payload: MessageWrite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"data": message_service.send_message(db, payload.trip, current_user, payload.content)}


# =====================================================
#                 DELETE MESSAGE
# =====================================================
@router.delete("/{message_id}", response_model=EmptyEnvelope)
def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message_service.delete_message(db, message_id, current_user)
    return {"data": {}}
