import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from models.User import User
from schemas import EmptyEnvelope, Envelope, JoinRequestRead, JoinRequestWithTrip, JoinRequestWrite, ListEnvelope
from services import join_requests as request_service
from services.errors import NotFoundError, UnavailableError
from utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["Join Requests"])


@router.post("", response_model=Envelope[JoinRequestWithTrip], status_code=status.HTTP_201_CREATED)
def send_request(
    payload: JoinRequestWrite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ask to join a trip"""
    return {"data": request_service.submit_request(db, payload.trip_id, current_user, payload.message)}


@router.get("/trip/{trip_id}", response_model=ListEnvelope[JoinRequestRead])
def get_requests_for_trip(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a trip's requests, newest first. Never fails on a bad trip id."""
    try:
        requests = request_service.list_for_trip(db, trip_id)
    except (NotFoundError, UnavailableError) as exc:
        logger.info("Requests for trip %s unavailable (%s); returning empty list", trip_id, exc.message)
        requests = []
    return {"count": len(requests), "data": requests}


@router.get("/user/{user_id}", response_model=ListEnvelope[JoinRequestWithTrip])
def get_requests_by_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    requests = request_service.list_for_user(db, user_id, current_user)
    return {"count": len(requests), "data": requests}


@router.put("/{request_id}/approve", response_model=Envelope[JoinRequestWithTrip])
def approve_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"data": request_service.approve_request(db, request_id, current_user)}


@router.put("/{request_id}/reject", response_model=Envelope[JoinRequestWithTrip])
def reject_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"data": request_service.reject_request(db, request_id, current_user)}


@router.delete("/{request_id}", response_model=EmptyEnvelope)
def cancel_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Withdraw your own pending request"""
    request_service.cancel_request(db, request_id, current_user)
    return {"data": {}}
