"""Join request lifecycle.

A request starts ``pending`` and moves exactly once, to ``approved`` or
``rejected``, at the organizer's hand; the requester may withdraw it while
it is still pending. There is at most one request per (trip, user) pair
whatever its status, backed by the ``uq_join_request`` constraint.

Approval admits the requester: the participant row, the seat counter and
the request status are committed in one transaction. The counter moves
through a conditional UPDATE guarded by ``current_participants <
max_participants``, so concurrent approvals cannot push a trip past
capacity.
"""
import logging
from typing import List

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload

from models.JoinRequest import JoinRequest, RequestStatus
from models.Trip import Trip
from models.TripMember import TripMember, ROLE_PARTICIPANT
from models.User import User
from services.errors import (
    ConflictError,
    DuplicateRequestError,
    ForbiddenError,
    NotFoundError,
    UnavailableError,
)
from utils.dates import utc_now

logger = logging.getLogger(__name__)

TRIP_FULL = "Trip is already full"


def _parse_id(raw) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise NotFoundError("Trip not found")


def _duplicate(existing: JoinRequest) -> DuplicateRequestError:
    return DuplicateRequestError(
        f"You have already sent a request for this trip (Status: {existing.status.value})"
    )


def _find_existing(db: Session, trip_id: int, user_id: int):
    return db.query(JoinRequest).filter(
        JoinRequest.trip_id == trip_id,
        JoinRequest.user_id == user_id,
    ).first()


def get_request(db: Session, request_id: int) -> JoinRequest:
    request = (
        db.query(JoinRequest)
        .options(joinedload(JoinRequest.user), joinedload(JoinRequest.trip))
        .filter(JoinRequest.id == request_id)
        .first()
    )
    if not request:
        raise NotFoundError("Request not found")
    return request


def submit_request(db: Session, trip_id: int, requester: User, message: str) -> JoinRequest:
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFoundError("Trip not found")

    if trip.is_full:
        raise ConflictError(TRIP_FULL)

    if requester.id in trip.participant_ids:
        raise ConflictError("You are already a participant in this trip")

    if trip.organizer_id == requester.id:
        raise ConflictError("You cannot request to join your own trip")

    existing = _find_existing(db, trip.id, requester.id)
    if existing:
        raise _duplicate(existing)

    request = JoinRequest(
        user_id=requester.id,
        message=message,
        status=RequestStatus.PENDING,
    )
    trip.join_requests.append(request)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against another submission from the same user
        db.rollback()
        existing = _find_existing(db, trip_id, requester.id)
        if existing:
            raise _duplicate(existing)
        raise

    logger.info("Join request %s submitted by user %s for trip %s", request.id, requester.id, trip_id)
    return get_request(db, request.id)


def list_for_trip(db: Session, raw_trip_id) -> List[JoinRequest]:
    """All requests for a trip, newest first.

    Raises NotFoundError for an unknown or malformed trip id and
    UnavailableError when the store cannot be reached.
    """
    trip_id = _parse_id(raw_trip_id)
    try:
        if not db.query(Trip.id).filter(Trip.id == trip_id).first():
            raise NotFoundError("Trip not found")
        return (
            db.query(JoinRequest)
            .options(joinedload(JoinRequest.user))
            .filter(JoinRequest.trip_id == trip_id)
            .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
            .all()
        )
    except OperationalError as exc:
        raise UnavailableError("Database unavailable") from exc


def list_for_user(db: Session, raw_user_id, caller: User) -> List[JoinRequest]:
    if str(raw_user_id) != str(caller.id):
        raise ForbiddenError("Not authorized to view these requests")
    return (
        db.query(JoinRequest)
        .options(
            joinedload(JoinRequest.user),
            joinedload(JoinRequest.trip).joinedload(Trip.organizer),
        )
        .filter(JoinRequest.user_id == caller.id)
        .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
        .all()
    )


def _pending_for_organizer(db: Session, request_id: int, caller: User, verb: str) -> JoinRequest:
    request = get_request(db, request_id)
    if request.trip.organizer_id != caller.id:
        raise ForbiddenError(f"Not authorized to {verb} this request")
    if request.status != RequestStatus.PENDING:
        raise ConflictError(f"Request has already been {request.status.value}")
    return request


def approve_request(db: Session, request_id: int, caller: User) -> JoinRequest:
    request = _pending_for_organizer(db, request_id, caller, "approve")
    trip = request.trip
    if trip.is_full:
        raise ConflictError(TRIP_FULL)

    try:
        seat = db.execute(
            update(Trip)
            .where(Trip.id == trip.id, Trip.current_participants < Trip.max_participants)
            .values(current_participants=Trip.current_participants + 1)
            .execution_options(synchronize_session=False)
        )
        if seat.rowcount != 1:
            db.rollback()
            raise ConflictError(TRIP_FULL)

        db.add(TripMember(trip_id=trip.id, user_id=request.user_id, role=ROLE_PARTICIPANT))
        request.status = RequestStatus.APPROVED
        request.responded_at = utc_now()
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User is already a participant in this trip")

    logger.info("Join request %s approved; user %s joined trip %s", request_id, request.user_id, trip.id)
    db.expire_all()
    return get_request(db, request_id)


def reject_request(db: Session, request_id: int, caller: User) -> JoinRequest:
    request = _pending_for_organizer(db, request_id, caller, "reject")
    request.status = RequestStatus.REJECTED
    request.responded_at = utc_now()
    db.commit()

    logger.info("Join request %s rejected", request_id)
    return get_request(db, request_id)


def cancel_request(db: Session, request_id: int, caller: User) -> None:
    request = db.query(JoinRequest).filter(JoinRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Request not found")
    if request.user_id != caller.id:
        raise ForbiddenError("Not authorized to cancel this request")
    if request.status != RequestStatus.PENDING:
        raise ConflictError("Can only cancel pending requests")

    db.delete(request)
    db.commit()
    logger.info("Join request %s cancelled by user %s", request_id, caller.id)
