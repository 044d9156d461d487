"""Trip store: CRUD, search, stats and status derivation.

Trip status is derived from the dates at read time by :func:`derive_status`;
reads never write it back. The persisted column only changes through an
organizer edit or :func:`sync_trip_statuses`, and ``cancelled`` is sticky.
"""
import logging
import math
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_, func, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from models.Trip import Trip, TripStatus
from models.TripMember import TripMember, ROLE_ORGANIZER
from models.User import User
from services.errors import ConflictError, ForbiddenError, InvalidError, NotFoundError
from utils.dates import as_utc, utc_now

logger = logging.getLogger(__name__)


def derive_status(now: Optional[datetime], trip: Trip) -> TripStatus:
    if trip.status == TripStatus.CANCELLED:
        return TripStatus.CANCELLED

    now = as_utc(now) if now else utc_now()
    start, end = as_utc(trip.start_date), as_utc(trip.end_date)
    if start <= now <= end:
        return TripStatus.ONGOING
    if now > end:
        return TripStatus.COMPLETED
    return TripStatus.UPCOMING


def _status_clause(status: TripStatus, now: datetime):
    """SQL predicate matching trips whose *derived* status is ``status``."""
    if status == TripStatus.CANCELLED:
        return Trip.status == TripStatus.CANCELLED

    live = Trip.status != TripStatus.CANCELLED
    if status == TripStatus.ONGOING:
        return and_(live, Trip.start_date <= now, Trip.end_date >= now)
    if status == TripStatus.COMPLETED:
        return and_(live, Trip.end_date < now)
    return and_(live, Trip.start_date > now)


def sync_trip_statuses(db: Session, now: Optional[datetime] = None) -> int:
    """Persist derived statuses. Returns the number of rows changed."""
    now = as_utc(now) if now else utc_now()
    changed = 0
    for status in (TripStatus.UPCOMING, TripStatus.ONGOING, TripStatus.COMPLETED):
        result = db.execute(
            update(Trip)
            .where(_status_clause(status, now), Trip.status != status)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        changed += result.rowcount or 0
    db.commit()
    if changed:
        logger.info("Trip status sync updated %d trip(s)", changed)
    return changed


def _with_people(query):
    return query.options(
        joinedload(Trip.organizer),
        selectinload(Trip.members).joinedload(TripMember.user),
    )


def get_trip(db: Session, trip_id: int, with_requests: bool = False) -> Trip:
    query = _with_people(db.query(Trip))
    if with_requests:
        query = query.options(selectinload(Trip.join_requests))
    trip = query.filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFoundError("Trip not found")
    return trip


def list_trips(
    db: Session,
    destination: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    mode: Optional[str] = None,
    trip_type: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    now: Optional[datetime] = None,
):
    """Filtered, paginated trip listing, newest first. Returns (trips, total)."""
    now = as_utc(now) if now else utc_now()
    filters = []
    if destination:
        filters.append(Trip.destination.ilike(f"%{destination}%"))
    if start_date:
        filters.append(Trip.start_date >= as_utc(start_date))
    if end_date:
        filters.append(Trip.end_date <= as_utc(end_date))
    if mode:
        filters.append(Trip.mode == mode)
    if trip_type:
        filters.append(Trip.trip_type == trip_type)
    if status:
        try:
            filters.append(_status_clause(TripStatus(status), now))
        except ValueError:
            raise InvalidError("Invalid status")
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            Trip.title.ilike(pattern),
            Trip.description.ilike(pattern),
            Trip.destination.ilike(pattern),
        ))

    total = db.query(func.count(Trip.id)).filter(*filters).scalar()
    trips = (
        _with_people(db.query(Trip))
        .filter(*filters)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return trips, total


def trips_by_organizer(db: Session, user_id: int):
    return (
        _with_people(db.query(Trip))
        .filter(Trip.organizer_id == user_id)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
        .all()
    )


def trips_joined(db: Session, user_id: int):
    """Trips the user holds a seat on without organizing them."""
    member_of = select(TripMember.trip_id).where(TripMember.user_id == user_id)
    return (
        _with_people(db.query(Trip))
        .filter(Trip.id.in_(member_of), Trip.organizer_id != user_id)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
        .all()
    )


def create_trip(db: Session, organizer: User, data: dict, now: Optional[datetime] = None) -> Trip:
    now = as_utc(now) if now else utc_now()
    data = dict(data)
    data["start_date"] = as_utc(data["start_date"])
    data["end_date"] = as_utc(data["end_date"])
    if data["start_date"] < now:
        raise InvalidError("Start date must be in the future")

    trip = Trip(
        **data,
        organizer_id=organizer.id,
        current_participants=1,
        status=TripStatus.UPCOMING,
    )
    trip.members.append(TripMember(user_id=organizer.id, role=ROLE_ORGANIZER))
    db.add(trip)
    db.commit()
    logger.info("Trip %s created by user %s", trip.id, organizer.id)
    return get_trip(db, trip.id)


def _owned_trip(db: Session, trip_id: int, caller: User, verb: str) -> Trip:
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise NotFoundError("Trip not found")
    if trip.organizer_id != caller.id:
        raise ForbiddenError(f"Not authorized to {verb} this trip")
    return trip


def update_trip(db: Session, trip_id: int, caller: User, changes: dict) -> Trip:
    trip = _owned_trip(db, trip_id, caller, "update")

    start = as_utc(changes.get("start_date") or trip.start_date)
    end = as_utc(changes.get("end_date") or trip.end_date)
    if end <= start:
        raise InvalidError("End date must be after start date")

    max_participants = changes.get("max_participants")
    if max_participants is not None and max_participants < trip.current_participants:
        raise ConflictError(
            f"Maximum participants cannot be lower than current participants ({trip.current_participants})"
        )

    for key, value in changes.items():
        if key in ("start_date", "end_date"):
            value = as_utc(value)
        elif key == "status":
            value = TripStatus(value)
        setattr(trip, key, value)

    db.commit()
    return get_trip(db, trip.id)


def delete_trip(db: Session, trip_id: int, caller: User) -> None:
    trip = _owned_trip(db, trip_id, caller, "delete")
    db.delete(trip)
    db.commit()
    logger.info("Trip %s deleted by user %s", trip_id, caller.id)


def trip_stats(db: Session, now: Optional[datetime] = None) -> dict:
    """Totals over live trips that have not started yet."""
    now = as_utc(now) if now else utc_now()
    upcoming = and_(Trip.status != TripStatus.CANCELLED, Trip.start_date >= now)
    total_trips, total_participants, total_cost = db.query(
        func.count(Trip.id),
        func.coalesce(func.sum(Trip.current_participants), 0),
        func.coalesce(func.sum(Trip.estimated_cost), 0),
    ).filter(upcoming).one()

    average = math.floor(total_cost / total_participants + 0.5) if total_participants else 0
    return {
        "total_trips": total_trips,
        "total_participants": int(total_participants),
        "average_cost_per_person": average,
    }


def user_stats(db: Session, user_id: int, now: Optional[datetime] = None) -> dict:
    now = as_utc(now) if now else utc_now()
    created = db.query(func.count(Trip.id)).filter(Trip.organizer_id == user_id).scalar()
    joined = (
        db.query(func.count(TripMember.id))
        .join(Trip, Trip.id == TripMember.trip_id)
        .filter(TripMember.user_id == user_id, Trip.organizer_id != user_id)
        .scalar()
    )
    completed = (
        db.query(func.count(TripMember.id))
        .join(Trip, Trip.id == TripMember.trip_id)
        .filter(TripMember.user_id == user_id, _status_clause(TripStatus.COMPLETED, now))
        .scalar()
    )
    return {
        "trips_created": created,
        "trips_joined": joined,
        "trips_completed": completed,
        "total_trips": created + joined,
    }
