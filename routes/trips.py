import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models.User import User
from schemas import EmptyEnvelope, Envelope, ListEnvelope, TripDetail, TripPage, TripRead, TripStats, TripUpdate, TripWrite
from services import trips as trip_service
from utils.security import get_current_user

router = APIRouter(prefix="/api/trips", tags=["Trips"])


@router.get("", response_model=TripPage)
def list_trips(
    destination: Optional[str] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    mode: Optional[str] = None,
    trip_type: Optional[str] = Query(None, alias="type"),
    trip_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    trips, total = trip_service.list_trips(
        db,
        destination=destination,
        start_date=start_date,
        end_date=end_date,
        mode=mode,
        trip_type=trip_type,
        status=trip_status,
        search=search,
        page=page,
        limit=limit,
    )
    return {
        "count": len(trips),
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit),
        "data": trips,
    }


@router.get("/stats", response_model=Envelope[TripStats])
def get_trip_stats(db: Session = Depends(get_db)):
    return {"data": trip_service.trip_stats(db)}


@router.get("/user/{user_id}", response_model=ListEnvelope[TripRead])
def get_trips_by_user(user_id: int, db: Session = Depends(get_db)):
    trips = trip_service.trips_by_organizer(db, user_id)
    return {"count": len(trips), "data": trips}


@router.get("/{trip_id}", response_model=Envelope[TripDetail])
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    return {"data": trip_service.get_trip(db, trip_id, with_requests=True)}


@router.post("", response_model=Envelope[TripRead], status_code=status.HTTP_201_CREATED)
def create_trip(
    payload: TripWrite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"data": trip_service.create_trip(db, current_user, payload.model_dump())}


@router.put("/{trip_id}", response_model=Envelope[TripRead])
def update_trip(
    trip_id: int,
    payload: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return {"data": trip_service.update_trip(db, trip_id, current_user, changes)}


@router.delete("/{trip_id}", response_model=EmptyEnvelope)
def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    trip_service.delete_trip(db, trip_id, current_user)
    return {"data": {}}
