from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.User import User
from schemas import Envelope, ListEnvelope, TripRead, UserProfileRead, UserRead, UserStats, UserUpdate
from services import trips as trip_service
from services.errors import ForbiddenError, NotFoundError
from utils.security import get_current_user

router = APIRouter(prefix="/api/users", tags=["Users"])


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}", response_model=Envelope[UserProfileRead])
def get_user(user_id: int, db: Session = Depends(get_db)):
    """
    Get a user profile with the trips they created and joined.
    """
    user = _get_user(db, user_id)
    profile = UserRead.model_validate(user).model_dump()
    profile["trips_created"] = trip_service.trips_by_organizer(db, user_id)
    profile["trips_joined"] = trip_service.trips_joined(db, user_id)
    return {"data": profile}


@router.put("/{user_id}", response_model=Envelope[UserRead])
def update_user(
    user_id: int,
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update your own profile.
    """
    if user_id != current_user.id:
        raise ForbiddenError("Not authorized to update this profile")

    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(current_user, key, value)

    db.commit()
    db.refresh(current_user)
    return {"data": current_user}


@router.get("/{user_id}/trips", response_model=ListEnvelope[TripRead])
def get_user_trips(user_id: int, db: Session = Depends(get_db)):
    trips = trip_service.trips_by_organizer(db, user_id)
    return {"count": len(trips), "data": trips}


@router.get("/{user_id}/participations", response_model=ListEnvelope[TripRead])
def get_user_participations(user_id: int, db: Session = Depends(get_db)):
    trips = trip_service.trips_joined(db, user_id)
    return {"count": len(trips), "data": trips}


@router.get("/{user_id}/stats", response_model=Envelope[UserStats])
def get_user_stats(user_id: int, db: Session = Depends(get_db)):
    _get_user(db, user_id)
    return {"data": trip_service.user_stats(db, user_id)}
