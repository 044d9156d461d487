import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.User import User, initials_from_name
from schemas import EmptyEnvelope, Envelope, LoginWrite, PasswordUpdate, RegisterWrite, TokenEnvelope, UserRead
from services.errors import AuthError, InvalidError
from utils.security import create_access_token, get_current_user, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _token_response(user: User) -> dict:
    return {"token": create_access_token(user.id), "data": user}


@router.post("/register", response_model=TokenEnvelope, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterWrite, db: Session = Depends(get_db)):
    domain = settings.ALLOWED_EMAIL_DOMAIN.lower().lstrip("@")
    if domain and not payload.email.endswith(f"@{domain}"):
        raise InvalidError(f"Please use a valid email address (@{domain})")

    if db.query(User).filter(User.email == payload.email).first():
        raise InvalidError("User already exists with this email")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        branch=payload.branch,
        year=payload.year,
        avatar=initials_from_name(payload.name),
        bio="",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _token_response(user)


@router.post("/login", response_model=TokenEnvelope)
def login(payload: LoginWrite, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthError("Invalid credentials")
    return _token_response(user)


@router.get("/me", response_model=Envelope[UserRead])
def me(current_user: User = Depends(get_current_user)):
    return {"data": current_user}


@router.post("/logout", response_model=EmptyEnvelope)
def logout(current_user: User = Depends(get_current_user)):
    # tokens are stateless; the client drops its copy
    return {"data": {}}


@router.put("/updatepassword", response_model=TokenEnvelope)
def update_password(
    payload: PasswordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise AuthError("Password is incorrect")

    current_user.password_hash = hash_password(payload.new_password)
    db.commit()
    db.refresh(current_user)
    return _token_response(current_user)
