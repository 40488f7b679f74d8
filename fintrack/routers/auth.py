import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import SQLModel, Field, Session, select
from pydantic import EmailStr

from ..database import get_session
from ..models.base import utcnow
from ..models.user import User
from ..core.errors import Unauthorized, ValidationError
from ..core.jwt import ACCESS_TOKEN_COOKIE, create_access_token
from ..core.logs import get_logger
from ..core.security import get_current_user, hash_password, verify_password
from ..config import settings
from ..seed import add_default_categories


logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


class RegisterIn(SQLModel):
    email: EmailStr
    password: str = Field(min_length=6)


class UserRead(SQLModel):
    id: uuid.UUID
    email: str
    created_at: datetime
    updated_at: datetime


def _user_read(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _reject_spaces(password: str) -> None:
    if any(c.isspace() for c in password):
        raise ValidationError("password", "Password must not contain spaces")


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: RegisterIn,
    session: Session = Depends(get_session),
):
    _reject_spaces(payload.password)
    email_norm = payload.email.strip().lower()
    existing = session.exec(select(User).where(User.email == email_norm)).first()
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    now = utcnow()
    user = User(
        id=uuid.uuid4(),
        email=email_norm,
        hashed_password=hash_password(payload.password),
        created_at=now,
        updated_at=now,
    )

    # The user and its default categories land in one commit or not at all
    try:
        session.add(user)
        categories = add_default_categories(session, user.id)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(user)
    logger.info("user_registered", user_id=str(user.id), categories=len(categories))
    return _user_read(user)


class LoginIn(SQLModel):
    email: EmailStr
    password: str


@router.post(
    "/login",
    response_model=UserRead,
    status_code=status.HTTP_200_OK,
)
def login(payload: LoginIn, response: Response, session: Session = Depends(get_session)):
    _reject_spaces(payload.password)
    email_norm = payload.email.strip().lower()
    user = session.exec(select(User).where(User.email == email_norm)).first()
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("login_failed")
        raise Unauthorized("Invalid email or password")

    token = create_access_token({"sub": str(user.id), "email": user.email})

    # HttpOnly cookie keeps the token away from JS; cross-site production needs SameSite=None + Secure
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
    )
    logger.info("login_succeeded", user_id=str(user.id))
    return _user_read(user)


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
)
def logout(response: Response):
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, path="/")
    return {"message": "Logged out"}


@router.get(
    "/me",
    response_model=UserRead,
    status_code=status.HTTP_200_OK,
)
def me(current_user: User = Depends(get_current_user)):
    return _user_read(current_user)
