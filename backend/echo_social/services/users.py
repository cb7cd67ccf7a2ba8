"""User account services."""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_social.models.user import User
from echo_social.schemas.user import UserCreate, UserUpdateRequest
from echo_social.services.errors import ConflictError

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def create_user(db: Session, payload: UserCreate) -> User:
    """Register a new account; usernames are unique."""

    username = payload.username.strip()
    if get_user_by_username(db, username) is not None:
        raise ConflictError("Username already exists")
    user = User(
        username=username,
        password=payload.password,
        display_name=payload.display_name.strip(),
        email=payload.email,
        avatar=payload.avatar or None,
        bio=payload.bio or None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username already exists") from None
    db.refresh(user)
    logger.info("users.created user_id=%s", user.id)
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Return the user when the stored password matches exactly."""

    user = get_user_by_username(db, username)
    if user is None or user.password != password:
        return None
    return user


def update_user(db: Session, user_id: int, payload: UserUpdateRequest) -> User | None:
    """Update editable profile fields for one user."""

    user = db.get(User, user_id)
    if user is None:
        return None
    fields = payload.provided_fields()
    if "display_name" in fields:
        user.display_name = payload.display_name.strip()
    if "bio" in fields:
        user.bio = payload.bio
    if "avatar" in fields:
        user.avatar = payload.avatar
    db.commit()
    db.refresh(user)
    return user


def search_users(db: Session, query: str) -> list[User]:
    """Case-insensitive substring match on username or display name."""

    needle = query.strip().lower()
    if not needle:
        return []
    pattern = f"%{needle}%"
    stmt = (
        select(User)
        .where(or_(func.lower(User.username).like(pattern), func.lower(User.display_name).like(pattern)))
        .order_by(User.id.asc())
    )
    return list(db.scalars(stmt).all())
