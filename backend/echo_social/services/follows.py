"""Follow relation writes."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_social.models.follow import Follow
from echo_social.models.user import User
from echo_social.schemas.post import FollowCreate
from echo_social.services.errors import ConflictError, InvalidOperationError, NotFoundError
from echo_social.services.hooks import FOLLOW_CREATED, PostCommitHooks


def get_follow(db: Session, follower_id: int, following_id: int) -> Follow | None:
    return db.scalar(
        select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    )


def create_follow(db: Session, payload: FollowCreate, *, hooks: PostCommitHooks | None = None) -> Follow:
    """Follow another user once; notifies the followed user."""

    if payload.follower_id == payload.following_id:
        raise InvalidOperationError("Users cannot follow themselves")
    if get_follow(db, payload.follower_id, payload.following_id) is not None:
        raise ConflictError("Already following this user")
    if db.get(User, payload.following_id) is None:
        raise NotFoundError("User not found")
    follow = Follow(follower_id=payload.follower_id, following_id=payload.following_id)
    db.add(follow)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already following this user") from None
    db.refresh(follow)
    if hooks is not None:
        hooks.run(FOLLOW_CREATED, db, follow)
    return follow


def delete_follow(db: Session, follow_id: int) -> bool:
    follow = db.get(Follow, follow_id)
    if follow is None:
        return False
    db.delete(follow)
    db.commit()
    return True
