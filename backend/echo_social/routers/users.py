"""User profile and follower graph routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from echo_social.db.dependencies import get_db
from echo_social.schemas.common import MAX_ID
from echo_social.schemas.post import PostRead
from echo_social.schemas.user import UserRead, UserUpdateRequest
from echo_social.services.feed import get_followers, get_following
from echo_social.services.posts import list_posts_by_user
from echo_social.services.users import get_user, search_users, update_user

router = APIRouter(prefix="/users")


@router.get("/search", response_model=list[UserRead])
def search(q: str = Query(default=""), db: Session = Depends(get_db)) -> list[UserRead]:
    """Find users by username or display name."""

    return [UserRead.model_validate(user) for user in search_users(db, q)]


@router.get("/{user_id}", response_model=UserRead)
def read_user(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> UserRead:
    user = get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
def patch_user(
    payload: UserUpdateRequest,
    user_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> UserRead:
    """Edit display name, bio or avatar."""

    user = update_user(db, user_id, payload)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(user)


@router.get("/{user_id}/posts", response_model=list[PostRead])
def read_user_posts(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[PostRead]:
    return [PostRead.model_validate(post) for post in list_posts_by_user(db, user_id)]


@router.get("/{user_id}/followers", response_model=list[UserRead])
def read_followers(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[UserRead]:
    return [UserRead.model_validate(user) for user in get_followers(db, user_id)]


@router.get("/{user_id}/following", response_model=list[UserRead])
def read_following(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[UserRead]:
    return [UserRead.model_validate(user) for user in get_following(db, user_id)]
