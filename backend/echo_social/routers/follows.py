"""Follow routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Response
from sqlalchemy.orm import Session

from echo_social.context import ServerContext
from echo_social.db.dependencies import get_context, get_db
from echo_social.schemas.common import MAX_ID
from echo_social.schemas.post import FollowCreate, FollowRead
from echo_social.services.follows import create_follow, delete_follow

router = APIRouter(prefix="/follows")


@router.post("", response_model=FollowRead, status_code=201)
def add_follow(
    payload: FollowCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> FollowRead:
    """Follow a user and notify them."""

    return FollowRead.model_validate(create_follow(db, payload, hooks=context.hooks))


@router.delete("/{follow_id}", status_code=204)
def remove_follow(follow_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> Response:
    if not delete_follow(db, follow_id):
        raise HTTPException(status_code=404, detail="Follow relationship not found")
    return Response(status_code=204)
