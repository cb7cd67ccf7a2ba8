"""Echo link and anonymous message routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from echo_social.context import ServerContext
from echo_social.db.dependencies import get_context, get_db
from echo_social.schemas.common import MAX_ID
from echo_social.schemas.echo_link import (
    AnonymousMessageCreate,
    AnonymousMessageRead,
    AnonymousMessageUpdateRequest,
    EchoLinkCreate,
    EchoLinkRead,
    EchoLinkUpdateRequest,
)
from echo_social.services.echo_links import (
    create_anonymous_message,
    create_echo_link,
    get_echo_link_by_slug,
    get_echo_link_by_user,
    list_anonymous_messages,
    update_anonymous_message,
    update_echo_link,
)

router = APIRouter()


@router.get("/users/{user_id}/echo-link", response_model=EchoLinkRead)
def read_user_echo_link(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> EchoLinkRead:
    echo_link = get_echo_link_by_user(db, user_id)
    if echo_link is None:
        raise HTTPException(status_code=404, detail="Echo Link not found")
    return EchoLinkRead.model_validate(echo_link)


@router.get("/echo-links/{link_id}", response_model=EchoLinkRead)
def read_echo_link(link_id: str = Path(..., min_length=1), db: Session = Depends(get_db)) -> EchoLinkRead:
    """Resolve a public slug."""

    echo_link = get_echo_link_by_slug(db, link_id)
    if echo_link is None:
        raise HTTPException(status_code=404, detail="Echo Link not found")
    return EchoLinkRead.model_validate(echo_link)


@router.post("/echo-links", response_model=EchoLinkRead, status_code=201)
def add_echo_link(payload: EchoLinkCreate, db: Session = Depends(get_db)) -> EchoLinkRead:
    return EchoLinkRead.model_validate(create_echo_link(db, payload))


@router.patch("/echo-links/{echo_link_id}", response_model=EchoLinkRead)
def patch_echo_link(
    payload: EchoLinkUpdateRequest,
    echo_link_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> EchoLinkRead:
    echo_link = update_echo_link(db, echo_link_id, payload)
    if echo_link is None:
        raise HTTPException(status_code=404, detail="Echo Link not found")
    return EchoLinkRead.model_validate(echo_link)


@router.get("/echo-links/{echo_link_id}/messages", response_model=list[AnonymousMessageRead])
def read_anonymous_messages(
    echo_link_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> list[AnonymousMessageRead]:
    return [AnonymousMessageRead.model_validate(m) for m in list_anonymous_messages(db, echo_link_id)]


@router.post("/anonymous-messages", response_model=AnonymousMessageRead, status_code=201)
def add_anonymous_message(
    payload: AnonymousMessageCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> AnonymousMessageRead:
    """Submit an anonymous message; the link owner is notified."""

    return AnonymousMessageRead.model_validate(create_anonymous_message(db, payload, hooks=context.hooks))


@router.patch("/anonymous-messages/{message_id}", response_model=AnonymousMessageRead)
def patch_anonymous_message(
    payload: AnonymousMessageUpdateRequest,
    message_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> AnonymousMessageRead:
    message = update_anonymous_message(db, message_id, payload)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return AnonymousMessageRead.model_validate(message)
