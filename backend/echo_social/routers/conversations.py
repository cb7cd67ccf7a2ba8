"""Conversation, participant and message routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from echo_social.context import ServerContext
from echo_social.db.dependencies import get_context, get_db
from echo_social.realtime.delivery import deliver_chat_message
from echo_social.schemas.common import MAX_ID
from echo_social.schemas.conversation import (
    ConversationCreate,
    ConversationRead,
    MessageCreate,
    MessageRead,
    ParticipantCreate,
    ParticipantRead,
)
from echo_social.services.conversations import (
    add_participant,
    create_conversation,
    get_conversation,
    list_conversations_for_user,
    list_messages,
    list_participants,
)

router = APIRouter()


@router.get("/users/{user_id}/conversations", response_model=list[ConversationRead])
def read_user_conversations(
    user_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> list[ConversationRead]:
    return [ConversationRead.model_validate(c) for c in list_conversations_for_user(db, user_id)]


@router.post("/conversations", response_model=ConversationRead, status_code=201)
def add_conversation(payload: ConversationCreate, db: Session = Depends(get_db)) -> ConversationRead:
    """Create a conversation, optionally with its participants."""

    return ConversationRead.model_validate(create_conversation(db, payload))


@router.get("/conversations/{conversation_id}", response_model=ConversationRead)
def read_conversation(
    conversation_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> ConversationRead:
    conversation = get_conversation(db, conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return ConversationRead.model_validate(conversation)


@router.get("/conversations/{conversation_id}/participants", response_model=list[ParticipantRead])
def read_participants(
    conversation_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> list[ParticipantRead]:
    return [ParticipantRead.model_validate(p) for p in list_participants(db, conversation_id)]


@router.post("/conversation-participants", response_model=ParticipantRead, status_code=201)
def add_conversation_participant(payload: ParticipantCreate, db: Session = Depends(get_db)) -> ParticipantRead:
    return ParticipantRead.model_validate(add_participant(db, payload))


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageRead])
def read_messages(
    conversation_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> list[MessageRead]:
    """Conversation history, oldest first."""

    return [MessageRead.model_validate(message) for message in list_messages(db, conversation_id)]


@router.post("/messages", response_model=MessageRead, status_code=201)
async def send_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> MessageRead:
    """Send without a socket; connected participants still get the live push."""

    report = await deliver_chat_message(
        db,
        context.registry,
        context.hooks,
        conversation_id=payload.conversation_id,
        sender_id=payload.sender_id,
        content=payload.content,
        enforce_membership=context.settings.enforce_sender_membership,
    )
    return report.message
