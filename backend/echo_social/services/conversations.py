"""Conversation, participant and message services."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_social.models.conversation import Conversation
from echo_social.models.conversation_participant import ConversationParticipant
from echo_social.models.message import Message
from echo_social.schemas.conversation import ConversationCreate, ParticipantCreate
from echo_social.services.errors import ConflictError, InvalidOperationError, NotFoundError

logger = logging.getLogger(__name__)


def create_conversation(db: Session, payload: ConversationCreate) -> Conversation:
    """Create a conversation and its initial participants in one transaction."""

    participant_ids = list(dict.fromkeys(payload.participant_ids))
    try:
        conversation = Conversation(name=payload.name, is_group=payload.is_group)
        db.add(conversation)
        db.flush()
        for user_id in participant_ids:
            db.add(ConversationParticipant(conversation_id=conversation.id, user_id=user_id))
        db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(conversation)
    logger.info(
        "conversations.created conversation_id=%s participants=%d",
        conversation.id,
        len(participant_ids),
    )
    return conversation


def get_conversation(db: Session, conversation_id: int) -> Conversation | None:
    return db.get(Conversation, conversation_id)


def list_conversations_for_user(db: Session, user_id: int) -> list[Conversation]:
    """Conversations the user participates in, newest first."""

    member_of = select(ConversationParticipant.conversation_id).where(ConversationParticipant.user_id == user_id)
    stmt = (
        select(Conversation)
        .where(Conversation.id.in_(member_of))
        .order_by(Conversation.created_at.desc(), Conversation.id.desc())
    )
    return list(db.scalars(stmt).all())


def add_participant(db: Session, payload: ParticipantCreate) -> ConversationParticipant:
    if db.get(Conversation, payload.conversation_id) is None:
        raise NotFoundError("Conversation not found")
    if is_participant(db, payload.conversation_id, payload.user_id):
        raise ConflictError("User is already a participant of this conversation")
    participant = ConversationParticipant(conversation_id=payload.conversation_id, user_id=payload.user_id)
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User is already a participant of this conversation") from None
    db.refresh(participant)
    return participant


def list_participants(db: Session, conversation_id: int) -> list[ConversationParticipant]:
    stmt = (
        select(ConversationParticipant)
        .where(ConversationParticipant.conversation_id == conversation_id)
        .order_by(ConversationParticipant.id.asc())
    )
    return list(db.scalars(stmt).all())


def list_participant_ids(db: Session, conversation_id: int) -> list[int]:
    """Distinct participant user ids in join order."""

    return list(dict.fromkeys(participant.user_id for participant in list_participants(db, conversation_id)))


def is_participant(db: Session, conversation_id: int, user_id: int) -> bool:
    stmt = select(ConversationParticipant.id).where(
        ConversationParticipant.conversation_id == conversation_id,
        ConversationParticipant.user_id == user_id,
    )
    return db.scalar(stmt.limit(1)) is not None


def create_message(
    db: Session,
    conversation_id: int,
    sender_id: int,
    content: str,
    *,
    enforce_membership: bool = True,
) -> Message:
    """Persist one chat message after validating its target conversation."""

    trimmed_content = content.strip()
    if not trimmed_content:
        raise InvalidOperationError("Message content cannot be empty.")
    if db.get(Conversation, conversation_id) is None:
        raise NotFoundError("Conversation not found")
    if enforce_membership and not is_participant(db, conversation_id, sender_id):
        raise InvalidOperationError("Sender is not a participant of this conversation")

    message = Message(conversation_id=conversation_id, sender_id=sender_id, content=trimmed_content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def list_messages(db: Session, conversation_id: int) -> list[Message]:
    """Return messages for a conversation oldest first, ties by id."""

    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return list(db.scalars(stmt).all())
