from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, insert, or_, select, update

from ..config import MESSAGE_MAX_LENGTH, OPENER_MIN_LENGTH, SNOOZE_MAX_HOURS
from ..errors import InvalidInput, NotFound, OpenerTooShort, Unauthorized
from ..models import Conversation, Message
from .events import log_product_event
from .matching import get_match
from .state_machine import OPEN_STATUSES, transition_status

logger = logging.getLogger(__name__)

conversation = Conversation.__table__
message = Message.__table__


def validate_opener(opener_text: str | None, min_length: int = OPENER_MIN_LENGTH) -> str:
    opener = str(opener_text or "").strip()
    if len(opener) < min_length:
        raise OpenerTooShort(f"Message must be at least {min_length} characters")
    return opener


def validate_message_content(content: str | None) -> str:
    body = str(content or "")
    if not body.strip():
        raise InvalidInput("Message cannot be empty")
    if len(body) > MESSAGE_MAX_LENGTH:
        raise InvalidInput("Message too long")
    return body


def other_participant(convo: dict[str, Any], user_id: str) -> str:
    return str(convo["user2_id"]) if str(convo["user1_id"]) == user_id else str(convo["user1_id"])


def get_conversation(db, conversation_id: str) -> dict[str, Any]:
    row = db.execute(select(conversation).where(conversation.c.id == conversation_id)).mappings().first()
    if not row:
        raise NotFound("Conversation not found")
    return dict(row)


def get_conversation_for_participant(db, user_id: str, conversation_id: str) -> dict[str, Any]:
    convo = get_conversation(db, conversation_id)
    if user_id not in {str(convo["user1_id"]), str(convo["user2_id"])}:
        raise Unauthorized()
    return convo


def create_conversation(db, user_id: str, match_id: str, opener_text: str | None, now: datetime) -> dict[str, Any]:
    """
    Open a conversation from a match with an intentional opener.

    The minimum length applies to this opener only. Messages sent later
    through ``send_message`` are never re-checked against it. Length is
    counted after trimming; the text is stored as sent.
    """
    opener = validate_opener(opener_text)
    match = get_match(db, match_id)
    if user_id not in {str(match["user_id"]), str(match["matched_user_id"])}:
        raise Unauthorized()

    conversation_id = str(uuid.uuid4())
    db.execute(
        insert(conversation).values(
            id=conversation_id,
            user1_id=str(match["user_id"]),
            user2_id=str(match["matched_user_id"]),
            match_id=match_id,
            initial_opener_message=str(opener_text),
            status="active",
            user1_unread_count=0,
            user2_unread_count=0,
            created_at=now,
            updated_at=now,
        )
    )
    log_product_event(
        db,
        event_name="conversation_started",
        user_id=user_id,
        properties={"conversation_id": conversation_id, "match_id": match_id, "opener_length": len(opener)},
    )
    db.commit()
    logger.info("[CONVO] created conversation_id=%s match_id=%s by=%s", conversation_id, match_id, user_id)
    return get_conversation(db, conversation_id)


def send_message(db, user_id: str, conversation_id: str, content: str | None, now: datetime) -> dict[str, Any]:
    body = validate_message_content(content)
    convo = get_conversation_for_participant(db, user_id, conversation_id)
    transition_status(convo["status"], "send")

    message_id = str(uuid.uuid4())
    db.execute(
        insert(message).values(
            id=message_id,
            conversation_id=conversation_id,
            sender_id=user_id,
            content=body,
            is_read=False,
            created_at=now,
        )
    )
    # Only the recipient's counter moves.
    if str(convo["user1_id"]) == user_id:
        values = {"user2_unread_count": conversation.c.user2_unread_count + 1}
    else:
        values = {"user1_unread_count": conversation.c.user1_unread_count + 1}
    db.execute(
        update(conversation)
        .where(conversation.c.id == conversation_id)
        .values(last_message_at=now, updated_at=now, **values)
    )
    db.commit()
    row = db.execute(select(message).where(message.c.id == message_id)).mappings().first()
    return dict(row)


def snooze_conversation(db, user_id: str, conversation_id: str, hours: Any, now: datetime) -> dict[str, Any]:
    if isinstance(hours, bool) or not isinstance(hours, int) or hours <= 0:
        raise InvalidInput("hours must be a positive integer")
    if hours > SNOOZE_MAX_HOURS:
        raise InvalidInput(f"hours must be at most {SNOOZE_MAX_HOURS}")
    convo = get_conversation_for_participant(db, user_id, conversation_id)
    new_status = transition_status(convo["status"], "snooze")

    # Last write wins: a second snooze simply replaces the timer.
    db.execute(
        update(conversation)
        .where(conversation.c.id == conversation_id)
        .values(
            status=new_status,
            snoozed_until=now + timedelta(hours=hours),
            snooze_duration=f"{hours}h",
            updated_at=now,
        )
    )
    log_product_event(db, event_name="conversation_snoozed", user_id=user_id, properties={"conversation_id": conversation_id, "hours": hours})
    db.commit()
    logger.info("[CONVO] snoozed conversation_id=%s hours=%s by=%s", conversation_id, hours, user_id)
    return get_conversation(db, conversation_id)


def resume_conversation(db, user_id: str, conversation_id: str, now: datetime) -> dict[str, Any]:
    convo = get_conversation_for_participant(db, user_id, conversation_id)
    new_status = transition_status(convo["status"], "resume")
    db.execute(
        update(conversation)
        .where(conversation.c.id == conversation_id)
        .values(status=new_status, snoozed_until=None, snooze_duration=None, updated_at=now)
    )
    db.commit()
    return get_conversation(db, conversation_id)


def end_conversation(db, user_id: str, conversation_id: str, now: datetime, reason: str | None = None) -> dict[str, Any]:
    convo = get_conversation_for_participant(db, user_id, conversation_id)
    new_status = transition_status(convo["status"], "end")
    db.execute(
        update(conversation)
        .where(conversation.c.id == conversation_id)
        .values(status=new_status, ended_by=user_id, ended_reason=reason, updated_at=now)
    )
    log_product_event(db, event_name="conversation_ended", user_id=user_id, properties={"conversation_id": conversation_id})
    db.commit()
    logger.info("[CONVO] ended conversation_id=%s by=%s", conversation_id, user_id)
    return get_conversation(db, conversation_id)


def mark_read(db, user_id: str, conversation_id: str, now: datetime) -> int:
    convo = get_conversation_for_participant(db, user_id, conversation_id)
    other_id = other_participant(convo, user_id)
    result = db.execute(
        update(message)
        .where(
            message.c.conversation_id == conversation_id,
            message.c.sender_id == other_id,
            message.c.is_read.is_(False),
        )
        .values(is_read=True, read_at=now)
    )
    counter = "user1_unread_count" if str(convo["user1_id"]) == user_id else "user2_unread_count"
    db.execute(update(conversation).where(conversation.c.id == conversation_id).values(**{counter: 0}))
    db.commit()
    return int(result.rowcount or 0)


def list_conversations(db, user_id: str) -> list[dict[str, Any]]:
    rows = db.execute(
        select(conversation)
        .where(
            or_(conversation.c.user1_id == user_id, conversation.c.user2_id == user_id),
            conversation.c.status.in_(sorted(OPEN_STATUSES)),
        )
        .order_by(func.coalesce(conversation.c.last_message_at, conversation.c.created_at).desc())
    ).mappings().all()
    return [dict(r) for r in rows]


def list_messages(db, user_id: str, conversation_id: str, limit: int = 50, offset: int = 0) -> tuple[list[dict[str, Any]], int]:
    get_conversation_for_participant(db, user_id, conversation_id)
    total = int(
        db.execute(
            select(func.count()).select_from(message).where(message.c.conversation_id == conversation_id)
        ).scalar_one()
    )
    rows = db.execute(
        select(message)
        .where(message.c.conversation_id == conversation_id)
        .order_by(message.c.created_at.asc(), message.c.id.asc())
        .limit(limit)
        .offset(offset)
    ).mappings().all()
    return [dict(r) for r in rows], total


def unread_count(db, user_id: str) -> int:
    rows = db.execute(
        select(conversation.c.user1_id, conversation.c.user1_unread_count, conversation.c.user2_unread_count).where(
            or_(conversation.c.user1_id == user_id, conversation.c.user2_id == user_id)
        )
    ).mappings().all()
    total = 0
    for r in rows:
        total += int(r["user1_unread_count"] if str(r["user1_id"]) == user_id else r["user2_unread_count"])
    return total


def end_conversations_for_user(db, user_id: str, ended_by: str, now: datetime, reason: str | None = None) -> list[str]:
    """End every open conversation ``user_id`` takes part in. Returns the ended ids."""
    rows = db.execute(
        select(conversation.c.id, conversation.c.status).where(
            or_(conversation.c.user1_id == user_id, conversation.c.user2_id == user_id)
        )
    ).mappings().all()

    ended: list[str] = []
    for row in rows:
        if row["status"] not in OPEN_STATUSES:
            continue
        new_status = transition_status(row["status"], "end")
        db.execute(
            update(conversation)
            .where(conversation.c.id == row["id"])
            .values(status=new_status, ended_by=ended_by, ended_reason=reason, updated_at=now)
        )
        ended.append(str(row["id"]))
    db.commit()
    logger.info("[CONVO] ended %s conversations for user_id=%s by=%s", len(ended), user_id, ended_by)
    return ended
