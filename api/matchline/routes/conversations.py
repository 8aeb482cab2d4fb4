from typing import Any

from fastapi import APIRouter, Depends

from .. import repo
from ..auth.deps import get_current_user
from ..config import RL_CONVERSATION_CREATE_LIMIT, RL_WINDOW_SECONDS
from ..database import SessionLocal
from ..deps import now_utc
from ..schemas import CreateConversationRequest, EndConversationRequest, SnoozeRequest
from ..services import conversations as lifecycle
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()
scaffold_router = APIRouter()

RL_CONVERSATION_CREATE = rate_limit_dependency("conversation_create", RL_CONVERSATION_CREATE_LIMIT, RL_WINDOW_SECONDS)


def _with_other_profile(convo: dict[str, Any], user_id: str) -> dict[str, Any]:
    other_id = lifecycle.other_participant(convo, user_id)
    unread = convo["user1_unread_count"] if str(convo["user1_id"]) == user_id else convo["user2_unread_count"]
    return {**convo, "other_profile": repo.get_public_profile(other_id), "unread_count": int(unread or 0)}


@scaffold_router.get("/health")
def conversations_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "conversations"}


@router.post("/conversations", dependencies=[RL_CONVERSATION_CREATE])
def create_conversation(payload: CreateConversationRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    with SessionLocal() as db:
        convo = lifecycle.create_conversation(db, str(current_user["id"]), payload.match_id, payload.message, now_utc())
    return {"conversation": convo}


@router.get("/conversations")
def list_conversations(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    with SessionLocal() as db:
        rows = lifecycle.list_conversations(db, user_id)
    return {"conversations": [_with_other_profile(r, user_id) for r in rows]}


@router.get("/conversations/{conversation_id}")
def get_conversation(conversation_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    with SessionLocal() as db:
        convo = lifecycle.get_conversation_for_participant(db, user_id, conversation_id)
    return {"conversation": _with_other_profile(convo, user_id)}


@router.post("/conversations/{conversation_id}/snooze")
def snooze_conversation(
    conversation_id: str,
    payload: SnoozeRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    with SessionLocal() as db:
        convo = lifecycle.snooze_conversation(db, str(current_user["id"]), conversation_id, payload.hours, now_utc())
    return {"conversation": convo}


@router.post("/conversations/{conversation_id}/resume")
def resume_conversation(conversation_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    with SessionLocal() as db:
        convo = lifecycle.resume_conversation(db, str(current_user["id"]), conversation_id, now_utc())
    return {"conversation": convo}


@router.post("/conversations/{conversation_id}/end")
def end_conversation(
    conversation_id: str,
    payload: EndConversationRequest | None = None,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    reason = payload.reason if payload else None
    with SessionLocal() as db:
        convo = lifecycle.end_conversation(db, str(current_user["id"]), conversation_id, now_utc(), reason=reason)
    return {"conversation": convo}
