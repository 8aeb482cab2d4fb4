from typing import Any

from fastapi import APIRouter, Depends

from ..auth.deps import get_current_user
from ..config import MESSAGES_PAGE_MAX, RL_MESSAGE_SEND_LIMIT, RL_WINDOW_SECONDS
from ..database import SessionLocal
from ..deps import now_utc
from ..schemas import SendMessageRequest
from ..services import conversations as lifecycle
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()
scaffold_router = APIRouter()

RL_MESSAGE_SEND = rate_limit_dependency("message_send", RL_MESSAGE_SEND_LIMIT, RL_WINDOW_SECONDS)


@scaffold_router.get("/health")
def messages_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "messages"}


@router.post("/messages", dependencies=[RL_MESSAGE_SEND])
def send_message(payload: SendMessageRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    with SessionLocal() as db:
        message = lifecycle.send_message(db, str(current_user["id"]), payload.conversation_id, payload.content, now_utc())
    return {"message": message}


# Registered before /messages/{conversation_id} so the literal path wins.
@router.get("/messages/unread-count")
def get_unread_count(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, int]:
    with SessionLocal() as db:
        return {"unreadCount": lifecycle.unread_count(db, str(current_user["id"]))}


@router.get("/messages/{conversation_id}")
def list_messages(
    conversation_id: str,
    limit: int = 50,
    offset: int = 0,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    limit = max(1, min(limit, MESSAGES_PAGE_MAX))
    offset = max(0, offset)
    with SessionLocal() as db:
        rows, total = lifecycle.list_messages(db, str(current_user["id"]), conversation_id, limit=limit, offset=offset)
    return {"messages": rows, "total": total}


@router.post("/messages/{conversation_id}/mark-read")
def mark_messages_read(conversation_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    with SessionLocal() as db:
        updated = lifecycle.mark_read(db, str(current_user["id"]), conversation_id, now_utc())
    return {"success": True, "updated": updated}
