from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import get_current_user
from ..deps import require_self_distinct
from ..schemas import BlockRequest, ReportRequest

router = APIRouter()
scaffold_router = APIRouter()


@scaffold_router.get("/health")
def safety_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "safety"}


@router.post("/blocks")
def block_user(payload: BlockRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    current_user_id = str(current_user["id"])
    blocked_user_id = payload.blocked_user_id.strip()
    if not blocked_user_id:
        raise HTTPException(status_code=400, detail="blockedUserId required")
    require_self_distinct(current_user_id, blocked_user_id, "Cannot block yourself")
    if not repo.get_profile(blocked_user_id):
        raise HTTPException(status_code=404, detail="User not found")
    if repo.get_user_block(current_user_id, blocked_user_id):
        raise HTTPException(status_code=400, detail="User already blocked")

    block = repo.create_user_block(current_user_id, blocked_user_id, reason=payload.reason)
    if not block:
        raise HTTPException(status_code=400, detail="User already blocked")
    return {"block": block, "message": "User blocked"}


@router.delete("/blocks/{user_id}")
def unblock_user(user_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    removed = repo.remove_user_block(str(current_user["id"]), user_id)
    return {"message": "User unblocked", "removed": removed}


@router.get("/blocks")
def list_blocks(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    rows = repo.list_user_blocks(str(current_user["id"]))
    blocked = [
        {
            "id": r["id"],
            "blockedUser": repo.get_public_profile(str(r["blocked_user_id"])) or {"id": r["blocked_user_id"]},
            "blockedAt": r["created_at"],
        }
        for r in rows
    ]
    return {"blockedUsers": blocked, "count": len(blocked)}


@router.get("/blocks/status/{user_id}")
def block_status(user_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, bool]:
    current_user_id = str(current_user["id"])
    blocked_by_me = repo.get_user_block(current_user_id, user_id) is not None
    blocked_by_target = repo.get_user_block(user_id, current_user_id) is not None
    return {
        "isBlocked": blocked_by_me or blocked_by_target,
        "blockedByMe": blocked_by_me,
        "blockedByTarget": blocked_by_target,
    }


@router.post("/reports")
def create_report(payload: ReportRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    current_user_id = str(current_user["id"])
    if not payload.reported_user_id and not payload.conversation_id:
        raise HTTPException(status_code=400, detail="Must specify reportedUserId or conversationId")
    if payload.reported_user_id:
        require_self_distinct(current_user_id, payload.reported_user_id, "Cannot report yourself")
    report_type = payload.report_type.strip()
    if not report_type:
        raise HTTPException(status_code=400, detail="reportType required")

    report = repo.create_report(
        current_user_id,
        report_type,
        reported_user_id=payload.reported_user_id,
        conversation_id=payload.conversation_id,
        description=payload.description,
    )
    return {"report": report, "message": "Report submitted"}


@router.get("/reports")
def list_reports(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    rows = repo.list_reports_by_reporter(str(current_user["id"]))
    return {"reports": rows, "count": len(rows)}
