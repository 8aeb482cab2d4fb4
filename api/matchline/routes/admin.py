import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from .. import repo
from ..auth.admin_deps import require_moderator, require_reviewer
from ..database import SessionLocal
from ..deps import now_utc
from ..schemas import RejectVerificationRequest, ResolveReportRequest, SuspendUserRequest
from ..services import conversations as lifecycle
from ..services.events import log_product_event

logger = logging.getLogger(__name__)

router = APIRouter()
scaffold_router = APIRouter()


def _json(data: Any) -> Any:
    return jsonable_encoder(data)


@scaffold_router.get("/health")
def admin_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "admin"}


@router.get("/admin/verification/pending")
def admin_pending_verifications(admin_user: dict[str, Any] = Depends(require_reviewer)) -> dict[str, Any]:
    _ = admin_user
    rows = repo.list_pending_profiles()
    return _json({"pendingReviews": len(rows), "profiles": rows})


@router.post("/admin/verification/{user_id}/approve")
def admin_approve_verification(user_id: str, admin_user: dict[str, Any] = Depends(require_reviewer)) -> dict[str, Any]:
    profile = repo.set_verification_status(user_id, "approved", admin_user_id=str(admin_user.get("id") or ""))
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return _json({"profile": profile, "message": "Profile approved"})


@router.post("/admin/verification/{user_id}/reject")
def admin_reject_verification(
    user_id: str,
    payload: RejectVerificationRequest,
    admin_user: dict[str, Any] = Depends(require_reviewer),
) -> dict[str, Any]:
    reason = (payload.reason or "").strip() or None
    profile = repo.set_verification_status(user_id, "rejected", reason=reason, admin_user_id=str(admin_user.get("id") or ""))
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return _json({"profile": profile, "message": "Profile rejected"})


@router.get("/admin/reports")
def admin_reports_list(
    status: str | None = None,
    limit: int = 100,
    admin_user: dict[str, Any] = Depends(require_moderator),
) -> dict[str, Any]:
    _ = admin_user
    rows = repo.list_reports_admin(status=status, limit=max(1, min(limit, 500)))
    return _json({"reports": rows, "count": len(rows)})


@router.post("/admin/reports/{report_id}/resolve")
def admin_reports_resolve(
    report_id: str,
    payload: ResolveReportRequest,
    admin_user: dict[str, Any] = Depends(require_moderator),
) -> dict[str, Any]:
    row = repo.resolve_report_admin(
        report_id,
        status=payload.status,
        resolved_by=str(admin_user.get("id") or ""),
        notes=(payload.notes or "").strip() or None,
    )
    if not row:
        raise HTTPException(status_code=404, detail="Report not found")
    return _json({"report": row})


@router.get("/admin/users")
def admin_users_list(
    limit: int = 20,
    offset: int = 0,
    admin_user: dict[str, Any] = Depends(require_moderator),
) -> dict[str, Any]:
    _ = admin_user
    limit = max(1, min(limit, 100))
    offset = max(0, offset)
    rows, total = repo.list_profiles_admin(limit=limit, offset=offset)
    return _json({"users": rows, "total": total, "limit": limit, "offset": offset})


@router.get("/admin/users/{user_id}")
def admin_user_details(user_id: str, admin_user: dict[str, Any] = Depends(require_moderator)) -> dict[str, Any]:
    _ = admin_user
    profile = repo.get_profile_admin_details(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return _json({"profile": profile})


@router.post("/admin/users/{user_id}/suspend")
def admin_user_suspend(
    user_id: str,
    payload: SuspendUserRequest | None = None,
    admin_user: dict[str, Any] = Depends(require_moderator),
) -> dict[str, Any]:
    if not repo.get_profile(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    admin_id = str(admin_user.get("id") or "")
    reason = ((payload.reason if payload else None) or "").strip() or "suspended"
    with SessionLocal() as db:
        ended = lifecycle.end_conversations_for_user(db, user_id, admin_id, now_utc(), reason=reason)
        log_product_event(
            db,
            event_name="user_suspended",
            user_id=user_id,
            properties={"admin_user_id": admin_id, "reason": reason, "ended_conversations": len(ended)},
        )
        db.commit()
    logger.info("[ADMIN] suspended user_id=%s by=%s ended=%s", user_id, admin_id, len(ended))
    return {"message": f"User {user_id} suspended", "endedConversations": ended}


@router.delete("/admin/users/{user_id}")
def admin_user_delete(user_id: str, admin_user: dict[str, Any] = Depends(require_moderator)) -> dict[str, Any]:
    if not repo.delete_profile(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("[ADMIN] deleted user_id=%s by=%s", user_id, admin_user.get("id"))
    return {"message": f"User {user_id} deleted"}
