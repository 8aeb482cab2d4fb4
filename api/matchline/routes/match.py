from typing import Any

from fastapi import APIRouter, Depends

from .. import repo
from ..auth.deps import get_current_user
from ..config import RL_MATCH_INTERACT_LIMIT, RL_WINDOW_SECONDS
from ..database import SessionLocal
from ..deps import now_utc, today_for_matching
from ..schemas import InteractRequest
from ..services.matching import allocate_daily_matches, get_match_for_party, record_interaction
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()
scaffold_router = APIRouter()

RL_MATCH_INTERACT = rate_limit_dependency("match_interact", RL_MATCH_INTERACT_LIMIT, RL_WINDOW_SECONDS)


@scaffold_router.get("/health")
def match_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "match"}


@router.get("/matches")
def get_daily_matches(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    today = today_for_matching()
    with SessionLocal() as db:
        result = allocate_daily_matches(db, user_id, today)

    matches = []
    for row in result.new_matches:
        matches.append({**row, "profile": repo.get_public_profile(str(row["matched_user_id"]))})
    return {
        "batch_date": today.isoformat(),
        "matches": matches,
        "count": len(matches),
        "remaining": result.remaining,
    }


@router.get("/matches/{match_id}")
def get_match_details(match_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    with SessionLocal() as db:
        match = get_match_for_party(db, user_id, match_id)
    other_id = str(match["matched_user_id"]) if str(match["user_id"]) == user_id else str(match["user_id"])
    return {"match": match, "profile": repo.get_public_profile(other_id)}


@router.post("/matches/{match_id}/interact", dependencies=[RL_MATCH_INTERACT])
def interact_with_match(
    match_id: str,
    payload: InteractRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    with SessionLocal() as db:
        match = record_interaction(db, str(current_user["id"]), match_id, payload.action, now_utc())
    return {"success": True, "match": match}
