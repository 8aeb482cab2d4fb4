from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import get_current_identity, get_current_user
from ..schemas import CreateProfileRequest, MatchPreferencesRequest, UpdateProfileRequest

router = APIRouter()
scaffold_router = APIRouter()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@scaffold_router.get("/health")
def profile_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "profile"}


@router.post("/profiles")
def create_profile(payload: CreateProfileRequest, user_id: str = Depends(get_current_identity)) -> dict[str, Any]:
    profile = repo.create_profile(
        user_id,
        display_name=_clean(payload.display_name),
        bio=_clean(payload.bio),
        location=_clean(payload.location),
    )
    if not profile:
        raise HTTPException(status_code=409, detail="Profile already exists")
    return {"profile": profile}


@router.get("/profiles/me")
def get_my_profile(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return {"profile": current_user}


@router.patch("/profiles/me")
def update_my_profile(payload: UpdateProfileRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key in ("display_name", "bio", "location"):
        if key in payload.model_fields_set:
            fields[key] = _clean(getattr(payload, key))
    if "is_accepting_chats" in payload.model_fields_set:
        if payload.is_accepting_chats is None:
            raise HTTPException(status_code=400, detail="isAcceptingChats must be a boolean")
        fields["is_accepting_chats"] = payload.is_accepting_chats
    return {"profile": repo.update_profile(str(current_user["id"]), fields)}


@router.delete("/profiles/me")
def delete_my_profile(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    repo.delete_profile(str(current_user["id"]))
    return {"status": "deleted"}


@router.get("/profiles/{user_id}")
def get_public_profile(user_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    profile = repo.get_public_profile(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return {"profile": profile}


@router.get("/verification/status")
def get_verification_status(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return {
        "verificationStatus": current_user["verification_status"],
        "badges": current_user.get("badges") or [],
        "rejectionReason": current_user.get("verification_rejection_reason"),
    }


@router.post("/verification/submit")
def submit_verification(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    if current_user["verification_status"] == "pending":
        raise HTTPException(status_code=400, detail="Profile already submitted for verification")
    profile = repo.submit_for_verification(str(current_user["id"]))
    return {"profile": profile, "message": "Profile submitted for verification"}


@router.get("/match-preferences")
def get_match_preferences(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    prefs = repo.get_match_preferences(str(current_user["id"]))
    if not prefs:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return {"preferences": prefs}


@router.put("/match-preferences")
def put_match_preferences(payload: MatchPreferencesRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    fields = {key: getattr(payload, key) for key in payload.model_fields_set}

    stored = repo.get_match_preferences(user_id) or {}
    min_age = fields.get("min_age", stored.get("min_age"))
    max_age = fields.get("max_age", stored.get("max_age"))
    if min_age is not None and max_age is not None and min_age > max_age:
        raise HTTPException(status_code=400, detail="minAge cannot exceed maxAge")
    return {"preferences": repo.upsert_match_preferences(user_id, fields)}
