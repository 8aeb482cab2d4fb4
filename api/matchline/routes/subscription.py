from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import get_current_user
from ..config import DAILY_MATCH_LIMITS
from ..schemas import SubscriptionRequest

router = APIRouter()
scaffold_router = APIRouter()

TIER_NAMES = {"free": "Free", "premium": "Premium", "vip": "VIP"}


@scaffold_router.get("/health")
def subscription_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "subscription"}


@router.get("/subscription/tiers")
def list_tiers() -> dict[str, Any]:
    return {
        "tiers": [
            {"tier": tier, "name": TIER_NAMES.get(tier, tier.title()), "matchesPerDay": limit}
            for tier, limit in DAILY_MATCH_LIMITS.items()
        ]
    }


@router.get("/subscription/status")
def get_subscription_status(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    sub = repo.get_subscription(str(current_user["id"]))
    if not sub:
        return {"tier": "free", "status": "inactive"}
    return sub


@router.post("/subscription")
def set_subscription(payload: SubscriptionRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return {"subscription": repo.upsert_subscription(str(current_user["id"]), payload.tier)}


@router.post("/subscription/cancel")
def cancel_subscription(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    if not repo.cancel_subscription(str(current_user["id"])):
        raise HTTPException(status_code=404, detail="No active subscription")
    return {"message": "Subscription cancelled"}
