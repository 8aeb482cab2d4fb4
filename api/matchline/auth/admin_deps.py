from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException

from matchline import repo
from matchline.auth.deps import get_current_identity


ROLE_ORDER = {"reviewer": 1, "moderator": 2, "super_admin": 3}


def has_admin_role(user_id: str, min_role: str = "reviewer") -> bool:
    admin = repo.get_admin_user(user_id)
    if not admin:
        return False
    return ROLE_ORDER.get(str(admin.get("role") or "").lower(), 0) >= ROLE_ORDER[min_role]


def require_admin_role(min_role: str):
    if min_role not in ROLE_ORDER:
        raise ValueError(f"Unknown role: {min_role}")

    def _dep(user_id: str = Depends(get_current_identity)) -> dict[str, Any]:
        if not has_admin_role(user_id, min_role):
            raise HTTPException(status_code=403, detail="Admin access required")
        return {"id": user_id, "min_role": min_role}

    return _dep


require_reviewer = require_admin_role("reviewer")
require_moderator = require_admin_role("moderator")
