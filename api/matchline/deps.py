from datetime import date, datetime, timezone

from fastapi import HTTPException

from .config import MATCH_TIMEZONE
from .services.matching import get_batch_date


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today_for_matching(now: datetime | None = None) -> date:
    return get_batch_date(now or now_utc(), MATCH_TIMEZONE)


def require_self_distinct(current_user_id: str, other_user_id: str, detail: str) -> None:
    if str(current_user_id) == str(other_user_id):
        raise HTTPException(status_code=400, detail=detail)
