from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError

from ..config import DAILY_MATCH_LIMITS, DEFAULT_TIER
from ..errors import InvalidInput, NotFound, ProfileNotVerified, Unauthorized
from ..models import BlockedUser, UserMatch, UserProfile
from .events import log_product_event

logger = logging.getLogger(__name__)

INTERACTION_TYPES = {"like", "pass", "skip"}

user_match = UserMatch.__table__
user_profile = UserProfile.__table__


@dataclass
class AllocationResult:
    new_matches: list[dict[str, Any]] = field(default_factory=list)
    remaining: int = 0


def get_batch_date(now: datetime, tz: str = "America/New_York") -> date:
    return now.astimezone(ZoneInfo(tz)).date()


def daily_match_limit(tier: str | None) -> int:
    return DAILY_MATCH_LIMITS.get(str(tier or ""), DAILY_MATCH_LIMITS[DEFAULT_TIER])


def placeholder_score(user_id: str, matched_user_id: str) -> int:
    """Advisory 0-100 score. Nothing filters or ranks on it."""
    h = hashlib.sha256(f"{user_id}|{matched_user_id}".encode("utf-8")).hexdigest()
    return int(h[:8], 16) % 101


def count_matches_for_date(db, user_id: str, batch_date: date) -> int:
    return int(
        db.execute(
            select(func.count())
            .select_from(user_match)
            .where(user_match.c.user_id == user_id, user_match.c.batch_date == batch_date)
        ).scalar_one()
    )


def fetch_excluded_user_ids(db, user_id: str) -> set[str]:
    blocked = db.execute(select(BlockedUser.blocked_user_id).where(BlockedUser.blocker_id == user_id)).scalars().all()
    # Every candidate already offered, on any date.
    offered = db.execute(select(user_match.c.matched_user_id).where(user_match.c.user_id == user_id)).scalars().all()
    return {str(x) for x in blocked} | {str(x) for x in offered} | {user_id}


def fetch_candidate_pool(db, user_id: str) -> list[dict[str, Any]]:
    excluded = fetch_excluded_user_ids(db, user_id)
    rows = db.execute(
        select(user_profile.c.id, user_profile.c.display_name, user_profile.c.bio, user_profile.c.location)
        .where(user_profile.c.verification_status == "approved")
        .order_by(user_profile.c.created_at.asc(), user_profile.c.id.asc())
    ).mappings().all()
    return [dict(r) for r in rows if str(r["id"]) not in excluded]


def _insert_match(db, user_id: str, matched_user_id: str, batch_date: date, score: int) -> str | None:
    match_id = str(uuid.uuid4())
    try:
        db.execute(
            insert(user_match).values(
                id=match_id,
                user_id=user_id,
                matched_user_id=matched_user_id,
                batch_date=batch_date,
                match_score=score,
                interaction_type=None,
            )
        )
        db.commit()
    except IntegrityError:
        # A concurrent allocation already claimed this pair.
        db.rollback()
        logger.info("[ALLOC] pair already allocated user_id=%s matched_user_id=%s", user_id, matched_user_id)
        return None
    return match_id


def allocate_daily_matches(
    db,
    user_id: str,
    today: date,
    score_fn: Callable[[str, str], int] = placeholder_score,
) -> AllocationResult:
    """
    Allocate the caller's match batch for ``today``.

    Quota is per tier and counted against rows already created for the same
    batch date. Each insert commits on its own so a uniqueness conflict only
    drops that one candidate. Candidates come out in profile creation order.
    """
    profile = db.execute(
        select(user_profile.c.id, user_profile.c.verification_status, user_profile.c.subscription_tier).where(
            user_profile.c.id == user_id
        )
    ).mappings().first()
    if not profile:
        raise NotFound("Profile not found")
    if profile["verification_status"] != "approved":
        raise ProfileNotVerified()

    quota = daily_match_limit(profile["subscription_tier"])
    remaining = max(0, quota - count_matches_for_date(db, user_id, today))
    if remaining == 0:
        logger.info("[ALLOC] quota exhausted user_id=%s batch_date=%s", user_id, today)
        return AllocationResult(new_matches=[], remaining=0)

    selected = fetch_candidate_pool(db, user_id)[:remaining]

    inserted_ids: list[str] = []
    for candidate in selected:
        candidate_id = str(candidate["id"])
        match_id = _insert_match(db, user_id, candidate_id, today, score_fn(user_id, candidate_id))
        if match_id:
            inserted_ids.append(match_id)

    new_matches: list[dict[str, Any]] = []
    if inserted_ids:
        rows = db.execute(
            select(user_match).where(user_match.c.id.in_(inserted_ids)).order_by(user_match.c.created_at.asc())
        ).mappings().all()
        by_id = {str(r["id"]): dict(r) for r in rows}
        new_matches = [by_id[i] for i in inserted_ids if i in by_id]
        log_product_event(
            db,
            event_name="match_batch_allocated",
            user_id=user_id,
            properties={"batch_date": today.isoformat(), "count": len(new_matches)},
        )
        db.commit()

    logger.info(
        "[ALLOC] user_id=%s tier=%s batch_date=%s quota=%s allocated=%s",
        user_id,
        profile["subscription_tier"],
        today,
        quota,
        len(new_matches),
    )
    return AllocationResult(new_matches=new_matches, remaining=remaining - len(new_matches))


def get_match(db, match_id: str) -> dict[str, Any]:
    row = db.execute(select(user_match).where(user_match.c.id == match_id)).mappings().first()
    if not row:
        raise NotFound("Match not found")
    return dict(row)


def get_match_for_party(db, user_id: str, match_id: str) -> dict[str, Any]:
    match = get_match(db, match_id)
    if user_id not in {str(match["user_id"]), str(match["matched_user_id"])}:
        raise Unauthorized()
    return match


def record_interaction(db, user_id: str, match_id: str, action: str, now: datetime) -> dict[str, Any]:
    if action not in INTERACTION_TYPES:
        raise InvalidInput("action must be one of: like, pass, skip")
    match = get_match(db, match_id)
    if str(match["user_id"]) != user_id:
        raise Unauthorized()
    db.execute(
        update(user_match)
        .where(user_match.c.id == match_id)
        .values(interaction_type=action, viewed_at=now)
    )
    log_product_event(db, event_name="match_interaction", user_id=user_id, properties={"match_id": match_id, "action": action})
    db.commit()
    return get_match(db, match_id)
