import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError

from matchline.config import SUBSCRIPTION_PERIOD_DAYS
from matchline.database import SessionLocal
from matchline.models import (
    AdminUser,
    BlockedUser,
    Conversation,
    MatchPreference,
    Message,
    Report,
    Subscription,
    UserMatch,
    UserProfile,
)
from matchline.services.events import log_product_event

user_profile = UserProfile.__table__
blocked_user = BlockedUser.__table__
report = Report.__table__
subscription = Subscription.__table__
match_preference = MatchPreference.__table__

PUBLIC_PROFILE_COLUMNS = (
    user_profile.c.id,
    user_profile.c.display_name,
    user_profile.c.bio,
    user_profile.c.location,
    user_profile.c.badges,
    user_profile.c.verification_status,
    user_profile.c.is_accepting_chats,
)
EDITABLE_PROFILE_FIELDS = {"display_name", "bio", "location", "is_accepting_chats"}
MATCH_PREFERENCE_FIELDS = {
    "min_age",
    "max_age",
    "preferred_sex",
    "max_distance",
    "accepted_locations",
    "required_interests",
    "excluded_interests",
}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_profile(
    user_id: str,
    display_name: str | None = None,
    bio: str | None = None,
    location: str | None = None,
) -> dict[str, Any] | None:
    try:
        with SessionLocal() as db:
            db.execute(
                insert(user_profile).values(
                    id=user_id,
                    display_name=display_name,
                    bio=bio,
                    location=location,
                    verification_status="pending",
                    badges=[],
                    subscription_tier="free",
                    is_accepting_chats=True,
                )
            )
            log_product_event(db, event_name="profile_created", user_id=user_id)
            db.commit()
    except IntegrityError:
        return None
    return get_profile(user_id)


def get_profile(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(select(user_profile).where(user_profile.c.id == user_id)).mappings().first()
    return dict(row) if row else None


def get_public_profile(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(select(*PUBLIC_PROFILE_COLUMNS).where(user_profile.c.id == user_id)).mappings().first()
    return dict(row) if row else None


def update_profile(user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    values = {k: v for k, v in fields.items() if k in EDITABLE_PROFILE_FIELDS}
    if values:
        with SessionLocal() as db:
            db.execute(update(user_profile).where(user_profile.c.id == user_id).values(**values))
            db.commit()
    return get_profile(user_id)


def delete_profile(user_id: str) -> bool:
    with SessionLocal() as db:
        convo_ids = db.execute(
            select(Conversation.id).where(or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id))
        ).scalars().all()
        if convo_ids:
            db.execute(delete(Report).where(Report.conversation_id.in_(convo_ids)))
            db.execute(delete(Message).where(Message.conversation_id.in_(convo_ids)))
            db.execute(delete(Conversation).where(Conversation.id.in_(convo_ids)))
        db.execute(delete(Message).where(Message.sender_id == user_id))
        db.execute(delete(UserMatch).where(or_(UserMatch.user_id == user_id, UserMatch.matched_user_id == user_id)))
        db.execute(delete(BlockedUser).where(or_(BlockedUser.blocker_id == user_id, BlockedUser.blocked_user_id == user_id)))
        db.execute(delete(Report).where(or_(Report.reporter_id == user_id, Report.reported_user_id == user_id)))
        db.execute(delete(Subscription).where(Subscription.user_id == user_id))
        db.execute(delete(MatchPreference).where(MatchPreference.user_id == user_id))
        res = db.execute(delete(UserProfile).where(UserProfile.id == user_id))
        log_product_event(db, event_name="account_deleted", user_id=user_id)
        db.commit()
        return int(res.rowcount or 0) > 0


def submit_for_verification(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        db.execute(
            update(user_profile)
            .where(user_profile.c.id == user_id)
            .values(verification_status="pending", verification_rejection_reason=None)
        )
        db.commit()
    return get_profile(user_id)


def list_pending_profiles() -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            select(user_profile)
            .where(user_profile.c.verification_status == "pending")
            .order_by(user_profile.c.created_at.asc())
        ).mappings().all()
    return [dict(r) for r in rows]


def set_verification_status(user_id: str, status: str, reason: str | None = None, admin_user_id: str | None = None) -> dict[str, Any] | None:
    values: dict[str, Any] = {"verification_status": status}
    if status == "approved":
        values["badges"] = ["verified"]
        values["verification_rejection_reason"] = None
    elif status == "rejected":
        values["verification_rejection_reason"] = reason
    with SessionLocal() as db:
        res = db.execute(update(user_profile).where(user_profile.c.id == user_id).values(**values))
        if not res.rowcount:
            return None
        log_product_event(
            db,
            event_name=f"verification_{status}",
            user_id=user_id,
            properties={"admin_user_id": admin_user_id, "reason": reason},
        )
        db.commit()
    return get_profile(user_id)


def get_subscription(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(select(subscription).where(subscription.c.user_id == user_id)).mappings().first()
    return dict(row) if row else None


def upsert_subscription(user_id: str, tier: str) -> dict[str, Any]:
    now = _now_utc()
    end_date = now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)
    with SessionLocal() as db:
        existing = db.execute(select(subscription.c.id).where(subscription.c.user_id == user_id)).first()
        if existing:
            db.execute(
                update(subscription)
                .where(subscription.c.user_id == user_id)
                .values(tier=tier, status="active", start_date=now, end_date=end_date, auto_renewal=True)
            )
        else:
            db.execute(
                insert(subscription).values(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    tier=tier,
                    status="active",
                    start_date=now,
                    end_date=end_date,
                    auto_renewal=True,
                )
            )
        db.execute(
            update(user_profile)
            .where(user_profile.c.id == user_id)
            .values(subscription_tier=tier, subscription_expires_at=end_date)
        )
        log_product_event(db, event_name="subscription_changed", user_id=user_id, properties={"tier": tier})
        db.commit()
    return get_subscription(user_id) or {}


def cancel_subscription(user_id: str) -> bool:
    with SessionLocal() as db:
        res = db.execute(
            update(subscription)
            .where(subscription.c.user_id == user_id)
            .values(status="cancelled", auto_renewal=False)
        )
        if not res.rowcount:
            return False
        db.execute(
            update(user_profile)
            .where(user_profile.c.id == user_id)
            .values(subscription_tier="free", subscription_expires_at=None)
        )
        log_product_event(db, event_name="subscription_cancelled", user_id=user_id)
        db.commit()
    return True


def get_match_preferences(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(select(match_preference).where(match_preference.c.user_id == user_id)).mappings().first()
    return dict(row) if row else None


def upsert_match_preferences(user_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    """Fields left out keep their stored value."""
    values = {k: v for k, v in fields.items() if k in MATCH_PREFERENCE_FIELDS}
    with SessionLocal() as db:
        existing = db.execute(select(match_preference.c.id).where(match_preference.c.user_id == user_id)).first()
        if existing:
            if values:
                db.execute(
                    update(match_preference)
                    .where(match_preference.c.user_id == user_id)
                    .values(updated_at=_now_utc(), **values)
                )
        else:
            db.execute(insert(match_preference).values(id=str(uuid.uuid4()), user_id=user_id, **values))
        db.commit()
    return get_match_preferences(user_id) or {}

def create_user_block(user_id: str, blocked_user_id: str, reason: str | None = None) -> dict[str, Any] | None:
    block_id = str(uuid.uuid4())
    try:
        with SessionLocal() as db:
            db.execute(
                insert(blocked_user).values(
                    id=block_id,
                    blocker_id=user_id,
                    blocked_user_id=blocked_user_id,
                    reason=reason,
                )
            )
            db.commit()
            row = db.execute(select(blocked_user).where(blocked_user.c.id == block_id)).mappings().first()
    except IntegrityError:
        return None
    return dict(row) if row else None


def get_user_block(user_id: str, blocked_user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            select(blocked_user).where(
                blocked_user.c.blocker_id == user_id,
                blocked_user.c.blocked_user_id == blocked_user_id,
            )
        ).mappings().first()
    return dict(row) if row else None


def remove_user_block(user_id: str, blocked_user_id: str) -> int:
    with SessionLocal() as db:
        res = db.execute(
            delete(blocked_user).where(
                blocked_user.c.blocker_id == user_id,
                blocked_user.c.blocked_user_id == blocked_user_id,
            )
        )
        db.commit()
        return int(res.rowcount or 0)


def list_user_blocks(user_id: str) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            select(blocked_user.c.id, blocked_user.c.blocked_user_id, blocked_user.c.reason, blocked_user.c.created_at)
            .where(blocked_user.c.blocker_id == user_id)
            .order_by(blocked_user.c.created_at.desc())
        ).mappings().all()
    return [dict(r) for r in rows]


def create_report(
    reporter_id: str,
    report_type: str,
    reported_user_id: str | None = None,
    conversation_id: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    report_id = str(uuid.uuid4())
    with SessionLocal() as db:
        db.execute(
            insert(report).values(
                id=report_id,
                reporter_id=reporter_id,
                reported_user_id=reported_user_id,
                conversation_id=conversation_id,
                report_type=report_type,
                description=description,
                status="pending",
            )
        )
        log_product_event(db, event_name="report_created", user_id=reporter_id, properties={"report_type": report_type})
        db.commit()
        row = db.execute(select(report).where(report.c.id == report_id)).mappings().first()
    return dict(row)


def list_reports_by_reporter(reporter_id: str) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            select(report).where(report.c.reporter_id == reporter_id).order_by(report.c.created_at.desc())
        ).mappings().all()
    return [dict(r) for r in rows]


def list_reports_admin(status: str | None = None, limit: int = 100) -> list[dict[str, Any]]:
    stmt = select(report).order_by(report.c.created_at.desc()).limit(limit)
    if status:
        stmt = stmt.where(report.c.status == status)
    with SessionLocal() as db:
        rows = db.execute(stmt).mappings().all()
    return [dict(r) for r in rows]


def resolve_report_admin(report_id: str, status: str, resolved_by: str, notes: str | None = None) -> dict[str, Any] | None:
    with SessionLocal() as db:
        res = db.execute(
            update(report)
            .where(report.c.id == report_id)
            .values(status=status, resolution_notes=notes, resolved_by=resolved_by, resolved_at=_now_utc())
        )
        if not res.rowcount:
            return None
        db.commit()
        row = db.execute(select(report).where(report.c.id == report_id)).mappings().first()
    return dict(row) if row else None


def get_admin_user(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(select(AdminUser.__table__).where(AdminUser.id == user_id)).mappings().first()
    return dict(row) if row else None


def create_admin_user(user_id: str, email: str, role: str = "reviewer") -> dict[str, Any] | None:
    try:
        with SessionLocal() as db:
            db.execute(insert(AdminUser.__table__).values(id=user_id, email=email.strip().lower(), role=role))
            db.commit()
    except IntegrityError:
        return None
    return get_admin_user(user_id)


def list_profiles_admin(limit: int = 20, offset: int = 0) -> tuple[list[dict[str, Any]], int]:
    with SessionLocal() as db:
        total = int(db.execute(select(func.count()).select_from(user_profile)).scalar_one())
        rows = db.execute(
            select(user_profile, subscription.c.status.label("subscription_status"))
            .select_from(user_profile.outerjoin(subscription, subscription.c.user_id == user_profile.c.id))
            .order_by(user_profile.c.created_at.asc(), user_profile.c.id.asc())
            .limit(limit)
            .offset(offset)
        ).mappings().all()
    return [dict(r) for r in rows], total


def get_profile_admin_details(user_id: str) -> dict[str, Any] | None:
    profile = get_profile(user_id)
    if not profile:
        return None
    with SessionLocal() as db:
        blocks = db.execute(select(blocked_user).where(blocked_user.c.blocker_id == user_id)).mappings().all()
        reports_against = db.execute(
            select(report).where(report.c.reported_user_id == user_id).order_by(report.c.created_at.desc())
        ).mappings().all()
    return {
        **profile,
        "subscription": get_subscription(user_id),
        "match_preferences": get_match_preferences(user_id),
        "blocked_users": [dict(r) for r in blocks],
        "reports": [dict(r) for r in reports_against],
    }
