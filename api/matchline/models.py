import uuid
from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from .database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


class UserProfile(Base):
    __tablename__ = "user_profile"

    id = Column(String(36), primary_key=True, default=_uuid)
    display_name = Column(String(80), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(120), nullable=True)
    verification_status = Column(String(20), nullable=False, default="pending")
    verification_rejection_reason = Column(Text, nullable=True)
    badges = Column(JSONType, nullable=False, default=list)
    subscription_tier = Column(String(20), nullable=False, default="free")
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)
    is_accepting_chats = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_user_profile_verification_status", "verification_status"),
        Index("idx_user_profile_subscription_tier", "subscription_tier"),
    )


class UserMatch(Base):
    __tablename__ = "user_match"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    matched_user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    batch_date = Column(Date, nullable=False)
    match_score = Column(Integer, nullable=True)
    interaction_type = Column(String(20), nullable=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "matched_user_id", name="uq_user_match_pair"),
        Index("idx_user_match_user_id", "user_id"),
        Index("idx_user_match_batch_date", "batch_date"),
    )


class Conversation(Base):
    __tablename__ = "conversation"

    id = Column(String(36), primary_key=True, default=_uuid)
    user1_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    match_id = Column(String(36), ForeignKey("user_match.id", ondelete="SET NULL"), nullable=True)
    initial_opener_message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    snoozed_until = Column(DateTime(timezone=True), nullable=True)
    snooze_duration = Column(String(20), nullable=True)
    ended_by = Column(String(36), nullable=True)
    ended_reason = Column(Text, nullable=True)
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    user1_unread_count = Column(Integer, nullable=False, default=0)
    user2_unread_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_conversation_user1", "user1_id"),
        Index("idx_conversation_user2", "user2_id"),
        Index("idx_conversation_status", "status"),
    )


class Message(Base):
    __tablename__ = "message"

    id = Column(String(36), primary_key=True, default=_uuid)
    conversation_id = Column(String(36), ForeignKey("conversation.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_message_conversation_id", "conversation_id"),
        Index("idx_message_sender_id", "sender_id"),
    )


class BlockedUser(Base):
    __tablename__ = "blocked_user"

    id = Column(String(36), primary_key=True, default=_uuid)
    blocker_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    blocked_user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_user_id", name="uq_blocked_user_pair"),
        Index("idx_blocked_user_blocker_id", "blocker_id"),
    )


class Report(Base):
    __tablename__ = "report"

    id = Column(String(36), primary_key=True, default=_uuid)
    reporter_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False)
    reported_user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=True)
    conversation_id = Column(String(36), ForeignKey("conversation.id", ondelete="CASCADE"), nullable=True)
    report_type = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    resolution_notes = Column(Text, nullable=True)
    resolved_by = Column(String(36), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_report_reporter_id", "reporter_id"),
        Index("idx_report_status", "status"),
    )


class Subscription(Base):
    __tablename__ = "subscription"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False, unique=True)
    tier = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="active")
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    auto_renewal = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class MatchPreference(Base):
    __tablename__ = "match_preference"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user_profile.id", ondelete="CASCADE"), nullable=False, unique=True)
    min_age = Column(Integer, nullable=True)
    max_age = Column(Integer, nullable=True)
    preferred_sex = Column(String(50), nullable=True)
    max_distance = Column(Integer, nullable=True)
    accepted_locations = Column(JSONType, nullable=True)
    required_interests = Column(JSONType, nullable=True)
    excluded_interests = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class AdminUser(Base):
    __tablename__ = "admin_user"

    id = Column(String(36), primary_key=True)
    email = Column(String(254), nullable=False, unique=True)
    role = Column(String(50), nullable=False, default="reviewer")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ProductEvent(Base):
    __tablename__ = "product_event"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=True)
    event_name = Column(String(80), nullable=False)
    properties = Column(JSONType, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_product_event_name", "event_name"),)
