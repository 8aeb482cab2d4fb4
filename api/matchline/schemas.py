from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    # The mobile client sends camelCase keys.
    model_config = ConfigDict(populate_by_name=True)


class CreateProfileRequest(_Request):
    display_name: str | None = Field(default=None, alias="displayName", max_length=80)
    bio: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=120)


class UpdateProfileRequest(_Request):
    display_name: str | None = Field(default=None, alias="displayName", max_length=80)
    bio: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=120)
    is_accepting_chats: bool | None = Field(default=None, alias="isAcceptingChats")


class InteractRequest(_Request):
    action: str


class CreateConversationRequest(_Request):
    match_id: str = Field(alias="matchId")
    message: str | None = None


class SnoozeRequest(_Request):
    hours: int


class EndConversationRequest(_Request):
    reason: str | None = None


class SendMessageRequest(_Request):
    conversation_id: str = Field(alias="conversationId")
    content: str | None = None


class SubscriptionRequest(_Request):
    tier: Literal["free", "premium", "vip"]


class BlockRequest(_Request):
    blocked_user_id: str = Field(alias="blockedUserId")
    reason: str | None = None


class ReportRequest(_Request):
    reported_user_id: str | None = Field(default=None, alias="reportedUserId")
    conversation_id: str | None = Field(default=None, alias="conversationId")
    report_type: str = Field(alias="reportType")
    description: str | None = None


class RejectVerificationRequest(_Request):
    reason: str | None = None


class ResolveReportRequest(_Request):
    status: Literal["resolved", "dismissed"] = "resolved"
    notes: str | None = None


class MatchPreferencesRequest(_Request):
    min_age: int | None = Field(default=None, alias="minAge", ge=18, le=120)
    max_age: int | None = Field(default=None, alias="maxAge", ge=18, le=120)
    preferred_sex: str | None = Field(default=None, alias="preferredSex", max_length=50)
    max_distance: int | None = Field(default=None, alias="maxDistance", ge=0)
    accepted_locations: list[str] | None = Field(default=None, alias="acceptedLocations")
    required_interests: list[str] | None = Field(default=None, alias="requiredInterests")
    excluded_interests: list[str] | None = Field(default=None, alias="excludedInterests")


class SuspendUserRequest(_Request):
    reason: str | None = None
