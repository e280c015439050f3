"""
Legacy SwipeStats schema.

The old store uses PascalCase table names and camelCase column names. Tables
are declared with SQLAlchemy Core on their own ``MetaData`` so they never mix
with the target models, and each table has a pydantic row model that the
transforms consume.
"""

from datetime import datetime
from typing import Annotated, Any

import pytz
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, MetaData, String, Table, Text

legacy_metadata = MetaData()


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps, convert aware ones to UTC."""
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


# =============================================================================
# TABLES
# =============================================================================

LegacyUser = Table(
    "User",
    legacy_metadata,
    Column("id", String, primary_key=True),
    Column("email", String),
    Column("swipestatsTier", String, nullable=False, default="FREE"),
    Column("createdAt", DateTime, nullable=False),
)

LegacyTinderProfile = Table(
    "TinderProfile",
    legacy_metadata,
    Column("tinderId", String, primary_key=True),
    Column("userId", String, nullable=False),
    Column("computed", Boolean, nullable=False, default=False),
    Column("createdAt", DateTime, nullable=False),
    Column("updatedAt", DateTime, nullable=False),
    Column("birthDate", DateTime, nullable=False),
    Column("ageAtUpload", Integer, nullable=False),
    Column("ageAtLastUsage", Integer, nullable=False),
    Column("createDate", DateTime, nullable=False),
    Column("activeTime", DateTime),
    Column("gender", String, nullable=False),
    Column("genderStr", String, nullable=False),
    Column("bio", Text),
    Column("bioOriginal", Text),
    Column("city", String),
    Column("country", String),
    Column("region", String),
    Column("user_interests", JSON),
    Column("interests", JSON),
    Column("sexual_orientations", JSON),
    Column("descriptors", JSON),
    Column("instagramConnected", Boolean, nullable=False, default=False),
    Column("spotifyConnected", Boolean, nullable=False, default=False),
    Column("jobTitle", String),
    Column("jobTitleDisplayed", Boolean),
    Column("company", String),
    Column("companyDisplayed", Boolean),
    Column("school", String),
    Column("schoolDisplayed", Boolean),
    Column("college", JSON),
    Column("jobsRaw", JSON),
    Column("schoolsRaw", JSON),
    Column("educationLevel", String),
    Column("ageFilterMin", Integer, nullable=False),
    Column("ageFilterMax", Integer, nullable=False),
    Column("interestedIn", String, nullable=False),
    Column("interestedInStr", String, nullable=False),
    Column("genderFilter", String, nullable=False),
    Column("genderFilterStr", String, nullable=False),
    Column("swipestatsVersion", String, nullable=False),
    Column("firstDayOnApp", DateTime, nullable=False),
    Column("lastDayOnApp", DateTime, nullable=False),
    Column("daysInProfilePeriod", Integer, nullable=False),
)

LegacyTinderUsage = Table(
    "TinderUsage",
    legacy_metadata,
    Column("dateStampRaw", String, primary_key=True),
    Column("tinderProfileId", String, primary_key=True),
    Column("dateStamp", DateTime, nullable=False),
    Column("appOpens", Integer, nullable=False, default=0),
    Column("matches", Integer, nullable=False, default=0),
    Column("swipeLikes", Integer, nullable=False, default=0),
    Column("swipeSuperLikes", Integer, nullable=False, default=0),
    Column("swipePasses", Integer, nullable=False, default=0),
    Column("swipesCombined", Integer, nullable=False, default=0),
    Column("messagesReceived", Integer, nullable=False, default=0),
    Column("messagesSent", Integer, nullable=False, default=0),
    Column("matchRate", Float, nullable=False, default=0),
    Column("likeRate", Float, nullable=False, default=0),
    Column("messagesSentRate", Float, nullable=False, default=0),
    Column("responseRate", Float, nullable=False, default=0),
    Column("engagementRate", Float, nullable=False, default=0),
    Column("dateIsMissingFromOriginalData", Boolean, nullable=False, default=False),
    Column("daysSinceLastActive", Integer),
    Column("activeUser", Boolean, nullable=False, default=False),
    Column("activeUserInLast7Days", Boolean, nullable=False, default=False),
    Column("activeUserInLast14Days", Boolean, nullable=False, default=False),
    Column("activeUserInLast30Days", Boolean, nullable=False, default=False),
    Column("userAgeThisDay", Integer, nullable=False),
)

LegacyJob = Table(
    "Job",
    legacy_metadata,
    Column("jobId", String, primary_key=True),
    Column("title", String, nullable=False),
    Column("titleDisplayed", Boolean, nullable=False, default=False),
    Column("company", String),
    Column("companyDisplayed", Boolean),
    Column("tinderProfileId", String, nullable=False),
)

LegacySchool = Table(
    "School",
    legacy_metadata,
    Column("schoolId", String, primary_key=True),
    Column("id", String),
    Column("displayed", Boolean, nullable=False, default=False),
    Column("name", String, nullable=False),
    Column("type", String),
    Column("year", String),
    Column("metadata_id", String),
    Column("tinderProfileId", String, nullable=False),
)

LegacyMatch = Table(
    "Match",
    legacy_metadata,
    Column("id", String, primary_key=True),
    Column("order", Integer, nullable=False),
    Column("totalMessageCount", Integer, nullable=False, default=0),
    Column("textCount", Integer, nullable=False, default=0),
    Column("gifCount", Integer, nullable=False, default=0),
    Column("gestureCount", Integer, nullable=False, default=0),
    Column("otherMessageTypeCount", Integer, nullable=False, default=0),
    Column("primaryLanguage", String),
    Column("languages", JSON),
    Column("initialMessageAt", DateTime),
    Column("lastMessageAt", DateTime),
    Column("likedAt", DateTime),
    Column("matchedAt", DateTime),
    Column("engagementScore", Integer),
    Column("responseTimeMedianSeconds", Integer),
    Column("conversationDurationDays", Integer),
    Column("messageImbalanceRatio", Float),
    Column("longestGapHours", Integer),
    Column("didMatchReply", Boolean),
    Column("lastMessageFrom", String),
    Column("tinderMatchId", String),
    Column("tinderProfileId", String),
    Column("weMet", JSON),
    Column("like", JSON),
    Column("match", JSON),
)

LegacyMessage = Table(
    "Message",
    legacy_metadata,
    Column("id", String, primary_key=True),
    Column("to", Integer, nullable=False),
    Column("sentDate", DateTime, nullable=False),
    Column("sentDateRaw", String, nullable=False),
    Column("contentRaw", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("contentSanitized", Text),
    Column("charCount", Integer, nullable=False),
    Column("messageType", String, nullable=False),
    Column("type", String),
    Column("gifUrl", String),
    Column("order", Integer, nullable=False),
    Column("language", String),
    Column("timeSinceLastMessage", Integer),
    Column("timeSinceLastMessageRelative", String),
    Column("emotionScore", Integer),
    Column("matchId", String, nullable=False),
    Column("tinderProfileId", String),
)

LegacyMedia = Table(
    "Media",
    legacy_metadata,
    Column("id", String, primary_key=True),
    Column("type", String, nullable=False),
    Column("prompt", String),
    Column("caption", String),
    Column("url", String, nullable=False),
    Column("fromSoMe", Boolean),
    Column("tinderProfileId", String),
)

LegacyOriginalAnonymizedFile = Table(
    "OriginalAnonymizedFile",
    legacy_metadata,
    Column("id", String, primary_key=True),
    Column("userId", String),
    Column("dataProvider", String, nullable=False),
    Column("swipestatsVersion", String),
    Column("file", JSON),
    Column("createdAt", DateTime, nullable=False),
)


# =============================================================================
# ROW MODELS
# =============================================================================


class LegacyRow(BaseModel):
    """Base for legacy rows: camelCase column names map onto snake_case fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class UserSeedRow(LegacyRow):
    """Owner of one or more profiles, aggregated from the profile table."""

    user_id: str
    created_at: UTCDateTime


class TinderProfileRow(LegacyRow):
    tinder_id: str
    user_id: str
    computed: bool = False
    created_at: UTCDateTime
    updated_at: UTCDateTime
    birth_date: UTCDateTime
    age_at_upload: int
    age_at_last_usage: int
    create_date: UTCDateTime
    active_time: UTCDateTime | None = None
    gender: str
    gender_str: str
    bio: str | None = None
    bio_original: str | None = None
    city: str | None = None
    country: str | None = None
    region: str | None = None
    user_interests: Any = Field(default=None, alias="user_interests")
    interests: Any = None
    sexual_orientations: Any = Field(default=None, alias="sexual_orientations")
    descriptors: Any = None
    instagram_connected: bool = False
    spotify_connected: bool = False
    job_title: str | None = None
    job_title_displayed: bool | None = None
    company: str | None = None
    company_displayed: bool | None = None
    school: str | None = None
    school_displayed: bool | None = None
    college: Any = None
    jobs_raw: Any = None
    schools_raw: Any = None
    education_level: str | None = None
    age_filter_min: int
    age_filter_max: int
    interested_in: str
    interested_in_str: str
    gender_filter: str
    gender_filter_str: str
    swipestats_version: str
    first_day_on_app: UTCDateTime
    last_day_on_app: UTCDateTime
    days_in_profile_period: int


class TinderUsageRow(LegacyRow):
    date_stamp_raw: str
    tinder_profile_id: str
    date_stamp: UTCDateTime
    app_opens: int = 0
    matches: int = 0
    swipe_likes: int = 0
    swipe_super_likes: int = 0
    swipe_passes: int = 0
    swipes_combined: int = 0
    messages_received: int = 0
    messages_sent: int = 0
    match_rate: float = 0.0
    like_rate: float = 0.0
    messages_sent_rate: float = 0.0
    response_rate: float = 0.0
    engagement_rate: float = 0.0
    date_is_missing_from_original_data: bool = False
    days_since_last_active: int | None = None
    active_user: bool = False
    active_user_in_last_7_days: bool = Field(default=False, alias="activeUserInLast7Days")
    active_user_in_last_14_days: bool = Field(default=False, alias="activeUserInLast14Days")
    active_user_in_last_30_days: bool = Field(default=False, alias="activeUserInLast30Days")
    user_age_this_day: int


class JobRow(LegacyRow):
    job_id: str
    title: str
    title_displayed: bool = False
    company: str | None = None
    company_displayed: bool | None = None
    tinder_profile_id: str


class SchoolRow(LegacyRow):
    school_id: str
    id: str | None = None
    displayed: bool = False
    name: str
    type: str | None = None
    year: str | None = None
    metadata_id: str | None = Field(default=None, alias="metadata_id")
    tinder_profile_id: str


class MatchRow(LegacyRow):
    id: str
    order: int
    total_message_count: int = 0
    text_count: int = 0
    gif_count: int = 0
    gesture_count: int = 0
    other_message_type_count: int = 0
    primary_language: str | None = None
    languages: list | None = None
    initial_message_at: UTCDateTime | None = None
    last_message_at: UTCDateTime | None = None
    liked_at: UTCDateTime | None = None
    matched_at: UTCDateTime | None = None
    engagement_score: int | None = None
    response_time_median_seconds: int | None = None
    conversation_duration_days: int | None = None
    message_imbalance_ratio: float | None = None
    longest_gap_hours: int | None = None
    did_match_reply: bool | None = None
    last_message_from: str | None = None
    tinder_match_id: str | None = None
    tinder_profile_id: str | None = None
    we_met: Any = None
    like: Any = None
    match: Any = None


class MessageRow(LegacyRow):
    id: str
    to: int
    sent_date: UTCDateTime
    sent_date_raw: str
    content_raw: str
    content: str
    content_sanitized: str | None = None
    char_count: int
    message_type: str
    type: str | None = None
    gif_url: str | None = None
    order: int
    language: str | None = None
    time_since_last_message: int | None = None
    time_since_last_message_relative: str | None = None
    emotion_score: int | None = None
    match_id: str
    tinder_profile_id: str | None = None


class MediaRow(LegacyRow):
    id: str
    type: str
    prompt: str | None = None
    caption: str | None = None
    url: str
    from_so_me: bool | None = None
    tinder_profile_id: str | None = None


class PaidUserRow(LegacyRow):
    """Legacy paying user joined to one of their profiles."""

    user_id: str
    email: str | None = None
    swipestats_tier: str
    tinder_id: str
    profile_last_day: UTCDateTime


class OriginalFileRow(LegacyRow):
    id: str
    user_id: str | None = None
    data_provider: str
    file: dict
    created_at: UTCDateTime
