"""Per-profile computed aggregates."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from db.models.base import create_id, utc_now


class ProfileMeta(SQLModel, table=True):
    """
    Aggregate statistics for one profile, computed from its real usage days
    and its match threads. At most one row per profile.
    """

    __tablename__ = "profile_meta"

    id: str = Field(default_factory=lambda: create_id("pm"), primary_key=True)
    tinder_profile_id: str = Field(
        foreign_key="tinder_profile.tinder_id", unique=True, index=True, ondelete="CASCADE"
    )

    # Time range
    from_date: datetime = Field(sa_type=DateTime(timezone=True))
    to_date: datetime = Field(sa_type=DateTime(timezone=True))
    days_in_period: int
    days_active: int

    # Totals over real usage days
    swipe_likes_total: int
    swipe_passes_total: int
    matches_total: int
    messages_sent_total: int
    messages_received_total: int
    app_opens_total: int

    # Rates
    like_rate: float
    match_rate: float
    swipes_per_day: float

    # Conversations
    conversation_count: int
    conversations_with_messages: int
    ghosted_count: int

    average_response_time_seconds: int | None = Field(default=None)
    mean_response_time_seconds: int | None = Field(default=None)
    median_conversation_duration_days: int | None = Field(default=None)
    longest_conversation_days: int | None = Field(default=None)
    average_messages_per_conversation: float | None = Field(default=None)
    median_messages_per_conversation: int | None = Field(default=None)

    computed_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
