"""Match threads, their messages, and profile media."""

from datetime import datetime

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel

from db.enums import MessageType


class Match(SQLModel, table=True):
    """One conversation thread belonging to a profile."""

    __tablename__ = "match"

    id: str = Field(primary_key=True)
    order: int
    total_message_count: int = Field(default=0)
    text_count: int = Field(default=0)
    gif_count: int = Field(default=0)
    gesture_count: int = Field(default=0)
    other_message_type_count: int = Field(default=0)
    primary_language: str | None = Field(default=None)
    languages: list = Field(default_factory=list, sa_type=JSON)

    initial_message_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    last_message_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    liked_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    matched_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))

    engagement_score: int | None = Field(default=None)
    response_time_median_seconds: int | None = Field(default=None)
    conversation_duration_days: int | None = Field(default=None)
    message_imbalance_ratio: float | None = Field(default=None)
    longest_gap_hours: int | None = Field(default=None)
    did_match_reply: bool | None = Field(default=None)
    last_message_from: str | None = Field(default=None)

    tinder_match_id: str | None = Field(default=None)
    tinder_profile_id: str | None = Field(
        default=None, foreign_key="tinder_profile.tinder_id", index=True, ondelete="CASCADE"
    )
    we_met: dict | list | None = Field(default=None, sa_type=JSON)
    like: dict | list | None = Field(default=None, sa_type=JSON)
    match: dict | list | None = Field(default=None, sa_type=JSON)

    @property
    def is_ghosted(self) -> bool:
        return self.total_message_count == 0


class Message(SQLModel, table=True):
    __tablename__ = "message"

    id: str = Field(primary_key=True)
    to: int
    sent_date: datetime = Field(sa_type=DateTime(timezone=True))
    sent_date_raw: str
    content_raw: str
    content: str
    content_sanitized: str | None = Field(default=None)
    char_count: int
    message_type: MessageType
    type: str | None = Field(default=None)
    gif_url: str | None = Field(default=None)
    order: int
    language: str | None = Field(default=None)
    time_since_last_message: int | None = Field(default=None)
    time_since_last_message_relative: str | None = Field(default=None)
    emotion_score: int | None = Field(default=None)

    match_id: str = Field(foreign_key="match.id", index=True, ondelete="RESTRICT")
    tinder_profile_id: str | None = Field(
        default=None, foreign_key="tinder_profile.tinder_id", index=True, ondelete="CASCADE"
    )


class Media(SQLModel, table=True):
    __tablename__ = "media"

    id: str = Field(primary_key=True)
    type: str
    prompt: str | None = Field(default=None)
    caption: str | None = Field(default=None)
    url: str
    from_so_me: bool | None = Field(default=None)
    tinder_profile_id: str | None = Field(
        default=None, foreign_key="tinder_profile.tinder_id", index=True, ondelete="CASCADE"
    )
