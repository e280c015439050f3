"""Tinder profile snapshot and its per-profile child tables."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index
from sqlmodel import Field, SQLModel

from db.enums import Gender, SwipestatsVersion
from db.models.base import TimestampMixin


class TinderProfile(TimestampMixin, table=True):
    """
    One uploaded Tinder account snapshot.

    ``computed`` is flipped to True by the metadata stage once a ProfileMeta
    row exists for the profile.
    """

    __tablename__ = "tinder_profile"

    tinder_id: str = Field(primary_key=True)
    user_id: str | None = Field(default=None, foreign_key="user.id", index=True, ondelete="CASCADE")
    computed: bool = Field(default=False, index=True)

    # Demographics
    birth_date: datetime = Field(sa_type=DateTime(timezone=True))
    age_at_upload: int
    age_at_last_usage: int = Field(index=True)
    create_date: datetime = Field(sa_type=DateTime(timezone=True))
    active_time: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    gender: Gender = Field(index=True)
    gender_str: str
    bio: str | None = Field(default=None)
    bio_original: str | None = Field(default=None)
    city: str | None = Field(default=None)
    country: str | None = Field(default=None)
    region: str | None = Field(default=None)

    # Nested documents kept as JSON
    user_interests: list | dict | None = Field(default=None, sa_type=JSON)
    interests: list | dict | None = Field(default=None, sa_type=JSON)
    sexual_orientations: list | dict | None = Field(default=None, sa_type=JSON)
    descriptors: list | dict | None = Field(default=None, sa_type=JSON)
    college: list | dict | None = Field(default=None, sa_type=JSON)
    jobs_raw: list | dict | None = Field(default=None, sa_type=JSON)
    schools_raw: list | dict | None = Field(default=None, sa_type=JSON)

    instagram_connected: bool = Field(default=False)
    spotify_connected: bool = Field(default=False)
    job_title: str | None = Field(default=None)
    job_title_displayed: bool = Field(default=False)
    company: str | None = Field(default=None)
    company_displayed: bool = Field(default=False)
    school: str | None = Field(default=None)
    school_displayed: bool = Field(default=False)
    education_level: str | None = Field(default=None)

    # Preferences
    age_filter_min: int
    age_filter_max: int
    interested_in: Gender
    interested_in_str: str
    gender_filter: Gender
    gender_filter_str: str
    swipestats_version: SwipestatsVersion

    # Activity window
    first_day_on_app: datetime = Field(sa_type=DateTime(timezone=True), index=True)
    last_day_on_app: datetime = Field(sa_type=DateTime(timezone=True), index=True)
    days_in_profile_period: int


class TinderUsage(SQLModel, table=True):
    """One calendar day of raw activity for a profile."""

    __tablename__ = "tinder_usage"
    __table_args__ = (Index("idx_tinder_usage_profile", "tinder_profile_id"),)

    date_stamp_raw: str = Field(primary_key=True)
    tinder_profile_id: str = Field(primary_key=True, foreign_key="tinder_profile.tinder_id", ondelete="CASCADE")
    date_stamp: datetime = Field(sa_type=DateTime(timezone=True))

    app_opens: int = Field(default=0)
    matches: int = Field(default=0)
    swipe_likes: int = Field(default=0)
    swipe_super_likes: int = Field(default=0)
    swipe_passes: int = Field(default=0)
    swipes_combined: int = Field(default=0)
    messages_received: int = Field(default=0)
    messages_sent: int = Field(default=0)

    match_rate: float = Field(default=0.0)
    like_rate: float = Field(default=0.0)
    messages_sent_rate: float = Field(default=0.0)
    response_rate: float = Field(default=0.0)
    engagement_rate: float = Field(default=0.0)

    # Data-quality flags: a missing day is a synthetic zero, not a real measurement
    date_is_missing_from_original_data: bool = Field(default=False)
    days_since_last_active: int | None = Field(default=None)
    active_user: bool = Field(default=False)
    active_user_in_last_7_days: bool = Field(default=False)
    active_user_in_last_14_days: bool = Field(default=False)
    active_user_in_last_30_days: bool = Field(default=False)
    user_age_this_day: int

    @property
    def is_real(self) -> bool:
        return not self.date_is_missing_from_original_data

    @property
    def is_active(self) -> bool:
        return self.is_real and self.app_opens > 0


class Job(SQLModel, table=True):
    __tablename__ = "job"

    job_id: str = Field(primary_key=True)
    title: str
    title_displayed: bool = Field(default=False)
    company: str | None = Field(default=None)
    company_displayed: bool | None = Field(default=None)
    tinder_profile_id: str = Field(foreign_key="tinder_profile.tinder_id", index=True, ondelete="CASCADE")


class School(SQLModel, table=True):
    __tablename__ = "school"

    school_id: str = Field(primary_key=True)
    id: str | None = Field(default=None)
    displayed: bool = Field(default=False)
    name: str
    type: str | None = Field(default=None)
    year: str | None = Field(default=None)
    metadata_id: str | None = Field(default=None)
    tinder_profile_id: str = Field(foreign_key="tinder_profile.tinder_id", index=True, ondelete="CASCADE")
