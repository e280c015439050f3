"""Cohort definitions and their per-period percentile snapshots."""

from datetime import datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from db.enums import CohortType, DataProvider, Gender
from db.models.base import create_id, utc_now


class CohortDefinition(SQLModel, table=True):
    """Named population filter. Nullable filters mean "no constraint"."""

    __tablename__ = "cohort_definition"

    id: str = Field(primary_key=True)
    name: str
    description: str | None = Field(default=None)

    # Filters
    data_provider: DataProvider | None = Field(default=None)
    gender: Gender | None = Field(default=None)
    age_min: int | None = Field(default=None)
    age_max: int | None = Field(default=None)
    country: str | None = Field(default=None)
    region: str | None = Field(default=None)

    type: CohortType = Field(default=CohortType.SYSTEM)
    created_by_user_id: str | None = Field(default=None, foreign_key="user.id", ondelete="CASCADE")

    # Cache written by the statistics stage
    profile_count: int = Field(default=0)
    last_computed_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class CohortStats(SQLModel, table=True):
    """Percentile distribution of three metrics for one (cohort, period) pair."""

    __tablename__ = "cohort_stats"
    __table_args__ = (UniqueConstraint("cohort_id", "period", name="cohort_period_idx"),)

    id: str = Field(default_factory=lambda: create_id("cst"), primary_key=True)
    cohort_id: str = Field(foreign_key="cohort_definition.id", index=True, ondelete="CASCADE")

    period: str = Field(default="all-time")
    period_start: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    period_end: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))

    profile_count: int

    like_rate_p10: float | None = Field(default=None)
    like_rate_p25: float | None = Field(default=None)
    like_rate_p50: float | None = Field(default=None)
    like_rate_p75: float | None = Field(default=None)
    like_rate_p90: float | None = Field(default=None)
    like_rate_mean: float | None = Field(default=None)

    match_rate_p10: float | None = Field(default=None)
    match_rate_p25: float | None = Field(default=None)
    match_rate_p50: float | None = Field(default=None)
    match_rate_p75: float | None = Field(default=None)
    match_rate_p90: float | None = Field(default=None)
    match_rate_mean: float | None = Field(default=None)

    swipes_per_day_p10: float | None = Field(default=None)
    swipes_per_day_p25: float | None = Field(default=None)
    swipes_per_day_p50: float | None = Field(default=None)
    swipes_per_day_p75: float | None = Field(default=None)
    swipes_per_day_p90: float | None = Field(default=None)
    swipes_per_day_mean: float | None = Field(default=None)

    computed_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
