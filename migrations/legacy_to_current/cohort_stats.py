"""
Cohort benchmark statistics.

For every (cohort, period) pair the matching profiles' like rate, match rate
and swipes per day are reduced to P10/P25/P50/P75/P90 plus the mean, and
stored as one CohortStats row keyed by (cohort_id, period).
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import pytz
from tqdm.asyncio import tqdm

from db import crud
from db.config import settings
from db.models import CohortDefinition, CohortStats, ProfileMeta, TinderProfile, utc_now
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.exceptions import CohortNotFoundError
from migrations.legacy_to_current.stats import Stats

logger = logging.getLogger(__name__)

ALL_TIME = "all-time"
PERCENTILES = {"p10": 0.10, "p25": 0.25, "p50": 0.50, "p75": 0.75, "p90": 0.90}
METRICS = ("like_rate", "match_rate", "swipes_per_day")


@dataclass(frozen=True)
class Period:
    """A statistics window. ``start``/``end`` are None for all-time."""

    name: str
    start: datetime | None = None
    end: datetime | None = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None

    @classmethod
    def for_year(cls, year: int) -> "Period":
        return cls(
            name=str(year),
            start=datetime(year, 1, 1, tzinfo=pytz.UTC),
            end=datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=pytz.UTC),
        )


def build_periods(years: Sequence[int] | None = None) -> list[Period]:
    """All-time followed by each configured calendar year."""
    years = settings.cohort_stats_years if years is None else years
    return [Period(ALL_TIME)] + [Period.for_year(year) for year in years]


def percentile(sorted_values: Sequence[float], p: float) -> float | None:
    """Nearest-rank percentile: the value at index ``ceil(n * p) - 1``, clamped to 0."""
    if not sorted_values:
        return None
    index = math.ceil(len(sorted_values) * p) - 1
    return sorted_values[max(0, index)]


def mean(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def summarize(metas: Sequence[ProfileMeta]) -> dict[str, float | None]:
    """Percentile and mean columns for the three benchmark metrics."""
    summary: dict[str, float | None] = {}
    for metric in METRICS:
        values = sorted(getattr(meta, metric) for meta in metas)
        for suffix, p in PERCENTILES.items():
            summary[f"{metric}_{suffix}"] = percentile(values, p)
        summary[f"{metric}_mean"] = mean(values)
    return summary


def matches_geography(cohort: CohortDefinition, profile: TinderProfile) -> bool:
    if cohort.country and profile.country != cohort.country:
        return False
    if cohort.region and profile.region != cohort.region:
        return False
    return True


class CohortStatsAggregator:
    """Computes cohort percentile snapshots for every cohort and period"""

    def __init__(
        self,
        migration: DatabaseMigration,
        periods: list[Period] | None = None,
        min_profiles: int | None = None,
    ):
        self.migration = migration
        self.periods = periods if periods is not None else build_periods()
        self.min_profiles = min_profiles or settings.cohort_min_profiles
        self.dry_run = migration.dry_run

    async def compute(self, cohort_id: str, period: Period) -> CohortStats | None:
        """Compute and upsert stats for one (cohort, period) pair.

        Returns None when fewer than ``min_profiles`` profiles match.
        """
        async with self.migration.get_session() as session:
            cohort = await session.get(CohortDefinition, cohort_id)
            if cohort is None:
                raise CohortNotFoundError(cohort_id)

            rows = await crud.get_cohort_profiles(
                session,
                gender=cohort.gender,
                age_min=cohort.age_min,
                age_max=cohort.age_max,
                period_start=period.start,
                period_end=period.end,
            )
            metas = [meta for profile, meta in rows if matches_geography(cohort, profile)]

            if len(metas) < self.min_profiles:
                logger.info(
                    f"   Skip - Only {len(metas)} profiles (need {self.min_profiles}+ for meaningful stats)"
                )
                return None

            computed_at = utc_now()
            stats = CohortStats(
                cohort_id=cohort_id,
                period=period.name,
                period_start=period.start,
                period_end=period.end,
                profile_count=len(metas),
                computed_at=computed_at,
                **summarize(metas),
            )

            if self.dry_run:
                logger.info(f"   [DRY RUN] Would write stats ({len(metas)} profiles)")
                return stats

            await crud.upsert(session, CohortStats, stats, index_elements=("cohort_id", "period"))
            # Only the all-time snapshot feeds the cohort's cached count
            if period.name == ALL_TIME:
                await crud.update_cohort_cache(session, cohort_id, len(metas), computed_at)
            await session.commit()

        logger.info(f"   Computed stats ({len(metas)} profiles)")
        return stats

    async def compute_all(self) -> Stats:
        """Every cohort x every period; failures are logged and counted, never fatal."""
        logger.info("\n" + "=" * 60)
        logger.info("📈 Compute Cohort Stats - Multi-Period")
        logger.info("=" * 60)

        stats = Stats()
        async with self.migration.get_session() as session:
            cohorts = await crud.get_cohorts(session)

        logger.info(f"Found {len(cohorts)} cohorts")
        logger.info(
            f"Computing stats for {len(self.periods)} periods: {', '.join(p.name for p in self.periods)}"
        )

        with tqdm(total=len(cohorts) * len(self.periods), desc="Computing cohort stats") as pbar:
            for index, cohort in enumerate(cohorts, start=1):
                logger.info(f"\n[{index}/{len(cohorts)}] {cohort.name} ({cohort.id})")
                for period in self.periods:
                    logger.info(f"   {period.name}...")
                    try:
                        result = await self.compute(cohort.id, period)
                    except Exception as e:
                        stats.failed += 1
                        stats.add_error("cohort_stats", f"{cohort.id}/{period.name}: {e}")
                        logger.exception(f"   Error computing {cohort.id}/{period.name}: {e}")
                    else:
                        if result is None:
                            stats.skipped += 1
                        else:
                            stats.successful += 1
                    finally:
                        pbar.update(1)

        logger.info(
            f"✅ Cohort stats: {stats.successful} computed, {stats.skipped} skipped, {stats.failed} errors"
        )
        return stats
