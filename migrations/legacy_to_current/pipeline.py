"""
Pipeline driver: data copy, profile meta, cohort seeding, cohort statistics.

Stages run strictly one after another. ``stats_only`` skips the copy and only
recomputes the derived analytics on the target store.
"""

import logging
import time

from migrations.legacy_to_current.batch import format_duration
from migrations.legacy_to_current.cohort_stats import CohortStatsAggregator, Period
from migrations.legacy_to_current.cohorts import seed_cohorts
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.orchestrator import MigrationOrchestrator
from migrations.legacy_to_current.profile_meta import ProfileMetaAggregator
from migrations.legacy_to_current.stats import MigrationStats

logger = logging.getLogger(__name__)


class PipelineDriver:
    """Runs every pipeline stage in order and collects one run report"""

    def __init__(
        self,
        migration: DatabaseMigration,
        profile_limit: int | None = None,
        force: bool = False,
        stats_only: bool = False,
        periods: list[Period] | None = None,
        min_profiles: int | None = None,
    ):
        self.migration = migration
        self.profile_limit = profile_limit
        self.force = force
        self.stats_only = stats_only
        self.periods = periods
        self.min_profiles = min_profiles
        self.stats = MigrationStats()

    @property
    def step_count(self) -> int:
        return 3 if self.stats_only else 4

    def _header(self, step: int, title: str):
        logger.info("\n" + "=" * 60)
        logger.info(f"Step {step}/{self.step_count}: {title}")
        logger.info("=" * 60)

    async def run(self) -> MigrationStats:
        """Run all stages. A stage-level failure is recorded and re-raised after the summary."""
        logger.info("🚀 SwipeStats - Migration Pipeline")
        logger.info(f"  Mode: {'Stats Only' if self.stats_only else 'Full Migration'}")
        if not self.stats_only:
            logger.info(f"  PROFILE_LIMIT: {self.profile_limit or 'all'}")
        logger.info(f"  DRY_RUN: {self.migration.dry_run}")
        logger.info(f"  FORCE: {self.force}")

        step = 0
        try:
            if self.stats_only:
                logger.info("Migrate Core Data - SKIPPED (--stats-only mode)")
            else:
                step += 1
                self._header(step, "Migrate Core Data")
                await self._timed(MigrationOrchestrator(self.migration, self.stats, self.profile_limit).run())

            step += 1
            self._header(step, "Compute ProfileMeta")
            aggregator = ProfileMetaAggregator(self.migration, force=self.force)
            self.stats.stages["profile_meta"] = await self._timed(aggregator.compute_all())

            step += 1
            self._header(step, "Seed System Cohorts")
            seeded = await self._timed(seed_cohorts(self.migration))
            self.stats.stage("seed_cohorts").successful = seeded

            step += 1
            self._header(step, "Compute Cohort Statistics")
            cohort_stats = CohortStatsAggregator(self.migration, periods=self.periods, min_profiles=self.min_profiles)
            self.stats.stages["cohort_stats"] = await self._timed(cohort_stats.compute_all())
        except Exception as e:
            logger.error(f"❌ Pipeline failed at step {step}/{self.step_count}: {e}")
            raise
        finally:
            self.stats.log_summary()

        return self.stats

    @staticmethod
    async def _timed(coro):
        start = time.monotonic()
        result = await coro
        logger.info(f"✅ Step complete ({format_duration(time.monotonic() - start)})")
        return result
