"""
Migration orchestrator: profile selection and dependency-ordered copying.
"""

import logging
from graphlib import TopologicalSorter

from sqlalchemy import select

from migrations.legacy_models import LegacyTinderProfile, ensure_utc
from migrations.legacy_to_current.batch import BatchExecutor
from migrations.legacy_to_current.copiers import COPIER_CLASSES, Copier, CopyContext
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.stats import MigrationStats

logger = logging.getLogger(__name__)


def resolve_copy_order(copiers: list[Copier]) -> list[Copier]:
    """Topologically sort copiers by ``depends_on``.

    Copiers that become ready together keep their declaration order.

    Raises:
        graphlib.CycleError: when the declared dependencies form a cycle
        KeyError: when a copier depends on an unknown entity
    """
    by_name = {copier.name: copier for copier in copiers}
    position = {copier.name: index for index, copier in enumerate(copiers)}

    sorter = TopologicalSorter()
    for copier in copiers:
        for dependency in copier.depends_on:
            if dependency not in by_name:
                raise KeyError(f"{copier.name} depends on unknown entity '{dependency}'")
        sorter.add(copier.name, *copier.depends_on)

    ordered = []
    sorter.prepare()
    while sorter.is_active():
        ready = sorted(sorter.get_ready(), key=position.__getitem__)
        for name in ready:
            ordered.append(by_name[name])
            sorter.done(name)
    return ordered


class MigrationOrchestrator:
    """Selects the profiles to migrate and drives every entity copier in dependency order"""

    def __init__(self, migration: DatabaseMigration, stats: MigrationStats, profile_limit: int | None = None):
        self.migration = migration
        self.stats = stats
        self.profile_limit = profile_limit
        self.executor = BatchExecutor(migration.batch_size, dry_run=migration.dry_run)
        self.copiers = resolve_copy_order([cls(migration, self.executor) for cls in COPIER_CLASSES])

    async def select_profiles(self, limit: int | None = None) -> CopyContext:
        """Most recently created profiles first, up to ``limit``."""
        logger.info("Selecting profiles to migrate...")

        query = select(
            LegacyTinderProfile.c.tinderId,
            LegacyTinderProfile.c.userId,
            LegacyTinderProfile.c.createdAt,
        ).order_by(LegacyTinderProfile.c.createdAt.desc())
        if limit:
            query = query.limit(limit)

        async with self.migration.legacy_connection() as conn:
            rows = (await conn.execute(query)).all()

        profile_ids = [row.tinderId for row in rows]
        user_ids = list(dict.fromkeys(row.userId for row in rows))
        context = CopyContext(profile_ids=profile_ids, user_ids=user_ids)

        if rows:
            context.newest_profile = ensure_utc(rows[0].createdAt)
            context.oldest_profile = ensure_utc(rows[-1].createdAt)
            logger.info(f"   Selected {len(profile_ids)} profiles")
            logger.info(
                f"   Date range: {context.oldest_profile.date().isoformat()} "
                f"to {context.newest_profile.date().isoformat()}"
            )
            logger.info(f"   Unique users: {len(user_ids)}")
        else:
            logger.info("   No profiles found!")

        return context

    async def run(self) -> CopyContext:
        """Copy every entity type for the selected profiles.

        Any copier failure propagates and aborts the stage.
        """
        logger.info("\n" + "=" * 60)
        logger.info("🚚 SwipeStats: Data Migration")
        logger.info("=" * 60)
        if self.migration.dry_run:
            logger.warning("DRY RUN MODE - No data will be written")

        stage = self.stats.stage("copy")
        context = await self.select_profiles(self.profile_limit)
        self.stats.oldest_profile = context.oldest_profile
        self.stats.newest_profile = context.newest_profile

        if not context.profile_ids:
            logger.info("No profiles selected. Nothing to migrate.")
            return context

        for copier in self.copiers:
            try:
                count = await copier.copy(context)
            except Exception as e:
                stage.failed += 1
                stage.add_error(copier.label, str(e))
                raise
            self.stats.record(copier.label, count)
            stage.successful += count

        logger.info(f"✅ Data migration complete: {self.stats.total_records:,} records")
        return context
