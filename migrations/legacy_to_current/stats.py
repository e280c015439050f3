"""
Run statistics and store status helpers.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime

import humanize
from sqlalchemy import Table, func, select
from sqlmodel import SQLModel

from db import crud
from db.models import (
    Job,
    Match,
    Media,
    Message,
    OriginalAnonymizedFile,
    School,
    TinderProfile,
    TinderUsage,
)
from migrations.legacy_models import (
    LegacyJob,
    LegacyMatch,
    LegacyMedia,
    LegacyMessage,
    LegacyOriginalAnonymizedFile,
    LegacySchool,
    LegacyTinderProfile,
    LegacyTinderUsage,
)

logger = logging.getLogger(__name__)

# Stages whose per-item failures make the run exit non-zero
FATAL_STAGES = ("copy", "profile_meta")


@dataclass
class Stats:
    """Simple stats tracker for individual stages"""

    successful: int = 0
    failed: int = 0
    skipped: int = 0
    not_migrated: int = 0
    errors: dict[str, list[str]] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = {}

    def add_error(self, category: str, error: str):
        if category not in self.errors:
            self.errors[category] = []
        self.errors[category].append(error)


@dataclass
class MigrationStats:
    """Report for a whole pipeline run: per-entity copy counts plus per-stage outcomes"""

    entity_counts: dict[str, int] = field(default_factory=dict)
    stages: dict[str, Stats] = field(default_factory=dict)
    oldest_profile: datetime | None = None
    newest_profile: datetime | None = None
    started_at: float = field(default_factory=time.monotonic)

    def stage(self, name: str) -> Stats:
        if name not in self.stages:
            self.stages[name] = Stats()
        return self.stages[name]

    def record(self, entity: str, count: int):
        self.entity_counts[entity] = count

    @property
    def total_records(self) -> int:
        return sum(self.entity_counts.values())

    @property
    def has_fatal_failures(self) -> bool:
        return any(self.stages[name].failed for name in FATAL_STAGES if name in self.stages)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def log_summary(self):
        logger.info("\n" + "=" * 60)
        logger.info("📊 MIGRATION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"  Total time: {humanize.precisedelta(self.elapsed, format='%0.1f')}")

        if self.entity_counts:
            logger.info("\n📦 Records migrated:")
            for entity, count in self.entity_counts.items():
                logger.info(f"  {entity:<30} {count:>12,}")
            logger.info(f"  {'Total records':<30} {self.total_records:>12,}")

        if self.oldest_profile and self.newest_profile:
            logger.info("\n📅 Profile date range:")
            logger.info(f"  Oldest: {self.oldest_profile.date().isoformat()}")
            logger.info(f"  Newest: {self.newest_profile.date().isoformat()}")

        for name, stats in self.stages.items():
            logger.info(f"\n🔧 {name}:")
            logger.info(f"  Successful: {stats.successful:,}")
            logger.info(f"  Failed: {stats.failed:,}")
            logger.info(f"  Skipped: {stats.skipped:,}")
            if stats.not_migrated:
                logger.info(f"  Not yet migrated: {stats.not_migrated:,}")

            for category, errors in stats.errors.items():
                logger.info(f"  {category}: {len(errors):,} records")
                # Show first 5 as samples
                for error in errors[:5]:
                    logger.info(f"    - {error}")
                if len(errors) > 5:
                    logger.info(f"    ... and {len(errors) - 5} more")

        logger.info("=" * 60 + "\n")


@dataclass
class TableStatus:
    """Status of a table's migration progress"""

    name: str
    legacy_count: int
    target_count: int

    @property
    def is_complete(self) -> bool:
        return self.target_count >= self.legacy_count

    @property
    def remaining(self) -> int:
        return max(0, self.legacy_count - self.target_count)

    @property
    def progress_pct(self) -> float:
        if self.legacy_count == 0:
            return 100.0
        return min(100.0, (self.target_count / self.legacy_count) * 100)


class TableCountChecker:
    """Compare row counts between the legacy and target stores"""

    TABLE_PAIRS: list[tuple[str, Table, type[SQLModel]]] = [
        ("TinderProfile", LegacyTinderProfile, TinderProfile),
        ("Job", LegacyJob, Job),
        ("School", LegacySchool, School),
        ("Match", LegacyMatch, Match),
        ("Message", LegacyMessage, Message),
        ("Media", LegacyMedia, Media),
        ("TinderUsage", LegacyTinderUsage, TinderUsage),
        ("OriginalAnonymizedFile", LegacyOriginalAnonymizedFile, OriginalAnonymizedFile),
    ]

    def __init__(self, migration):
        self.migration = migration

    async def get_all_statuses(self) -> list[TableStatus]:
        statuses = []
        async with self.migration.legacy_connection() as conn, self.migration.get_session() as session:
            for name, legacy_table, model in self.TABLE_PAIRS:
                legacy_count = (await conn.execute(select(func.count()).select_from(legacy_table))).scalar_one()
                target_count = await crud.count_rows(session, model)
                statuses.append(TableStatus(name, legacy_count, target_count))
        return statuses

    @staticmethod
    def log_status_table(statuses: list[TableStatus]):
        logger.info("\n" + "=" * 75)
        logger.info("📊 TABLE STATUS")
        logger.info("=" * 75)
        logger.info(f"{'Table':<26} {'Legacy':>12} {'Target':>12} {'Remaining':>12} {'Progress':>9}")
        logger.info("-" * 75)
        for status in statuses:
            marker = "✅" if status.is_complete else "⏳"
            logger.info(
                f"{status.name:<26} {status.legacy_count:>12,} {status.target_count:>12,} "
                f"{status.remaining:>12,} {status.progress_pct:>8.1f}% {marker}"
            )
        logger.info("=" * 75 + "\n")
