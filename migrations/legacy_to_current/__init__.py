"""
SwipeStats legacy to current migration module.

This module copies the legacy relational store into the current schema and
derives the analytics built on top of it:
- Users, Tinder profiles and their jobs, schools, matches, messages, media and usage
- Per-profile ProfileMeta aggregates
- System cohort definitions and their percentile statistics per period
- Original uploaded files moved to blob storage
- Legacy paid tiers upgraded to lifetime ELITE

CLI Usage:
    python -m migrations.legacy_to_current run --limit 100
    python -m migrations.legacy_to_current run --stats-only --force
    python -m migrations.legacy_to_current files --limit 50
    python -m migrations.legacy_to_current subscriptions --dry-run
    python -m migrations.legacy_to_current status
"""

from migrations.legacy_to_current.cli import app
from migrations.legacy_to_current.cohort_stats import CohortStatsAggregator, Period
from migrations.legacy_to_current.cohorts import SYSTEM_COHORTS, seed_cohorts
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.file_migrator import FileBlobMigrator
from migrations.legacy_to_current.orchestrator import MigrationOrchestrator
from migrations.legacy_to_current.pipeline import PipelineDriver
from migrations.legacy_to_current.profile_meta import ProfileMetaAggregator, compute_profile_meta
from migrations.legacy_to_current.stats import (
    MigrationStats,
    Stats,
    TableCountChecker,
    TableStatus,
)
from migrations.legacy_to_current.subscription_migrator import SubscriptionMigrator

__all__ = [
    "app",
    "DatabaseMigration",
    "MigrationOrchestrator",
    "PipelineDriver",
    "ProfileMetaAggregator",
    "compute_profile_meta",
    "SYSTEM_COHORTS",
    "seed_cohorts",
    "CohortStatsAggregator",
    "Period",
    "FileBlobMigrator",
    "SubscriptionMigrator",
    "MigrationStats",
    "Stats",
    "TableStatus",
    "TableCountChecker",
]
