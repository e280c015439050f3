import asyncio
import logging

import typer

from db.config import settings, to_async_database_url
from migrations.legacy_to_current.cohort_stats import CohortStatsAggregator
from migrations.legacy_to_current.cohorts import seed_cohorts
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.exceptions import ConfigurationError
from migrations.legacy_to_current.file_migrator import FileBlobMigrator
from migrations.legacy_to_current.media_migrator import MediaBlobMigrator
from migrations.legacy_to_current.orchestrator import MigrationOrchestrator
from migrations.legacy_to_current.pipeline import PipelineDriver
from migrations.legacy_to_current.profile_meta import ProfileMetaAggregator
from migrations.legacy_to_current.stats import MigrationStats, TableCountChecker
from migrations.legacy_to_current.subscription_migrator import SubscriptionMigrator

# Set up logging with more detailed format
logging.basicConfig(
    level=settings.logging_level,
    format="%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Migrate SwipeStats legacy data and compute derived statistics")

OldDatabaseOption = typer.Option(None, "--old-database-url", help="Legacy database URL [env: OLD_DATABASE_URL]")
DatabaseOption = typer.Option(None, "--database-url", help="Target database URL [env: DATABASE_URL]")
DryRunOption = typer.Option(None, "--dry-run/--no-dry-run", help="Run every query and transform but write nothing")
ForceOption = typer.Option(None, "--force/--no-force", help="Recompute ProfileMeta even where it already exists")
LimitOption = typer.Option(None, "--limit", "-l", min=1, help="Limit records processed [env: PROFILE_LIMIT]")


def build_migration(
    old_database_url: str | None,
    database_url: str | None,
    dry_run: bool | None,
    batch_size: int | None = None,
) -> DatabaseMigration:
    """CLI options take precedence over environment settings."""
    target = to_async_database_url(database_url) or settings.database_url
    if not target:
        logger.error("DATABASE_URL environment variable is required")
        raise typer.Exit(code=1)
    return DatabaseMigration(
        to_async_database_url(old_database_url) or settings.old_database_url,
        target,
        batch_size=batch_size or settings.batch_size,
        dry_run=settings.dry_run if dry_run is None else dry_run,
    )


def _flag(value: bool | None, default: bool) -> bool:
    return default if value is None else value


@app.command()
def run(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
    profile_limit: int | None = LimitOption,
    dry_run: bool | None = DryRunOption,
    force: bool | None = ForceOption,
    stats_only: bool | None = typer.Option(
        None, "--stats-only/--full", help="Skip the data copy, only recompute derived statistics"
    ),
    batch_size: int | None = typer.Option(None, min=1, help="Rows per insert batch [env: BATCH_SIZE]"),
):
    """Run the whole pipeline: copy data, compute ProfileMeta, seed cohorts, compute cohort stats.

    Examples:
      # Full migration of the 100 most recent profiles
      python -m migrations.legacy_to_current run --limit 100

      # Recompute derived statistics only
      python -m migrations.legacy_to_current run --stats-only --force
    """
    stats_only = _flag(stats_only, settings.stats_only)

    async def run_pipeline():
        migration = build_migration(old_database_url, database_url, dry_run, batch_size)
        try:
            await migration.init_connections(connect_legacy=not stats_only)
            driver = PipelineDriver(
                migration,
                profile_limit=profile_limit or settings.profile_limit,
                force=_flag(force, settings.force),
                stats_only=stats_only,
            )
            report = await driver.run()
        except ConfigurationError as e:
            logger.error(str(e))
            raise typer.Exit(code=1)
        except Exception as e:
            logger.exception(f"Pipeline failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

        if report.has_fatal_failures:
            logger.error("❌ Pipeline finished with failed records")
            raise typer.Exit(code=1)
        logger.info("✅ Pipeline completed successfully!")

    asyncio.run(run_pipeline())


@app.command()
def migrate(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
    profile_limit: int | None = LimitOption,
    dry_run: bool | None = DryRunOption,
    batch_size: int | None = typer.Option(None, min=1, help="Rows per insert batch [env: BATCH_SIZE]"),
):
    """Copy the most recent legacy profiles and their related records"""

    async def run_migration():
        migration = build_migration(old_database_url, database_url, dry_run, batch_size)
        stats = MigrationStats()
        try:
            await migration.init_connections()
            await MigrationOrchestrator(migration, stats, profile_limit or settings.profile_limit).run()
        except Exception as e:
            logger.exception(f"Migration failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            stats.log_summary()
            await migration.close_connections()

    asyncio.run(run_migration())


@app.command("profile-meta")
def profile_meta(
    database_url: str | None = DatabaseOption,
    dry_run: bool | None = DryRunOption,
    force: bool | None = ForceOption,
):
    """Compute ProfileMeta for every profile not yet computed"""

    async def run_profile_meta():
        migration = build_migration(None, database_url, dry_run)
        try:
            await migration.init_connections(connect_legacy=False)
            stats = await ProfileMetaAggregator(migration, force=_flag(force, settings.force)).compute_all()
        except Exception as e:
            logger.exception(f"ProfileMeta computation failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

        if stats.failed:
            raise typer.Exit(code=1)

    asyncio.run(run_profile_meta())


@app.command("seed-cohorts")
def seed_cohorts_command(
    database_url: str | None = DatabaseOption,
    dry_run: bool | None = DryRunOption,
):
    """Insert the system cohort definitions (safe to re-run)"""

    async def run_seed():
        migration = build_migration(None, database_url, dry_run)
        try:
            await migration.init_connections(connect_legacy=False)
            await seed_cohorts(migration)
        except Exception as e:
            logger.exception(f"Cohort seeding failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

    asyncio.run(run_seed())


@app.command("cohort-stats")
def cohort_stats(
    database_url: str | None = DatabaseOption,
    dry_run: bool | None = DryRunOption,
    min_profiles: int | None = typer.Option(
        None, min=1, help="Minimum matching profiles per cohort and period [env: COHORT_MIN_PROFILES]"
    ),
):
    """Compute percentile statistics for every cohort and period"""

    async def run_cohort_stats():
        migration = build_migration(None, database_url, dry_run)
        try:
            await migration.init_connections(connect_legacy=False)
            await CohortStatsAggregator(migration, min_profiles=min_profiles).compute_all()
        except Exception as e:
            logger.exception(f"Cohort statistics failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

    asyncio.run(run_cohort_stats())


@app.command()
def files(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
    record_limit: int | None = LimitOption,
    dry_run: bool | None = DryRunOption,
    batch_size: int | None = typer.Option(None, min=1, help="Files per upload batch [env: FILE_UPLOAD_BATCH]"),
):
    """Upload legacy original files to blob storage and record their URLs"""

    async def run_files():
        migration = build_migration(old_database_url, database_url, dry_run)
        try:
            await migration.init_connections()
            stats = await FileBlobMigrator(migration, record_limit=record_limit, batch_size=batch_size).run()
        except Exception as e:
            logger.exception(f"File migration failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

        if stats.failed:
            raise typer.Exit(code=1)

    asyncio.run(run_files())


@app.command()
def media(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
    record_limit: int | None = LimitOption,
    dry_run: bool | None = DryRunOption,
):
    """Extract profile photos from legacy original files into the media table (safe to re-run)"""

    async def run_media():
        migration = build_migration(old_database_url, database_url, dry_run)
        try:
            await migration.init_connections()
            stats = await MediaBlobMigrator(migration, record_limit=record_limit).run()
        except Exception as e:
            logger.exception(f"Media migration failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

        if stats.failed:
            raise typer.Exit(code=1)

    asyncio.run(run_media())


@app.command()
def subscriptions(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
    record_limit: int | None = LimitOption,
    dry_run: bool | None = DryRunOption,
):
    """Grant lifetime ELITE to migrated owners of legacy paid accounts"""

    async def run_subscriptions():
        migration = build_migration(old_database_url, database_url, dry_run)
        try:
            await migration.init_connections()
            stats = await SubscriptionMigrator(migration, record_limit=record_limit).run()
        except Exception as e:
            logger.exception(f"Subscription migration failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

        if stats.failed:
            raise typer.Exit(code=1)

    asyncio.run(run_subscriptions())


@app.command()
def status(
    old_database_url: str | None = OldDatabaseOption,
    database_url: str | None = DatabaseOption,
):
    """Compare table row counts between the legacy and target stores"""

    async def run_status():
        migration = build_migration(old_database_url, database_url, dry_run=False)
        try:
            await migration.init_connections()
            checker = TableCountChecker(migration)
            statuses = await checker.get_all_statuses()
            checker.log_status_table(statuses)

            total_legacy = sum(s.legacy_count for s in statuses)
            total_target = sum(s.target_count for s in statuses)
            if total_legacy:
                typer.echo(
                    f"📈 Overall progress: {total_target:,} / {total_legacy:,} rows "
                    f"({(total_target / total_legacy * 100):.1f}%)"
                )
        except Exception as e:
            logger.exception(f"Status check failed: {str(e)}")
            raise typer.Exit(code=1)
        finally:
            await migration.close_connections()

    asyncio.run(run_status())


if __name__ == "__main__":
    app()
