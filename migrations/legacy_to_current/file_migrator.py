"""
Original upload migration through blob storage.

Raw Tinder exports are too large to copy relationally. Each legacy file is
uploaded to blob storage and the target row keeps only the returned URL.
"""

import logging

import humanize
from sqlmodel import col, select

from db import crud
from db.config import settings
from db.enums import DataProvider, SwipestatsVersion
from db.models import OriginalAnonymizedFile, utc_now
from migrations.legacy_models import LegacyOriginalAnonymizedFile, OriginalFileRow
from migrations.legacy_to_current import transforms
from migrations.legacy_to_current.batch import chunked
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.stats import Stats
from utils.blob_storage import BlobStorage, get_blob_storage, serialize_json, tinder_blob_pathname
from utils.hashing import profile_id_from_tinder_export

logger = logging.getLogger(__name__)


class FileBlobMigrator:
    """Upload legacy Tinder files to blob storage and record their URLs"""

    def __init__(
        self,
        migration: DatabaseMigration,
        storage: BlobStorage | None = None,
        record_limit: int | None = None,
        batch_size: int | None = None,
    ):
        self.migration = migration
        self.storage = storage
        self.record_limit = record_limit
        self.batch_size = batch_size or settings.file_upload_batch
        self.dry_run = migration.dry_run
        self.stats = Stats()

    async def get_pending_files(self) -> list[OriginalFileRow]:
        """Legacy Tinder files, newest first, minus those already uploaded."""
        async with self.migration.get_session() as session:
            result = await session.exec(
                select(OriginalAnonymizedFile.id).where(col(OriginalAnonymizedFile.blob_url).is_not(None))
            )
            uploaded = set(result.all())
        logger.info(f"Found {len(uploaded)} files already uploaded to blob storage")

        query = (
            select(
                LegacyOriginalAnonymizedFile.c.id,
                LegacyOriginalAnonymizedFile.c.userId,
                LegacyOriginalAnonymizedFile.c.dataProvider,
                LegacyOriginalAnonymizedFile.c.file,
                LegacyOriginalAnonymizedFile.c.createdAt,
            )
            .where(
                LegacyOriginalAnonymizedFile.c.file.is_not(None),
                LegacyOriginalAnonymizedFile.c.dataProvider == DataProvider.TINDER.value,
            )
            .order_by(LegacyOriginalAnonymizedFile.c.createdAt.desc())
        )
        if self.record_limit:
            query = query.limit(self.record_limit)

        async with self.migration.legacy_connection() as conn:
            rows = (await conn.execute(query)).mappings().all()

        files = [transforms.parse_row(OriginalFileRow, row, "OriginalAnonymizedFile", "id") for row in rows]
        pending = [file for file in files if file.id not in uploaded]
        logger.info(f"Found {len(files)} legacy files, {len(pending)} pending upload")
        return pending

    async def migrate_file(self, file: OriginalFileRow) -> bool:
        """Upload one file and upsert its target row. Returns False if it was skipped."""
        profile_id = profile_id_from_tinder_export(file.file)
        if profile_id is None:
            raise ValueError(f"Missing birth_date or create_date in Tinder file {file.id}")

        async with self.migration.get_session() as session:
            profile = await crud.get_profile(session, profile_id)
            if profile is None or not profile.user_id:
                logger.warning(f"   Tinder profile {profile_id} not migrated yet - skipping file {file.id}")
                self.stats.not_migrated += 1
                return False

            size_mb = len(serialize_json(file.file)) / (1024 * 1024)
            if size_mb > settings.large_file_warning_mb:
                logger.warning(f"   File {file.id} is large ({size_mb:.2f} MB) - may take time to upload")

            pathname = tinder_blob_pathname(profile_id)
            if self.dry_run:
                logger.info(f"   [DRY RUN] Would upload {file.id} to {pathname} ({size_mb:.2f} MB)")
                return True

            blob_url = await self.storage.upload_json(pathname, file.file)
            await crud.upsert(
                session,
                OriginalAnonymizedFile,
                {
                    "id": file.id,
                    "user_id": profile.user_id,
                    "data_provider": DataProvider.TINDER,
                    "swipestats_version": SwipestatsVersion.SWIPESTATS_1,
                    "file": None,
                    "blob_url": blob_url,
                    "created_at": file.created_at,
                    "updated_at": utc_now(),
                },
                index_elements=("id",),
                exclude_from_update=("id", "user_id", "data_provider", "swipestats_version", "file", "created_at"),
            )
            await session.commit()
        return True

    async def run(self) -> Stats:
        logger.info("\n" + "=" * 60)
        logger.info("☁️  Migrate Original Files to Blob Storage")
        logger.info("=" * 60)
        if self.storage is None and not self.dry_run:
            self.storage = get_blob_storage()

        files = await self.get_pending_files()
        if not files:
            logger.info("No files to migrate! All done.")
            return self.stats

        total_batches = -(-len(files) // self.batch_size)
        for batch_index, batch in enumerate(chunked(files, self.batch_size), start=1):
            logger.info(f"Batch {batch_index}/{total_batches} ({len(batch)} files)")
            for file in batch:
                try:
                    if await self.migrate_file(file):
                        self.stats.successful += 1
                except Exception as e:
                    self.stats.failed += 1
                    self.stats.add_error("upload", f"{file.id}: {e}")
                    logger.error(f"   Failed to migrate {file.id}: {e}")

        logger.info(
            f"✅ Files: {humanize.intcomma(self.stats.successful)} uploaded, "
            f"{self.stats.not_migrated} profile not migrated, {self.stats.failed} failed"
        )
        return self.stats
