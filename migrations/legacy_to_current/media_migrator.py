"""
Profile media recovered from original Tinder exports.

The legacy Media table holds almost nothing: profile photos only exist inside
the uploaded export JSON. Exports in the current photo format (objects with
``id`` and ``url``) are turned into Media rows; HTTPS URLs only.
"""

import logging
from typing import Any

import humanize
from sqlalchemy import select

from db import crud
from db.config import settings
from db.enums import DataProvider
from db.models import Media, create_id
from migrations.legacy_models import LegacyOriginalAnonymizedFile, OriginalFileRow
from migrations.legacy_to_current import transforms
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.stats import Stats
from utils.hashing import profile_id_from_tinder_export

logger = logging.getLogger(__name__)


def is_current_photo_format(photos: Any) -> bool:
    """Current exports list photo objects; older ones list bare URL strings."""
    return (
        isinstance(photos, list)
        and len(photos) > 0
        and isinstance(photos[0], dict)
        and "id" in photos[0]
        and "url" in photos[0]
    )


def photos_to_media(data: dict[str, Any], tinder_id: str) -> tuple[list[Media], int]:
    """Media rows for one export, plus the number of non-HTTPS photos dropped."""
    photos = data.get("Photos")
    if not is_current_photo_format(photos):
        return [], 0

    media: list[Media] = []
    skipped_non_https = 0
    for photo in photos:
        url = photo.get("url") or ""
        if not url.startswith("https://"):
            skipped_non_https += 1
            continue
        media.append(
            Media(
                id=create_id("media"),
                type=photo.get("type") or "photo",
                url=url,
                prompt=photo.get("prompt_text") or None,
                tinder_profile_id=tinder_id,
            )
        )
    return media, skipped_non_https


class MediaBlobMigrator:
    """Extract photos from legacy Tinder exports into the target media table"""

    def __init__(
        self,
        migration: DatabaseMigration,
        record_limit: int | None = None,
        fetch_batch: int | None = None,
        insert_batch: int | None = None,
    ):
        self.migration = migration
        self.record_limit = record_limit
        self.fetch_batch = fetch_batch or settings.media_fetch_batch
        self.insert_batch = insert_batch or settings.media_insert_batch
        self.dry_run = migration.dry_run
        self.stats = Stats()
        self.media_inserted = 0
        self.non_https_skipped = 0
        self.pending: list[Media] = []

    async def fetch_files(self, offset: int, limit: int) -> list[OriginalFileRow]:
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
            .order_by(LegacyOriginalAnonymizedFile.c.createdAt.desc(), LegacyOriginalAnonymizedFile.c.id)
            .offset(offset)
            .limit(limit)
        )
        async with self.migration.legacy_connection() as conn:
            rows = (await conn.execute(query)).mappings().all()
        return [transforms.parse_row(OriginalFileRow, row, "OriginalAnonymizedFile", "id") for row in rows]

    async def flush(self) -> None:
        if not self.pending:
            return
        if not self.dry_run:
            async with self.migration.get_session() as session:
                await crud.insert_ignore(session, Media, self.pending)
                await session.commit()
        self.media_inserted += len(self.pending)
        self.pending = []

    async def run(self) -> Stats:
        logger.info("\n" + "=" * 60)
        logger.info("🖼️  Migrate Media from Original Files")
        logger.info("=" * 60)

        async with self.migration.get_session() as session:
            already_migrated = await crud.get_profile_ids_with_media(session)
            valid_profiles = await crud.get_all_profile_ids(session)
        logger.info(f"{humanize.intcomma(len(already_migrated))} profiles already have media")
        logger.info(f"{humanize.intcomma(len(valid_profiles))} tinder profiles exist in the target store")

        offset = 0
        while self.record_limit is None or offset < self.record_limit:
            limit = self.fetch_batch
            if self.record_limit is not None:
                limit = min(limit, self.record_limit - offset)
            files = await self.fetch_files(offset, limit)
            if not files:
                break

            for file in files:
                tinder_id = profile_id_from_tinder_export(file.file)
                if tinder_id is None or tinder_id in already_migrated:
                    self.stats.skipped += 1
                    continue
                if tinder_id not in valid_profiles:
                    self.stats.not_migrated += 1
                    continue

                try:
                    media, skipped_non_https = photos_to_media(file.file, tinder_id)
                except Exception as e:
                    self.stats.failed += 1
                    self.stats.add_error("media", f"{file.id}: {e}")
                    logger.error(f"   Failed to extract photos from {file.id}: {e}")
                    continue

                self.non_https_skipped += skipped_non_https
                if not media:
                    self.stats.skipped += 1
                    continue

                self.pending.extend(media)
                self.stats.successful += 1
                # Same profile may appear again in an older export
                already_migrated.add(tinder_id)
                if len(self.pending) >= self.insert_batch:
                    await self.flush()

            offset += len(files)
            logger.info(
                f"   {humanize.intcomma(offset)} files scanned | "
                f"{self.media_inserted + len(self.pending)} media queued | "
                f"{self.stats.not_migrated} profile not migrated"
            )

        await self.flush()

        prefix = "[DRY RUN] Would insert" if self.dry_run else "Inserted"
        logger.info(
            f"✅ Media: {prefix} {humanize.intcomma(self.media_inserted)} rows from {self.stats.successful} files, "
            f"{self.stats.skipped} skipped, {self.stats.not_migrated} profile not migrated, "
            f"{self.non_https_skipped} non-HTTPS photos dropped"
        )
        return self.stats
