"""
Entity copiers: legacy rows for a selected profile set into the target store.

Every copier follows the same steps: query the legacy store in chunks of
parent keys, turn each row into its target model via a typed transform, then
hand the rows to the batch executor for insert-if-absent writes.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

import humanize
from sqlalchemy import Select, Table, func, select
from sqlmodel import SQLModel

from db import crud
from db.config import settings
from db.models import Job, Match, Media, Message, School, TinderProfile, TinderUsage, User
from migrations.legacy_models import (
    JobRow,
    LegacyJob,
    LegacyMatch,
    LegacyMedia,
    LegacyMessage,
    LegacyRow,
    LegacySchool,
    LegacyTinderProfile,
    LegacyTinderUsage,
    MatchRow,
    MediaRow,
    MessageRow,
    SchoolRow,
    TinderProfileRow,
    TinderUsageRow,
    UserSeedRow,
)
from migrations.legacy_to_current import transforms
from migrations.legacy_to_current.batch import BatchExecutor, chunked
from migrations.legacy_to_current.database import DatabaseMigration

logger = logging.getLogger(__name__)


@dataclass
class CopyContext:
    """Keys discovered while copying, passed forward to dependent copiers."""

    profile_ids: list[str]
    user_ids: list[str]
    match_ids: list[str] = field(default_factory=list)
    oldest_profile: datetime | None = None
    newest_profile: datetime | None = None


class Copier(ABC):
    """One node of the copy dependency graph."""

    name: ClassVar[str]
    label: ClassVar[str]
    depends_on: ClassVar[tuple[str, ...]] = ()

    def __init__(self, migration: DatabaseMigration, executor: BatchExecutor):
        self.migration = migration
        self.executor = executor

    @abstractmethod
    async def copy(self, context: CopyContext) -> int:
        """Copy this entity type and return the number of rows handled."""


class EntityCopier(Copier):
    """Copy one entity type for a set of parent keys."""

    target_model: ClassVar[type[SQLModel]]
    row_schema: ClassVar[type[LegacyRow]]
    key_column: ClassVar[str]
    transform: ClassVar[Callable[[Any], SQLModel]]

    @property
    def query_batch_size(self) -> int:
        return settings.profile_query_batch

    def source_keys(self, context: CopyContext) -> list[str]:
        return context.profile_ids

    @abstractmethod
    def build_query(self, keys: Sequence[str]) -> Select:
        """Legacy query for one chunk of parent keys."""

    async def extract(self, keys: Sequence[str]) -> list[Mapping[str, Any]]:
        rows: list[Mapping[str, Any]] = []
        chunk_size = self.query_batch_size
        if len(keys) > chunk_size:
            logger.info(f"   Querying {self.label} in batches of {chunk_size} keys...")

        async with self.migration.legacy_connection() as conn:
            for start, chunk in zip(range(0, len(keys), chunk_size), chunked(keys, chunk_size)):
                result = await conn.execute(self.build_query(chunk))
                found = result.mappings().all()
                rows.extend(found)
                if len(keys) > chunk_size:
                    progress = min(start + chunk_size, len(keys))
                    logger.info(
                        f"   Queried {progress}/{len(keys)} keys "
                        f"({len(found)} {self.label} found, {len(rows)} total)"
                    )
        return rows

    def transform_rows(self, raw_rows: Sequence[Mapping[str, Any]]) -> list[SQLModel]:
        """Validate and transform every row; the first failure aborts the copy."""
        transform = type(self).transform
        return [
            transform(transforms.parse_row(self.row_schema, raw, self.label, self.key_column)) for raw in raw_rows
        ]

    async def insert_batch(self, batch: Sequence[SQLModel]) -> None:
        async with self.migration.get_session() as session:
            await crud.insert_ignore(session, self.target_model, batch)
            await session.commit()

    def after_copy(self, context: CopyContext, items: list[SQLModel]) -> None:
        """Hook for copiers that discover keys needed downstream."""

    async def copy(self, context: CopyContext) -> int:
        logger.info(f"\n=== Migrating {self.label} ===")

        keys = self.source_keys(context)
        if not keys:
            logger.info(f"Skip - no parent keys to migrate {self.label} for")
            return 0

        raw_rows = await self.extract(keys)
        logger.info(f"   Found {humanize.intcomma(len(raw_rows))} total {self.label} records to migrate")

        items = self.transform_rows(raw_rows)
        await self.executor.run(self.label, items, self.insert_batch)
        self.after_copy(context, items)
        return len(items)


class UserCopier(EntityCopier):
    """Synthetic anonymous owners, one per distinct legacy profile owner."""

    name = "users"
    label = "User"
    target_model = User
    row_schema = UserSeedRow
    key_column = "userId"
    transform = transforms.transform_user

    def source_keys(self, context: CopyContext) -> list[str]:
        return context.user_ids

    def build_query(self, keys: Sequence[str]) -> Select:
        return (
            select(
                LegacyTinderProfile.c.userId,
                func.min(LegacyTinderProfile.c.createdAt).label("createdAt"),
            )
            .where(LegacyTinderProfile.c.userId.in_(keys))
            .group_by(LegacyTinderProfile.c.userId)
        )


class ProfileCopier(EntityCopier):
    name = "profiles"
    label = "TinderProfile"
    depends_on = ("users",)
    target_model = TinderProfile
    row_schema = TinderProfileRow
    key_column = "tinderId"
    transform = transforms.transform_profile

    def build_query(self, keys: Sequence[str]) -> Select:
        return (
            select(LegacyTinderProfile)
            .where(LegacyTinderProfile.c.tinderId.in_(keys))
            .order_by(LegacyTinderProfile.c.createdAt)
        )


class ProfileChildCopier(EntityCopier):
    """Rows keyed to a profile through ``tinderProfileId``."""

    depends_on = ("profiles",)
    legacy_table: ClassVar[Table]

    def order_by(self) -> tuple:
        return ()

    def build_query(self, keys: Sequence[str]) -> Select:
        return (
            select(self.legacy_table)
            .where(self.legacy_table.c.tinderProfileId.in_(keys))
            .order_by(*self.order_by())
        )


class JobCopier(ProfileChildCopier):
    name = "jobs"
    label = "Job"
    legacy_table = LegacyJob
    target_model = Job
    row_schema = JobRow
    key_column = "jobId"
    transform = transforms.transform_job


class SchoolCopier(ProfileChildCopier):
    name = "schools"
    label = "School"
    legacy_table = LegacySchool
    target_model = School
    row_schema = SchoolRow
    key_column = "schoolId"
    transform = transforms.transform_school


class MatchCopier(ProfileChildCopier):
    name = "matches"
    label = "Match"
    legacy_table = LegacyMatch
    target_model = Match
    row_schema = MatchRow
    key_column = "id"
    transform = transforms.transform_match

    @property
    def query_batch_size(self) -> int:
        return settings.match_query_batch

    def order_by(self) -> tuple:
        return LegacyMatch.c.tinderProfileId, LegacyMatch.c.order

    def after_copy(self, context: CopyContext, items: list[SQLModel]) -> None:
        context.match_ids = [match.id for match in items]


class MessageCopier(EntityCopier):
    """Messages of the copied matches that still reference a profile."""

    name = "messages"
    label = "Message"
    depends_on = ("matches",)
    target_model = Message
    row_schema = MessageRow
    key_column = "id"
    transform = transforms.transform_message

    @property
    def query_batch_size(self) -> int:
        return settings.message_query_batch

    def source_keys(self, context: CopyContext) -> list[str]:
        return context.match_ids

    def build_query(self, keys: Sequence[str]) -> Select:
        return (
            select(LegacyMessage)
            .where(
                LegacyMessage.c.matchId.in_(keys),
                LegacyMessage.c.tinderProfileId.is_not(None),
            )
            .order_by(LegacyMessage.c.sentDate)
        )


class MediaCopier(ProfileChildCopier):
    """Relational media rows. Photos kept only inside uploaded exports come from the ``media`` command."""

    name = "media"
    label = "Media"
    legacy_table = LegacyMedia
    target_model = Media
    row_schema = MediaRow
    key_column = "id"
    transform = transforms.transform_media

    @property
    def query_batch_size(self) -> int:
        return settings.media_query_batch


class UsageCopier(ProfileChildCopier):
    name = "usage"
    label = "TinderUsage"
    legacy_table = LegacyTinderUsage
    target_model = TinderUsage
    row_schema = TinderUsageRow
    key_column = "dateStampRaw"
    transform = transforms.transform_usage

    @property
    def query_batch_size(self) -> int:
        return settings.usage_query_batch

    def order_by(self) -> tuple:
        return (LegacyTinderUsage.c.dateStamp,)


class OriginalFileCopier(Copier):
    """Raw uploads are too large for a relational copy; see the ``files`` command."""

    name = "original_files"
    label = "OriginalAnonymizedFile"
    depends_on = ("profiles",)

    async def copy(self, context: CopyContext) -> int:
        logger.info(f"\n=== Migrating {self.label} ===")
        logger.warning("Skip: files can exceed the transport size limit, use the 'files' command instead")
        return 0


COPIER_CLASSES: list[type[Copier]] = [
    UserCopier,
    ProfileCopier,
    OriginalFileCopier,
    JobCopier,
    SchoolCopier,
    MatchCopier,
    MessageCopier,
    MediaCopier,
    UsageCopier,
]
