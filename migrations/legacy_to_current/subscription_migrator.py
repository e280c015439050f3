"""
Legacy paid users to lifetime ELITE.

The legacy store only recorded a tier, so every legacy user on a paid tier is
granted lifetime ELITE on the account that owns their migrated profile.
"""

import logging

from sqlalchemy import select
from sqlalchemy import update as sa_update
from sqlmodel import col

from db import crud
from db.enums import SwipestatsTier
from db.models import User
from migrations.legacy_models import LegacyTinderProfile, LegacyUser, PaidUserRow
from migrations.legacy_to_current import transforms
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.stats import Stats

logger = logging.getLogger(__name__)


class SubscriptionMigrator:
    """Upgrade migrated owners of legacy paid accounts"""

    def __init__(self, migration: DatabaseMigration, record_limit: int | None = None):
        self.migration = migration
        self.record_limit = record_limit
        self.dry_run = migration.dry_run

    async def get_paid_users(self) -> list[PaidUserRow]:
        query = (
            select(
                LegacyUser.c.id.label("userId"),
                LegacyUser.c.email,
                LegacyUser.c.swipestatsTier,
                LegacyTinderProfile.c.tinderId,
                LegacyTinderProfile.c.lastDayOnApp.label("profileLastDay"),
            )
            .join(LegacyTinderProfile, LegacyUser.c.id == LegacyTinderProfile.c.userId)
            .where(LegacyUser.c.swipestatsTier != SwipestatsTier.FREE.value)
            .order_by(LegacyTinderProfile.c.lastDayOnApp.desc())
        )
        if self.record_limit:
            query = query.limit(self.record_limit)

        async with self.migration.legacy_connection() as conn:
            rows = (await conn.execute(query)).mappings().all()

        logger.info(f"Found {len(rows)} paid users with profiles")
        return [transforms.parse_row(PaidUserRow, row, "User", "userId") for row in rows]

    async def run(self) -> Stats:
        logger.info("\n" + "=" * 60)
        logger.info("💎 SwipeStats Subscription Migration")
        logger.info("=" * 60)
        logger.info(f"Mode: {'DRY RUN (preview only)' if self.dry_run else 'LIVE MIGRATION'}")
        logger.info(f"Record limit: {self.record_limit or 'unlimited'}")

        stats = Stats()
        paid_users = await self.get_paid_users()

        for legacy_user in paid_users:
            async with self.migration.get_session() as session:
                profile = await crud.get_profile(session, legacy_user.tinder_id)
                user = await crud.get_user(session, profile.user_id) if profile and profile.user_id else None
                if user is None:
                    stats.not_migrated += 1
                    continue

                if user.swipestats_tier == SwipestatsTier.ELITE and user.is_lifetime:
                    stats.skipped += 1
                    continue

                if self.dry_run:
                    logger.info(
                        f"[DRY RUN] Would upgrade {user.email or user.id} ({legacy_user.tinder_id[:8]}...): "
                        f"{legacy_user.swipestats_tier} → ELITE (lifetime)"
                    )
                    stats.successful += 1
                    continue

                try:
                    await session.execute(
                        sa_update(User)
                        .where(col(User.id) == user.id)
                        .values(swipestats_tier=SwipestatsTier.ELITE, is_lifetime=True)
                    )
                    await session.commit()
                except Exception as e:
                    await session.rollback()
                    stats.failed += 1
                    stats.add_error("upgrade", f"{legacy_user.tinder_id}: {e}")
                    logger.error(f"Failed to upgrade user for tinderId {legacy_user.tinder_id}: {e}")
                    continue

                stats.successful += 1
                if stats.successful % 10 == 0:
                    logger.info(f"Upgraded {stats.successful} users...")

        logger.info(
            f"✅ Subscriptions: {stats.successful} upgraded, {stats.skipped} already lifetime, "
            f"{stats.not_migrated} not yet migrated, {stats.failed} failed"
        )
        return stats
