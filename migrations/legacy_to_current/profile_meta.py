"""
Per-profile aggregate metadata.

Totals only ever include real usage days: a day flagged as missing from the
original export is a synthetic zero, not a measurement. Real days with zero
activity still count. Swipes per day is measured against active days (real
days with at least one app open).
"""

import logging
import math
from collections.abc import Sequence
from datetime import datetime

from tqdm.asyncio import tqdm

from db import crud
from db.models import Match, ProfileMeta, TinderProfile, TinderUsage, create_id, utc_now
from migrations.legacy_to_current.database import DatabaseMigration
from migrations.legacy_to_current.stats import Stats

logger = logging.getLogger(__name__)


def get_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def get_median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_profile_meta(
    profile: TinderProfile,
    usage_days: Sequence[TinderUsage],
    matches: Sequence[Match],
    computed_at: datetime | None = None,
) -> ProfileMeta:
    """Build the ProfileMeta row for one profile from its usage days and matches."""
    real_days = [day for day in usage_days if day.is_real]
    active_days = [day for day in real_days if day.is_active]

    swipe_likes = sum(day.swipe_likes for day in real_days)
    swipe_passes = sum(day.swipe_passes for day in real_days)
    matches_total = sum(day.matches for day in real_days)
    total_swipes = swipe_likes + swipe_passes

    ghosted = [match for match in matches if match.is_ghosted]
    with_messages = [match for match in matches if not match.is_ghosted]

    response_times = [m.response_time_median_seconds for m in matches if m.response_time_median_seconds is not None]
    durations = [
        m.conversation_duration_days
        for m in matches
        if m.conversation_duration_days is not None and m.conversation_duration_days > 0
    ]
    message_counts = [m.total_message_count for m in with_messages]

    return ProfileMeta(
        id=create_id("pm"),
        tinder_profile_id=profile.tinder_id,
        from_date=profile.first_day_on_app,
        to_date=profile.last_day_on_app,
        days_in_period=(profile.last_day_on_app.date() - profile.first_day_on_app.date()).days + 1,
        days_active=len(active_days),
        swipe_likes_total=swipe_likes,
        swipe_passes_total=swipe_passes,
        matches_total=matches_total,
        messages_sent_total=sum(day.messages_sent for day in real_days),
        messages_received_total=sum(day.messages_received for day in real_days),
        app_opens_total=sum(day.app_opens for day in real_days),
        like_rate=get_ratio(swipe_likes, total_swipes),
        match_rate=get_ratio(matches_total, swipe_likes),
        swipes_per_day=get_ratio(total_swipes, len(active_days)),
        conversation_count=len(matches),
        conversations_with_messages=len(with_messages),
        ghosted_count=len(ghosted),
        average_response_time_seconds=round_half_up(get_median(response_times)) if response_times else None,
        mean_response_time_seconds=(
            round_half_up(sum(response_times) / len(response_times)) if response_times else None
        ),
        median_conversation_duration_days=round_half_up(get_median(durations)) if durations else None,
        longest_conversation_days=max(durations) if durations else None,
        average_messages_per_conversation=(
            sum(message_counts) / len(message_counts) if message_counts else None
        ),
        median_messages_per_conversation=round_half_up(get_median(message_counts)) if message_counts else None,
        computed_at=computed_at or utc_now(),
    )


class ProfileMetaAggregator:
    """Computes and stores ProfileMeta for migrated profiles"""

    def __init__(self, migration: DatabaseMigration, force: bool = False):
        self.migration = migration
        self.force = force
        self.dry_run = migration.dry_run

    async def compute(self, tinder_id: str) -> ProfileMeta | None:
        """Compute and write meta for one profile.

        Returns None when meta already exists and ``force`` is off.
        """
        async with self.migration.get_session() as session:
            profile = await crud.get_profile(session, tinder_id)
            if profile is None:
                raise LookupError(f"Profile not found: {tinder_id}")

            existing = await crud.get_profile_meta(session, tinder_id)
            if existing and not self.force:
                logger.info("   Skip - ProfileMeta already exists")
                if not profile.computed and not self.dry_run:
                    await crud.mark_profile_computed(session, tinder_id)
                    await session.commit()
                return None

            usage_days = await crud.get_usage_days(session, tinder_id)
            matches = await crud.get_matches(session, tinder_id)
            meta = compute_profile_meta(profile, usage_days, matches)

            if self.dry_run:
                logger.info(
                    f"   [DRY RUN] Would write ProfileMeta (days active {meta.days_active}, "
                    f"like rate {meta.like_rate:.3f}, match rate {meta.match_rate:.3f})"
                )
                return meta

            if existing:
                # Full replace, never a partial update
                await crud.delete_profile_meta(session, tinder_id)
            session.add(meta)
            await crud.mark_profile_computed(session, tinder_id)
            await session.commit()
            return meta

    async def compute_all(self) -> Stats:
        """Process every profile still flagged ``computed = false`` (all profiles when forced).

        Per-profile errors are logged and counted, the loop continues.
        """
        logger.info("\n" + "=" * 60)
        logger.info("🧮 Compute Profile Metadata")
        logger.info("=" * 60)

        stats = Stats()
        async with self.migration.get_session() as session:
            profile_ids = await crud.get_profile_ids_to_compute(session, force=self.force)

        logger.info(
            f"Found {len(profile_ids)} profiles to process{' (FORCE recompute mode)' if self.force else ''}"
        )
        if not profile_ids:
            logger.info("No profiles to compute! All done.")
            return stats

        with tqdm(total=len(profile_ids), desc="Computing ProfileMeta") as pbar:
            for index, tinder_id in enumerate(profile_ids, start=1):
                logger.debug(f"[{index}/{len(profile_ids)}] Processing {tinder_id}...")
                try:
                    meta = await self.compute(tinder_id)
                except Exception as e:
                    stats.failed += 1
                    stats.add_error("profile_meta", f"{tinder_id}: {e}")
                    logger.exception(f"   Error computing meta for {tinder_id}: {e}")
                else:
                    if meta is None:
                        stats.skipped += 1
                    else:
                        stats.successful += 1
                finally:
                    pbar.update(1)

        logger.info(f"✅ ProfileMeta: {stats.successful} computed, {stats.skipped} skipped, {stats.failed} errors")
        return stats
