"""
Profile, usage and meta CRUD operations used by the statistics stages.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete as sa_delete
from sqlalchemy import update as sa_update
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from db.enums import Gender
from db.models import (
    CohortDefinition,
    CohortStats,
    Match,
    Media,
    ProfileMeta,
    TinderProfile,
    TinderUsage,
    User,
)

logger = logging.getLogger(__name__)


# =============================================================================
# PROFILES
# =============================================================================


async def get_profile(session: AsyncSession, tinder_id: str) -> TinderProfile | None:
    return await session.get(TinderProfile, tinder_id)


async def get_profile_ids_to_compute(session: AsyncSession, force: bool = False) -> list[str]:
    """Profile ids whose meta still needs computing, oldest first.

    With ``force`` every profile is returned.
    """
    query = select(TinderProfile.tinder_id).order_by(TinderProfile.created_at)
    if not force:
        query = query.where(col(TinderProfile.computed).is_(False))
    result = await session.exec(query)
    return list(result.all())


async def mark_profile_computed(session: AsyncSession, tinder_id: str) -> None:
    await session.execute(
        sa_update(TinderProfile).where(col(TinderProfile.tinder_id) == tinder_id).values(computed=True)
    )


async def count_rows(session: AsyncSession, model) -> int:
    result = await session.exec(select(func.count()).select_from(model))
    return result.one()


async def get_all_profile_ids(session: AsyncSession) -> set[str]:
    result = await session.exec(select(TinderProfile.tinder_id))
    return set(result.all())


# =============================================================================
# USAGE & MATCHES
# =============================================================================


async def get_usage_days(session: AsyncSession, tinder_id: str) -> Sequence[TinderUsage]:
    result = await session.exec(
        select(TinderUsage).where(TinderUsage.tinder_profile_id == tinder_id).order_by(TinderUsage.date_stamp)
    )
    return result.all()


async def get_matches(session: AsyncSession, tinder_id: str) -> Sequence[Match]:
    result = await session.exec(
        select(Match).where(Match.tinder_profile_id == tinder_id).order_by(Match.order)
    )
    return result.all()


async def get_profile_ids_with_media(session: AsyncSession) -> set[str]:
    """Profiles that already own at least one media row."""
    result = await session.exec(
        select(Media.tinder_profile_id).where(col(Media.tinder_profile_id).is_not(None)).distinct()
    )
    return set(result.all())


# =============================================================================
# PROFILE META
# =============================================================================


async def get_profile_meta(session: AsyncSession, tinder_id: str) -> ProfileMeta | None:
    result = await session.exec(select(ProfileMeta).where(ProfileMeta.tinder_profile_id == tinder_id))
    return result.first()


async def delete_profile_meta(session: AsyncSession, tinder_id: str) -> None:
    await session.execute(sa_delete(ProfileMeta).where(col(ProfileMeta.tinder_profile_id) == tinder_id))


# =============================================================================
# COHORTS
# =============================================================================


async def get_cohorts(session: AsyncSession) -> Sequence[CohortDefinition]:
    result = await session.exec(select(CohortDefinition).order_by(CohortDefinition.id))
    return result.all()


async def get_cohort_profiles(
    session: AsyncSession,
    gender: Gender | None = None,
    age_min: int | None = None,
    age_max: int | None = None,
    period_start: datetime | None = None,
    period_end: datetime | None = None,
) -> Sequence[tuple[TinderProfile, ProfileMeta]]:
    """Profiles with computed meta matching the pushed-down cohort filters.

    A bounded period keeps profiles whose activity window overlaps it.
    """
    query = select(TinderProfile, ProfileMeta).join(
        ProfileMeta, ProfileMeta.tinder_profile_id == TinderProfile.tinder_id
    )
    if gender is not None:
        query = query.where(TinderProfile.gender == gender)
    if age_min is not None:
        query = query.where(TinderProfile.age_at_last_usage >= age_min)
    if age_max is not None:
        query = query.where(TinderProfile.age_at_last_usage <= age_max)
    if period_start is not None and period_end is not None:
        query = query.where(
            TinderProfile.first_day_on_app <= period_end,
            TinderProfile.last_day_on_app >= period_start,
        )
    result = await session.exec(query)
    return result.all()


async def get_cohort_stats(session: AsyncSession, cohort_id: str, period: str) -> CohortStats | None:
    result = await session.exec(
        select(CohortStats).where(CohortStats.cohort_id == cohort_id, CohortStats.period == period)
    )
    return result.first()


async def update_cohort_cache(
    session: AsyncSession, cohort_id: str, profile_count: int, computed_at: datetime
) -> None:
    await session.execute(
        sa_update(CohortDefinition)
        .where(col(CohortDefinition.id) == cohort_id)
        .values(profile_count=profile_count, last_computed_at=computed_at)
    )


# =============================================================================
# USERS
# =============================================================================


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)
