"""
Tests for per-profile metadata computation.

Covers:
- Rates over real usage days (missing-day placeholders excluded)
- True zero-activity days kept in totals but not in active days
- Zero-denominator rates
- Ghost invariant and conversation metrics
- Aggregator resumability, force recompute and dry run
"""

import pytest
from sqlmodel import select

from db import crud
from db.models import ProfileMeta, TinderProfile
from migrations.legacy_to_current.profile_meta import (
    ProfileMetaAggregator,
    compute_profile_meta,
    get_median,
    round_half_up,
)
from tests.factories import add_target, make_match, make_profile, make_usage, make_user


def test_rates_from_real_days():
    profile = make_profile("p1")
    usage = [
        make_usage("p1", 0, likes=50, passes=10, matches=5, app_opens=4),
        make_usage("p1", 1, likes=30, passes=10, matches=3, app_opens=2),
    ]

    meta = compute_profile_meta(profile, usage, [])

    assert meta.swipe_likes_total == 80
    assert meta.swipe_passes_total == 20
    assert meta.like_rate == pytest.approx(0.8)
    assert meta.match_rate == pytest.approx(0.1)
    assert meta.swipes_per_day == pytest.approx(50.0)
    assert meta.days_active == 2
    assert meta.app_opens_total == 6


def test_missing_days_are_excluded_from_totals():
    profile = make_profile("p1")
    usage = [
        make_usage("p1", 0, likes=10, passes=10, matches=2, app_opens=1),
        make_usage("p1", 1, likes=999, passes=999, matches=99, app_opens=9, missing=True),
    ]

    meta = compute_profile_meta(profile, usage, [])

    assert meta.swipe_likes_total == 10
    assert meta.matches_total == 2
    assert meta.app_opens_total == 1
    assert meta.days_active == 1


def test_zero_activity_days_count_but_are_not_active():
    profile = make_profile("p1")
    usage = [
        make_usage("p1", 0, likes=20, passes=20, app_opens=2),
        make_usage("p1", 1, app_opens=0),
        make_usage("p1", 2, app_opens=0),
    ]

    meta = compute_profile_meta(profile, usage, [])

    assert meta.days_active == 1
    # Denominator is active days, not real days
    assert meta.swipes_per_day == pytest.approx(40.0)


def test_zero_denominators_give_zero_rates():
    meta = compute_profile_meta(make_profile("p1"), [make_usage("p1", 0, app_opens=0)], [])

    assert meta.like_rate == 0.0
    assert meta.match_rate == 0.0
    assert meta.swipes_per_day == 0.0


def test_period_comes_from_profile_activity_window():
    profile = make_profile("p1")
    meta = compute_profile_meta(profile, [], [])

    assert meta.from_date == profile.first_day_on_app
    assert meta.to_date == profile.last_day_on_app
    assert meta.days_in_period == 30


def test_conversation_metrics_and_ghost_invariant():
    matches = [
        make_match("m1", "p1", total_message_count=0),
        make_match("m2", "p1", total_message_count=4, response_time_median_seconds=10, conversation_duration_days=3),
        make_match("m3", "p1", total_message_count=9, response_time_median_seconds=21, conversation_duration_days=8),
        make_match("m4", "p1", total_message_count=0),
    ]

    meta = compute_profile_meta(make_profile("p1"), [], matches)

    assert meta.conversation_count == 4
    assert meta.ghosted_count == 2
    assert meta.conversations_with_messages == 2
    assert meta.ghosted_count + meta.conversations_with_messages == meta.conversation_count
    assert meta.average_response_time_seconds == 16
    assert meta.longest_conversation_days == 8
    assert meta.average_messages_per_conversation == pytest.approx(6.5)


def test_no_matches_leaves_optional_metrics_empty():
    meta = compute_profile_meta(make_profile("p1"), [], [])

    assert meta.conversation_count == 0
    assert meta.average_response_time_seconds is None
    assert meta.median_messages_per_conversation is None


def test_median_and_rounding_helpers():
    assert get_median([]) == 0.0
    assert get_median([3, 1, 2]) == 2
    assert get_median([1, 2, 3, 4]) == 2.5
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


async def seed_profile(migration, tinder_id="p1"):
    await add_target(
        migration,
        make_user(),
        make_profile(tinder_id),
        make_usage(tinder_id, 0, likes=8, passes=2, matches=1, app_opens=1),
        make_usage(tinder_id, 1, likes=100, passes=100, matches=10, missing=True),
        make_match(f"{tinder_id}-m1", tinder_id, total_message_count=0),
    )


async def test_compute_all_writes_meta_and_marks_computed(target_only_migration):
    migration = target_only_migration
    await seed_profile(migration)

    stats = await ProfileMetaAggregator(migration).compute_all()

    assert stats.successful == 1
    async with migration.get_session() as session:
        meta = await crud.get_profile_meta(session, "p1")
        profile = await session.get(TinderProfile, "p1")
    assert meta.like_rate == pytest.approx(0.8)
    assert meta.ghosted_count == 1
    assert profile.computed is True


async def test_second_run_has_nothing_to_do(target_only_migration):
    migration = target_only_migration
    await seed_profile(migration)

    await ProfileMetaAggregator(migration).compute_all()
    stats = await ProfileMetaAggregator(migration).compute_all()

    assert (stats.successful, stats.skipped, stats.failed) == (0, 0, 0)


async def test_existing_meta_is_skipped_and_profile_marked(target_only_migration):
    migration = target_only_migration
    await seed_profile(migration)
    await ProfileMetaAggregator(migration).compute("p1")
    async with migration.get_session() as session:
        profile = await session.get(TinderProfile, "p1")
        profile.computed = False
        session.add(profile)
        await session.commit()

    assert await ProfileMetaAggregator(migration).compute("p1") is None

    async with migration.get_session() as session:
        assert (await session.get(TinderProfile, "p1")).computed is True


async def test_force_replaces_existing_meta(target_only_migration):
    migration = target_only_migration
    await seed_profile(migration)
    first = await ProfileMetaAggregator(migration).compute("p1")

    stats = await ProfileMetaAggregator(migration, force=True).compute_all()

    assert stats.successful == 1
    async with migration.get_session() as session:
        rows = (await session.exec(select(ProfileMeta))).all()
    assert len(rows) == 1
    assert rows[0].id != first.id


async def test_compute_unknown_profile_raises(target_only_migration):
    aggregator = ProfileMetaAggregator(target_only_migration)

    with pytest.raises(LookupError):
        await aggregator.compute("does-not-exist")


async def test_dry_run_writes_nothing(target_only_migration):
    migration = target_only_migration
    await seed_profile(migration)
    migration.dry_run = True

    stats = await ProfileMetaAggregator(migration).compute_all()

    assert stats.successful == 1
    async with migration.get_session() as session:
        assert await crud.get_profile_meta(session, "p1") is None
        assert (await session.get(TinderProfile, "p1")).computed is False
