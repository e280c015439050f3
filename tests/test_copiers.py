"""
Tests for dependency ordering and the entity copy stage.

Covers:
- Parent-before-child copy order and cycle detection
- Profile limit selecting the most recent profiles
- Re-runs producing identical rows
- Legacy queries split into key chunks
- Dry runs writing nothing
- Transformation failures aborting the stage
"""

from datetime import datetime, timedelta
from graphlib import CycleError
from types import SimpleNamespace

import pytest
from sqlmodel import select

from db import crud
from db.config import settings
from db.models import Job, Match, Media, Message, School, TinderProfile, TinderUsage, User
from migrations.legacy_models import (
    LegacyJob,
    LegacyMatch,
    LegacyMedia,
    LegacyMessage,
    LegacySchool,
    LegacyTinderProfile,
    LegacyTinderUsage,
)
from migrations.legacy_to_current.copiers import COPIER_CLASSES, Copier, EntityCopier, OriginalFileCopier
from migrations.legacy_to_current.exceptions import TransformationError
from migrations.legacy_to_current.orchestrator import MigrationOrchestrator, resolve_copy_order
from migrations.legacy_to_current.stats import MigrationStats
from tests.factories import (
    JAN_1_2023,
    insert_legacy,
    legacy_job_row,
    legacy_match_row,
    legacy_media_row,
    legacy_message_row,
    legacy_profile_row,
    legacy_school_row,
    legacy_usage_row,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def node(name, *depends_on):
    return SimpleNamespace(name=name, depends_on=depends_on)


async def seed_legacy_store(migration):
    """Three profiles owned by two users, newest is p3."""
    await insert_legacy(
        migration,
        LegacyTinderProfile,
        [
            legacy_profile_row("p1", "u1", created_at=datetime(2023, 1, 1)),
            legacy_profile_row("p2", "u1", created_at=datetime(2023, 2, 1)),
            legacy_profile_row("p3", "u2", created_at=datetime(2023, 3, 1)),
        ],
    )
    await insert_legacy(migration, LegacyJob, [legacy_job_row(f"job-{p}", p) for p in ("p1", "p2", "p3")])
    await insert_legacy(migration, LegacySchool, [legacy_school_row(f"school-{p}", p) for p in ("p1", "p2", "p3")])
    await insert_legacy(migration, LegacyMedia, [legacy_media_row(f"media-{p}", p) for p in ("p1", "p2", "p3")])
    await insert_legacy(
        migration,
        LegacyMatch,
        [
            legacy_match_row("m1", "p1", total_message_count=1),
            legacy_match_row("m2", "p2", total_message_count=2),
            legacy_match_row("m3", "p3", total_message_count=0),
        ],
    )
    await insert_legacy(
        migration,
        LegacyMessage,
        [
            legacy_message_row("msg-1", "m1", "p1"),
            legacy_message_row("msg-2", "m2", "p2", order=0),
            legacy_message_row("msg-3", "m2", "p2", order=1, message_type="VOICE"),
            # Orphaned from its profile, never copied
            legacy_message_row("msg-4", "m2", None, order=2),
        ],
    )
    await insert_legacy(
        migration,
        LegacyTinderUsage,
        [legacy_usage_row(p, JAN_1_2023 + timedelta(days=d)) for p in ("p1", "p2", "p3") for d in range(3)],
    )


async def target_counts(migration) -> dict[str, int]:
    async with migration.get_session() as session:
        return {
            model.__name__: await crud.count_rows(session, model)
            for model in (User, TinderProfile, Job, School, Match, Message, Media, TinderUsage)
        }


async def target_snapshot(migration) -> dict[str, list[dict]]:
    """Every copied row of the main entity tables, in a stable order."""
    async with migration.get_session() as session:
        snapshot = {}
        for model in (User, TinderProfile, Match, Message, TinderUsage):
            rows = (await session.exec(select(model))).all()
            snapshot[model.__name__] = sorted((row.model_dump() for row in rows), key=repr)
        return snapshot


# ---------------------------------------------------------------------------
# Dependency order
# ---------------------------------------------------------------------------


def test_copy_order_puts_parents_first():
    ordered = resolve_copy_order([cls(None, None) for cls in COPIER_CLASSES])

    assert [copier.name for copier in ordered] == [
        "users",
        "profiles",
        "original_files",
        "jobs",
        "schools",
        "matches",
        "media",
        "usage",
        "messages",
    ]


def test_copy_order_ignores_declaration_order():
    ordered = resolve_copy_order([node("messages", "matches"), node("matches", "profiles"), node("profiles")])
    assert [copier.name for copier in ordered] == ["profiles", "matches", "messages"]


def test_copy_order_detects_cycles():
    with pytest.raises(CycleError):
        resolve_copy_order([node("a", "b"), node("b", "a")])


def test_copy_order_rejects_unknown_dependency():
    with pytest.raises(KeyError):
        resolve_copy_order([node("jobs", "profiles")])


# ---------------------------------------------------------------------------
# Copy stage
# ---------------------------------------------------------------------------


async def test_profile_limit_selects_most_recent_profiles(migration):
    await seed_legacy_store(migration)
    stats = MigrationStats()

    context = await MigrationOrchestrator(migration, stats, profile_limit=2).run()

    assert context.profile_ids == ["p3", "p2"]
    assert sorted(context.user_ids) == ["u1", "u2"]
    assert context.match_ids == ["m2", "m3"]
    assert await target_counts(migration) == {
        "User": 2,
        "TinderProfile": 2,
        "Job": 2,
        "School": 2,
        "Match": 2,
        "Message": 2,
        "Media": 2,
        "TinderUsage": 6,
    }
    assert stats.entity_counts["Message"] == 2
    assert stats.oldest_profile.date().isoformat() == "2023-02-01"


async def test_copy_is_idempotent(migration):
    await seed_legacy_store(migration)

    await MigrationOrchestrator(migration, MigrationStats()).run()
    first = await target_counts(migration)
    first_rows = await target_snapshot(migration)
    await MigrationOrchestrator(migration, MigrationStats()).run()

    assert await target_counts(migration) == first
    assert await target_snapshot(migration) == first_rows
    assert first["TinderProfile"] == 3
    assert first["Message"] == 3
    assert len(first_rows["TinderUsage"]) == 9


async def test_chunked_extraction_copies_everything(migration, monkeypatch):
    for setting in (
        "profile_query_batch",
        "match_query_batch",
        "message_query_batch",
        "media_query_batch",
        "usage_query_batch",
    ):
        monkeypatch.setattr(settings, setting, 1)
    await seed_legacy_store(migration)
    stats = MigrationStats()

    context = await MigrationOrchestrator(migration, stats).run()

    assert context.profile_ids == ["p3", "p2", "p1"]
    assert sorted(context.match_ids) == ["m1", "m2", "m3"]
    assert await target_counts(migration) == {
        "User": 2,
        "TinderProfile": 3,
        "Job": 3,
        "School": 3,
        "Match": 3,
        "Message": 3,
        "Media": 3,
        "TinderUsage": 9,
    }


def test_skip_only_copier_has_no_legacy_query():
    assert not hasattr(OriginalFileCopier, "build_query")
    assert issubclass(OriginalFileCopier, Copier)
    assert not issubclass(OriginalFileCopier, EntityCopier)


async def test_copied_profiles_are_not_computed(migration):
    await seed_legacy_store(migration)
    await MigrationOrchestrator(migration, MigrationStats()).run()

    async with migration.get_session() as session:
        result = await session.exec(select(TinderProfile.computed))
        assert set(result.all()) == {False}


async def test_message_types_are_remapped(migration):
    await seed_legacy_store(migration)
    await MigrationOrchestrator(migration, MigrationStats()).run()

    async with migration.get_session() as session:
        message = await session.get(Message, "msg-3")
    assert message.message_type == "VOICE_NOTE"


async def test_dry_run_writes_nothing(migration):
    await seed_legacy_store(migration)
    migration.dry_run = True
    stats = MigrationStats()

    await MigrationOrchestrator(migration, stats).run()

    assert set((await target_counts(migration)).values()) == {0}
    assert stats.entity_counts["TinderProfile"] == 3


async def test_transformation_error_aborts_copy(migration):
    await insert_legacy(migration, LegacyTinderProfile, [legacy_profile_row("p1", "u1", gender="ROBOT")])
    stats = MigrationStats()

    with pytest.raises(TransformationError):
        await MigrationOrchestrator(migration, stats).run()

    assert stats.stages["copy"].failed == 1
    assert stats.has_fatal_failures
    counts = await target_counts(migration)
    assert counts["User"] == 1
    assert counts["TinderProfile"] == 0


async def test_empty_legacy_store(migration):
    stats = MigrationStats()
    context = await MigrationOrchestrator(migration, stats).run()

    assert context.profile_ids == []
    assert stats.total_records == 0
