"""
Tests for legacy row parsing and entity transforms.

Covers:
- Gender and message-type remapping, including legacy aliases
- Validation failures surfacing as TransformationError
- Profile transform resetting the computed flag
- Naive legacy timestamps normalized to UTC
"""

from datetime import datetime

import pytest
import pytz

from db.enums import Gender, MessageType, SwipestatsTier, SwipestatsVersion
from migrations.legacy_models import JobRow, MatchRow, TinderProfileRow, UserSeedRow, ensure_utc
from migrations.legacy_to_current import transforms
from migrations.legacy_to_current.exceptions import TransformationError
from tests.factories import legacy_match_row, legacy_profile_row


@pytest.mark.parametrize(
    "value, expected",
    [
        ("MALE", Gender.MALE),
        ("female", Gender.FEMALE),
        ("M", Gender.MALE),
        ("Woman", Gender.FEMALE),
        (" other ", Gender.OTHER),
        ("", Gender.UNKNOWN),
        (None, Gender.UNKNOWN),
    ],
)
def test_to_gender(value, expected):
    assert transforms.to_gender(value) == expected


def test_to_gender_rejects_unknown_value():
    with pytest.raises(TransformationError) as exc_info:
        transforms.to_gender("ROBOT", key="abc")
    assert exc_info.value.entity == "TinderProfile"
    assert exc_info.value.key == "abc"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("TEXT", MessageType.TEXT),
        ("gif", MessageType.GIF),
        ("voice_note", MessageType.VOICE_NOTE),
        ("VOICE", MessageType.VOICE_NOTE),
        ("voicenote", MessageType.VOICE_NOTE),
        ("contact-card", MessageType.CONTACT_CARD),
        ("CONTACT", MessageType.CONTACT_CARD),
    ],
)
def test_to_message_type(value, expected):
    assert transforms.to_message_type(value) == expected


def test_to_message_type_rejects_unknown_value():
    with pytest.raises(TransformationError, match="STICKER"):
        transforms.to_message_type("STICKER", key="m1")


def test_to_swipestats_version():
    assert transforms.to_swipestats_version("swipestats_2") == SwipestatsVersion.SWIPESTATS_2
    with pytest.raises(TransformationError):
        transforms.to_swipestats_version("SWIPESTATS_9")


def test_parse_row_reports_entity_key_and_fields():
    raw = {"jobId": "job-1", "tinderProfileId": "p1"}

    with pytest.raises(TransformationError) as exc_info:
        transforms.parse_row(JobRow, raw, "Job", "jobId")

    assert exc_info.value.key == "job-1"
    assert "title" in str(exc_info.value)


def test_ensure_utc_localizes_naive_timestamps():
    value = ensure_utc(datetime(2023, 5, 1, 12, 0))
    assert value.tzinfo is not None
    assert value.utcoffset().total_seconds() == 0


def test_transform_profile_resets_computed_flag():
    row = transforms.parse_row(
        TinderProfileRow, legacy_profile_row("p1", computed=True, gender="F"), "TinderProfile", "tinderId"
    )

    profile = transforms.transform_profile(row)

    assert profile.computed is False
    assert profile.gender == Gender.FEMALE
    assert profile.interested_in == Gender.MALE
    assert profile.swipestats_version == SwipestatsVersion.SWIPESTATS_3
    assert profile.user_interests == ["Travel", "Coffee"]
    assert profile.first_day_on_app.tzinfo is not None


def test_transform_profile_fails_on_unknown_gender():
    row = transforms.parse_row(
        TinderProfileRow, legacy_profile_row("p1", gender="ROBOT"), "TinderProfile", "tinderId"
    )
    with pytest.raises(TransformationError) as exc_info:
        transforms.transform_profile(row)
    assert exc_info.value.key == "p1"


def test_transform_user_creates_anonymous_owner():
    created_at = datetime(2022, 3, 4, tzinfo=pytz.UTC)
    user = transforms.transform_user(UserSeedRow(user_id="u1", created_at=created_at))

    assert user.id == "u1"
    assert user.is_anonymous is True
    assert user.email is None
    assert user.swipestats_tier == SwipestatsTier.FREE
    assert user.created_at == created_at


def test_transform_match_defaults_languages():
    row = transforms.parse_row(MatchRow, legacy_match_row("m1", "p1", total_message_count=0), "Match", "id")

    match = transforms.transform_match(row)

    assert match.languages == []
    assert match.is_ghosted
