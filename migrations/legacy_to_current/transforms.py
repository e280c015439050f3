"""
Legacy row to target model transforms.

Each entity has one function taking its typed legacy row and returning the
target SQLModel instance. Rows that cannot be mapped raise
``TransformationError``; the copy stage treats that as fatal for the whole
entity type.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from db.enums import Gender, MessageType, SwipestatsTier, SwipestatsVersion
from db.models import Job, Match, Media, Message, School, TinderProfile, TinderUsage, User
from migrations.legacy_models import (
    JobRow,
    LegacyRow,
    MatchRow,
    MediaRow,
    MessageRow,
    SchoolRow,
    TinderProfileRow,
    TinderUsageRow,
    UserSeedRow,
)
from migrations.legacy_to_current.exceptions import TransformationError

RowType = TypeVar("RowType", bound=LegacyRow)

GENDER_ALIASES: dict[str, Gender] = {
    "M": Gender.MALE,
    "MAN": Gender.MALE,
    "F": Gender.FEMALE,
    "WOMAN": Gender.FEMALE,
    "": Gender.UNKNOWN,
}

MESSAGE_TYPE_ALIASES: dict[str, MessageType] = {
    "VOICE": MessageType.VOICE_NOTE,
    "VOICENOTE": MessageType.VOICE_NOTE,
    "CONTACT": MessageType.CONTACT_CARD,
    "CONTACTCARD": MessageType.CONTACT_CARD,
}


def parse_row(schema: type[RowType], mapping: Mapping[str, Any], entity: str, key_column: str) -> RowType:
    """Validate a raw legacy mapping against its row schema."""
    try:
        return schema.model_validate(dict(mapping))
    except ValidationError as e:
        key = mapping.get(key_column)
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise TransformationError(entity, str(key) if key is not None else None, f"invalid fields: {fields}") from e


def to_gender(value: str | None, entity: str = "TinderProfile", key: str | None = None) -> Gender:
    normalized = (value or "").strip().upper()
    if normalized in Gender.__members__:
        return Gender(normalized)
    if normalized in GENDER_ALIASES:
        return GENDER_ALIASES[normalized]
    raise TransformationError(entity, key, f"unknown gender value {value!r}")


def to_message_type(value: str | None, key: str | None = None) -> MessageType:
    normalized = (value or "").strip().upper().replace("-", "_")
    if normalized in MessageType.__members__:
        return MessageType(normalized)
    compact = normalized.replace("_", "")
    if compact in MESSAGE_TYPE_ALIASES:
        return MESSAGE_TYPE_ALIASES[compact]
    raise TransformationError("Message", key, f"unknown message type {value!r}")


def to_swipestats_version(value: str | None, key: str | None = None) -> SwipestatsVersion:
    normalized = (value or "").strip().upper()
    if normalized in SwipestatsVersion.__members__:
        return SwipestatsVersion(normalized)
    raise TransformationError("TinderProfile", key, f"unknown swipestats version {value!r}")


# =============================================================================
# ENTITY TRANSFORMS
# =============================================================================


def transform_user(row: UserSeedRow) -> User:
    """Anonymous placeholder account owning the migrated profiles."""
    return User(
        id=row.user_id,
        name="Anonymous User",
        email=None,
        email_verified=False,
        is_anonymous=True,
        role="user",
        banned=False,
        active_on_tinder=True,
        active_on_hinge=False,
        swipestats_tier=SwipestatsTier.FREE,
        created_at=row.created_at,
        updated_at=row.created_at,
    )


def transform_profile(row: TinderProfileRow) -> TinderProfile:
    key = row.tinder_id
    return TinderProfile(
        tinder_id=row.tinder_id,
        user_id=row.user_id,
        # Meta is recomputed in the target store
        computed=False,
        created_at=row.created_at,
        updated_at=row.updated_at,
        birth_date=row.birth_date,
        age_at_upload=row.age_at_upload,
        age_at_last_usage=row.age_at_last_usage,
        create_date=row.create_date,
        active_time=row.active_time,
        gender=to_gender(row.gender, key=key),
        gender_str=row.gender_str,
        bio=row.bio,
        bio_original=row.bio_original,
        city=row.city,
        country=row.country,
        region=row.region,
        user_interests=row.user_interests,
        interests=row.interests,
        sexual_orientations=row.sexual_orientations,
        descriptors=row.descriptors,
        college=row.college,
        jobs_raw=row.jobs_raw,
        schools_raw=row.schools_raw,
        instagram_connected=row.instagram_connected,
        spotify_connected=row.spotify_connected,
        job_title=row.job_title,
        job_title_displayed=bool(row.job_title_displayed),
        company=row.company,
        company_displayed=bool(row.company_displayed),
        school=row.school,
        school_displayed=bool(row.school_displayed),
        education_level=row.education_level,
        age_filter_min=row.age_filter_min,
        age_filter_max=row.age_filter_max,
        interested_in=to_gender(row.interested_in, key=key),
        interested_in_str=row.interested_in_str,
        gender_filter=to_gender(row.gender_filter, key=key),
        gender_filter_str=row.gender_filter_str,
        swipestats_version=to_swipestats_version(row.swipestats_version, key=key),
        first_day_on_app=row.first_day_on_app,
        last_day_on_app=row.last_day_on_app,
        days_in_profile_period=row.days_in_profile_period,
    )


def transform_usage(row: TinderUsageRow) -> TinderUsage:
    return TinderUsage(**row.model_dump())


def transform_job(row: JobRow) -> Job:
    return Job(**row.model_dump())


def transform_school(row: SchoolRow) -> School:
    return School(**row.model_dump())


def transform_match(row: MatchRow) -> Match:
    data = row.model_dump()
    data["languages"] = row.languages or []
    return Match(**data)


def transform_message(row: MessageRow) -> Message:
    data = row.model_dump()
    data["message_type"] = to_message_type(row.message_type, key=row.id)
    return Message(**data)


def transform_media(row: MediaRow) -> Media:
    return Media(**row.model_dump())
