"""
Row builders for legacy tables and target models.

Legacy builders return camelCase dicts ready for ``Table.insert()``; target
builders return SQLModel instances.
"""

from datetime import datetime, timedelta

import pytz
from sqlalchemy import Table

from db.enums import Gender, SwipestatsVersion
from db.models import Match, ProfileMeta, TinderProfile, TinderUsage, User
from migrations.legacy_to_current.database import DatabaseMigration

JAN_1_2023 = datetime(2023, 1, 1)


# ---------------------------------------------------------------------------
# Legacy rows
# ---------------------------------------------------------------------------


def legacy_profile_row(
    tinder_id: str,
    user_id: str = "user-1",
    *,
    created_at: datetime = JAN_1_2023,
    gender: str = "MALE",
    age: int = 30,
    first_day: datetime = JAN_1_2023,
    last_day: datetime | None = None,
    **overrides,
) -> dict:
    last_day = last_day or first_day + timedelta(days=29)
    row = {
        "tinderId": tinder_id,
        "userId": user_id,
        "computed": False,
        "createdAt": created_at,
        "updatedAt": created_at,
        "birthDate": datetime(2023 - age, 6, 1),
        "ageAtUpload": age,
        "ageAtLastUsage": age,
        "createDate": first_day,
        "gender": gender,
        "genderStr": gender.title(),
        "bio": "Hello there",
        "city": "Oslo",
        "country": "Norway",
        "region": "Oslo",
        "user_interests": ["Travel", "Coffee"],
        "instagramConnected": False,
        "spotifyConnected": True,
        "ageFilterMin": 18,
        "ageFilterMax": 40,
        "interestedIn": "FEMALE" if gender == "MALE" else "MALE",
        "interestedInStr": "Women" if gender == "MALE" else "Men",
        "genderFilter": "FEMALE" if gender == "MALE" else "MALE",
        "genderFilterStr": "Women" if gender == "MALE" else "Men",
        "swipestatsVersion": "SWIPESTATS_3",
        "firstDayOnApp": first_day,
        "lastDayOnApp": last_day,
        "daysInProfilePeriod": (last_day - first_day).days + 1,
    }
    row.update(overrides)
    return row


def legacy_usage_row(
    profile_id: str,
    day: datetime,
    *,
    likes: int = 10,
    passes: int = 10,
    matches: int = 1,
    app_opens: int = 3,
    missing: bool = False,
) -> dict:
    return {
        "dateStampRaw": day.strftime("%Y-%m-%d"),
        "tinderProfileId": profile_id,
        "dateStamp": day,
        "appOpens": app_opens,
        "matches": matches,
        "swipeLikes": likes,
        "swipeSuperLikes": 0,
        "swipePasses": passes,
        "swipesCombined": likes + passes,
        "messagesReceived": 0,
        "messagesSent": 0,
        "matchRate": 0.0,
        "likeRate": 0.0,
        "messagesSentRate": 0.0,
        "responseRate": 0.0,
        "engagementRate": 0.0,
        "dateIsMissingFromOriginalData": missing,
        "activeUser": app_opens > 0,
        "activeUserInLast7Days": False,
        "activeUserInLast14Days": False,
        "activeUserInLast30Days": False,
        "userAgeThisDay": 30,
    }


def legacy_match_row(match_id: str, profile_id: str, *, order: int = 0, total_message_count: int = 0) -> dict:
    return {
        "id": match_id,
        "order": order,
        "totalMessageCount": total_message_count,
        "textCount": total_message_count,
        "gifCount": 0,
        "gestureCount": 0,
        "otherMessageTypeCount": 0,
        "languages": None,
        "tinderProfileId": profile_id,
    }


def legacy_message_row(
    message_id: str,
    match_id: str,
    profile_id: str | None,
    *,
    order: int = 0,
    message_type: str = "TEXT",
) -> dict:
    sent = JAN_1_2023 + timedelta(hours=order)
    return {
        "id": message_id,
        "to": 1,
        "sentDate": sent,
        "sentDateRaw": sent.isoformat(),
        "contentRaw": f"message {order}",
        "content": f"message {order}",
        "charCount": 9,
        "messageType": message_type,
        "order": order,
        "matchId": match_id,
        "tinderProfileId": profile_id,
    }


def legacy_job_row(job_id: str, profile_id: str) -> dict:
    return {"jobId": job_id, "title": "Engineer", "titleDisplayed": True, "tinderProfileId": profile_id}


def legacy_school_row(school_id: str, profile_id: str) -> dict:
    return {"schoolId": school_id, "name": "University", "displayed": True, "tinderProfileId": profile_id}


def legacy_media_row(media_id: str, profile_id: str) -> dict:
    return {"id": media_id, "type": "photo", "url": f"https://img.example.com/{media_id}.jpg", "tinderProfileId": profile_id}


async def insert_legacy(migration: DatabaseMigration, table: Table, rows: list[dict]) -> None:
    async with migration.legacy_engine.begin() as conn:
        await conn.execute(table.insert(), rows)


# ---------------------------------------------------------------------------
# Target models
# ---------------------------------------------------------------------------


def make_user(user_id: str = "user-1", **overrides) -> User:
    return User(id=user_id, name="Anonymous User", is_anonymous=True, **overrides)


def make_profile(
    tinder_id: str,
    *,
    user_id: str = "user-1",
    gender: Gender = Gender.MALE,
    age: int = 30,
    first_day: datetime | None = None,
    last_day: datetime | None = None,
    computed: bool = False,
    country: str | None = None,
) -> TinderProfile:
    first_day = first_day or datetime(2023, 1, 1, tzinfo=pytz.UTC)
    last_day = last_day or first_day + timedelta(days=29)
    return TinderProfile(
        tinder_id=tinder_id,
        user_id=user_id,
        computed=computed,
        birth_date=datetime(1993, 6, 1, tzinfo=pytz.UTC),
        age_at_upload=age,
        age_at_last_usage=age,
        create_date=first_day,
        gender=gender,
        gender_str=gender.value.title(),
        country=country,
        age_filter_min=18,
        age_filter_max=40,
        interested_in=Gender.FEMALE,
        interested_in_str="Women",
        gender_filter=Gender.FEMALE,
        gender_filter_str="Women",
        swipestats_version=SwipestatsVersion.SWIPESTATS_3,
        first_day_on_app=first_day,
        last_day_on_app=last_day,
        days_in_profile_period=(last_day - first_day).days + 1,
    )


def make_usage(
    profile_id: str,
    day: int,
    *,
    likes: int = 0,
    passes: int = 0,
    matches: int = 0,
    app_opens: int = 1,
    missing: bool = False,
) -> TinderUsage:
    date_stamp = datetime(2023, 1, 1, tzinfo=pytz.UTC) + timedelta(days=day)
    return TinderUsage(
        date_stamp_raw=date_stamp.strftime("%Y-%m-%d"),
        tinder_profile_id=profile_id,
        date_stamp=date_stamp,
        app_opens=app_opens,
        matches=matches,
        swipe_likes=likes,
        swipe_passes=passes,
        swipes_combined=likes + passes,
        date_is_missing_from_original_data=missing,
        user_age_this_day=30,
    )


def make_match(
    match_id: str,
    profile_id: str,
    *,
    total_message_count: int = 0,
    response_time_median_seconds: int | None = None,
    conversation_duration_days: int | None = None,
) -> Match:
    return Match(
        id=match_id,
        order=0,
        total_message_count=total_message_count,
        tinder_profile_id=profile_id,
        response_time_median_seconds=response_time_median_seconds,
        conversation_duration_days=conversation_duration_days,
    )


def make_meta(
    profile: TinderProfile,
    *,
    like_rate: float = 0.5,
    match_rate: float = 0.1,
    swipes_per_day: float = 50.0,
) -> ProfileMeta:
    return ProfileMeta(
        tinder_profile_id=profile.tinder_id,
        from_date=profile.first_day_on_app,
        to_date=profile.last_day_on_app,
        days_in_period=profile.days_in_profile_period,
        days_active=10,
        swipe_likes_total=100,
        swipe_passes_total=100,
        matches_total=10,
        messages_sent_total=0,
        messages_received_total=0,
        app_opens_total=10,
        like_rate=like_rate,
        match_rate=match_rate,
        swipes_per_day=swipes_per_day,
        conversation_count=0,
        conversations_with_messages=0,
        ghosted_count=0,
    )


async def add_target(migration: DatabaseMigration, *items) -> None:
    async with migration.get_session() as session:
        session.add_all(items)
        await session.commit()
