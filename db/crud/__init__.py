"""
Database CRUD operations package.

Usage:
    from db import crud
    await crud.insert_ignore(session, TinderProfile, rows)
    meta = await crud.get_profile_meta(session, tinder_id)
"""

# Bulk writes
from db.crud.bulk import insert_ignore, to_rows, upsert

# Profiles, usage, meta and cohorts
from db.crud.profiles import (
    count_rows,
    delete_profile_meta,
    get_all_profile_ids,
    get_cohort_profiles,
    get_cohort_stats,
    get_cohorts,
    get_matches,
    get_profile,
    get_profile_ids_to_compute,
    get_profile_ids_with_media,
    get_profile_meta,
    get_usage_days,
    get_user,
    mark_profile_computed,
    update_cohort_cache,
)

__all__ = [
    # Bulk writes
    "insert_ignore",
    "to_rows",
    "upsert",
    # Profiles
    "count_rows",
    "get_profile",
    "get_all_profile_ids",
    "get_profile_ids_to_compute",
    "mark_profile_computed",
    # Usage & matches
    "get_usage_days",
    "get_matches",
    # Media
    "get_profile_ids_with_media",
    # Profile meta
    "get_profile_meta",
    "delete_profile_meta",
    # Cohorts
    "get_cohorts",
    "get_cohort_profiles",
    "get_cohort_stats",
    "update_cohort_cache",
    # Users
    "get_user",
]
