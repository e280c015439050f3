"""
Database models package.

This module re-exports all target-store models for easy importing:
    from db.models import TinderProfile, ProfileMeta, CohortStats, ...

Primary keys are text throughout: migrated rows keep their legacy ids,
computed rows use prefixed ids (see ``create_id``).
"""

# Base and mixins
from db.models.base import TimestampMixin, create_id, utc_now

# Cohorts
from db.models.cohorts import CohortDefinition, CohortStats

# Conversations
from db.models.conversations import Match, Media, Message

# Raw uploads
from db.models.files import OriginalAnonymizedFile

# Computed aggregates
from db.models.meta import ProfileMeta

# Profiles
from db.models.profiles import Job, School, TinderProfile, TinderUsage

# Users
from db.models.users import User

__all__ = [
    # Base
    "TimestampMixin",
    "create_id",
    "utc_now",
    # Users
    "User",
    # Profiles
    "TinderProfile",
    "TinderUsage",
    "Job",
    "School",
    # Conversations
    "Match",
    "Message",
    "Media",
    # Raw uploads
    "OriginalAnonymizedFile",
    # Computed aggregates
    "ProfileMeta",
    # Cohorts
    "CohortDefinition",
    "CohortStats",
]
