"""System cohort definitions and their seeding."""

import logging

from db import crud
from db.enums import CohortType, DataProvider, Gender
from db.models import CohortDefinition
from migrations.legacy_to_current.database import DatabaseMigration

logger = logging.getLogger(__name__)


def _system_cohort(
    cohort_id: str,
    name: str,
    description: str,
    gender: Gender | None = None,
    age_min: int | None = None,
    age_max: int | None = None,
) -> dict:
    return {
        "id": cohort_id,
        "name": name,
        "description": description,
        "data_provider": DataProvider.TINDER,
        "gender": gender,
        "age_min": age_min,
        "age_max": age_max,
        "country": None,
        "region": None,
        "type": CohortType.SYSTEM,
        "created_by_user_id": None,
    }


SYSTEM_COHORTS: list[dict] = [
    # Basic cohorts
    _system_cohort("tinder_all", "Everyone", "All Tinder users"),
    _system_cohort("tinder_male", "Men", "All Tinder men", Gender.MALE),
    _system_cohort("tinder_female", "Women", "All Tinder women", Gender.FEMALE),
    # Age brackets
    _system_cohort("tinder_male_18-24", "Men 18-24", "Tinder men aged 18-24", Gender.MALE, 18, 24),
    _system_cohort("tinder_male_25-34", "Men 25-34", "Tinder men aged 25-34", Gender.MALE, 25, 34),
    _system_cohort("tinder_female_18-24", "Women 18-24", "Tinder women aged 18-24", Gender.FEMALE, 18, 24),
    _system_cohort("tinder_female_25-34", "Women 25-34", "Tinder women aged 25-34", Gender.FEMALE, 25, 34),
    _system_cohort("tinder_male_35-44", "Men 35-44", "Tinder men aged 35-44", Gender.MALE, 35, 44),
    _system_cohort("tinder_female_35-44", "Women 35-44", "Tinder women aged 35-44", Gender.FEMALE, 35, 44),
    # Open-ended brackets
    _system_cohort("tinder_male_45plus", "Men 45+", "Tinder men aged 45 and above", Gender.MALE, 45),
    _system_cohort("tinder_female_45plus", "Women 45+", "Tinder women aged 45 and above", Gender.FEMALE, 45),
    _system_cohort("tinder_35plus", "35+", "Tinder users aged 35 and above", age_min=35),
]


async def seed_cohorts(migration: DatabaseMigration) -> int:
    """Insert the system cohorts, leaving existing definitions untouched.

    Returns:
        Number of cohorts newly inserted.
    """
    logger.info("\n" + "=" * 60)
    logger.info("🌱 Seeding System Cohorts")
    logger.info("=" * 60)
    logger.info(f"Preparing to insert {len(SYSTEM_COHORTS)} system cohorts...")

    if migration.dry_run:
        logger.info(f"   [DRY RUN] Would insert up to {len(SYSTEM_COHORTS)} cohorts")
        return 0

    async with migration.get_session() as session:
        cohorts = [CohortDefinition(**definition) for definition in SYSTEM_COHORTS]
        inserted = await crud.insert_ignore(session, CohortDefinition, cohorts)
        await session.commit()

    logger.info(f"✅ Seeded {inserted} new cohorts ({len(SYSTEM_COHORTS) - inserted} already present)")
    return inserted
