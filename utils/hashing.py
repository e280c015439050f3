import hashlib
from typing import Any


def create_profile_id(birth_date: str, create_date: str) -> str:
    """Canonical Tinder profile id: sha256 of ``"{birth_date}-{create_date}"``."""
    return hashlib.sha256(f"{birth_date}-{create_date}".encode()).hexdigest()


def profile_id_from_tinder_export(data: dict[str, Any]) -> str | None:
    """Re-derive the profile id from a raw Tinder export, None if the fields are missing."""
    user = data.get("User") or {}
    birth_date = user.get("birth_date")
    create_date = user.get("create_date")
    if not birth_date or not create_date:
        return None
    return create_profile_id(birth_date, create_date)
