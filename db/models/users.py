"""User accounts that own dating-app profiles."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field

from db.enums import SwipestatsTier
from db.models.base import TimestampMixin


class User(TimestampMixin, table=True):
    """Account table.

    Migrated rows are synthetic anonymous users that exist only to satisfy
    the profile foreign key; they carry no personal data.
    """

    __tablename__ = "user"

    id: str = Field(primary_key=True)
    name: str | None = Field(default=None)
    email: str | None = Field(default=None, index=True)
    email_verified: bool = Field(default=False)
    image: str | None = Field(default=None)
    username: str | None = Field(default=None, unique=True)
    is_anonymous: bool = Field(default=False)
    role: str = Field(default="user")
    banned: bool = Field(default=False)

    active_on_tinder: bool = Field(default=False)
    active_on_hinge: bool = Field(default=False)
    country: str | None = Field(default=None)

    swipestats_tier: SwipestatsTier = Field(default=SwipestatsTier.FREE)
    subscription_current_period_end: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    is_lifetime: bool = Field(default=False)
