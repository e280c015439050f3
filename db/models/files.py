"""Raw uploaded data files."""

from sqlalchemy import JSON
from sqlmodel import Field

from db.enums import DataProvider, SwipestatsVersion
from db.models.base import TimestampMixin


class OriginalAnonymizedFile(TimestampMixin, table=True):
    """
    An anonymized upload as received from the user.

    Large payloads are stored externally: ``file`` is null and ``blob_url``
    points at the uploaded JSON document.
    """

    __tablename__ = "original_anonymized_file"

    id: str = Field(primary_key=True)
    data_provider: DataProvider
    swipestats_version: SwipestatsVersion
    file: dict | None = Field(default=None, sa_type=JSON)
    blob_url: str | None = Field(default=None)
    user_id: str = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
