"""Pydantic models for Grilette notes."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Note(BaseModel):
    """A single note with an optional image attachment.

    Title and content may be empty here so that drafts can be built by a
    form; the repository refuses to store incomplete notes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    id: UUID = Field(default_factory=uuid4)
    title: str = Field("", description="Note title")
    content: str = Field("", description="Note body")
    created_at: datetime = Field(
        default_factory=utc_now, description="Creation timestamp, never changed"
    )
    last_modified: datetime = Field(
        default_factory=utc_now, description="Timestamp of the last saved edit"
    )
    image_data: bytes | None = Field(None, description="Opaque image bytes")
    is_pinned: bool = False

    @field_validator("created_at", "last_modified")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive and aware datetimes cannot be compared when sorting.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_complete(self) -> bool:
        """Whether the note has both a title and content."""
        return bool(self.title) and bool(self.content)


NOTE_LIST = TypeAdapter(list[Note])


def dump_notes(notes: list[Note], indent: int | None = None) -> bytes:
    """Serialize notes to the JSON array stored under the ``notes`` key."""
    return NOTE_LIST.dump_json(notes, by_alias=True, indent=indent)


def parse_notes(raw: bytes | str) -> list[Note]:
    """Parse a JSON array of notes. Raises ``ValidationError`` on bad input."""
    return NOTE_LIST.validate_json(raw)
