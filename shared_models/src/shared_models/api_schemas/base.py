from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator


# Base Pydantic model configuration
class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,  # Allows creating schemas from ORM models
        populate_by_name=True,
    )


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Base schema including standard timestamps
class TimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_timezone_aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)
