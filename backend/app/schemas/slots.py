# backend/app/schemas/slots.py
"""
Pydantic schemas for the availability API.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SlotRead(_CamelModel):
    """A single bookable slot."""
    start: datetime
    end: datetime
    available: bool = True
    price_minor_units: int | None = None
    currency: str | None = None


class AvailabilityDayRead(_CamelModel):
    """Available slots of one calendar day."""
    date: str = Field(description="YYYY-MM-DD")
    slots: list[SlotRead]


class AvailabilityResponse(_CamelModel):
    """Available slots grouped by day. Days without slots are omitted."""
    service_id: str
    slot_duration_minutes: int
    days: list[AvailabilityDayRead]
