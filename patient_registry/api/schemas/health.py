"""Health check schemas."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field

from patient_registry.api.schemas.base import ApiModel


class RecordCounts(ApiModel):
    """Number of live records per collection.

    Attributes:
        patients: Live patients
        attachments: Live attachments
        diagnosed_conditions: Live diagnosed conditions
        users: Registered users
    """

    patients: int
    attachments: int
    diagnosed_conditions: int
    users: int


class HealthResponse(ApiModel):
    """Health check response model.

    Attributes:
        status: Overall service status
        timestamp: Current timestamp
        version: Application version
        records: Record counts of the in-memory store
    """

    status: Literal["healthy"]
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Current UTC timestamp"
    )
    version: str
    records: RecordCounts
