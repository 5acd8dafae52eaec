"""Patient, attachment and diagnosed condition schemas."""

import base64
import datetime as dt
from typing import Optional

from pydantic import Field, field_serializer

from patient_registry.api.schemas.base import ApiModel


class PatientRequest(ApiModel):
    """Body of POST /patients and PUT /patients/{id}."""

    name: str = Field(..., min_length=3, description="Name of the patient")
    address: Optional[str] = Field(None, description="Address of the patient")
    phone_number: str = Field(..., min_length=10, description="Phone number of the patient")
    date_of_birth: dt.date = Field(..., description="Date of birth of the patient")
    external_identifier: str = Field(
        ..., min_length=3, description="External identifier of the patient (e.g. SSN)"
    )


class DiagnosedConditionRequest(ApiModel):
    """Body of POST /patients/{patientId}/diagnosedConditions."""

    name: str = Field(..., min_length=3, description="Name of the condition")
    code: str = Field(..., min_length=3, description="Medical code identifying the condition")
    description: Optional[str] = Field(None, description="Description of the condition")
    date: dt.date = Field(..., description="Date the condition was diagnosed")


class DiagnosedConditionResponse(ApiModel):
    id: int
    patient_id: int
    name: str
    code: str
    description: str = ""
    date: Optional[dt.date] = None


class AttachmentResponse(ApiModel):
    """Attachment metadata plus its payload as standard base64."""

    id: int
    patient_id: int
    name: str
    description: str = ""
    type: str = ""
    data: bytes = Field(b"", description="Base64 encoded payload")

    @field_serializer("data", when_used="json")
    def serialize_data(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")


class PatientResponse(ApiModel):
    """A patient with every attachment and diagnosed condition it owns."""

    id: int
    name: str
    address: str = ""
    phone_number: str
    external_identifier: str
    date_of_birth: Optional[dt.date] = None
    diagnosed_conditions: list[DiagnosedConditionResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)
