"""Domain Record Definitions.

This module defines the canonical records held by the registry: patients,
their diagnosed conditions and attachments, and the users allowed to edit
them. Search criteria are modelled here as well since the query engine
operates on domain records only.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Identifiers are assigned by the store, never chosen by callers
    - Transport concerns (camelCase JSON, multipart bodies) live in the API layer
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DiagnosedCondition(BaseModel):
    """A condition a patient has been diagnosed with.

    Parameters:
        id: Store-assigned identifier (None until inserted)
        patient_id: Identifier of the owning patient
        name: Name of the condition
        code: Medical code identifying the condition (e.g. ICD-10)
        description: Free text description
        date: Date on which the condition was diagnosed
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = Field(None, description="Internal id of the diagnosed condition")
    patient_id: int = Field(..., description="Internal id of the owning patient")
    name: str = Field(..., description="Name of the condition")
    code: str = Field(..., description="Medical code identifying the condition")
    description: str = Field("", description="Description of the condition")
    date: Optional[dt.date] = Field(None, description="Date the condition was diagnosed")


class Attachment(BaseModel):
    """A file attached to a patient (imaging, doctor's reports, ...).

    Parameters:
        id: Store-assigned identifier (None until inserted)
        patient_id: Identifier of the owning patient
        name: Attachment name
        description: Free text description
        type: Attachment type (e.g. "MRI", "report")
        data: Raw binary payload
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = Field(None, description="Internal id of the attachment")
    patient_id: int = Field(..., description="Internal id of the owning patient")
    name: str = Field(..., description="Name of the attachment")
    description: str = Field("", description="Description of the attachment")
    type: str = Field("", description="Type of the attachment")
    data: bytes = Field(b"", description="Binary payload of the attachment")


class Patient(BaseModel):
    """Patient demographics plus the dependents the patient owns.

    ``attachments`` and ``diagnosed_conditions`` are never stored on the
    patient record itself; the query engine fills them in when a patient
    is read back.

    Parameters:
        id: Store-assigned identifier (None until inserted)
        name: Patient name
        address: Postal address
        phone_number: Contact phone number
        external_identifier: Identifier issued outside the registry (e.g. SSN);
            unique across live patients
        date_of_birth: Date of birth
        diagnosed_conditions: Conditions owned by the patient
        attachments: Attachments owned by the patient
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = Field(None, description="Internal id of the patient")
    name: str = Field(..., description="Name of the patient")
    address: str = Field("", description="Address of the patient")
    phone_number: str = Field(..., description="Phone number of the patient")
    external_identifier: str = Field(..., description="External identifier (e.g. SSN)")
    date_of_birth: Optional[dt.date] = Field(None, description="Date of birth of the patient")
    diagnosed_conditions: list[DiagnosedCondition] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)


class User(BaseModel):
    """A user permitted to edit patient records.

    Users are immutable once created. ``password`` always holds a hash,
    never the plaintext.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    username: str
    password: str = Field(..., repr=False)


class PatientSearch(BaseModel):
    """Search criteria for patients.

    Every field is optional; an empty string means "not part of the search".
    Fields are combined with OR: a patient matches when any non-empty field
    matches it or one of its dependents.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    address: str = ""
    phone: str = ""
    external_identifier: str = ""
    diagnosed_condition_name: str = ""
    diagnosed_condition_code: str = ""
    attachment_name: str = ""
    attachment_type: str = ""

    def is_empty(self) -> bool:
        """Return True when no criterion is set."""
        return not any(getattr(self, field) for field in type(self).model_fields)
