"""Patient endpoints, including creation of a patient's dependents."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile, status

from patient_registry.api.dependencies import (
    AttachmentServiceDep,
    DiagnosedConditionServiceDep,
    PatientServiceDep,
)
from patient_registry.api.schemas.patients import (
    AttachmentResponse,
    DiagnosedConditionRequest,
    DiagnosedConditionResponse,
    PatientRequest,
    PatientResponse,
)
from patient_registry.domain.models import PatientSearch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])


def search_criteria(
    name: str = "",
    address: str = "",
    phone: str = "",
    external_identifier: Annotated[str, Query(alias="externalIdentifier")] = "",
    diagnosed_condition_name: Annotated[str, Query(alias="diagnosedConditionName")] = "",
    diagnosed_condition_code: Annotated[str, Query(alias="diagnosedConditionCode")] = "",
    attachment_name: Annotated[str, Query(alias="attachmentName")] = "",
    attachment_type: Annotated[str, Query(alias="attachmentType")] = "",
) -> PatientSearch:
    """Collect the camelCase query parameters into PatientSearch criteria."""
    return PatientSearch(
        name=name,
        address=address,
        phone=phone,
        external_identifier=external_identifier,
        diagnosed_condition_name=diagnosed_condition_name,
        diagnosed_condition_code=diagnosed_condition_code,
        attachment_name=attachment_name,
        attachment_type=attachment_type,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PatientResponse)
def create_patient(body: PatientRequest, patients: PatientServiceDep) -> PatientResponse:
    """Create a patient.

    Returns 409 when another patient already holds ``externalIdentifier``.
    """
    patient = patients.create_patient(
        name=body.name,
        address=body.address,
        phone_number=body.phone_number,
        date_of_birth=body.date_of_birth,
        external_identifier=body.external_identifier,
    )
    return PatientResponse.model_validate(patient)


@router.get("", response_model=list[PatientResponse])
def search_patients(
    criteria: Annotated[PatientSearch, Depends(search_criteria)],
    patients: PatientServiceDep,
) -> list[PatientResponse]:
    """Search patients.

    A patient is returned when any supplied parameter matches it exactly,
    either on its own fields or on one of its conditions or attachments.
    Without parameters the result is empty.
    """
    return [PatientResponse.model_validate(p) for p in patients.search_patients(criteria)]


@router.get("/{id}", response_model=PatientResponse)
def get_patient(id: int, patients: PatientServiceDep) -> PatientResponse:
    """Fetch a patient with its attachments and diagnosed conditions."""
    return PatientResponse.model_validate(patients.get_patient(id))


@router.put("/{id}", response_model=PatientResponse)
def update_patient(id: int, body: PatientRequest, patients: PatientServiceDep) -> PatientResponse:
    """Replace a patient's demographics; dependents are left untouched."""
    patient = patients.update_patient(
        id,
        name=body.name,
        address=body.address,
        phone_number=body.phone_number,
        date_of_birth=body.date_of_birth,
        external_identifier=body.external_identifier,
    )
    return PatientResponse.model_validate(patient)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_patient(id: int, patients: PatientServiceDep) -> Response:
    """Delete a patient together with its attachments and conditions."""
    patients.delete_patient(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{patientId}/attachments",
    status_code=status.HTTP_201_CREATED,
    response_model=AttachmentResponse,
)
def create_attachment(
    patient_id: Annotated[int, Path(alias="patientId")],
    name: Annotated[str, Form(min_length=5)],
    data: Annotated[UploadFile, File(description="Attachment payload")],
    attachments: AttachmentServiceDep,
    type: Annotated[str, Form(min_length=1)],
    description: Annotated[Optional[str], Form()] = None,
) -> AttachmentResponse:
    """Upload an attachment for a patient (multipart/form-data).

    Parameters:
        patient_id: Owning patient
        name: Attachment name (at least 5 characters)
        data: Uploaded payload; must not be empty
        type: Attachment type such as "MRI" (at least 1 character)
        description: Optional free text

    Returns:
        AttachmentResponse: The stored attachment, payload base64 encoded
    """
    payload = data.file.read()
    attachment = attachments.add_attachment_to_patient(patient_id, name, description, type, payload)
    return AttachmentResponse.model_validate(attachment)


@router.post(
    "/{patientId}/diagnosedConditions",
    status_code=status.HTTP_201_CREATED,
    response_model=DiagnosedConditionResponse,
)
def create_diagnosed_condition(
    patient_id: Annotated[int, Path(alias="patientId")],
    body: DiagnosedConditionRequest,
    conditions: DiagnosedConditionServiceDep,
) -> DiagnosedConditionResponse:
    """Record a diagnosed condition for an existing patient."""
    condition = conditions.add_diagnosed_condition_to_patient(
        patient_id, body.name, body.code, body.description, body.date
    )
    return DiagnosedConditionResponse.model_validate(condition)
