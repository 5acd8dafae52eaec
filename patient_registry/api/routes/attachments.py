"""Attachment lookup and deletion endpoints."""

from fastapi import APIRouter, Response, status

from patient_registry.api.dependencies import AttachmentServiceDep
from patient_registry.api.schemas.patients import AttachmentResponse

router = APIRouter(prefix="/attachments", tags=["attachments"])


@router.get("/{id}", response_model=AttachmentResponse)
def get_attachment(id: int, attachments: AttachmentServiceDep) -> AttachmentResponse:
    """Fetch attachment metadata with its payload base64 encoded."""
    return AttachmentResponse.model_validate(attachments.get_attachment(id))


@router.get("/{id}/data", response_class=Response)
def get_attachment_data(id: int, attachments: AttachmentServiceDep) -> Response:
    """Download the raw attachment payload."""
    attachment = attachments.get_attachment(id)
    return Response(content=attachment.data, media_type="application/octet-stream")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_attachment(id: int, attachments: AttachmentServiceDep) -> Response:
    """Delete one attachment; its patient is untouched."""
    attachments.delete_attachment(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
