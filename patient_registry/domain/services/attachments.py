"""Attachment domain service."""

import logging
from typing import Optional

from patient_registry.domain.integrity import ReferentialIntegrity
from patient_registry.domain.models import Attachment
from patient_registry.domain.ports import InvalidInputError, RecordKind, RecordStorePort

logger = logging.getLogger(__name__)


class AttachmentService:
    """Attach files to patients and remove them again.

    The owning patient is checked inside the same write session as the
    insert, so an attachment can never be created for a patient that is
    being deleted concurrently.
    """

    def __init__(self, store: RecordStorePort, integrity: Optional[ReferentialIntegrity] = None):
        self.store = store
        self.integrity = integrity or ReferentialIntegrity()

    def add_attachment_to_patient(
        self,
        patient_id: int,
        name: str,
        description: Optional[str],
        type: Optional[str],
        data: Optional[bytes],
    ) -> Attachment:
        """Store a new attachment for an existing patient.

        Raises:
            InvalidInputError: If ``data`` is empty or the patient does not exist
        """
        if not data:
            logger.warning(f"Rejected empty attachment for patient {patient_id}")
            raise InvalidInputError("data was empty")

        attachment = Attachment(
            patient_id=patient_id,
            name=name,
            description=description or "",
            type=type or "",
            data=data,
        )

        with self.store.write_session() as session:
            self.integrity.validate_patient_id(session, patient_id)
            attachment.id = session.insert(RecordKind.ATTACHMENT, attachment)

        logger.info(f"Added attachment {attachment.id} ({len(data)} bytes) to patient {patient_id}")
        return attachment

    def get_attachment(self, attachment_id: int) -> Attachment:
        """Raises RecordNotFoundError if absent."""
        return self.store.get(RecordKind.ATTACHMENT, attachment_id)

    def delete_attachment(self, attachment_id: int) -> None:
        """Delete one attachment. Raises RecordNotFoundError if absent."""
        self.store.delete(RecordKind.ATTACHMENT, attachment_id)
        logger.info(f"Deleted attachment {attachment_id}")

    def delete_patient_attachments(self, patient_id: int) -> int:
        """Delete every attachment of a patient; returns how many were removed."""
        removed = self.store.delete_where(
            RecordKind.ATTACHMENT, lambda attachment: attachment.patient_id == patient_id
        )
        logger.info(f"Deleted {removed} attachment(s) of patient {patient_id}")
        return removed
