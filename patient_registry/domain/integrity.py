"""Referential Integrity Orchestrator.

Enforces the invariants that span collections or must hold before a
mutation: patient references, unique external identifiers, unique usernames,
and the ownership cascade on patient deletion.

Every check takes the caller's StoreSession. Running the check and the
mutation that depends on it inside the same write session is what makes
them atomic with respect to other writers; the orchestrator never opens a
session of its own.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from patient_registry.domain.ports import (
    AlreadyExistsError,
    InvalidInputError,
    RecordKind,
    StoreSession,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeResult:
    """Outcome of a cascading patient deletion.

    Attributes:
        patient_id: The deleted patient
        attachments_removed: Number of attachments removed with it
        conditions_removed: Number of diagnosed conditions removed with it
    """
    patient_id: int
    attachments_removed: int
    conditions_removed: int


class ReferentialIntegrity:
    """Invariant checks and the patient ownership cascade."""

    def validate_patient_id(self, session: StoreSession, patient_id: int) -> None:
        """Fail unless a patient with ``patient_id`` exists.

        Raises:
            InvalidInputError: If no such patient exists
        """
        if session.count(RecordKind.PATIENT, lambda patient: patient.id == patient_id) < 1:
            logger.warning(f"Rejected reference to unknown patient id {patient_id}")
            raise InvalidInputError("patient id not found")

    def validate_unique_external_identifier(
        self,
        session: StoreSession,
        external_identifier: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        """Fail if another live patient already holds ``external_identifier``.

        Parameters:
            session: Open write session the subsequent insert/update will use
            external_identifier: Value to check
            exclude_id: Patient allowed to hold the value (the one being updated)

        Raises:
            AlreadyExistsError: If the value is taken
        """
        taken = session.count(
            RecordKind.PATIENT,
            lambda patient: patient.external_identifier == external_identifier and patient.id != exclude_id,
        )
        if taken > 0:
            logger.warning("Rejected duplicate patient external identifier")
            raise AlreadyExistsError(
                "patient with matching externalIdentifier already exists",
                field="external_identifier",
            )

    def validate_unique_username(self, session: StoreSession, username: str) -> None:
        """Fail if ``username`` is already registered.

        Raises:
            AlreadyExistsError: If the username is taken
        """
        if session.count(RecordKind.USER, lambda user: user.username == username) > 0:
            logger.warning(f"Rejected duplicate username '{username}'")
            raise AlreadyExistsError("username is already taken", field="username")

    def cascade_delete_patient(self, session: StoreSession, patient_id: int) -> CascadeResult:
        """Delete a patient together with every attachment and condition it owns.

        Must be called with a write session; the three deletions then happen
        in one critical section and no reader sees a partial cascade.

        Raises:
            InvalidInputError: If the patient does not exist
        """
        self.validate_patient_id(session, patient_id)

        attachments_removed = session.delete_where(
            RecordKind.ATTACHMENT, lambda attachment: attachment.patient_id == patient_id
        )
        conditions_removed = session.delete_where(
            RecordKind.DIAGNOSED_CONDITION, lambda condition: condition.patient_id == patient_id
        )
        session.delete(RecordKind.PATIENT, patient_id)

        return CascadeResult(
            patient_id=patient_id,
            attachments_removed=attachments_removed,
            conditions_removed=conditions_removed,
        )
