"""Diagnosed condition domain service."""

import datetime as dt
import logging
from typing import Optional

from patient_registry.domain.integrity import ReferentialIntegrity
from patient_registry.domain.models import DiagnosedCondition
from patient_registry.domain.ports import InvalidInputError, RecordKind, RecordStorePort

logger = logging.getLogger(__name__)


class DiagnosedConditionService:
    """Record and remove diagnosed conditions of patients."""

    def __init__(self, store: RecordStorePort, integrity: Optional[ReferentialIntegrity] = None):
        self.store = store
        self.integrity = integrity or ReferentialIntegrity()

    def add_diagnosed_condition_to_patient(
        self,
        patient_id: int,
        name: str,
        code: str,
        description: Optional[str],
        date: Optional[dt.date],
    ) -> DiagnosedCondition:
        """Record a condition for an existing patient.

        Raises:
            InvalidInputError: If name, code or date is missing, or the patient
                does not exist
        """
        for value, field_name in ((name, "name"), (code, "code")):
            if value is None or not value.strip():
                logger.warning(f"Rejected diagnosed condition without {field_name}")
                raise InvalidInputError(f"{field_name} is required")
        if date is None:
            logger.warning("Rejected diagnosed condition without date")
            raise InvalidInputError("date is required")

        condition = DiagnosedCondition(
            patient_id=patient_id,
            name=name,
            code=code,
            description=description or "",
            date=date,
        )

        with self.store.write_session() as session:
            self.integrity.validate_patient_id(session, patient_id)
            condition.id = session.insert(RecordKind.DIAGNOSED_CONDITION, condition)

        logger.info(f"Added diagnosed condition {condition.id} to patient {patient_id}")
        return condition

    def get_diagnosed_condition(self, condition_id: int) -> DiagnosedCondition:
        """Raises RecordNotFoundError if absent."""
        return self.store.get(RecordKind.DIAGNOSED_CONDITION, condition_id)

    def delete_diagnosed_condition(self, condition_id: int) -> None:
        """Delete one condition. Raises RecordNotFoundError if absent."""
        self.store.delete(RecordKind.DIAGNOSED_CONDITION, condition_id)
        logger.info(f"Deleted diagnosed condition {condition_id}")

    def delete_patient_diagnosed_conditions(self, patient_id: int) -> int:
        """Delete every condition of a patient; returns how many were removed."""
        removed = self.store.delete_where(
            RecordKind.DIAGNOSED_CONDITION, lambda condition: condition.patient_id == patient_id
        )
        logger.info(f"Deleted {removed} diagnosed condition(s) of patient {patient_id}")
        return removed
