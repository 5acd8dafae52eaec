"""Patient domain service.

Validates patient input, runs the integrity checks and mutates the store,
composing each check with its mutation in a single write session.
"""

import datetime as dt
import logging
from typing import Optional

from patient_registry.domain.integrity import CascadeResult, ReferentialIntegrity
from patient_registry.domain.models import Patient, PatientSearch
from patient_registry.domain.ports import InvalidInputError, RecordKind, RecordStorePort
from patient_registry.domain.search import PatientQueryEngine

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    return value


class PatientService:
    """Create, update, delete, fetch and search patients.

    Parameters:
        store: The process's record store
        integrity: Referential integrity orchestrator
        query_engine: Patient search/join engine
    """

    def __init__(
        self,
        store: RecordStorePort,
        integrity: Optional[ReferentialIntegrity] = None,
        query_engine: Optional[PatientQueryEngine] = None,
    ):
        self.store = store
        self.integrity = integrity or ReferentialIntegrity()
        self.query_engine = query_engine or PatientQueryEngine()

    def _build_patient(
        self,
        name: str,
        address: Optional[str],
        phone_number: str,
        date_of_birth: Optional[dt.date],
        external_identifier: str,
    ) -> Patient:
        try:
            _require_text(name, "name")
            _require_text(phone_number, "phoneNumber")
            _require_text(external_identifier, "externalIdentifier")
            if date_of_birth is None:
                raise InvalidInputError("dateOfBirth is required")
        except InvalidInputError as e:
            logger.warning(f"Rejected patient input: {e.message}")
            raise

        return Patient(
            name=name,
            address=address or "",
            phone_number=phone_number,
            external_identifier=external_identifier,
            date_of_birth=date_of_birth,
        )

    def create_patient(
        self,
        name: str,
        address: Optional[str],
        phone_number: str,
        date_of_birth: Optional[dt.date],
        external_identifier: str,
    ) -> Patient:
        """Create a patient.

        Raises:
            InvalidInputError: If a required field is missing
            AlreadyExistsError: If ``external_identifier`` is already in use
        """
        patient = self._build_patient(name, address, phone_number, date_of_birth, external_identifier)

        with self.store.write_session() as session:
            self.integrity.validate_unique_external_identifier(session, external_identifier)
            patient.id = session.insert(RecordKind.PATIENT, patient)

        logger.info(f"Created patient {patient.id}")
        return patient

    def update_patient(
        self,
        patient_id: int,
        name: str,
        address: Optional[str],
        phone_number: str,
        date_of_birth: Optional[dt.date],
        external_identifier: str,
    ) -> Patient:
        """Replace the demographics of an existing patient.

        Attachments and conditions are untouched. The returned patient
        carries its full dependent lists.

        Raises:
            InvalidInputError: If a field is missing or the patient does not exist
            AlreadyExistsError: If another patient holds ``external_identifier``
        """
        patient = self._build_patient(name, address, phone_number, date_of_birth, external_identifier)

        with self.store.write_session() as session:
            self.integrity.validate_patient_id(session, patient_id)
            self.integrity.validate_unique_external_identifier(
                session, external_identifier, exclude_id=patient_id
            )
            session.update(RecordKind.PATIENT, patient_id, patient)
            patient.id = patient_id
            self.query_engine.assemble(session, patient)

        logger.info(f"Updated patient {patient_id}")
        return patient

    def delete_patient(self, patient_id: int) -> CascadeResult:
        """Delete a patient and everything it owns.

        Raises:
            InvalidInputError: If the patient does not exist
        """
        with self.store.write_session() as session:
            result = self.integrity.cascade_delete_patient(session, patient_id)

        logger.info(
            f"Deleted patient {patient_id} with {result.attachments_removed} attachment(s) "
            f"and {result.conditions_removed} diagnosed condition(s)"
        )
        return result

    def get_patient(self, patient_id: int) -> Patient:
        """Fetch one patient with its attachments and conditions.

        Raises:
            RecordNotFoundError: If the patient does not exist
        """
        with self.store.read_session() as session:
            patient = session.get(RecordKind.PATIENT, patient_id)
            return self.query_engine.assemble(session, patient)

    def search_patients(self, criteria: PatientSearch) -> list[Patient]:
        """Search patients; see PatientQueryEngine for the matching rules."""
        with self.store.read_session() as session:
            return self.query_engine.search(session, criteria)

    def validate_patient_id(self, patient_id: int) -> None:
        """Fail with InvalidInputError unless the patient exists."""
        with self.store.read_session() as session:
            self.integrity.validate_patient_id(session, patient_id)
