"""Patient Query/Join Engine.

Answers multi-criteria patient searches and assembles each matching patient
with its owned attachments and diagnosed conditions.

Matching rules:
    - Criteria are OR'd: a patient matches when ANY non-empty criterion
      matches the patient itself or ANY of its conditions or attachments
    - Equality is exact and case-sensitive
    - A search with every criterion empty matches nothing
    - A matched patient always carries its complete dependent lists, not
      only the dependents that matched

Each search makes one pass over conditions, attachments and patients
(O(P + A + C)). Indexes are rebuilt per call and never persisted.
"""

import logging
from collections import defaultdict

from patient_registry.domain.models import Attachment, DiagnosedCondition, Patient, PatientSearch
from patient_registry.domain.ports import RecordKind, StoreSession

logger = logging.getLogger(__name__)


def _condition_matches(condition: DiagnosedCondition, criteria: PatientSearch) -> bool:
    return (
        (criteria.diagnosed_condition_code != "" and condition.code == criteria.diagnosed_condition_code)
        or (criteria.diagnosed_condition_name != "" and condition.name == criteria.diagnosed_condition_name)
    )


def _attachment_matches(attachment: Attachment, criteria: PatientSearch) -> bool:
    return (
        (criteria.attachment_name != "" and attachment.name == criteria.attachment_name)
        or (criteria.attachment_type != "" and attachment.type == criteria.attachment_type)
    )


def _patient_matches(patient: Patient, criteria: PatientSearch) -> bool:
    return (
        (criteria.name != "" and patient.name == criteria.name)
        or (criteria.phone != "" and patient.phone_number == criteria.phone)
        or (criteria.address != "" and patient.address == criteria.address)
        or (criteria.external_identifier != "" and patient.external_identifier == criteria.external_identifier)
    )


class PatientQueryEngine:
    """Search and join over the patient, attachment and condition collections.

    The engine is stateless; every method works on the session it is given,
    so callers decide which lock the read runs under.
    """

    def search(self, session: StoreSession, criteria: PatientSearch) -> list[Patient]:
        """Return all patients matching ``criteria``, dependents included.

        Parameters:
            session: Open store session (shared lock is sufficient)
            criteria: Search criteria

        Returns:
            list[Patient]: Matching patients in unspecified order
        """
        if criteria.is_empty():
            logger.debug("Empty search criteria; returning no patients")
            return []

        matched_ids: set[int] = set()
        conditions_by_patient: dict[int, list[DiagnosedCondition]] = defaultdict(list)
        attachments_by_patient: dict[int, list[Attachment]] = defaultdict(list)

        for condition in session.scan(RecordKind.DIAGNOSED_CONDITION):
            conditions_by_patient[condition.patient_id].append(condition)
            if _condition_matches(condition, criteria):
                matched_ids.add(condition.patient_id)

        for attachment in session.scan(RecordKind.ATTACHMENT):
            attachments_by_patient[attachment.patient_id].append(attachment)
            if _attachment_matches(attachment, criteria):
                matched_ids.add(attachment.patient_id)

        patients: list[Patient] = []
        for patient in session.scan(RecordKind.PATIENT):
            if patient.id in matched_ids or _patient_matches(patient, criteria):
                patient.attachments = attachments_by_patient.get(patient.id, [])
                patient.diagnosed_conditions = conditions_by_patient.get(patient.id, [])
                patients.append(patient)

        logger.debug(f"Patient search matched {len(patients)} patient(s)")
        return patients

    def assemble(self, session: StoreSession, patient: Patient) -> Patient:
        """Attach the full dependent lists of a single patient."""
        patient.attachments = [
            attachment for attachment in session.scan(RecordKind.ATTACHMENT)
            if attachment.patient_id == patient.id
        ]
        patient.diagnosed_conditions = [
            condition for condition in session.scan(RecordKind.DIAGNOSED_CONDITION)
            if condition.patient_id == patient.id
        ]
        return patient
