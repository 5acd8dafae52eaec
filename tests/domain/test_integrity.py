"""Unit tests for referential integrity checks and the patient cascade."""

import datetime as dt

import pytest

from patient_registry.adapters.storage import InMemoryRecordStore
from patient_registry.domain.integrity import CascadeResult, ReferentialIntegrity
from patient_registry.domain.models import Attachment, DiagnosedCondition, Patient, User
from patient_registry.domain.ports import AlreadyExistsError, InvalidInputError, RecordKind


@pytest.fixture
def integrity():
    return ReferentialIntegrity()


@pytest.fixture
def store():
    store = InMemoryRecordStore()
    for external_identifier in ("111", "222"):
        store.insert(
            RecordKind.PATIENT,
            Patient(
                name="John Smith",
                phone_number="5555555555",
                external_identifier=external_identifier,
                date_of_birth=dt.date(1980, 1, 1),
            ),
        )
    for patient_id in (1, 1, 2):
        store.insert(RecordKind.ATTACHMENT, Attachment(patient_id=patient_id, name="scan1", data=b"x"))
        store.insert(
            RecordKind.DIAGNOSED_CONDITION,
            DiagnosedCondition(patient_id=patient_id, name="Flu", code="J11", date=dt.date(2023, 1, 1)),
        )
    store.insert(RecordKind.USER, User(username="doctor1", password="hash"))
    return store


class TestValidation:
    """Test the individual invariant checks."""

    def test_validate_existing_patient(self, store, integrity):
        with store.read_session() as session:
            integrity.validate_patient_id(session, 1)

    def test_validate_missing_patient(self, store, integrity):
        with store.read_session() as session:
            with pytest.raises(InvalidInputError, match="patient id not found"):
                integrity.validate_patient_id(session, 99)

    def test_duplicate_external_identifier(self, store, integrity):
        with store.read_session() as session:
            with pytest.raises(AlreadyExistsError) as exc_info:
                integrity.validate_unique_external_identifier(session, "111")

        assert exc_info.value.field == "external_identifier"

    def test_external_identifier_may_stay_on_same_patient(self, store, integrity):
        with store.read_session() as session:
            integrity.validate_unique_external_identifier(session, "111", exclude_id=1)
            with pytest.raises(AlreadyExistsError):
                integrity.validate_unique_external_identifier(session, "111", exclude_id=2)

    def test_duplicate_username(self, store, integrity):
        with store.read_session() as session:
            integrity.validate_unique_username(session, "doctor2")
            with pytest.raises(AlreadyExistsError, match="username is already taken"):
                integrity.validate_unique_username(session, "doctor1")


class TestCascadeDelete:
    """Test cascade_delete_patient."""

    def test_cascade_removes_owned_records_only(self, store, integrity):
        with store.write_session() as session:
            result = integrity.cascade_delete_patient(session, 1)

        assert result == CascadeResult(patient_id=1, attachments_removed=2, conditions_removed=2)
        assert store.count(RecordKind.PATIENT) == 1
        assert store.count(RecordKind.ATTACHMENT, lambda a: a.patient_id == 1) == 0
        assert store.count(RecordKind.DIAGNOSED_CONDITION, lambda c: c.patient_id == 1) == 0
        assert store.count(RecordKind.ATTACHMENT) == 1
        assert store.count(RecordKind.DIAGNOSED_CONDITION) == 1

    def test_cascade_unknown_patient_changes_nothing(self, store, integrity):
        with store.write_session() as session:
            with pytest.raises(InvalidInputError):
                integrity.cascade_delete_patient(session, 99)

        assert store.count(RecordKind.ATTACHMENT) == 3
        assert store.count(RecordKind.DIAGNOSED_CONDITION) == 3
