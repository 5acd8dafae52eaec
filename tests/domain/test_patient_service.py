"""Unit tests for PatientService, AttachmentService and DiagnosedConditionService."""

import datetime as dt
import threading

import pytest

from patient_registry.adapters.storage import InMemoryRecordStore
from patient_registry.domain.models import PatientSearch
from patient_registry.domain.ports import (
    AlreadyExistsError,
    InvalidInputError,
    RecordKind,
    RecordNotFoundError,
)
from patient_registry.domain.services import (
    AttachmentService,
    DiagnosedConditionService,
    PatientService,
)

BIRTHDAY = dt.date(1980, 5, 17)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def patients(store):
    return PatientService(store)


@pytest.fixture
def attachments(store):
    return AttachmentService(store)


@pytest.fixture
def conditions(store):
    return DiagnosedConditionService(store)


def create_john(patients, external_identifier="123"):
    return patients.create_patient(
        name="John Smith",
        address="1 Main Street",
        phone_number="5555555555",
        date_of_birth=BIRTHDAY,
        external_identifier=external_identifier,
    )


class TestCreatePatient:
    """Test patient creation and its uniqueness rule."""

    def test_create_then_duplicate(self, patients, store):
        """Test the first patient gets id 1 and a duplicate identifier is rejected."""
        patient = create_john(patients)
        assert patient.id == 1

        with pytest.raises(AlreadyExistsError):
            create_john(patients)

        assert store.size(RecordKind.PATIENT) == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "  "},
            {"phone_number": ""},
            {"external_identifier": ""},
            {"date_of_birth": None},
        ],
    )
    def test_missing_required_field(self, patients, store, overrides):
        fields = {
            "name": "John Smith",
            "address": None,
            "phone_number": "5555555555",
            "date_of_birth": BIRTHDAY,
            "external_identifier": "123",
        }
        fields.update(overrides)

        with pytest.raises(InvalidInputError):
            patients.create_patient(**fields)

        assert store.size(RecordKind.PATIENT) == 0

    def test_address_is_optional(self, patients):
        patient = patients.create_patient("John Smith", None, "5555555555", BIRTHDAY, "123")
        assert patient.address == ""

    def test_concurrent_duplicate_identifiers(self, patients, store):
        """Test that racing creations with one identifier leave exactly one patient."""
        outcomes = []
        barrier = threading.Barrier(8)

        def create():
            barrier.wait()
            try:
                create_john(patients, external_identifier="race")
                outcomes.append("created")
            except AlreadyExistsError:
                outcomes.append("duplicate")

        threads = [threading.Thread(target=create) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert outcomes.count("created") == 1
        assert outcomes.count("duplicate") == 7
        assert store.size(RecordKind.PATIENT) == 1


class TestUpdatePatient:
    """Test patient updates."""

    def test_update_keeps_own_identifier(self, patients, attachments):
        patient = create_john(patients)
        attachments.add_attachment_to_patient(patient.id, "knee scan", None, "MRI", b"\x01")

        updated = patients.update_patient(patient.id, "John Q. Smith", "2 Side Street", "5555555555", BIRTHDAY, "123")

        assert updated.id == patient.id
        assert updated.name == "John Q. Smith"
        assert [a.name for a in updated.attachments] == ["knee scan"]

    def test_update_to_taken_identifier(self, patients):
        create_john(patients, "111")
        second = create_john(patients, "222")

        with pytest.raises(AlreadyExistsError):
            patients.update_patient(second.id, "Jane", None, "5555555555", BIRTHDAY, "111")

    def test_update_unknown_patient(self, patients):
        with pytest.raises(InvalidInputError, match="patient id not found"):
            patients.update_patient(42, "Jane", None, "5555555555", BIRTHDAY, "111")


class TestGetAndDeletePatient:
    """Test fetch and cascading delete."""

    def test_get_patient_with_dependents(self, patients, attachments, conditions):
        patient = create_john(patients)
        attachments.add_attachment_to_patient(patient.id, "knee scan", "left knee", "MRI", b"\x01\x02")
        conditions.add_diagnosed_condition_to_patient(patient.id, "Flu", "J11", None, dt.date(2023, 1, 1))

        fetched = patients.get_patient(patient.id)

        assert fetched.attachments[0].data == b"\x01\x02"
        assert fetched.diagnosed_conditions[0].code == "J11"

    def test_get_unknown_patient(self, patients):
        with pytest.raises(RecordNotFoundError):
            patients.get_patient(5)

    def test_delete_cascades(self, patients, attachments, conditions, store):
        patient = create_john(patients)
        attachment = attachments.add_attachment_to_patient(patient.id, "knee scan", None, "MRI", b"\x01")
        condition = conditions.add_diagnosed_condition_to_patient(
            patient.id, "Flu", "J11", None, dt.date(2023, 1, 1)
        )

        result = patients.delete_patient(patient.id)

        assert result.attachments_removed == 1
        assert result.conditions_removed == 1
        assert store.size(RecordKind.PATIENT) == 0
        assert store.size(RecordKind.ATTACHMENT) == 0
        assert store.size(RecordKind.DIAGNOSED_CONDITION) == 0

        assert patients.search_patients(PatientSearch(attachment_type="MRI")) == []
        assert patients.search_patients(PatientSearch(diagnosed_condition_name="Flu")) == []
        with pytest.raises(RecordNotFoundError):
            attachments.get_attachment(attachment.id)
        with pytest.raises(RecordNotFoundError):
            conditions.get_diagnosed_condition(condition.id)

    def test_identifier_is_free_after_delete(self, patients):
        patient = create_john(patients)
        patients.delete_patient(patient.id)

        assert create_john(patients).id == 2

    def test_delete_unknown_patient(self, patients):
        with pytest.raises(InvalidInputError):
            patients.delete_patient(3)

    def test_search_delegates_to_engine(self, patients):
        create_john(patients)

        assert [p.name for p in patients.search_patients(PatientSearch(external_identifier="123"))] == ["John Smith"]
        assert patients.search_patients(PatientSearch()) == []

    def test_validate_patient_id(self, patients):
        patient = create_john(patients)
        patients.validate_patient_id(patient.id)
        with pytest.raises(InvalidInputError):
            patients.validate_patient_id(patient.id + 1)


class TestAttachmentService:
    """Test attachment creation and deletion."""

    def test_attachment_requires_existing_patient(self, attachments, store):
        with pytest.raises(InvalidInputError, match="patient id not found"):
            attachments.add_attachment_to_patient(1, "knee scan", None, "MRI", b"\x01")

        assert store.size(RecordKind.ATTACHMENT) == 0

    def test_empty_data_rejected(self, patients, attachments):
        patient = create_john(patients)

        with pytest.raises(InvalidInputError, match="data was empty"):
            attachments.add_attachment_to_patient(patient.id, "knee scan", None, "MRI", b"")

    def test_get_and_delete(self, patients, attachments):
        patient = create_john(patients)
        attachment = attachments.add_attachment_to_patient(patient.id, "knee scan", None, None, b"\x01")

        assert attachments.get_attachment(attachment.id).patient_id == patient.id
        attachments.delete_attachment(attachment.id)
        with pytest.raises(RecordNotFoundError):
            attachments.get_attachment(attachment.id)
        with pytest.raises(RecordNotFoundError):
            attachments.delete_attachment(attachment.id)

    def test_delete_patient_attachments(self, patients, attachments):
        patient = create_john(patients)
        for _ in range(3):
            attachments.add_attachment_to_patient(patient.id, "knee scan", None, "MRI", b"\x01")

        assert attachments.delete_patient_attachments(patient.id) == 3
        assert attachments.delete_patient_attachments(patient.id) == 0


class TestDiagnosedConditionService:
    """Test condition creation and deletion."""

    def test_condition_requires_existing_patient(self, conditions):
        with pytest.raises(InvalidInputError, match="patient id not found"):
            conditions.add_diagnosed_condition_to_patient(9, "Flu", "J11", None, dt.date(2023, 1, 1))

    @pytest.mark.parametrize(
        "name,code,date",
        [("", "J11", dt.date(2023, 1, 1)), ("Flu", " ", dt.date(2023, 1, 1)), ("Flu", "J11", None)],
    )
    def test_missing_required_field(self, patients, conditions, name, code, date):
        patient = create_john(patients)

        with pytest.raises(InvalidInputError):
            conditions.add_diagnosed_condition_to_patient(patient.id, name, code, None, date)

    def test_get_and_delete(self, patients, conditions):
        patient = create_john(patients)
        condition = conditions.add_diagnosed_condition_to_patient(
            patient.id, "Flu", "J11", "seasonal", dt.date(2023, 1, 1)
        )

        assert conditions.get_diagnosed_condition(condition.id).description == "seasonal"
        conditions.delete_diagnosed_condition(condition.id)
        with pytest.raises(RecordNotFoundError):
            conditions.get_diagnosed_condition(condition.id)

    def test_delete_patient_diagnosed_conditions(self, patients, conditions):
        first = create_john(patients, "111")
        second = create_john(patients, "222")
        conditions.add_diagnosed_condition_to_patient(first.id, "Flu", "J11", None, dt.date(2023, 1, 1))
        conditions.add_diagnosed_condition_to_patient(second.id, "Flu", "J11", None, dt.date(2023, 1, 1))

        assert conditions.delete_patient_diagnosed_conditions(first.id) == 1
        assert conditions.get_diagnosed_condition(2).patient_id == second.id
