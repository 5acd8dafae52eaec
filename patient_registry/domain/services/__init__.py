"""Domain services: validating facades over the record store."""

from patient_registry.domain.services.attachments import AttachmentService
from patient_registry.domain.services.auth import AuthService
from patient_registry.domain.services.diagnosed_conditions import DiagnosedConditionService
from patient_registry.domain.services.patients import PatientService
from patient_registry.domain.services.users import MIN_CREDENTIAL_LENGTH, UserService

__all__ = [
    "AttachmentService",
    "AuthService",
    "DiagnosedConditionService",
    "PatientService",
    "UserService",
    "MIN_CREDENTIAL_LENGTH",
]
