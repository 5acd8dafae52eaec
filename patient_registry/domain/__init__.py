"""Domain layer for the Patient Registry.

This module contains the records, ports, query engine and integrity rules.
All domain code is pure Python with no external dependencies beyond Pydantic.
"""

from .models import (
    Attachment,
    DiagnosedCondition,
    Patient,
    PatientSearch,
    User,
)

__all__ = [
    "Attachment",
    "DiagnosedCondition",
    "Patient",
    "PatientSearch",
    "User",
]
