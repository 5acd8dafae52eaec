"""Dependency injection for the registry API.

Services come from the ServiceContainer the app was created with, so each
app instance (and each test) works on its own store.
"""

from typing import Annotated

from fastapi import Depends, Request

from patient_registry.domain.services import (
    AttachmentService,
    AuthService,
    DiagnosedConditionService,
    PatientService,
    UserService,
)
from patient_registry.main import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Return the ServiceContainer the app was created with."""
    return request.app.state.container


def get_patient_service(request: Request) -> PatientService:
    """Resolve the PatientService of the current app."""
    return get_container(request).patients


def get_attachment_service(request: Request) -> AttachmentService:
    """Resolve the AttachmentService of the current app."""
    return get_container(request).attachments


def get_diagnosed_condition_service(request: Request) -> DiagnosedConditionService:
    """Resolve the DiagnosedConditionService of the current app."""
    return get_container(request).diagnosed_conditions


def get_user_service(request: Request) -> UserService:
    """Resolve the UserService of the current app."""
    return get_container(request).users


def get_auth_service(request: Request) -> AuthService:
    """Resolve the AuthService of the current app."""
    return get_container(request).auth


# Type aliases for dependency injection
ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
AttachmentServiceDep = Annotated[AttachmentService, Depends(get_attachment_service)]
DiagnosedConditionServiceDep = Annotated[DiagnosedConditionService, Depends(get_diagnosed_condition_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
