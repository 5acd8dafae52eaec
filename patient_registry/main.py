"""Composition root for the Patient Registry.

Wires the record store, the security collaborators and the domain services
together. There is no module level store: every call to ``build_container``
produces an independent registry, which the API receives through
``create_app``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from patient_registry.adapters.storage import InMemoryRecordStore
from patient_registry.domain.integrity import ReferentialIntegrity
from patient_registry.domain.ports import RecordStorePort
from patient_registry.domain.search import PatientQueryEngine
from patient_registry.domain.services import (
    AttachmentService,
    AuthService,
    DiagnosedConditionService,
    PatientService,
    UserService,
)
from patient_registry.infrastructure.security import BcryptPasswordHasher, JWTTokenCodec
from patient_registry.infrastructure.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    store: RecordStorePort
    patients: PatientService
    attachments: AttachmentService
    diagnosed_conditions: DiagnosedConditionService
    users: UserService
    auth: AuthService


def build_container(settings: Optional[Settings] = None) -> ServiceContainer:
    """Create the store and the services sharing it.

    Parameters:
        settings: Application settings; read from the environment when omitted

    Returns:
        ServiceContainer: Fully wired services over a fresh, empty store
    """
    settings = settings or Settings()
    auth_config = settings.auth

    store = InMemoryRecordStore()
    integrity = ReferentialIntegrity()
    password_hasher = BcryptPasswordHasher(rounds=auth_config.bcrypt_rounds)
    token_codec = JWTTokenCodec.from_config(auth_config)

    users = UserService(store, password_hasher, integrity)

    logger.debug(
        f"Built service container (issuer={auth_config.issuer}, "
        f"token lifetime={auth_config.token_expiration_minutes}m)"
    )
    return ServiceContainer(
        settings=settings,
        store=store,
        patients=PatientService(store, integrity, PatientQueryEngine()),
        attachments=AttachmentService(store, integrity),
        diagnosed_conditions=DiagnosedConditionService(store, integrity),
        users=users,
        auth=AuthService(users, password_hasher, token_codec),
    )
