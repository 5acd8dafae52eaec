"""Health check endpoint."""

import logging

from fastapi import APIRouter

from patient_registry.api.dependencies import ContainerDep
from patient_registry.api.schemas.health import HealthResponse, RecordCounts
from patient_registry.domain.ports import RecordKind
from patient_registry.infrastructure.settings import APP_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(container: ContainerDep) -> HealthResponse:
    """Report liveness and the size of each collection."""
    store = container.store
    with store.read_session() as session:
        records = RecordCounts(
            patients=session.count(RecordKind.PATIENT),
            attachments=session.count(RecordKind.ATTACHMENT),
            diagnosed_conditions=session.count(RecordKind.DIAGNOSED_CONDITION),
            users=session.count(RecordKind.USER),
        )
    return HealthResponse(status="healthy", version=APP_VERSION, records=records)
