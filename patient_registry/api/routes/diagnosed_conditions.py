"""Diagnosed condition lookup and deletion endpoints."""

from fastapi import APIRouter, Response, status

from patient_registry.api.dependencies import DiagnosedConditionServiceDep
from patient_registry.api.schemas.patients import DiagnosedConditionResponse

router = APIRouter(prefix="/diagnosedConditions", tags=["diagnosed conditions"])


@router.get("/{id}", response_model=DiagnosedConditionResponse)
def get_diagnosed_condition(id: int, conditions: DiagnosedConditionServiceDep) -> DiagnosedConditionResponse:
    """Fetch one diagnosed condition."""
    return DiagnosedConditionResponse.model_validate(conditions.get_diagnosed_condition(id))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_diagnosed_condition(id: int, conditions: DiagnosedConditionServiceDep) -> Response:
    """Delete one diagnosed condition; its patient is untouched."""
    conditions.delete_diagnosed_condition(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
