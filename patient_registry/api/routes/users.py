"""Public user registration and login endpoints."""

from fastapi import APIRouter, Response, status

from patient_registry.api.dependencies import AuthServiceDep, UserServiceDep
from patient_registry.api.schemas.users import LoginResponse, UserRequest

router = APIRouter(prefix="/public/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED, response_class=Response)
def create_user(body: UserRequest, users: UserServiceDep) -> Response:
    """Register a user allowed to edit patient records."""
    users.create_user(body.username, body.password)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/login", response_model=LoginResponse)
def login(body: UserRequest, auth: AuthServiceDep) -> LoginResponse:
    """Exchange credentials for a bearer token."""
    return LoginResponse(token=auth.login(body.username, body.password))
