"""User domain service."""

import logging
from typing import Optional

from patient_registry.domain.integrity import ReferentialIntegrity
from patient_registry.domain.models import User
from patient_registry.domain.ports import (
    InvalidInputError,
    PasswordHasherPort,
    RecordKind,
    RecordStorePort,
)

logger = logging.getLogger(__name__)

MIN_CREDENTIAL_LENGTH = 6


class UserService:
    """Register users and look up their stored password hashes.

    Passwords are hashed before the store's write lock is taken; the
    username check and the insert then run in one write session, so two
    concurrent registrations of the same name cannot both succeed.
    """

    def __init__(
        self,
        store: RecordStorePort,
        password_hasher: PasswordHasherPort,
        integrity: Optional[ReferentialIntegrity] = None,
    ):
        self.store = store
        self.password_hasher = password_hasher
        self.integrity = integrity or ReferentialIntegrity()

    def create_user(self, username: str, password: str) -> User:
        """Register a new user.

        Raises:
            InvalidInputError: If username or password is shorter than
                MIN_CREDENTIAL_LENGTH
            AlreadyExistsError: If the username is taken
        """
        if not username or len(username) < MIN_CREDENTIAL_LENGTH:
            logger.warning("Rejected user registration: username too short")
            raise InvalidInputError(f"username must be at least {MIN_CREDENTIAL_LENGTH} characters")
        if not password or len(password) < MIN_CREDENTIAL_LENGTH:
            logger.warning(f"Rejected user registration for '{username}': password too short")
            raise InvalidInputError(f"password must be at least {MIN_CREDENTIAL_LENGTH} characters")

        hashed_password = self.password_hasher.hash(password)

        with self.store.write_session() as session:
            self.integrity.validate_unique_username(session, username)
            user_id = session.insert(RecordKind.USER, User(username=username, password=hashed_password))

        logger.info(f"Created user '{username}'")
        return User(id=user_id, username=username, password=hashed_password)

    def get_password_by_username(self, username: str) -> str:
        """Return the stored password hash of ``username``.

        Raises:
            InvalidInputError: If no such user exists
        """
        with self.store.read_session() as session:
            user = session.find_first(RecordKind.USER, lambda candidate: candidate.username == username)

        if user is None or not user.password:
            raise InvalidInputError("invalid username")
        return user.password
