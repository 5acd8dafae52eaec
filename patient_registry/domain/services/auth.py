"""Authentication service.

Exchanges credentials for bearer tokens and verifies presented tokens. Used
by the HTTP layer only; the record services never consult it.
"""

import logging

from patient_registry.domain.ports import (
    InvalidInputError,
    PasswordHasherPort,
    TokenCodecPort,
    UnauthorizedError,
)
from patient_registry.domain.services.users import UserService

logger = logging.getLogger(__name__)


class AuthService:
    """Login and token verification.

    Parameters:
        user_service: Source of stored password hashes
        password_hasher: Compares plaintext against stored hashes
        token_codec: Issues and checks signed tokens
    """

    def __init__(
        self,
        user_service: UserService,
        password_hasher: PasswordHasherPort,
        token_codec: TokenCodecPort,
    ):
        self.user_service = user_service
        self.password_hasher = password_hasher
        self.token_codec = token_codec

    def login(self, username: str, password: str) -> str:
        """Return a signed token for valid credentials.

        Raises:
            InvalidInputError: If the user is unknown or the password does not match
        """
        stored_password = self.user_service.get_password_by_username(username)

        if not self.password_hasher.verify(password, stored_password):
            logger.warning(f"Password mismatch for user '{username}'")
            raise InvalidInputError("password does not match")

        logger.info(f"Issued token for user '{username}'")
        return self.token_codec.encode(username)

    def verify_token(self, token: str) -> dict:
        """Return the claims of a valid token.

        Raises:
            UnauthorizedError: If the token is missing, invalid or expired
        """
        if not token:
            raise UnauthorizedError("token is missing")
        return self.token_codec.decode(token)
