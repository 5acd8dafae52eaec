"""Password hashing and bearer token adapters.

Implements PasswordHasherPort with passlib (bcrypt) and TokenCodecPort with
python-jose (HS256 JWT).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from patient_registry.domain.ports import PasswordHasherPort, TokenCodecPort, UnauthorizedError
from patient_registry.infrastructure.config_manager import AuthConfig

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


class BcryptPasswordHasher(PasswordHasherPort):
    """bcrypt password hashing through a passlib CryptContext."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__ident="2b",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return self._context.verify(plaintext, digest)
        except ValueError:
            # digest is not a recognised hash
            logger.warning("Stored password digest could not be parsed")
            return False


class JWTTokenCodec(TokenCodecPort):
    """Signed JWTs carrying ``sub``, ``iat``, ``exp`` and ``iss`` claims.

    Parameters:
        secret: HMAC signing key
        issuer: Expected and emitted ``iss`` claim
        expiration: Token lifetime
    """

    def __init__(self, secret: str, issuer: str, expiration: timedelta):
        self._secret = secret
        self.issuer = issuer
        self.expiration = expiration

    @classmethod
    def from_config(cls, config: AuthConfig) -> 'JWTTokenCodec':
        return cls(
            secret=config.token_secret.get_secret_value(),
            issuer=config.issuer,
            expiration=timedelta(minutes=config.token_expiration_minutes),
        )

    def encode(self, subject: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self.expiration,
            "iss": self.issuer,
        }
        return jwt.encode(claims, self._secret, algorithm=TOKEN_ALGORITHM)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self._secret, algorithms=[TOKEN_ALGORITHM], issuer=self.issuer)
        except ExpiredSignatureError:
            raise UnauthorizedError("token has expired")
        except JWTError as e:
            logger.debug(f"Rejected token: {e}")
            raise UnauthorizedError("token is invalid")
