"""Tests for the bcrypt password hasher and the JWT token codec."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from patient_registry.domain.ports import UnauthorizedError
from patient_registry.infrastructure.config_manager import AuthConfig
from patient_registry.infrastructure.security import BcryptPasswordHasher, JWTTokenCodec

SECRET = "test-secret"


@pytest.fixture(scope="module")
def hasher():
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def codec():
    return JWTTokenCodec(secret=SECRET, issuer="localhost", expiration=timedelta(minutes=10))


class TestBcryptPasswordHasher:
    """Test password hashing."""

    def test_hash_is_not_plaintext(self, hasher):
        digest = hasher.hash("secret1")

        assert digest != "secret1"
        assert digest.startswith("$2b$04$")

    def test_verify(self, hasher):
        digest = hasher.hash("secret1")

        assert hasher.verify("secret1", digest)
        assert not hasher.verify("secret2", digest)

    def test_hashes_are_salted(self, hasher):
        assert hasher.hash("secret1") != hasher.hash("secret1")

    def test_unparseable_digest_does_not_verify(self, hasher):
        assert not hasher.verify("secret1", "not-a-bcrypt-hash")


class TestJWTTokenCodec:
    """Test token issuing and verification."""

    def test_round_trip_claims(self, codec):
        claims = codec.decode(codec.encode("doctor1"))

        assert claims["sub"] == "doctor1"
        assert claims["iss"] == "localhost"
        assert claims["exp"] - claims["iat"] == 600

    def test_expired_token(self, codec):
        issued = datetime.now(timezone.utc) - timedelta(minutes=11)
        token = codec.encode("doctor1", now=issued)

        with pytest.raises(UnauthorizedError, match="expired"):
            codec.decode(token)

    def test_garbage_token(self, codec):
        with pytest.raises(UnauthorizedError):
            codec.decode("not.a.token")

    def test_wrong_secret(self, codec):
        other = JWTTokenCodec(secret="other-secret", issuer="localhost", expiration=timedelta(minutes=10))

        with pytest.raises(UnauthorizedError):
            codec.decode(other.encode("doctor1"))

    def test_wrong_issuer(self, codec):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "doctor1", "iat": now, "exp": now + timedelta(minutes=5), "iss": "elsewhere"},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(UnauthorizedError):
            codec.decode(token)

    def test_from_config(self):
        config = AuthConfig(token_secret=SECRET, issuer="registry", token_expiration_minutes=3)
        codec = JWTTokenCodec.from_config(config)

        assert codec.issuer == "registry"
        assert codec.expiration == timedelta(minutes=3)
        assert codec.decode(codec.encode("doctor1"))["iss"] == "registry"
