"""Unit tests for UserService and AuthService."""

import threading
from unittest.mock import Mock, patch

import pytest

from patient_registry.adapters.storage import InMemoryRecordStore
from patient_registry.adapters.storage.memory_adapter import _InMemorySession
from patient_registry.domain.ports import (
    AlreadyExistsError,
    InvalidInputError,
    PasswordHasherPort,
    RecordKind,
    TokenCodecPort,
    UnauthorizedError,
)
from patient_registry.domain.services import AuthService, UserService


class FakeHasher(PasswordHasherPort):
    """Reversible stand-in so unit tests don't pay for bcrypt."""

    def hash(self, plaintext: str) -> str:
        return f"hashed:{plaintext}"

    def verify(self, plaintext: str, digest: str) -> bool:
        return digest == f"hashed:{plaintext}"


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def hasher():
    return FakeHasher()


@pytest.fixture
def users(store, hasher):
    return UserService(store, hasher)


@pytest.fixture
def token_codec():
    codec = Mock(spec=TokenCodecPort)
    codec.encode.return_value = "signed-token"
    codec.decode.return_value = {"sub": "doctor1"}
    return codec


@pytest.fixture
def auth(users, hasher, token_codec):
    return AuthService(users, hasher, token_codec)


class TestUserService:
    """Test user registration."""

    def test_create_user_stores_hash(self, users, store):
        user = users.create_user("doctor1", "secret1")

        assert user.id == 1
        assert user.password == "hashed:secret1"
        assert store.get(RecordKind.USER, 1).password == "hashed:secret1"
        assert "secret1" not in repr(user)

    def test_duplicate_username(self, users, store):
        users.create_user("doctor1", "secret1")

        with pytest.raises(AlreadyExistsError):
            users.create_user("doctor1", "another")

        assert store.size(RecordKind.USER) == 1

    @pytest.mark.parametrize("username,password", [("short", "secret1"), ("doctor1", "12345"), ("", "")])
    def test_credentials_too_short(self, users, store, username, password):
        with pytest.raises(InvalidInputError):
            users.create_user(username, password)

        assert store.size(RecordKind.USER) == 0

    def test_concurrent_registration_of_same_username(self, users, store):
        """Test that exactly one of many racing registrations succeeds."""
        successes = []
        failures = []
        barrier = threading.Barrier(10)

        def register():
            barrier.wait()
            try:
                users.create_user("doctor1", "secret1")
                successes.append(1)
            except AlreadyExistsError:
                failures.append(1)

        threads = [threading.Thread(target=register) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(successes) == 1
        assert len(failures) == 9
        assert store.size(RecordKind.USER) == 1

    def test_password_lookup_does_not_scan_users(self, users):
        """Test that the login lookup stops at the matching user instead of copying the table."""
        users.create_user("doctor1", "secret1")
        users.create_user("doctor2", "secret2")

        with patch.object(_InMemorySession, "scan", side_effect=AssertionError("full scan")):
            assert users.get_password_by_username("doctor2") == "hashed:secret2"

    def test_get_password_by_username(self, users):
        users.create_user("doctor1", "secret1")

        assert users.get_password_by_username("doctor1") == "hashed:secret1"
        with pytest.raises(InvalidInputError, match="invalid username"):
            users.get_password_by_username("nobody1")


class TestAuthService:
    """Test login and token verification."""

    def test_login_returns_token(self, users, auth, token_codec):
        users.create_user("doctor1", "secret1")

        assert auth.login("doctor1", "secret1") == "signed-token"
        token_codec.encode.assert_called_once_with("doctor1")

    def test_login_wrong_password(self, users, auth, token_codec):
        users.create_user("doctor1", "secret1")

        with pytest.raises(InvalidInputError, match="password does not match"):
            auth.login("doctor1", "wrong-password")
        token_codec.encode.assert_not_called()

    def test_login_unknown_user(self, auth):
        with pytest.raises(InvalidInputError):
            auth.login("nobody1", "secret1")

    def test_verify_token(self, auth, token_codec):
        assert auth.verify_token("signed-token") == {"sub": "doctor1"}
        token_codec.decode.assert_called_once_with("signed-token")

    def test_verify_missing_token(self, auth, token_codec):
        with pytest.raises(UnauthorizedError):
            auth.verify_token("")
        token_codec.decode.assert_not_called()

    def test_verify_propagates_codec_rejection(self, auth, token_codec):
        token_codec.decode.side_effect = UnauthorizedError("token is invalid")

        with pytest.raises(UnauthorizedError, match="token is invalid"):
            auth.verify_token("garbage")
