"""Domain Ports - Abstract Contracts and Error Taxonomy.

This module defines the Port interfaces (abstract contracts) that adapters must
implement, together with the closed set of domain errors the core may raise.
Following Hexagonal Architecture, the Domain Core defines what it needs, not
how it's provided.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - The in-memory store, the password hasher and the token codec implement these ports
    - Error kinds form a closed enumeration so the transport maps on a tag,
      not on exception classes or message contents
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

# Type variable for stored records
R = TypeVar('R', bound=BaseModel)


# ============================================================================
# Error Taxonomy
# ============================================================================

class ErrorKind(str, Enum):
    """The three kinds of failure the domain reports to its callers."""
    INVALID_INPUT = "invalid_input"
    ALREADY_EXISTS = "already_exists"
    UNAUTHORIZED = "unauthorized"


class DomainError(Exception):
    """Base exception for all classified domain failures.

    Every subclass pins ``kind`` to one ErrorKind member. Callers that need to
    branch on the failure should read ``kind`` rather than inspect the type.

    Attributes:
        kind: The ErrorKind tag of this failure
        message: Human-readable description, safe to return to API clients
    """

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(DomainError):
    """Raised for malformed or missing input, or a reference to an unknown record."""

    kind = ErrorKind.INVALID_INPUT


class AlreadyExistsError(DomainError):
    """Raised when a uniqueness constraint would be violated.

    Attributes:
        field: Name of the unique field that collided (e.g. "external_identifier")
    """

    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnauthorizedError(DomainError):
    """Raised when credentials or tokens are rejected."""

    kind = ErrorKind.UNAUTHORIZED


class RecordNotFoundError(InvalidInputError):
    """Raised when a record id is absent from the store.

    Attributes:
        record_kind: Collection that was searched
        record_id: The missing identifier
    """

    def __init__(self, record_kind: 'RecordKind', record_id: Any):
        super().__init__(f"{record_kind.label} not found")
        self.record_kind = record_kind
        self.record_id = record_id


class StorageError(Exception):
    """Unclassified storage failure.

    Deliberately not a DomainError: the transport reports it as a generic
    internal failure. The in-memory store never raises it; durable backends
    would (disk I/O, serialization).

    Attributes:
        operation: Store operation that failed
        details: Additional error context
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}


# ============================================================================
# Store Contracts
# ============================================================================

class RecordKind(str, Enum):
    """Record collections owned by the store."""
    PATIENT = "patient"
    ATTACHMENT = "attachment"
    DIAGNOSED_CONDITION = "diagnosed_condition"
    USER = "user"

    @property
    def label(self) -> str:
        """Human-readable name used in error messages."""
        return self.value.replace("_", " ")


class StoreSession(ABC):
    """Operations available inside one critical section of the store.

    A session is obtained from RecordStorePort.read_session() or
    write_session(). All calls made through the same session observe (and, for
    write sessions, produce) one consistent state of all collections.

    Sessions are not re-entrant. Code running inside a session must use the
    session it was given and never call back into the store's own methods.
    """

    @abstractmethod
    def insert(self, kind: RecordKind, record: R) -> int:
        """Assign the next id of ``kind`` to a copy of ``record`` and store it.

        Returns:
            int: The assigned id (starts at 1, strictly increasing, never reused)
        """
        pass

    @abstractmethod
    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Return a copy of the record.

        Raises:
            RecordNotFoundError: If the id is absent
        """
        pass

    @abstractmethod
    def update(self, kind: RecordKind, record_id: int, record: R) -> None:
        """Replace an existing record, keeping its id.

        Raises:
            RecordNotFoundError: If the id is absent
        """
        pass

    @abstractmethod
    def delete(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Remove a record and return it.

        Raises:
            RecordNotFoundError: If the id is absent
        """
        pass

    @abstractmethod
    def delete_where(self, kind: RecordKind, predicate: Callable[[Any], bool]) -> int:
        """Remove every record of ``kind`` matching ``predicate``.

        Returns:
            int: Number of records removed (zero is not an error)
        """
        pass

    @abstractmethod
    def scan(self, kind: RecordKind) -> list:
        """Return copies of all records of ``kind``. Order is unspecified."""
        pass

    @abstractmethod
    def count(self, kind: RecordKind, predicate: Optional[Callable[[Any], bool]] = None) -> int:
        """Count records of ``kind`` matching ``predicate`` (all when None)."""
        pass

    @abstractmethod
    def find_first(self, kind: RecordKind, predicate: Callable[[Any], bool]) -> Optional[BaseModel]:
        """Return a copy of the first record of ``kind`` matching ``predicate``, or None.

        Only the matching record is copied.
        """
        pass


class RecordStorePort(ABC):
    """Abstract contract for the entity store.

    Key Principles:
        - One store instance per process, created explicitly and passed to its users
        - Mutations are linearizable (exclusive lock over the whole store)
        - Reads run concurrently with each other but never with a mutation
        - Check-then-act sequences are composed inside a single write session

    Example Usage:
        ```python
        with store.write_session() as session:
            integrity.validate_unique_username(session, "alice1")
            session.insert(RecordKind.USER, user)
        ```
    """

    @abstractmethod
    def read_session(self) -> AbstractContextManager[StoreSession]:
        """Open a session under the shared lock."""
        pass

    @abstractmethod
    def write_session(self) -> AbstractContextManager[StoreSession]:
        """Open a session under the exclusive lock."""
        pass

    def insert(self, kind: RecordKind, record: R) -> int:
        """Insert a record in its own critical section."""
        with self.write_session() as session:
            return session.insert(kind, record)

    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Fetch a record in its own critical section."""
        with self.read_session() as session:
            return session.get(kind, record_id)

    def update(self, kind: RecordKind, record_id: int, record: R) -> None:
        """Replace a record in its own critical section."""
        with self.write_session() as session:
            session.update(kind, record_id, record)

    def delete(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Delete a record in its own critical section."""
        with self.write_session() as session:
            return session.delete(kind, record_id)

    def delete_where(self, kind: RecordKind, predicate: Callable[[Any], bool]) -> int:
        """Delete matching records in one critical section."""
        with self.write_session() as session:
            return session.delete_where(kind, predicate)

    def scan(self, kind: RecordKind) -> list:
        """Snapshot all records of a kind."""
        with self.read_session() as session:
            return session.scan(kind)

    def count(self, kind: RecordKind, predicate: Optional[Callable[[Any], bool]] = None) -> int:
        """Count matching records under the shared lock."""
        with self.read_session() as session:
            return session.count(kind, predicate)

    def size(self, kind: RecordKind) -> int:
        """Number of live records of a kind."""
        return self.count(kind)


# ============================================================================
# Security Collaborator Contracts
# ============================================================================

class PasswordHasherPort(ABC):
    """Abstract contract for one-way password hashing."""

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        """Return a salted digest of ``plaintext``."""
        pass

    @abstractmethod
    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True when ``plaintext`` matches ``digest``."""
        pass


class TokenCodecPort(ABC):
    """Abstract contract for issuing and checking bearer tokens."""

    @abstractmethod
    def encode(self, subject: str) -> str:
        """Issue a signed token for ``subject``."""
        pass

    @abstractmethod
    def decode(self, token: str) -> dict:
        """Verify ``token`` and return its claims.

        Raises:
            UnauthorizedError: If the token is malformed, forged or expired
        """
        pass
