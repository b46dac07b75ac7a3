"""
Domain error taxonomy.

Services raise these; only the request layer (``horplus.main``) maps them to
HTTP status codes.  ``NotFound``, ``Conflict`` and ``InvalidInput`` are
expected outcomes of a request, ``StorageFailure`` is the only one that
signals a problem with the system itself.
"""
import enum


class DomainError(Exception):
    """Base class for every error the core hands back to a caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    def __init__(self, entity: str, id):
        super().__init__(f"{entity} {id} not found")
        self.entity = entity
        self.id = id


class ConflictKind(str, enum.Enum):
    ROOM_OCCUPIED = "room_occupied"
    DUPLICATE_USERNAME = "duplicate_username"
    DUPLICATE_ROOM_NUMBER = "duplicate_room_number"


_CONFLICT_MESSAGES = {
    ConflictKind.ROOM_OCCUPIED: "Room {subject} is already occupied",
    ConflictKind.DUPLICATE_USERNAME: "Username '{subject}' is already taken",
    ConflictKind.DUPLICATE_ROOM_NUMBER: "Room number {subject} already exists",
}


class Conflict(DomainError):
    def __init__(self, kind: ConflictKind, subject: str):
        super().__init__(_CONFLICT_MESSAGES[kind].format(subject=subject))
        self.kind = kind
        self.subject = subject


class InvalidInput(DomainError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class StorageFailure(DomainError):
    """Transient failure talking to the relational store."""

    def __init__(self, cause: BaseException):
        super().__init__("Storage temporarily unavailable")
        self.cause = cause


class AuthenticationFailed(DomainError):
    def __init__(self, message: str = "Incorrect username or password"):
        super().__init__(message)


class AccountLocked(DomainError):
    def __init__(self):
        super().__init__(
            "Account temporarily locked due to too many failed attempts. Try again in 15 minutes."
        )
