"""Custom exception hierarchy for the karma tracker.

All application-specific exceptions inherit from KarmaAppError,
which carries an error code for command error payload mapping.

Layering: storage errors are wrapped by service errors, which are wrapped
by API errors. Only validation errors expose their message and offending
value across the command boundary; everything else is serialized as an
opaque ``external`` failure.
"""

from __future__ import annotations

from typing import Any


class KarmaAppError(Exception):
    """Base exception for all karma tracker errors."""

    kind = "external"

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code

    def to_payload(self) -> dict[str, Any]:
        """Serializable form of the error, safe to hand to the GUI shell."""
        return {"kind": self.kind, "code": self.code}


# ---------------------------------------------------------------------------
# Domain validation
# ---------------------------------------------------------------------------


class DomainValidationError(KarmaAppError):
    """Input failed a domain rule before reaching the store."""

    kind = "validation"

    def __init__(
        self, message: str, *, code: str = "VALIDATION_ERROR", value: Any = None
    ) -> None:
        super().__init__(message, code=code)
        self.value = value

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["message"] = str(self)
        payload["value"] = self.value
        return payload


class InvalidKarmaType(DomainValidationError):
    """Free-text purpose label is not a supported karma type."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Failed to convert karma type: {value}", code="INVALID_KARMA_TYPE", value=value
        )


class InvalidNumericKarmaType(DomainValidationError):
    """Numeric purpose code is outside the known range."""

    def __init__(self, value: int) -> None:
        super().__init__(
            f"Could not convert {value} into a Karma Type",
            code="INVALID_NUMERIC_KARMA_TYPE",
            value=value,
        )


class UnsupportedStatus(DomainValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"Failed to convert {value} into a State object",
            code="UNSUPPORTED_STATUS",
            value=value,
        )


class InvalidKarmaName(DomainValidationError):
    def __init__(self, value: str) -> None:
        super().__init__("Karma name must not be empty", code="INVALID_KARMA_NAME", value=value)


class KarmaAlreadyPersisted(DomainValidationError):
    """A point that already carries a storage id was offered for insertion."""

    def __init__(self, name: str, karma_id: int) -> None:
        super().__init__(
            f"Karma point '{name}' already persisted with id {karma_id}",
            code="KARMA_ALREADY_PERSISTED",
            value=karma_id,
        )


class UsernameError(DomainValidationError):
    """Username failed validation. The offending username is not echoed back."""


class UsernameSizeError(UsernameError):
    def __init__(self, min_size: int) -> None:
        super().__init__(f"Username size should be at least {min_size}", code="USERNAME_SIZE")


class UsernameLowercaseError(UsernameError):
    def __init__(self) -> None:
        super().__init__(
            "Username should start with lowercase letter", code="USERNAME_NOT_LOWERCASE"
        )


class PasswordError(DomainValidationError):
    """Password failed validation. Plaintext never travels in the error."""


class PasswordSizeError(PasswordError):
    def __init__(self, min_size: int) -> None:
        super().__init__(f"Password size should be at least {min_size}", code="PASSWORD_SIZE")


class PasswordNoDigitError(PasswordError):
    def __init__(self) -> None:
        super().__init__("Password should contain at least 1 digit", code="PASSWORD_NO_DIGIT")


class PasswordNoSpecialCharError(PasswordError):
    def __init__(self) -> None:
        super().__init__(
            "Password should contain at least 1 special char", code="PASSWORD_NO_SPECIAL_CHAR"
        )


class PasswordNoUppercaseError(PasswordError):
    def __init__(self) -> None:
        super().__init__(
            "Password should contain at least 1 uppercase letter", code="PASSWORD_NO_UPPERCASE"
        )


class InvalidParamsError(DomainValidationError):
    """Command arguments do not match the command's parameter schema."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_PARAMS")


class UnknownCommandError(DomainValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown command: {value}", code="UNKNOWN_COMMAND", value=value)


class PasswordHashError(KarmaAppError):
    """The hashing backend failed. Serialized as an external failure."""

    def __init__(self, message: str = "Failed to hash the password") -> None:
        super().__init__(message, code="PASSWORD_HASH")


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class StorageError(KarmaAppError):
    """Errors in the backing store or the repositories over it."""

    def __init__(self, message: str, *, code: str = "STORAGE_ERROR") -> None:
        super().__init__(message, code=code)


class OpenConnectionError(StorageError):
    """The backing store could not be created, opened, or bootstrapped."""

    def __init__(self, message: str = "Failed to open the connection to the db") -> None:
        super().__init__(message, code="OPEN_CONNECTION")


class RepositoryError(StorageError):
    """A repository query failed at the driver level."""

    def __init__(self, message: str, *, code: str = "REPOSITORY_ERROR") -> None:
        super().__init__(message, code=code)


class NotFoundError(RepositoryError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="NOT_FOUND")


class AmbiguousResultError(RepositoryError):
    """A query expected to match one row matched several."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="AMBIGUOUS_RESULT")


class ConstraintViolationError(RepositoryError):
    """Unique or foreign key constraint rejected a write."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONSTRAINT_VIOLATION")


class DecodeError(RepositoryError):
    """A stored row no longer satisfies the domain rules."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="DECODE_ERROR")


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class ServiceError(KarmaAppError):
    def __init__(self, message: str, *, code: str = "SERVICE_ERROR") -> None:
        super().__init__(message, code=code)


class KarmaServiceError(ServiceError):
    """Storage failure seen from the karma service."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Storage failed with: {message}", code="STORAGE")


class AccountsServiceError(ServiceError):
    """Storage failure seen from the accounts service."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Storage failed with: {message}", code="STORAGE")


# ---------------------------------------------------------------------------
# API / command boundary
# ---------------------------------------------------------------------------


class ApiError(KarmaAppError):
    def __init__(self, message: str, *, code: str = "API_ERROR") -> None:
        super().__init__(message, code=code)


class ApiControllerError(ApiError):
    """The shared controller could not be constructed."""

    def __init__(
        self, message: str = "Failed to initialise and connect to the database"
    ) -> None:
        super().__init__(message, code="DATABASE_CONNECTION_FAILURE")


class KarmaCreationFailed(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to create karma point: {message}", code="KARMA_CREATION_FAILED")


class KarmaLookupFailed(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to fetch karma point: {message}", code="KARMA_LOOKUP_FAILED")


class KarmaStatusFailed(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Karma status operation failed: {message}", code="KARMA_STATUS_FAILED")
