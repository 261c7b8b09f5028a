"""User accounts: validated usernames and bcrypt-hashed passwords."""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt

from src.infra.errors import (
    PasswordHashError,
    PasswordNoDigitError,
    PasswordNoSpecialCharError,
    PasswordNoUppercaseError,
    PasswordSizeError,
    UsernameLowercaseError,
    UsernameSizeError,
)

MIN_USERNAME_SIZE = 6
MIN_PASSWORD_SIZE = 8
SPECIAL_CHARACTERS = "!@#$%^&*().,:; "
BCRYPT_COST = 12


@dataclass(frozen=True)
class Username:
    value: str

    @classmethod
    def new(cls, username: str) -> Username:
        if len(username) < MIN_USERNAME_SIZE:
            raise UsernameSizeError(MIN_USERNAME_SIZE)
        if not username[0].islower():
            raise UsernameLowercaseError()
        return cls(username)


@dataclass(frozen=True)
class Password:
    """A bcrypt hash. Never holds the plaintext."""

    hashed: str

    def __repr__(self) -> str:
        return "Password(hashed='***')"

    @classmethod
    def new(cls, password: str) -> Password:
        """Validate and hash a plaintext password."""
        if len(password) < MIN_PASSWORD_SIZE:
            raise PasswordSizeError(MIN_PASSWORD_SIZE)
        if not any(ch.isdigit() for ch in password):
            raise PasswordNoDigitError()
        if not any(ch in SPECIAL_CHARACTERS for ch in password):
            raise PasswordNoSpecialCharError()
        if not any(ch.isupper() for ch in password):
            raise PasswordNoUppercaseError()

        try:
            hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_COST))
        except ValueError as e:
            # bcrypt rejects inputs longer than 72 bytes
            raise PasswordHashError(f"Failed to hash the password: {e}") from e
        return cls(hashed.decode())

    @classmethod
    def from_hashed(cls, hashed: str) -> Password:
        """Wrap a hash loaded from storage without re-hashing it."""
        return cls(hashed)

    def verify(self, password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), self.hashed.encode())
        except ValueError:
            return False


@dataclass(frozen=True)
class User:
    username: Username
    hashed_password: Password

    @classmethod
    def new(cls, username: str, password: str) -> User:
        return cls(username=Username.new(username), hashed_password=Password.new(password))

    @classmethod
    def from_storage(cls, username: str, hashed_password: str) -> User:
        """Rehydrate a stored user. The username is re-validated against current rules."""
        return cls(
            username=Username.new(username),
            hashed_password=Password.from_hashed(hashed_password),
        )
