"""Password hashing utilities."""

import secrets
from functools import cached_property

import bcrypt

from cms_api.config import get_settings


class PasswordService:
    """Service for password hashing and verification."""

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds or get_settings().bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, hashed: str) -> bool:
        """Verify a password against a hash.

        Args:
            password: Plain text password
            hashed: Hashed password

        Returns:
            True if password matches
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, UnicodeDecodeError, UnicodeEncodeError):
            # Invalid hash format or encoding issues
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """Hash of a random password, checked when a login names an unknown account."""
        return self.hash_password(secrets.token_urlsafe(16))


_password_service: PasswordService | None = None


def get_password_service() -> PasswordService:
    """Get the shared password service instance."""
    global _password_service
    if _password_service is None:
        _password_service = PasswordService()
    return _password_service
