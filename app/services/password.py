"""Password hashing with bcrypt."""

import bcrypt

from app.config import get_settings
from app.errors import InvalidInputError

# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way salted hashing and verification of plaintext passwords."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a plaintext password. Raises InvalidInputError for empty or oversized input."""
        if not plaintext:
            raise InvalidInputError("Password must not be empty")
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"Password too long (max {MAX_PASSWORD_BYTES} bytes)")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        if not plaintext or not password_hash:
            return False
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False


_password_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """Get singleton password hasher configured from settings."""
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    return _password_hasher
