from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


class PasswordHasher:
    """One-way salted hashing (Werkzeug scrypt/pbkdf2 format)."""

    def hash(self, password: str) -> str:
        return generate_password_hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        if not password_hash or password is None:
            return False
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False
