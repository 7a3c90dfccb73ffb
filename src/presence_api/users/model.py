from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code). ``password_hash`` never
    leaves the service layer; use :meth:`to_public` for responses.
    """

    user_id: int
    full_name: str
    phone: str
    email: str
    password_hash: str
    verification_token: Optional[str] = None
    email_verified: bool = False

    def to_public(self) -> dict:
        return {
            "id": self.user_id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class ProfilePatch:
    """Partial profile update: only fields that are not None change."""

    email: Optional[str] = None
    phone: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in (("email", self.email), ("phone", self.phone)) if v is not None}

    def is_empty(self) -> bool:
        return not self.changes()
