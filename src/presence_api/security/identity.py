from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..core.exceptions import InvalidTokenError


@dataclass(frozen=True)
class Identity:
    """Caller identity carried by a session token."""

    user_id: int
    email: str
    full_name: str

    def to_claims(self) -> dict:
        return {"user_id": self.user_id, "email": self.email, "full_name": self.full_name}

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Identity":
        try:
            return cls(
                user_id=int(claims["user_id"]),
                email=str(claims["email"]),
                full_name=str(claims["full_name"]),
            )
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError("Invalid token")
