from __future__ import annotations

from typing import Optional, Protocol

from .model import ProfilePatch, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note: the service layer depends on this interface, not on a concrete DB.
    Implementations raise ``ConflictError`` when a unique key (email, full name)
    is violated.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_identifier(self, identifier: str) -> Optional[User]:
        """Match on email first, then on full name."""

        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        phone: str,
        email: str,
        password_hash: str,
        verification_token: Optional[str],
        email_verified: bool = False,
    ) -> int:
        raise NotImplementedError

    def mark_email_verified(self, email: str) -> bool:
        raise NotImplementedError

    def update_profile(self, user_id: int, patch: ProfilePatch) -> Optional[User]:
        """Apply the patch and return the updated user (None if it does not exist)."""

        raise NotImplementedError

    def update_password(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError
