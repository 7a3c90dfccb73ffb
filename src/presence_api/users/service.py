from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import (
    DEFAULT_SESSION_DAYS,
    DEFAULT_VERIFICATION_HOURS,
    MIN_PASSWORD_LENGTH,
    TOKEN_PURPOSE_SESSION,
    TOKEN_PURPOSE_VERIFY_EMAIL,
)
from ..core.exceptions import ConflictError, InvalidCredentialsError, InvalidTokenError, NotFoundError, ValidationError
from ..mail.mailer import Mailer
from ..security.identity import Identity
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenCodec
from .model import ProfilePatch, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    user_id: int
    email: str
    email_sent: bool


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class AuthService:
    """Use cases: registration, email verification, login and account self-service.

    Session tokens are not revocable: a token stays valid for its whole
    lifetime even after a password change.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenCodec,
        mailer: Mailer,
        *,
        session_ttl: timedelta = timedelta(days=DEFAULT_SESSION_DAYS),
        verification_ttl: timedelta = timedelta(hours=DEFAULT_VERIFICATION_HOURS),
    ):
        self._users = users
        self._hasher = hasher
        self._tokens = tokens
        self._mailer = mailer
        self._session_ttl = session_ttl
        self._verification_ttl = verification_ttl

    def register(
        self,
        *,
        full_name: Optional[str],
        phone: Optional[str],
        email: Optional[str],
        password: Optional[str],
        password_confirmation: Optional[str],
    ) -> Registration:
        if not all((full_name, phone, email, password, password_confirmation)):
            raise ValidationError("All fields are required")
        if password != password_confirmation:
            raise ValidationError("Password and password confirmation do not match")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        full_name = require_non_empty(full_name, "Full name")
        phone = require_non_empty(phone, "Phone")
        email = require_email(email)

        if self._users.get_by_email(email):
            raise ConflictError("Email already registered")

        verification_token = self._tokens.sign(
            {"email": email},
            self._verification_ttl,
            purpose=TOKEN_PURPOSE_VERIFY_EMAIL,
        )
        user_id = self._users.create_user(
            full_name=full_name,
            phone=phone,
            email=email,
            password_hash=self._hasher.hash(password),
            verification_token=verification_token,
            email_verified=False,
        )
        logger.info("Registered user %s (%s)", user_id, email)

        # A mail failure must not undo the registration.
        try:
            email_sent = self._mailer.send_verification(email=email, full_name=full_name, token=verification_token)
        except Exception:
            logger.exception("Mailer raised while sending verification to %s", email)
            email_sent = False

        return Registration(user_id=user_id, email=email, email_sent=email_sent)

    def verify_email(self, token: Optional[str]) -> None:
        claims = self._tokens.verify(token, purpose=TOKEN_PURPOSE_VERIFY_EMAIL)
        email = claims.get("email")
        if not email:
            raise InvalidTokenError("Invalid token")

        # Re-verifying with a still-valid token is not an error.
        self._users.mark_email_verified(email)
        logger.info("Email verified for %s", email)

    def login(self, identifier: Optional[str], password: Optional[str]) -> LoginResult:
        if not identifier or not password:
            raise ValidationError("Full name/email and password are required")

        user = self._users.get_by_identifier(identifier.strip())
        if not user:
            raise NotFoundError("Account not found")
        if not self._hasher.verify(user.password_hash, password):
            raise InvalidCredentialsError("Incorrect password")

        identity = Identity(user_id=user.user_id, email=user.email, full_name=user.full_name)
        token = self._tokens.sign(identity.to_claims(), self._session_ttl, purpose=TOKEN_PURPOSE_SESSION)
        return LoginResult(token=token, user=user)

    def identify(self, token: Optional[str]) -> Identity:
        """Resolve a bearer token into the caller's identity (no DB lookup)."""
        return Identity.from_claims(self._tokens.verify(token, purpose=TOKEN_PURPOSE_SESSION))

    def get_current_user(self, identity: Identity) -> User:
        user = self._users.get_by_id(identity.user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, identity: Identity, patch: ProfilePatch) -> User:
        if patch.is_empty():
            raise ValidationError("Nothing to update")

        if patch.email is not None:
            email = require_email(patch.email)
            owner = self._users.get_by_email(email)
            if owner and owner.user_id != identity.user_id:
                raise ConflictError("Email already registered")
            patch = ProfilePatch(email=email, phone=patch.phone)
        if patch.phone is not None:
            patch = ProfilePatch(email=patch.email, phone=require_non_empty(patch.phone, "Phone"))

        user = self._users.update_profile(identity.user_id, patch)
        if not user:
            raise NotFoundError("User not found")
        return user

    def change_password(self, identity: Identity, old_password: Optional[str], new_password: Optional[str]) -> None:
        if not old_password or not new_password:
            raise ValidationError("Old and new password are required")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        user = self._users.get_by_id(identity.user_id)
        if not user:
            raise NotFoundError("User not found")
        if not self._hasher.verify(user.password_hash, old_password):
            raise InvalidCredentialsError("Old password is incorrect")

        self._users.update_password(user.user_id, self._hasher.hash(new_password))
        logger.info("Password changed for user %s", user.user_id)
