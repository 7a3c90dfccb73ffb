"""Signed, expiring tokens (JWT via python-jose).

Two kinds of token are issued: session tokens proving identity, and email
verification tokens. Each carries a ``purpose`` claim and :meth:`TokenCodec.verify`
rejects a token of the wrong purpose, so a verification link can never be used
as a bearer token.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..common.datetime_utils import now_utc
from ..core.constants import TOKEN_PURPOSE_SESSION
from ..core.exceptions import InvalidTokenError

RESERVED_CLAIMS = ("iat", "exp", "purpose")


class TokenCodec:
    def __init__(self, secret: str, *, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def sign(
        self,
        claims: Mapping[str, Any],
        ttl: timedelta,
        *,
        purpose: str = TOKEN_PURPOSE_SESSION,
        now: Optional[datetime] = None,
    ) -> str:
        issued_at = now or now_utc()
        payload = {k: v for k, v in claims.items() if k not in RESERVED_CLAIMS}
        payload["purpose"] = purpose
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + ttl).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str], *, purpose: str = TOKEN_PURPOSE_SESSION) -> dict:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token not found")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except JWTError:
            raise InvalidTokenError("Invalid token")

        if claims.get("purpose") != purpose:
            raise InvalidTokenError("Invalid token")
        return claims
