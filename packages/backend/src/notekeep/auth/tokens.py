"""JWT access token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the identity id (`sub`), when it was issued (`iat`) and when it
stops being valid (`exp`), signed with the process-wide secret.

A token is valid iff the signature verifies AND now < exp. Verification
is a pure function of the token and the key. No database, no I/O.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt

from notekeep.auth.errors import (
    MalformedTokenError,
    TokenExpiredError,
    TokenSignatureError,
)
from notekeep.config import Settings, settings

TOKEN_TYPE = "access"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenCodec:
    """Signs and verifies access tokens with a single shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(minutes=60),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if lifetime <= timedelta(0):
            raise ValueError("Token lifetime must be positive")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenCodec":
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            lifetime=timedelta(minutes=config.access_token_expire_minutes),
        )

    def issue(self, identity_id: str, now: Optional[datetime] = None) -> IssuedToken:
        """Create a token for `identity_id`, valid for the configured lifetime."""
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        expires_at = issued_at + self.lifetime
        payload = {
            "sub": str(identity_id),
            "type": TOKEN_TYPE,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> str:
        """Verify a token and return the identity id it was issued for.

        Raises MalformedTokenError, TokenSignatureError or TokenExpiredError.
        Signature is checked before expiry, so a tampered expired token
        reports as a signature failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise TokenSignatureError(f"Token signature rejected: {e}")
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Token subject is missing")
        if payload.get("type") != TOKEN_TYPE:
            raise MalformedTokenError("Not an access token")
        return subject


@lru_cache
def get_token_codec() -> TokenCodec:
    """Process-wide codec, built from settings on first use."""
    return TokenCodec.from_settings(settings)
