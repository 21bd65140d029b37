"""Session resolution — raw Authorization header to Identity.

Learn: Three checks, in order, each with its own failure type:
1. The header has the `Bearer <token>` shape     -> MissingCredentialError
2. The token verifies (signature, then expiry)   -> TokenError subclasses
3. The account it names still exists             -> UnknownIdentityError

Step 3 is the only I/O, and it is a read.
"""

from typing import Optional

from notekeep.auth.errors import MissingCredentialError, UnknownIdentityError
from notekeep.auth.tokens import TokenCodec
from notekeep.stores.credentials import CredentialStore, Identity


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an `Authorization: Bearer <token>` header value."""
    if not authorization or not authorization.strip():
        raise MissingCredentialError("Authorization header is missing")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise MissingCredentialError("Authorization header is not a Bearer credential")
    return parts[1]


class SessionResolver:
    """Turns a presented credential into the request's Identity."""

    def __init__(self, credentials: CredentialStore, codec: TokenCodec):
        self.credentials = credentials
        self.codec = codec

    async def resolve(self, authorization: Optional[str]) -> Identity:
        token = extract_bearer_token(authorization)
        identity_id = self.codec.verify(token)

        identity = await self.credentials.find_by_id(identity_id)
        if identity is None:
            raise UnknownIdentityError("No account matches the token subject")
        return identity
