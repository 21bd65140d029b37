"""Account service — registration and password login.

Learn: Service layer separates business logic from HTTP routing.
Registration hashes the password before it ever reaches the store;
login returns a freshly issued access token. Unknown login and wrong
password fail identically.
"""

from functools import lru_cache

import structlog

from notekeep.auth.passwords import hash_password, verify_password
from notekeep.auth.tokens import IssuedToken, TokenCodec
from notekeep.stores.credentials import Identity, SqlCredentialStore

logger = structlog.get_logger()


@lru_cache
def _dummy_hash() -> str:
    """Hash checked against when the login matches no account."""
    return hash_password("notekeep-no-such-account")


class InvalidCredentialsError(Exception):
    """Raised when a login/password pair does not match an account."""


class AccountService:
    """Business logic for accounts."""

    def __init__(self, credentials: SqlCredentialStore, codec: TokenCodec):
        self.credentials = credentials
        self.codec = codec

    async def register(self, email: str, name: str, password: str) -> Identity:
        identity = await self.credentials.create(
            login=email,
            display_name=name,
            password_hash=hash_password(password),
        )
        logger.info("account.registered", identity_id=str(identity.id))
        return identity

    async def login(self, email: str, password: str) -> tuple[Identity, IssuedToken]:
        identity = await self.credentials.find_by_login(email)
        if identity is None:
            # Unknown logins pay the same bcrypt cost as wrong passwords
            verify_password(password, _dummy_hash())
        if identity is None or not verify_password(password, identity.password_hash):
            logger.info("account.login_failed")
            raise InvalidCredentialsError("Invalid credentials")

        issued = self.codec.issue(str(identity.id))
        logger.info("account.logged_in", identity_id=str(identity.id))
        return identity, issued
