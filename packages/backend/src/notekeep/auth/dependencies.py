"""FastAPI auth dependencies.

Learn: get_current_identity is used as Depends() by every protected
route. It is the single gate: nothing that touches notes runs until it
has produced an Identity.

Whatever went wrong (no header, bad signature, expired, deleted
account), the client gets the same 401. The reason is only logged.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth.errors import AuthenticationError
from notekeep.auth.resolver import SessionResolver
from notekeep.auth.tokens import TokenCodec, get_token_codec
from notekeep.db.engine import get_db
from notekeep.stores.credentials import Identity, SqlCredentialStore

logger = structlog.get_logger()


def get_session_resolver(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionResolver:
    return SessionResolver(SqlCredentialStore(db), codec)


def authentication_required() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(
    authorization: Optional[str] = Header(None),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Identity:
    """Resolve the request's bearer token to an Identity (401 otherwise)."""
    try:
        identity = await resolver.resolve(authorization)
    except AuthenticationError as e:
        logger.info("auth.rejected", reason=e.code)
        raise authentication_required()

    structlog.contextvars.bind_contextvars(identity_id=str(identity.id))
    return identity
