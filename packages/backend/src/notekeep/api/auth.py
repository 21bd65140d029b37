"""Auth API — registration, login, token validation.

Learn: Routes for the account lifecycle:
- POST /auth/register → create a new account
- POST /auth/login → email/password → access token
- POST /auth/validate-token → is this token still good, and whose is it?
- GET /auth/me → current account info (requires a token)
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth.dependencies import get_current_identity, get_session_resolver
from notekeep.auth.errors import AuthenticationError
from notekeep.auth.resolver import SessionResolver
from notekeep.auth.tokens import TokenCodec, get_token_codec
from notekeep.db.engine import get_db
from notekeep.schemas.account import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    TokenValidation,
    UserRead,
    ValidateTokenRequest,
)
from notekeep.services.account_service import AccountService, InvalidCredentialsError
from notekeep.stores.credentials import Identity, LoginTakenError, SqlCredentialStore

router = APIRouter(prefix="/auth")


def _account_svc(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> AccountService:
    return AccountService(SqlCredentialStore(db), codec)


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, svc: AccountService = Depends(_account_svc)):
    """Create a new account."""
    try:
        identity = await svc.register(body.email, body.name, body.password)
    except LoginTakenError:
        raise HTTPException(status_code=409, detail="Email already registered")
    return UserRead.from_identity(identity)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AccountService = Depends(_account_svc)):
    """Login with email and password → access token."""
    try:
        identity, issued = await svc.login(body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(
        access_token=issued.token,
        expires_at=issued.expires_at,
        user=UserRead.from_identity(identity),
    )


@router.post("/validate-token", response_model=TokenValidation)
async def validate_token(
    body: ValidateTokenRequest,
    resolver: SessionResolver = Depends(get_session_resolver),
):
    """Check a token without using it. Always 200; `valid` carries the answer."""
    try:
        identity = await resolver.resolve(f"Bearer {body.token}")
    except AuthenticationError:
        return TokenValidation(valid=False)
    return TokenValidation(valid=True, user=UserRead.from_identity(identity))


@router.get("/me", response_model=UserRead)
async def get_me(identity: Identity = Depends(get_current_identity)):
    """Get the current authenticated account."""
    return UserRead.from_identity(identity)
