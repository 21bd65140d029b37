"""Authentication failure taxonomy.

Every failure has a stable `code` so it can be logged and asserted on.
At the HTTP boundary they all collapse into the same 401; callers are
never told which check failed.
"""


class AuthenticationError(Exception):
    """Base class for all authentication failures."""

    code = "authentication_failed"


class MissingCredentialError(AuthenticationError):
    """No Authorization header, or it is not of the `Bearer <token>` shape."""

    code = "missing_credential"


class TokenError(AuthenticationError):
    """Raised when a presented token cannot be verified."""

    code = "invalid_token"


class MalformedTokenError(TokenError):
    code = "malformed"


class TokenSignatureError(TokenError):
    code = "signature_invalid"


class TokenExpiredError(TokenError):
    code = "expired"


class UnknownIdentityError(AuthenticationError):
    """Token is valid but no account exists for its subject."""

    code = "unknown_identity"
