"""
Spacetime API — Bearer Token Authentication
=============================================

What:  Verifies the JWT sent in `Authorization: Bearer <token>` and exposes
       the caller's subject (`sub` claim) to route handlers.
Why:   Every memory route acts on behalf of an authenticated user.
How:   FastAPI's HTTPBearer extracts the credential; PyJWT checks signature,
       expiry and (when configured) audience and issuer.
Who:   `get_current_user_id` is a router-level dependency of routes/memories.py.

Tokens are normally issued by the identity provider sharing JWT_SECRET.
`create_access_token` signs tokens with the same settings for tests and the
`spacetime-token` developer command.
"""

import argparse
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from spacetime.config import settings
from spacetime.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches our own handler (401, not 403)
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    subject: str,
    expires_in: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Sign a token for `subject`.

    Args:
        subject: Value of the `sub` claim (the user identifier)
        expires_in: Token lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES
        extra_claims: Additional claims merged into the payload
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload: Dict[str, Any] = dict(extra_claims or {})
    payload.update({"sub": subject, "iat": now, "exp": now + lifetime})
    if settings.jwt_audience:
        payload.setdefault("aud", settings.jwt_audience)
    if settings.jwt_issuer:
        payload.setdefault("iss", settings.jwt_issuer)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        AuthenticationError: Bad signature, expired, wrong audience/issuer,
            or no string `sub` claim. Tokens without `exp` never expire.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected bearer token: %s", type(e).__name__)
        raise AuthenticationError(
            message="Invalid token",
            context={"reason": type(e).__name__},
        )


def _subject_from(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None:
        raise AuthenticationError(message="Not authenticated")

    claims = decode_access_token(credentials.credentials)
    subject = claims.get("sub")
    if not subject:
        raise AuthenticationError(message="Invalid token")
    return subject


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    FastAPI dependency returning the caller's subject identifier.

    FastAPI caches it per request, so the router-level dependency and the
    handler parameter share one verification.
    """
    return _subject_from(credentials)


async def authenticate_request(request: Request) -> str:
    """
    Run the bearer check outside dependency injection.

    FastAPI reads the JSON body before it solves dependencies, so a body
    that is not JSON fails before `get_current_user_id` runs. The
    validation error handler calls this first to keep such requests on 401.
    """
    return _subject_from(await bearer_scheme(request))


def main(argv: Optional[list] = None) -> None:
    """Print a signed development token: `spacetime-token <subject> [--minutes N]`."""
    parser = argparse.ArgumentParser(description="Sign a bearer token for local testing.")
    parser.add_argument("subject", help="value of the sub claim")
    parser.add_argument("--minutes", type=int, default=None, help="token lifetime in minutes")
    args = parser.parse_args(argv)

    expires_in = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.subject, expires_in=expires_in))
