import logging
from typing import Any

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from hillmonitor import db
from hillmonitor.auth.context import AuthResult, AuthUser
from hillmonitor.auth.jwt import decode_supabase_token
from hillmonitor.config import settings
from hillmonitor.observability import log_event, request_id_of


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extract token from 'Bearer <token>' header."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def _user_from_claims(claims: dict[str, Any]) -> AuthUser:
    return AuthUser(id=str(claims["sub"]), email=claims.get("email"), claims=dict(claims))


def _lookup_provider_user(authorization: str, token: str) -> AuthUser | None:
    """Ask the Supabase auth server who owns ``token``. Blocking; run in a threadpool."""
    client = db.create_authenticated_client(authorization)
    response = client.auth.get_user(token)
    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        return None
    claims = {"sub": str(user.id), "email": getattr(user, "email", None)}
    return AuthUser(id=str(user.id), email=getattr(user, "email", None), claims=claims)


async def verify_auth(request: Request) -> AuthResult:
    """
    Resolve the caller's identity from the Authorization header.
    Verifies locally when SUPABASE_JWT_SECRET is set, otherwise asks the auth provider.
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        return AuthResult(error="Missing authorization header")

    token = _extract_bearer_token(authorization)
    if not token:
        return AuthResult(error="Invalid JWT")

    if settings.supabase_jwt_secret:
        claims = decode_supabase_token(token)
        if claims:
            return AuthResult(user=_user_from_claims(claims))
        reason = "local verification failed"
    else:
        try:
            user = await run_in_threadpool(_lookup_provider_user, authorization, token)
        except Exception as exc:
            user = None
            reason = str(exc)
        else:
            reason = "no user for token"
        if user:
            return AuthResult(user=user)

    log_event(
        "auth_verification_failed",
        level=logging.WARNING,
        request_id=request_id_of(request),
        reason=reason,
    )
    return AuthResult(error="Invalid JWT")
