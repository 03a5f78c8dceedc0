from jose import JWTError, jwt

from hillmonitor.config import settings


SUPABASE_JWT_ALGORITHM = "HS256"
SUPABASE_JWT_AUDIENCE = "authenticated"


def decode_supabase_token(token: str) -> dict | None:
    """Decode and validate a Supabase session JWT. Returns claims or None if invalid."""
    if not settings.supabase_jwt_secret:
        return None
    try:
        claims = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[SUPABASE_JWT_ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except JWTError:
        return None
    if not claims.get("sub"):
        return None
    return claims
