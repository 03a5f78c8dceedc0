from hillmonitor.auth.context import AuthResult, AuthUser
from hillmonitor.auth.dependencies import verify_auth
from hillmonitor.auth.jwt import decode_supabase_token

__all__ = [
    "AuthResult",
    "AuthUser",
    "decode_supabase_token",
    "verify_auth",
]
