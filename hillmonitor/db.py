from supabase import Client, ClientOptions, create_client

from hillmonitor.config import settings


def create_service_client() -> Client:
    """Service-role client. Bypasses row level security; server-side use only."""
    return create_client(
        settings.supabase_url or "",
        settings.supabase_service_role_key or "",
    )


def create_authenticated_client(auth_header: str) -> Client:
    """Anon-key client carrying the caller's JWT so row level security applies."""
    return create_client(
        settings.supabase_url or "",
        settings.supabase_anon_key or "",
        options=ClientOptions(headers={"Authorization": auth_header}),
    )
