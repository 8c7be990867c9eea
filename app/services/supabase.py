"""Supabase admin client for server-side operations."""

from supabase import Client, create_client

from app.config.settings import settings


def get_supabase_admin_client() -> Client:
    """
    Get a Supabase client authenticated with the service role key.

    Only the admin invite flow uses it. The key bypasses RLS, so it never
    leaves the server.
    """
    if not settings.supabase_admin_enabled:
        raise ValueError(
            "SUPABASE_SERVICE_ROLE_KEY not configured. Set it in .env to invite admins."
        )

    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )
