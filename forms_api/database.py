"""Database connection and utilities"""
from functools import lru_cache
from supabase import create_client, Client
from forms_api.config import get_settings

CONTACT_TABLE = "contact_submissions"
MULTISTEP_TABLE = "multistep_submissions"
DYNAMIC_TABLE = "dynamic_submissions"
FILE_TABLE = "file_submissions"


@lru_cache()
def get_supabase_admin() -> Client:
    """
    Get the service role client (bypasses RLS - use carefully)

    Created on first use so that importing the app does not require a
    reachable database.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )
