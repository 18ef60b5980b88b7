from supabase import create_client, Client
from postgrest.exceptions import APIError
from eggtracker.config import settings
from typing import Any, Dict, Optional

# Postgres "invalid_text_representation": a malformed uuid in a filter
INVALID_TEXT_REPRESENTATION = "22P02"


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in scripts."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def is_malformed_id(error: APIError) -> bool:
    """True when PostgREST rejected a filter value that is not a valid uuid"""
    return error.code == INVALID_TEXT_REPRESENTATION


def fetch_by_id(supabase: Client, table: str, record_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the row of `table` with the given id, or None (also for ids that are not uuids)"""
    if not record_id:
        return None
    try:
        result = supabase.table(table)\
            .select("*")\
            .eq("id", record_id)\
            .limit(1)\
            .execute()
    except APIError as e:
        if is_malformed_id(e):
            return None
        raise
    return result.data[0] if result.data else None
