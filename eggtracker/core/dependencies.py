"""
Core dependencies for identifying the acting user and checking room membership
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from eggtracker.database.supabase_client import fetch_by_id, is_malformed_id
from postgrest.exceptions import APIError
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

# Users are anonymous name-only records; the client keeps the id it got back
# from POST /users and sends it with every request.
user_id_header = APIKeyHeader(name="X-User-Id", description="Id returned by POST /users")


def get_current_user_id(user_id: str = Security(user_id_header)) -> str:
    """Extract acting user id from the X-User-Id header"""
    user_id = user_id.strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authenticated"
        )
    return user_id


def get_user_or_404(user_id: str, supabase: Client) -> Dict[str, Any]:
    user = fetch_by_id(supabase, "users", user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


def get_room_or_404(room_id: str, supabase: Client) -> Dict[str, Any]:
    room = fetch_by_id(supabase, "rooms", room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found.")
    return room


def get_membership(room_id: str, user_id: str, supabase: Client) -> Optional[Dict[str, Any]]:
    """Return the room_members row for (room, user), or None"""
    try:
        result = supabase.table("room_members")\
            .select("*")\
            .eq("room_id", room_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
    except APIError as e:
        if is_malformed_id(e):
            return None
        raise
    return result.data[0] if result.data else None


def check_room_member(room_id: str, user_id: str, supabase: Client) -> Dict[str, Any]:
    """Check if user is a member of the room"""
    membership = get_membership(room_id, user_id, supabase)
    if not membership:
        logger.info(f"User {user_id} rejected from room {room_id}: not a member")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Join the room first."
        )
    return membership
