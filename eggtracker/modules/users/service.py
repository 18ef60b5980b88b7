from supabase import Client
from eggtracker.modules.users.schemas import UserCreate, UserResponse
from eggtracker.database.supabase_client import fetch_by_id
from fastapi import HTTPException
from typing import Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_user(self, user_data: UserCreate) -> UserResponse:
        """Create a name-only user (sign-in)"""
        name = user_data.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Please enter a name.")
        try:
            result = self.supabase.table("users").insert({
                "name": name,
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create user")

            logger.info(f"Created user {result.data[0]['id']}")
            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def find_user(self, user_id: str) -> Optional[UserResponse]:
        """Get user by ID, or None when it does not exist"""
        user = fetch_by_id(self.supabase, "users", user_id)
        return UserResponse(**user) if user else None

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user by ID"""
        try:
            user = self.find_user(user_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if user is None:
            raise HTTPException(status_code=404, detail="User not found.")
        return user
