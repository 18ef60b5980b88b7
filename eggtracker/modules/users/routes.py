from fastapi import APIRouter, Depends
from eggtracker.database.supabase_client import get_supabase
from eggtracker.modules.users.schemas import UserCreate, UserResponse
from eggtracker.modules.users.service import UserService
from eggtracker.core.dependencies import get_current_user_id
from supabase import Client

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service)
):
    """Sign in: create a user and return its id for the X-User-Id header"""
    return service.create_user(user_data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Get the user identified by the X-User-Id header"""
    return service.get_user_by_id(user_id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    """Get user by ID"""
    return service.get_user_by_id(user_id)
