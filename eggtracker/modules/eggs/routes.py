from fastapi import APIRouter, BackgroundTasks, Depends
from eggtracker.database.supabase_client import get_supabase
from eggtracker.modules.eggs.schemas import EggToggleResponse
from eggtracker.modules.eggs.service import EggService
from eggtracker.modules.realtime.manager import manager
from eggtracker.core.dependencies import get_current_user_id
from supabase import Client

router = APIRouter(prefix="/eggs", tags=["eggs"])


def get_egg_service(supabase: Client = Depends(get_supabase)) -> EggService:
    return EggService(supabase)


@router.post("/{egg_id}/toggle", response_model=EggToggleResponse)
async def toggle_egg(
    egg_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    service: EggService = Depends(get_egg_service),
    supabase: Client = Depends(get_supabase)
):
    """Claim an unclaimed egg, or release one you hold. Eggs held by others return 409."""
    result = service.toggle_egg(egg_id, user_id)
    background_tasks.add_task(manager.publish_room, result.room_id, supabase)
    return result
