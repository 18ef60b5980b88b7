from fastapi import APIRouter, BackgroundTasks, Depends
from eggtracker.database.supabase_client import get_supabase
from eggtracker.modules.trays.schemas import TrayCreate, TrayResponse, TrayListItem, TrayDetailResponse
from eggtracker.modules.trays.service import TrayService
from eggtracker.modules.realtime.manager import manager
from eggtracker.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["trays"])


def get_tray_service(supabase: Client = Depends(get_supabase)) -> TrayService:
    return TrayService(supabase)


@router.post("/rooms/{room_id}/trays", response_model=TrayResponse, status_code=201)
async def create_tray(
    room_id: str,
    background_tasks: BackgroundTasks,
    tray_data: Optional[TrayCreate] = None,
    user_id: str = Depends(get_current_user_id),
    service: TrayService = Depends(get_tray_service),
    supabase: Client = Depends(get_supabase)
):
    """Start a new tray for the room (members only). It becomes the active tray."""
    tray = service.create_tray_for_room(room_id, user_id, tray_data or TrayCreate())
    background_tasks.add_task(manager.publish_room, room_id, supabase)
    return tray


@router.get("/rooms/{room_id}/trays", response_model=List[TrayListItem])
async def list_trays(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TrayService = Depends(get_tray_service)
):
    """Tray history of a room, newest first (members only)"""
    return service.list_trays(room_id, user_id)


@router.get("/trays/{tray_id}", response_model=TrayDetailResponse)
async def get_tray(
    tray_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TrayService = Depends(get_tray_service)
):
    """Get a tray with its eggs, including retired trays (members only)"""
    return service.get_tray(tray_id, user_id)
