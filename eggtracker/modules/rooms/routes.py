from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from eggtracker.database.supabase_client import get_supabase
from eggtracker.modules.rooms.schemas import (
    RoomCreate, RoomResponse, RoomListItem, JoinRoomResponse,
    JoinByInviteRequest, RoomSummaryResponse
)
from eggtracker.modules.rooms.service import RoomService
from eggtracker.modules.realtime.manager import manager
from eggtracker.core.dependencies import get_current_user_id
from supabase import Client
from typing import List

router = APIRouter(prefix="/rooms", tags=["rooms"])


def get_room_service(supabase: Client = Depends(get_supabase)) -> RoomService:
    return RoomService(supabase)


@router.get("", response_model=List[RoomListItem])
async def list_rooms(
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service)
):
    """List rooms the current user is a member of"""
    return service.list_rooms(user_id)


@router.post("", response_model=RoomResponse, status_code=201)
async def create_room(
    room_data: RoomCreate,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service)
):
    """Create a room with its first tray; the creator joins automatically"""
    return service.create_room(room_data, user_id)


@router.post("/join", response_model=JoinRoomResponse)
async def join_room_by_invite(
    invite_data: JoinByInviteRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
    supabase: Client = Depends(get_supabase)
):
    """Join a room from a pasted invite link or room id"""
    result = service.join_room_by_invite(invite_data.invite, user_id)
    if result.joined:
        background_tasks.add_task(manager.publish_room, result.room_id, supabase)
    return result


@router.post("/{room_id}/join", response_model=JoinRoomResponse)
async def join_room(
    room_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
    supabase: Client = Depends(get_supabase)
):
    """Join a room (no-op if already a member)"""
    result = service.join_room(room_id, user_id)
    if result.joined:
        background_tasks.add_task(manager.publish_room, room_id, supabase)
    return result


@router.get("/{room_id}/summary", response_model=RoomSummaryResponse)
async def get_room_summary(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service)
):
    """Room, members, active tray with eggs, and the per-member split"""
    summary = service.get_room_summary(room_id, user_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Room not found.")
    return summary
