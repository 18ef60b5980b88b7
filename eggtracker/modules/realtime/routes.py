from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from eggtracker.database.supabase_client import get_supabase
from eggtracker.modules.realtime.manager import manager
from eggtracker.modules.rooms.service import RoomService
from supabase import Client

router = APIRouter(tags=["realtime"])

ROOM_NOT_FOUND_CLOSE_CODE = 4404


@router.websocket("/ws/rooms/{room_id}")
async def room_updates(
    websocket: WebSocket,
    room_id: str,
    user_id: str,
    supabase: Client = Depends(get_supabase)
):
    """Subscribe to live room summaries. The first message is the current state."""
    await manager.connect(websocket, room_id, user_id)
    try:
        if not await manager.send_summary(websocket, RoomService(supabase), room_id, user_id):
            await websocket.close(code=ROOM_NOT_FOUND_CLOSE_CODE)
            return
        while True:
            # Clients only listen; incoming frames are ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, room_id)
