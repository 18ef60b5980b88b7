from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool
from supabase import Client
from eggtracker.modules.rooms.service import RoomService
from typing import Dict, List, Tuple
import logging

logger = logging.getLogger(__name__)


# ---- WebSocket Connection Manager ----
class RoomConnectionManager:
    """Pushes a fresh room summary to every socket watching a room after it changes"""

    def __init__(self):
        self.active_connections: Dict[str, List[Tuple[WebSocket, str]]] = {}  # room_id -> [(websocket, user_id)]

    async def connect(self, websocket: WebSocket, room_id: str, user_id: str):
        await websocket.accept()
        self.active_connections.setdefault(room_id, []).append((websocket, user_id))
        logger.debug(f"User {user_id} subscribed to room {room_id}")

    def disconnect(self, websocket: WebSocket, room_id: str):
        connections = self.active_connections.get(room_id)
        if not connections:
            return
        connections[:] = [entry for entry in connections if entry[0] is not websocket]
        if not connections:
            del self.active_connections[room_id]

    def subscriber_count(self, room_id: str) -> int:
        return len(self.active_connections.get(room_id, []))

    async def send_summary(self, websocket: WebSocket, service: RoomService, room_id: str, user_id: str) -> bool:
        """Send the user's view of the room. Returns False if the room no longer exists."""
        # The summary runs blocking Supabase calls; keep them off the event loop
        summary = await run_in_threadpool(service.get_room_summary, room_id, user_id)
        if summary is None:
            return False
        await websocket.send_json({"type": "room_summary", "data": summary.model_dump(mode="json")})
        return True

    async def publish_room(self, room_id: str, supabase: Client):
        """Recompute and push the room summary to each subscriber of the room"""
        connections = list(self.active_connections.get(room_id, []))
        if not connections:
            return
        service = RoomService(supabase)
        for websocket, user_id in connections:
            try:
                await self.send_summary(websocket, service, room_id, user_id)
            except Exception as e:
                logger.warning(f"Dropping subscriber {user_id} of room {room_id}: {e}")
                self.disconnect(websocket, room_id)


manager = RoomConnectionManager()
