from supabase import Client
from eggtracker.modules.trays.schemas import TrayCreate, TrayResponse, TrayListItem, TrayDetailResponse
from eggtracker.modules.eggs.service import list_tray_eggs, count_eaten
from eggtracker.database.supabase_client import fetch_by_id
from eggtracker.core.dependencies import get_user_or_404, get_room_or_404, check_room_member
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

TRAY_SIZE = 30


def format_tray_label(moment: datetime) -> str:
    """Default tray label, e.g. "October 2026" """
    return moment.strftime("%B %Y")


class TrayService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_tray(self, room_id: str, user_id: str, label: Optional[str] = None) -> Dict[str, Any]:
        """Insert a tray and its 30 unclaimed eggs. Does not touch the room."""
        created_at = datetime.now(timezone.utc)
        tray_label = (label or "").strip() or format_tray_label(created_at)

        result = self.supabase.table("trays").insert({
            "room_id": room_id,
            "label": tray_label,
            "created_by": user_id,
            "created_at": created_at.isoformat()
        }).execute()

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create tray")

        tray = result.data[0]
        try:
            self.supabase.table("eggs").insert([
                {
                    "tray_id": tray["id"],
                    "position": position,
                    "eaten_by": None,
                    "eaten_at": None
                }
                for position in range(TRAY_SIZE)
            ]).execute()
        except Exception:
            self.discard_tray(tray["id"])
            raise

        logger.info(f"Created tray {tray['id']} ({tray_label!r}) for room {room_id}")
        return tray

    def discard_tray(self, tray_id: str) -> None:
        """Delete a tray that never became usable, along with any of its eggs"""
        logger.warning(f"Rolling back partially created tray {tray_id}")
        try:
            self.supabase.table("eggs").delete().eq("tray_id", tray_id).execute()
            self.supabase.table("trays").delete().eq("id", tray_id).execute()
        except Exception as e:
            logger.error(f"Failed to roll back tray {tray_id}: {str(e)}")

    def set_active_tray(self, room_id: str, tray_id: str) -> None:
        self.supabase.table("rooms")\
            .update({"active_tray_id": tray_id})\
            .eq("id", room_id)\
            .execute()

    def create_tray_for_room(self, room_id: str, user_id: str, tray_data: TrayCreate) -> TrayResponse:
        """Start a new tray and make it the room's active tray"""
        try:
            get_room_or_404(room_id, self.supabase)
            get_user_or_404(user_id, self.supabase)
            check_room_member(room_id, user_id, self.supabase)

            tray = self.create_tray(room_id, user_id, tray_data.label)
            try:
                self.set_active_tray(room_id, tray["id"])
            except Exception:
                self.discard_tray(tray["id"])
                raise
            logger.info(f"User {user_id} started tray {tray['id']} in room {room_id}")
            return TrayResponse(**tray)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_trays(self, room_id: str, user_id: str) -> List[TrayListItem]:
        """List all trays of a room, newest first"""
        try:
            room = get_room_or_404(room_id, self.supabase)
            check_room_member(room_id, user_id, self.supabase)

            result = self.supabase.table("trays")\
                .select("*")\
                .eq("room_id", room_id)\
                .order("created_at", desc=True)\
                .execute()

            return [
                TrayListItem(**tray, is_active=tray["id"] == room.get("active_tray_id"))
                for tray in result.data or []
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_tray(self, tray_id: str, user_id: str) -> TrayDetailResponse:
        """Get a tray (active or retired) with its eggs"""
        try:
            tray = fetch_by_id(self.supabase, "trays", tray_id)
            if not tray:
                raise HTTPException(status_code=404, detail="Tray not found.")
            check_room_member(tray["room_id"], user_id, self.supabase)

            room = fetch_by_id(self.supabase, "rooms", tray["room_id"]) or {}
            eggs = list_tray_eggs(self.supabase, tray_id)
            counts = count_eaten(eggs)
            return TrayDetailResponse(
                tray=TrayResponse(**tray),
                is_active=room.get("active_tray_id") == tray_id,
                eggs=eggs,
                counts=counts,
                total_eaten=sum(counts.values())
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
