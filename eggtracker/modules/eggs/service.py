from supabase import Client
from eggtracker.modules.eggs.schemas import EggResponse, EggToggleResponse
from eggtracker.database.supabase_client import fetch_by_id
from eggtracker.core.dependencies import get_user_or_404, check_room_member
from fastapi import HTTPException
from typing import Any, Dict, List
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CLAIM_CONFLICT = "Egg already claimed by someone else."


def list_tray_eggs(supabase: Client, tray_id: str) -> List[EggResponse]:
    """All eggs of a tray, sorted by position"""
    result = supabase.table("eggs")\
        .select("*")\
        .eq("tray_id", tray_id)\
        .order("position")\
        .execute()
    eggs = [EggResponse(**egg) for egg in result.data or []]
    eggs.sort(key=lambda egg: egg.position)
    return eggs


def count_eaten(eggs: List[EggResponse]) -> Dict[str, int]:
    """Map claimant user id -> number of eggs they currently hold"""
    counts: Dict[str, int] = {}
    for egg in eggs:
        if egg.eaten_by:
            counts[egg.eaten_by] = counts.get(egg.eaten_by, 0) + 1
    return counts


class EggService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_egg_or_404(self, egg_id: str) -> Dict[str, Any]:
        egg = fetch_by_id(self.supabase, "eggs", egg_id)
        if not egg:
            raise HTTPException(status_code=404, detail="Egg not found.")
        return egg

    def toggle_egg(self, egg_id: str, user_id: str) -> EggToggleResponse:
        """
        Claim an unclaimed egg for the user, or release an egg the user holds.

        Eggs held by another member cannot be taken over. The write only
        applies if eaten_by still has the value that was read, so a concurrent
        toggle on the same egg makes this one fail with a conflict instead of
        overwriting it.
        """
        try:
            egg = self.get_egg_or_404(egg_id)
            get_user_or_404(user_id, self.supabase)

            tray = fetch_by_id(self.supabase, "trays", egg["tray_id"])
            if not tray:
                raise HTTPException(status_code=404, detail="Tray not found.")

            check_room_member(tray["room_id"], user_id, self.supabase)

            owner = egg.get("eaten_by")
            if owner and owner != user_id:
                logger.warning(f"User {user_id} tried to take egg {egg_id} held by {owner}")
                raise HTTPException(status_code=409, detail=CLAIM_CONFLICT)

            if owner == user_id:
                query = self.supabase.table("eggs")\
                    .update({"eaten_by": None, "eaten_at": None})\
                    .eq("id", egg_id)\
                    .eq("eaten_by", user_id)
            else:
                query = self.supabase.table("eggs")\
                    .update({
                        "eaten_by": user_id,
                        "eaten_at": datetime.now(timezone.utc).isoformat()
                    })\
                    .eq("id", egg_id)\
                    .is_("eaten_by", "null")
            result = query.execute()

            if not result.data:
                # Another toggle changed the egg between our read and write
                current = fetch_by_id(self.supabase, "eggs", egg_id) or {}
                current_owner = current.get("eaten_by")
                logger.warning(f"Toggle of egg {egg_id} by {user_id} lost a race (now held by {current_owner})")
                if current_owner and current_owner != user_id:
                    raise HTTPException(status_code=409, detail=CLAIM_CONFLICT)
                raise HTTPException(status_code=409, detail="Egg was just updated. Try again.")

            updated = EggResponse(**result.data[0])
            claimed = updated.eaten_by is not None
            logger.info(f"User {user_id} {'claimed' if claimed else 'released'} egg {egg_id} (position {updated.position})")
            return EggToggleResponse(claimed=claimed, room_id=tray["room_id"], egg=updated)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
