from supabase import Client
from postgrest.exceptions import APIError
from eggtracker.config import settings
from eggtracker.modules.rooms.schemas import (
    RoomCreate, RoomResponse, RoomListItem, JoinRoomResponse,
    RoomMemberResponse, MemberShare, RoomSummaryResponse
)
from eggtracker.modules.users.schemas import UserResponse
from eggtracker.modules.trays.schemas import TrayResponse
from eggtracker.modules.trays.service import TrayService, TRAY_SIZE
from eggtracker.modules.eggs.service import list_tray_eggs, count_eaten
from eggtracker.database.supabase_client import fetch_by_id, is_malformed_id
from eggtracker.core.dependencies import get_user_or_404, get_room_or_404, get_membership
from fastapi import HTTPException
from typing import Dict, List, Optional
from datetime import datetime, timezone
from urllib.parse import urlparse
import logging
import re

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
_ROOM_PATH_RE = re.compile(r"room/([A-Za-z0-9_-]+)")


def parse_room_id(value: str) -> Optional[str]:
    """Extract a room id from an invite link ("https://host/room/<id>") or a bare id"""
    trimmed = (value or "").strip()
    if not trimmed:
        return None

    parsed = urlparse(trimmed)
    if parsed.scheme and parsed.netloc:
        parts = [part for part in parsed.path.split("/") if part]
        if "room" in parts:
            index = parts.index("room")
            if index + 1 < len(parts):
                return parts[index + 1]
    else:
        match = _ROOM_PATH_RE.search(trimmed)
        if match:
            return match.group(1)

    return trimmed


def split_tray(members: List[RoomMemberResponse], counts: Dict[str, int]) -> List[MemberShare]:
    """Even share of a tray per member, in join order; the earliest joiners absorb the remainder"""
    if not members:
        return []
    base, extra = divmod(TRAY_SIZE, len(members))
    shares = []
    for index, member in enumerate(members):
        target = base + (1 if index < extra else 0)
        eaten = counts.get(member.user_id, 0)
        shares.append(MemberShare(
            user_id=member.user_id,
            name=member.name,
            eaten=eaten,
            target=target,
            remaining=max(target - eaten, 0)
        ))
    return shares


class RoomService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.trays = TrayService(supabase)

    def create_room(self, room_data: RoomCreate, user_id: str) -> RoomResponse:
        """Create a room, join the creator and start its first tray"""
        name = room_data.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Room name is required.")
        room_id = None
        try:
            get_user_or_404(user_id, self.supabase)

            now = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("rooms").insert({
                "name": name,
                "created_by": user_id,
                "active_tray_id": None,
                "created_at": now
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create room")

            room = result.data[0]
            room_id = room["id"]

            # Add creator as first member
            self.supabase.table("room_members").insert({
                "room_id": room_id,
                "user_id": user_id,
                "joined_at": now
            }).execute()

            tray = self.trays.create_tray(room_id, user_id)
            self.trays.set_active_tray(room_id, tray["id"])
            room["active_tray_id"] = tray["id"]

            logger.info(f"User {user_id} created room {room_id} ({name!r})")
            return RoomResponse(**room)
        except HTTPException:
            if room_id:
                self._discard_room(room_id)
            raise
        except Exception as e:
            if room_id:
                self._discard_room(room_id)
            raise HTTPException(status_code=500, detail=str(e))

    def _discard_room(self, room_id: str) -> None:
        """Remove a half-created room with its memberships, trays and eggs"""
        logger.warning(f"Rolling back partially created room {room_id}")
        try:
            room = fetch_by_id(self.supabase, "rooms", room_id)
            # rooms.active_tray_id references trays, so unlink before deleting trays
            if room and room.get("active_tray_id"):
                self.supabase.table("rooms")\
                    .update({"active_tray_id": None})\
                    .eq("id", room_id)\
                    .execute()
            trays = self.supabase.table("trays")\
                .select("id")\
                .eq("room_id", room_id)\
                .execute()
            tray_ids = [tray["id"] for tray in trays.data or []]
            if tray_ids:
                self.supabase.table("eggs").delete().in_("tray_id", tray_ids).execute()
                self.supabase.table("trays").delete().eq("room_id", room_id).execute()
            self.supabase.table("room_members").delete().eq("room_id", room_id).execute()
            self.supabase.table("rooms").delete().eq("id", room_id).execute()
        except Exception as e:
            logger.error(f"Failed to roll back room {room_id}: {str(e)}")

    def join_room(self, room_id: str, user_id: str) -> JoinRoomResponse:
        """Join a room; joining again is a no-op"""
        try:
            get_room_or_404(room_id, self.supabase)
            get_user_or_404(user_id, self.supabase)

            if get_membership(room_id, user_id, self.supabase):
                return JoinRoomResponse(room_id=room_id, joined=False)

            try:
                self.supabase.table("room_members").insert({
                    "room_id": room_id,
                    "user_id": user_id,
                    "joined_at": datetime.now(timezone.utc).isoformat()
                }).execute()
            except APIError as e:
                # Concurrent join of the same pair hit the unique constraint
                if e.code == UNIQUE_VIOLATION:
                    return JoinRoomResponse(room_id=room_id, joined=False)
                raise

            logger.info(f"User {user_id} joined room {room_id}")
            return JoinRoomResponse(room_id=room_id, joined=True)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def join_room_by_invite(self, invite: str, user_id: str) -> JoinRoomResponse:
        """Join the room an invite link (or bare room id) points to"""
        room_id = parse_room_id(invite)
        if not room_id:
            raise HTTPException(status_code=400, detail="Paste a room link or id to join.")
        return self.join_room(room_id, user_id)

    def list_rooms(self, user_id: str) -> List[RoomListItem]:
        """List the rooms a user belongs to, with member counts"""
        try:
            try:
                memberships = self.supabase.table("room_members")\
                    .select("room_id")\
                    .eq("user_id", user_id)\
                    .order("joined_at")\
                    .execute()
            except APIError as e:
                if is_malformed_id(e):
                    return []
                raise
            if not memberships.data:
                return []
            room_ids = [m["room_id"] for m in memberships.data]

            rooms_result = self.supabase.table("rooms")\
                .select("*")\
                .in_("id", room_ids)\
                .execute()
            rooms = {room["id"]: room for room in rooms_result.data or []}

            members_result = self.supabase.table("room_members")\
                .select("room_id")\
                .in_("room_id", room_ids)\
                .execute()
            member_counts: Dict[str, int] = {}
            for member in members_result.data or []:
                member_counts[member["room_id"]] = member_counts.get(member["room_id"], 0) + 1

            return [
                RoomListItem(
                    id=room_id,
                    name=rooms[room_id]["name"],
                    active_tray_id=rooms[room_id].get("active_tray_id"),
                    member_count=member_counts.get(room_id, 0)
                )
                for room_id in room_ids
                if room_id in rooms
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, room_id: str) -> List[RoomMemberResponse]:
        """Room members with their names, sorted by join time"""
        entries = self.supabase.table("room_members")\
            .select("*")\
            .eq("room_id", room_id)\
            .execute()
        if not entries.data:
            return []

        users_result = self.supabase.table("users")\
            .select("*")\
            .in_("id", [entry["user_id"] for entry in entries.data])\
            .execute()
        users = {user["id"]: user for user in users_result.data or []}

        members = [
            RoomMemberResponse(
                user_id=entry["user_id"],
                name=users[entry["user_id"]]["name"],
                joined_at=entry["joined_at"]
            )
            for entry in entries.data
            if entry["user_id"] in users
        ]
        members.sort(key=lambda member: member.joined_at)
        return members

    def get_room_summary(self, room_id: str, user_id: str) -> Optional[RoomSummaryResponse]:
        """Everything the room page shows. None when the room does not exist."""
        try:
            room = fetch_by_id(self.supabase, "rooms", room_id)
            if not room:
                return None

            current_user = fetch_by_id(self.supabase, "users", user_id)
            membership = get_membership(room_id, user_id, self.supabase)
            members = self.list_members(room_id)

            tray = None
            eggs = []
            if room.get("active_tray_id"):
                tray = fetch_by_id(self.supabase, "trays", room["active_tray_id"])
                if tray:
                    eggs = list_tray_eggs(self.supabase, tray["id"])

            counts = count_eaten(eggs)
            return RoomSummaryResponse(
                room=RoomResponse(**room),
                current_user=UserResponse(**current_user) if current_user else None,
                is_member=membership is not None,
                members=members,
                tray=TrayResponse(**tray) if tray else None,
                eggs=eggs,
                counts=counts,
                total_eaten=sum(counts.values()),
                tray_size=TRAY_SIZE,
                split=split_tray(members, counts),
                invite_url=settings.build_invite_url(room_id)
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
