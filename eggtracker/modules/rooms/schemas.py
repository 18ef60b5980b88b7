from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from eggtracker.modules.users.schemas import UserResponse
from eggtracker.modules.trays.schemas import TrayResponse
from eggtracker.modules.eggs.schemas import EggResponse


class RoomCreate(BaseModel):
    name: str = Field(..., max_length=80)


class RoomResponse(BaseModel):
    id: str
    name: str
    created_by: str
    active_tray_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoomListItem(BaseModel):
    id: str
    name: str
    active_tray_id: Optional[str] = None
    member_count: int


class JoinRoomResponse(BaseModel):
    room_id: str
    joined: bool


class JoinByInviteRequest(BaseModel):
    invite: str  # Invite link or bare room id


class RoomMemberResponse(BaseModel):
    user_id: str
    name: str
    joined_at: datetime


class MemberShare(BaseModel):
    user_id: str
    name: str
    eaten: int
    target: int
    remaining: int


class RoomSummaryResponse(BaseModel):
    room: RoomResponse
    current_user: Optional[UserResponse] = None
    is_member: bool
    members: List[RoomMemberResponse]
    tray: Optional[TrayResponse] = None
    eggs: List[EggResponse]
    counts: Dict[str, int]  # user_id -> eggs currently held on the active tray
    total_eaten: int
    tray_size: int
    split: List[MemberShare]
    invite_url: str
