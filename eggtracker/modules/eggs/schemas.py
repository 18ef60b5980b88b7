from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class EggResponse(BaseModel):
    id: str
    tray_id: str
    position: int
    eaten_by: Optional[str] = None
    eaten_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EggToggleResponse(BaseModel):
    claimed: bool
    room_id: str
    egg: EggResponse
