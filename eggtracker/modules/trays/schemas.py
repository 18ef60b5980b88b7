from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from eggtracker.modules.eggs.schemas import EggResponse


class TrayCreate(BaseModel):
    label: Optional[str] = Field(None, max_length=80)


class TrayResponse(BaseModel):
    id: str
    room_id: str
    label: str
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class TrayListItem(TrayResponse):
    is_active: bool = False


class TrayDetailResponse(BaseModel):
    tray: TrayResponse
    is_active: bool
    eggs: List[EggResponse]
    counts: Dict[str, int]
    total_eaten: int
