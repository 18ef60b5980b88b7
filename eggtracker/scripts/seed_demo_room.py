"""
Seed Demo Room Script
Creates two users and a shared room with a fresh tray, then claims a few eggs
so a local front end has something to render.
Run with: python -m eggtracker.scripts.seed_demo_room
"""

from eggtracker.database.supabase_client import SupabaseClient
from eggtracker.modules.users.schemas import UserCreate
from eggtracker.modules.users.service import UserService
from eggtracker.modules.rooms.schemas import RoomCreate
from eggtracker.modules.rooms.service import RoomService
from eggtracker.modules.eggs.service import EggService
from eggtracker.config import settings
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_ROOM_NAME = "Flat 3B"
DEMO_USERS = ["Asha", "Bilal"]
DEMO_CLAIMS = {0: [0, 1, 2], 1: [5, 6]}  # user index -> egg positions


def seed_demo_room(supabase: Client) -> str:
    """Create the demo room and return its id"""
    users = UserService(supabase)
    rooms = RoomService(supabase)
    eggs = EggService(supabase)

    user_ids = [users.create_user(UserCreate(name=name)).id for name in DEMO_USERS]
    logger.info(f"Created users: {', '.join(user_ids)}")

    room = rooms.create_room(RoomCreate(name=DEMO_ROOM_NAME), user_ids[0])
    for user_id in user_ids[1:]:
        rooms.join_room(room.id, user_id)

    summary = rooms.get_room_summary(room.id, user_ids[0])
    by_position = {egg.position: egg for egg in summary.eggs}
    for user_index, positions in DEMO_CLAIMS.items():
        for position in positions:
            eggs.toggle_egg(by_position[position].id, user_ids[user_index])

    logger.info(f"Room {room.id} ready: {settings.build_invite_url(room.id)}")
    return room.id


def main():
    supabase = SupabaseClient.get_service_client()
    try:
        seed_demo_room(supabase)
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        raise


if __name__ == "__main__":
    main()
