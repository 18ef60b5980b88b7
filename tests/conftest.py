import pytest
from fastapi.testclient import TestClient

from eggtracker.database.supabase_client import get_supabase
from eggtracker.main import app, limiter
from eggtracker.modules.rooms.schemas import RoomCreate
from eggtracker.modules.rooms.service import RoomService
from eggtracker.modules.users.schemas import UserCreate
from eggtracker.modules.users.service import UserService
from tests.fake_supabase import FakeSupabase


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def client(supabase):
    app.dependency_overrides[get_supabase] = lambda: supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(supabase):
    def _make_user(name="Asha"):
        return UserService(supabase).create_user(UserCreate(name=name)).id

    return _make_user


@pytest.fixture
def make_room(supabase):
    def _make_room(user_id, name="Flat 3B"):
        return RoomService(supabase).create_room(RoomCreate(name=name), user_id).id

    return _make_room
