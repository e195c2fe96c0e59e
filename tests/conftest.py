import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# must be set before anything under whatnow reads the environment
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

# imported up front so every router holds the same get_session object,
# even after a test reloads whatnow.db.session
from whatnow.main import app  # noqa: E402
from whatnow.core.jwt import create_access_token  # noqa: E402
from whatnow.db.session import get_session  # noqa: E402
from whatnow.dependencies.tasks import get_task_service  # noqa: E402
from whatnow.services.task_list import TaskListService  # noqa: E402
from whatnow.services.task_store import TaskStore  # noqa: E402

OWNER = "user-a"
OTHER = "user-b"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 17, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(session, clock):
    return TaskStore(session, clock=clock)


@pytest.fixture
def service(store, clock):
    return TaskListService(store, clock=clock)


@pytest.fixture
def client(engine, clock):
    def _session_override():
        with Session(engine) as s:
            yield s

    def _service_override(db: Session = Depends(get_session)):
        return TaskListService(TaskStore(db, clock=clock), clock=clock)

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_task_service] = _service_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user_id: str = OWNER) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
