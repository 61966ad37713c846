import uuid
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from server_helpers.config import REQUESTER_ID_HEADER
from server_helpers.db.migrations import init_postgres_migrations
from server_helpers.dependencies import get_session
from server_helpers.main import create_app
from server_helpers.models.model import Model  # noqa: F401  registers the table


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_postgres_migrations(engine, SQLModel.metadata, max_ms_to_wait=0, is_running_locally=True)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def requester_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def client(engine, requester_id):
    app = create_app(startup_checks=False)

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    return TestClient(app, headers={REQUESTER_ID_HEADER: requester_id})
