from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool
import pytest

from leadhive.main import app
from leadhive.database import get_session
from leadhive.events import leads_changed
from leadhive.users.models import User

@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session
    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(name="owner")
def owner_fixture(session: Session) -> User:
    user = User(email="owner@example.com", hashed_password="not-a-real-hash")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture(name="other_owner")
def other_owner_fixture(session: Session) -> User:
    user = User(email="other@example.com", hashed_password="not-a-real-hash")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

def get_token(client: TestClient, email, password):
    client.post("/users/", json={"email": email, "password": password})
    response = client.post("/auth/login", data={"username": email, "password": password})
    return response.json()["access_token"]

@pytest.fixture(name="headers")
def headers_fixture(client: TestClient):
    token = get_token(client, "sales@example.com", "pass")
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture(name="signals")
def signals_fixture():
    """Collect leads_changed payloads for the duration of a test."""
    received = []

    def listener(**payload):
        received.append(payload)

    leads_changed.subscribe(listener)
    yield received
    leads_changed.unsubscribe(listener)
