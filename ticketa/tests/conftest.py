import os

# Must be set before the application modules read their configuration.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUDIT_ON_WRITE"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from ticketa.core.principal import Principal, Role
from ticketa.database.db import Base, enable_sqlite_foreign_keys, get_db
from ticketa.main import app
from ticketa.models.events import Event, EventStatus
from ticketa.models.users import User
from ticketa.services.reservations import ReservationService
from ticketa.stores.sql import SqlInventoryStore, SqlReservationStore

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test a fresh schema; stores commit, so rollback alone won't isolate."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed database so worker threads get their own connections."""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_foreign_keys(file_engine)
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    file_engine.dispose()


def _add_user(db: Session, user_id: int) -> User:
    user = User(id=user_id, username=f"user{user_id}", email=f"user{user_id}@example.com")
    db.add(user)
    db.commit()
    return user


def _add_event(db: Session, total: int, status: EventStatus, title: str) -> Event:
    inventory = SqlInventoryStore(db)
    event = inventory.add(title=title, total_tickets=total, location="Main Hall")
    if status is not EventStatus.DRAFT:
        event = inventory.set_status(event.id, status)
    return event


@pytest.fixture
def make_user(db_session: Session):
    def _make(user_id: int) -> User:
        return _add_user(db_session, user_id)

    return _make


@pytest.fixture
def make_event(db_session: Session):
    def _make(total: int = 5, status: EventStatus = EventStatus.PUBLISHED, title: str = "Concert") -> Event:
        return _add_event(db_session, total, status, title)

    return _make


@pytest.fixture
def seed(file_session_factory):
    """Seed helpers bound to the file-backed database."""

    class Seeder:
        def user(self, user_id: int) -> None:
            with file_session_factory() as db:
                _add_user(db, user_id)

        def event(self, total: int, status: EventStatus = EventStatus.PUBLISHED) -> int:
            with file_session_factory() as db:
                return _add_event(db, total, status, "Race Event").id

    return Seeder()


@pytest.fixture
def service(db_session: Session) -> ReservationService:
    return ReservationService(SqlInventoryStore(db_session), SqlReservationStore(db_session))


@pytest.fixture
def participant():
    def _make(user_id: int) -> Principal:
        return Principal(user_id=user_id, role=Role.PARTICIPANT)

    return _make


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id=999, role=Role.ADMIN)


@pytest.fixture
def headers():
    def _make(user_id: int, role: str = "participant") -> dict[str, str]:
        return {"X-User-Id": str(user_id), "X-User-Role": role}

    return _make
