import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SEED_MOCK_DATA", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from main import app
from core.clock import utcnow
from core.database import Base, get_db
from core.security import get_current_user

# Ensure models are registered with SQLAlchemy metadata
import models.client  # noqa: F401
import models.container  # noqa: F401
import models.id_sequence  # noqa: F401
import models.iso_code  # noqa: F401
import models.shipping_line  # noqa: F401
import models.user  # noqa: F401

from models.container import ContainerSource, ContainerType
from models.user import User
from schemas.container import ContainerCreate
from schemas.reference import ClientCreate, IsoCodeCreate, ShippingLineCreate
from services.container_service import ContainerService
from services.reference_service import client_service, iso_code_service, shipping_line_service


class MockUser:
    def __init__(self, role: str = "admin", permissions=None, user_id: str = "900") -> None:
        self.id = user_id
        self.role = role
        self.permissions = ["all"] if permissions is None else permissions
        self.email = "test@example.com"
        self.username = "test-user"
        self.is_active = True

    has_permission = User.has_permission


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def _override_db(db_session):
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass
    return _override_get_db


@pytest.fixture(scope="function")
def client(db_session):
    app.dependency_overrides[get_db] = _override_db(db_session)
    app.dependency_overrides[get_current_user] = lambda: MockUser("admin")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def anon_client(db_session):
    """Client with the real bearer-token authentication in place."""
    app.dependency_overrides[get_db] = _override_db(db_session)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def reference_data(db_session):
    """Two shipping lines, two ISO codes and one client, ids "1", "2", ..."""
    lines = [
        shipping_line_service.create(db_session, ShippingLineCreate(name="MSC", code="MSC")),
        shipping_line_service.create(db_session, ShippingLineCreate(name="Maersk", code="MSK")),
    ]
    iso_codes = [
        iso_code_service.create(db_session, IsoCodeCreate(code="22G1", description="20' General Purpose")),
        iso_code_service.create(db_session, IsoCodeCreate(code="42R1", description="40' Refrigerated")),
    ]
    clients = [client_service.create(db_session, ClientCreate(name="Acme", code="acm"))]
    return {"lines": lines, "iso_codes": iso_codes, "clients": clients}


def make_container(
    db,
    number: str,
    shipping_line_id: str = "1",
    iso_code_id: str = "1",
    container_type: ContainerType = ContainerType.DRY,
    entry_date=None,
    now=None,
    **extra,
):
    data = ContainerCreate(
        container_number=number,
        type=container_type,
        iso_code_id=iso_code_id,
        shipping_line_id=shipping_line_id,
        entry_date=entry_date or (now or utcnow()) - timedelta(hours=1),
        **extra,
    )
    return ContainerService.create_container(data, db, source=ContainerSource.SHIPPING_LINE, now=now)
