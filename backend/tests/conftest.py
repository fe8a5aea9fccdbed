import os
import tempfile

# Settings are read at import time; point them at throwaway locations first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="materials-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models.product, models.withdrawal, models.admin, models.log  # noqa: F401,E401
from main import app
from services.admins import create_admin
from services.products import ProductStore

ADMIN_EMAIL = "admin@materials.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    return create_admin(db, ADMIN_EMAIL, "Admin", ADMIN_PASSWORD)


@pytest.fixture
def auth_headers(client, admin):
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def make_product(db):
    def _make(name="Banner", quantity=10, category="grafico", **extra):
        data = {"name": name, "category": category, "available_quantity": quantity}
        data.update(extra)
        return ProductStore(db).create(data)
    return _make


@pytest.fixture
def meta():
    return {"destination": "Loja Centro", "supervisor": "Maria", "photo_url": None, "signature_url": None}
