import os

# Settings are read at import time, so the environment has to be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("ADMIN_PASSWORD", None)

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models import Picking
from services import workers as worker_service
from utils.security import sign_token


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    return TestClient(app)


@pytest.fixture()
def admin(db):
    return worker_service.create_worker(db, name="Admin", password="SuperSecret!", admin=True)


@pytest.fixture()
def worker(db):
    return worker_service.create_worker(db, name="Alice", password="alice-pw", soft_one_id="1001")


@pytest.fixture()
def admin_headers(admin):
    return {"Authorization": f"Bearer {sign_token(admin.id, True)}"}


@pytest.fixture()
def worker_headers(worker):
    return {"Authorization": f"Bearer {sign_token(worker.id, False)}"}


@pytest.fixture()
def add_picking(db):
    """Insert a picking row with explicit timestamps"""
    def _add(worker_id, work_type="picking", start=None, hours=None, subtask=None, quantity=None):
        start = start or datetime.now(timezone.utc) - timedelta(hours=3)
        end = start + timedelta(hours=hours) if hours is not None else None
        picking = Picking(
            worker_id=worker_id,
            work_type=work_type,
            start_timestamp=start,
            end_timestamp=end,
            subtask=subtask,
            subtask_quantity=quantity
        )
        db.add(picking)
        db.commit()
        db.refresh(picking)
        return picking
    return _add
