import os

# Settings are read at import time, so the environment must be in place first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_TOKEN"] = "test-dashboard-token"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

import nomadai.models  # noqa: F401  registers tables on Base.metadata
from nomadai.database import Base, SessionLocal, engine
from nomadai.main import app
from nomadai.models import Project

API_KEY = "test-api-key"
AUTH_TOKEN = "test-dashboard-token"
BASE_TS = 1_700_000_000_000


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project(db):
    project = Project(name="Demo Site", api_key=API_KEY)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def click(ts: int, selector: str | None = "#btn", **meta) -> dict:
    if selector is not None:
        meta["selector"] = selector
    return {"type": "click", "timestamp": BASE_TS + ts, "meta": meta}


def event(event_type: str, ts: int, **meta) -> dict:
    return {"type": event_type, "timestamp": BASE_TS + ts, "meta": meta}
