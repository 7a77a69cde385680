"""Shared fixtures: a fresh file-backed SQLite database per test."""
import os
from datetime import date

# Provide minimal env for Settings validation during import.
os.environ.setdefault("DATABASE_URL", "sqlite:///./unifind-test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from unifind.core.models import ItemCreate, Principal  # noqa: E402
from unifind.core.states import ItemCategory, Role  # noqa: E402
from unifind.db import create_db_engine, create_session_factory, init_db  # noqa: E402
from unifind.main import create_app  # noqa: E402
from unifind.security import create_access_token  # noqa: E402
from unifind.workflow import WorkflowEngine  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'unifind.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def workflow(session_factory):
    return WorkflowEngine(session_factory)


@pytest.fixture
def student():
    return Principal(
        id=1,
        role=Role.STUDENT,
        email="ama.mensah@uni.example",
        full_name="Ama Mensah",
        university_id="S1001",
    )


@pytest.fixture
def other_student():
    return Principal(
        id=2,
        role=Role.STUDENT,
        email="kofi.boateng@uni.example",
        full_name="Kofi Boateng",
        university_id="S1002",
    )


@pytest.fixture
def admin():
    return Principal(
        id=100,
        role=Role.ADMIN,
        email="desk@uni.example",
        full_name="Lost & Found Desk",
    )


@pytest.fixture
def item_fields():
    return ItemCreate(
        title="Blue backpack",
        description="Navy blue backpack with a laptop sleeve",
        category=ItemCategory.BAG,
        location="Main Library, 2nd floor",
        event_date=date(2024, 3, 1),
    )


@pytest.fixture
def found_item_id(workflow, admin, item_fields):
    return workflow.register_found(admin, item_fields).id


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine)) as client:
        yield client


@pytest.fixture
def student_headers(student):
    return {"Authorization": f"Bearer {create_access_token(student)}"}


@pytest.fixture
def other_student_headers(other_student):
    return {"Authorization": f"Bearer {create_access_token(other_student)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin)}"}
