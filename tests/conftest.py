"""Shared fixtures: a per-test SQLite database behind a fresh app instance."""

import os
import tempfile

# Configure before task_manager.config is imported anywhere.
_TMP_DIR = tempfile.mkdtemp(prefix="task-manager-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/default.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from task_manager.database import create_engine, create_tables, get_session_factory, make_session_factory
from task_manager.main import create_app
from task_manager.repositories.task_repository import TaskRepository
from task_manager.services.auth_service import AuthService

ALICE_ID = "a1a1a1a1a1a1a1a1a1a1a1a1"
BOB_ID = "b2b2b2b2b2b2b2b2b2b2b2b2"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'tasks.db'}")
    create_tables(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    return TaskRepository(session_factory)


@pytest.fixture
def app(session_factory):
    application = create_app()
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_service():
    return AuthService()


def bearer(auth_service: AuthService, subject_id: str) -> dict:
    return {"Authorization": f"Bearer {auth_service.issue_token(subject_id)}"}


@pytest.fixture
def alice_headers(auth_service):
    return bearer(auth_service, ALICE_ID)


@pytest.fixture
def bob_headers(auth_service):
    return bearer(auth_service, BOB_ID)
