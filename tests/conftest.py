import pytest
from fastapi.testclient import TestClient

from app.schemas import BugCreate
from app.services.bug_store import BugStore, get_bug_store
from app.storage import InMemoryStorage


def make_request(**overrides) -> BugCreate:
    """A bug submission that passes every validator unless overridden."""
    fields = {
        "title": "Crash on save",
        "description": "The editor crashes when saving a large file",
        "severity": "high",
        "priority": "medium",
        "reported_by": "alice@example.com",
        "assigned_to": "bob@example.com",
        "tags": ["editor", "crash"],
    }
    fields.update(overrides)
    return BugCreate(**fields)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return BugStore(storage)


@pytest.fixture
def client(store):
    from main import app

    app.dependency_overrides[get_bug_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
