import pytest
from fastapi.testclient import TestClient

from todo_api import migrations
from todo_api.db import Database
from todo_api.main import create_app
from todo_api.settings import get_settings


@pytest.fixture
def database():
    # Fresh in-memory database per test, migrated the same way `todo-api migrate` does
    db = Database("sqlite://")
    migrations.upgrade(db)
    yield db
    db.dispose()


@pytest.fixture
def app(database):
    return create_app(settings=get_settings(), database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
