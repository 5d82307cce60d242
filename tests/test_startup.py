import asyncio
import json
import os

import pytest
from fastapi.testclient import TestClient

from todo_api import cli, migrations
from todo_api.db import Database
from todo_api.errors import DatabaseUnavailableError, SchemaOutOfDateError
from todo_api.main import create_app, lifespan
from todo_api.settings import get_settings


def run_lifespan(app):
    async def _start():
        async with lifespan(app):
            pass

    asyncio.run(_start())


class TestLifespan:
    def test_unreachable_database_aborts_startup(self, tmp_path):
        missing = tmp_path / "no" / "such" / "dir" / "todos.db"
        db = Database(f"sqlite:///{missing}")
        with pytest.raises(DatabaseUnavailableError):
            db.connect()

        app = create_app(settings=get_settings(), database=db)
        with pytest.raises(DatabaseUnavailableError):
            run_lifespan(app)

    def test_pending_migrations_abort_startup(self):
        db = Database("sqlite://")
        app = create_app(settings=get_settings(), database=db)
        with pytest.raises(SchemaOutOfDateError) as info:
            run_lifespan(app)
        assert info.value.pending == ["0001"]

    def test_migrated_database_starts(self, database):
        app = create_app(settings=get_settings(), database=database)
        with TestClient(app) as client:
            assert client.get("/").status_code == 200


def completed_events(caplog):
    events = []
    for rec in caplog.records:
        try:
            events.append(json.loads(rec.getMessage()))
        except ValueError:
            continue
    return [e for e in events if e.get("event") == "request.completed"]


class TestRequestLogging:
    def test_request_completed_event(self, client, caplog):
        caplog.set_level("INFO", logger="todo_api")
        res = client.get("/todos")
        assert res.status_code == 200

        completed = completed_events(caplog)
        assert completed
        evt = completed[-1]
        assert evt["method"] == "GET"
        assert evt["path"] == "/todos"
        assert evt["status"] == 200
        assert isinstance(evt["latency_ms"], int)
        assert evt["request_id"] == res.headers["X-Request-ID"]

    def test_unhandled_error_is_logged_as_500(self, app, caplog):
        @app.get("/explode")
        def explode():
            raise RuntimeError("unexpected")

        caplog.set_level("INFO", logger="todo_api")
        with TestClient(app, raise_server_exceptions=False) as client:
            res = client.get("/explode")
        assert res.status_code == 500

        evt = [e for e in completed_events(caplog) if e["path"] == "/explode"][-1]
        assert evt["status"] == 500
        assert evt["method"] == "GET"


class TestCli:
    def test_migrate_command(self, tmp_path, monkeypatch):
        db_path = tmp_path / "todos.db"
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")

        assert cli.main(["migrate"]) == 0
        db = Database(f"sqlite:///{db_path}")
        try:
            assert migrations.current_revision(db) == "0001"
        finally:
            db.dispose()

    def test_migrate_unreachable_database(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'todos.db'}")
        assert cli.main(["migrate"]) == 1

    def test_openapi_command(self, tmp_path):
        out = tmp_path / "interfaces" / "openapi.json"
        assert cli.main(["openapi", "--output", str(out)]) == 0

        schema = json.loads(out.read_text(encoding="utf-8"))
        assert "/todos" in schema["paths"]
        assert "/todos/{todo_id}" in schema["paths"]
        assert {t["name"] for t in schema["tags"]} >= {"health", "todos"}
        assert os.path.exists(out)

    def test_serve_migrates_before_listening(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'todos.db'}"
        monkeypatch.setenv("DATABASE_URL", url)
        calls = []

        def fake_run(app, host, port, log_level):
            database = app.state.database
            calls.append(
                {
                    "url": database.url,
                    "pending": migrations.pending(database),
                    "host": host,
                    "port": port,
                }
            )

        monkeypatch.setattr(cli.uvicorn, "run", fake_run)

        assert cli.main(["serve", "--port", "9090"]) == 0
        assert len(calls) == 1
        assert calls[0]["url"] == url
        assert calls[0]["pending"] == []
        assert calls[0]["port"] == 9090
        assert calls[0]["host"] == get_settings().host

    def test_serve_no_migrate_leaves_schema_alone(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'todos.db'}")
        seen = []

        def fake_run(app, host, port, log_level):
            seen.append(migrations.pending(app.state.database))

        monkeypatch.setattr(cli.uvicorn, "run", fake_run)

        assert cli.main(["serve", "--no-migrate"]) == 0
        assert seen == [["0001"]]

    def test_serve_unreachable_database(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'todos.db'}")
        ran = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda *a, **kw: ran.append(True))

        assert cli.main(["serve"]) == 1
        assert ran == []
