from alembic.autogenerate import compare_metadata
from alembic.runtime.migration import MigrationContext
from sqlalchemy import inspect, text

from todo_api import migrations
from todo_api.db import Database
from todo_api.models import Base


def fresh_database() -> Database:
    return Database("sqlite://")


class TestUpgrade:
    def test_fresh_database_has_no_revision(self):
        db = fresh_database()
        assert migrations.current_revision(db) is None
        assert migrations.pending(db) == ["0001"]
        assert migrations.head_revision() == "0001"

    def test_upgrade_creates_todos_table(self):
        db = fresh_database()
        applied = migrations.upgrade(db)
        assert applied == ["0001"]

        insp = inspect(db.engine)
        assert insp.has_table("todos")
        columns = {c["name"] for c in insp.get_columns("todos")}
        assert columns == {"id", "title", "completed", "created_at", "updated_at"}
        indexes = {ix["name"] for ix in insp.get_indexes("todos")}
        assert "idx_todos_completed" in indexes
        assert migrations.current_revision(db) == "0001"
        assert migrations.pending(db) == []

    def test_upgrade_is_idempotent(self):
        db = fresh_database()
        migrations.upgrade(db)
        assert migrations.upgrade(db) == []
        with db.engine.connect() as conn:
            versions = conn.execute(text("SELECT version_num FROM alembic_version")).scalars().all()
        assert versions == ["0001"]

    def test_upgrade_keeps_existing_rows(self):
        db = fresh_database()
        migrations.upgrade(db)
        with db.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO todos (title, completed, created_at, updated_at) "
                    "VALUES ('keep me', 0, '2025-01-01 00:00:00', '2025-01-01 00:00:00')"
                )
            )

        migrations.upgrade(db)

        with db.engine.connect() as conn:
            titles = conn.execute(text("SELECT title FROM todos")).scalars().all()
        assert titles == ["keep me"]

    def test_migrated_schema_matches_models(self):
        db = fresh_database()
        migrations.upgrade(db)
        with db.engine.connect() as conn:
            diff = compare_metadata(MigrationContext.configure(conn), Base.metadata)
        assert diff == []
