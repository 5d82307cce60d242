from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

TITLE_MAX_LENGTH = 200


def _now() -> datetime:
    return datetime.now()


# PUBLIC_INTERFACE
class Todo(Base):
    """
    ORM model for a Todo item.

    Fields:
    - id: Unique integer identifier assigned by the database
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - completed: Boolean completion flag
    - created_at: creation timestamp, set on insert
    - updated_at: last update timestamp, refreshed on every update

    The table itself is created by the Alembic revisions in
    `todo_api/migrations/versions`, not by `Base.metadata.create_all`.
    """

    __tablename__ = "todos"
    __table_args__ = (Index("idx_todos_completed", "completed"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now, onupdate=_now)

    def __repr__(self) -> str:
        return f"<Todo id={self.id} title={self.title!r} completed={self.completed}>"
