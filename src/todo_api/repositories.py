from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Todo
from .schemas import TodoCreate


# PUBLIC_INTERFACE
class TodoRepository:
    """
    CRUD operations for todos over a single SQLAlchemy session.

    The session is opened and closed by the caller (see `Database.session`);
    each write commits before returning, so a failed commit surfaces inside the
    handler rather than after the response is sent.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, data: TodoCreate) -> Todo:
        """Create and return a new Todo with its assigned id."""
        todo = Todo(title=data.title, completed=data.completed)
        self._session.add(todo)
        self._session.commit()
        self._session.refresh(todo)
        return todo

    def get(self, todo_id: int) -> Optional[Todo]:
        """Return a Todo by id, or None if not found."""
        return self._session.get(Todo, todo_id)

    def list(self) -> List[Todo]:
        """Return every Todo, oldest id first."""
        return list(self._session.scalars(select(Todo).order_by(Todo.id)))

    def update(self, todo_id: int, changes: Dict[str, Any]) -> Optional[Todo]:
        """Apply the given field values. Return the updated Todo or None if not found."""
        todo = self.get(todo_id)
        if todo is None:
            return None
        for field, value in changes.items():
            setattr(todo, field, value)
        todo.updated_at = datetime.now()
        self._session.commit()
        self._session.refresh(todo)
        return todo

    def delete(self, todo_id: int) -> bool:
        """Delete a Todo by id. Return True if deleted, False if not found."""
        todo = self.get(todo_id)
        if todo is None:
            return False
        self._session.delete(todo)
        self._session.commit()
        return True
