from __future__ import annotations


class TodoApiError(Exception):
    """Base class for errors raised by the todo service outside a request."""


# PUBLIC_INTERFACE
class DatabaseUnavailableError(TodoApiError):
    """The configured database could not be reached at startup."""


# PUBLIC_INTERFACE
class SchemaOutOfDateError(TodoApiError):
    """
    The database schema is behind the code; run `todo-api migrate` first.

    Attributes:
        pending: Alembic revisions that have not been applied yet.
    """

    def __init__(self, pending: list[str]) -> None:
        self.pending = list(pending)
        revisions = ", ".join(self.pending)
        super().__init__(f"Database schema is out of date; pending revisions: {revisions}")
