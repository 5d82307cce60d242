from __future__ import annotations

from typing import Annotated, Generator, List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from ..db import Database
from ..repositories import TodoRepository
from ..schemas import ErrorResponse, TodoCreate, TodoDeleted, TodoOut, TodoUpdate

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    responses={500: {"model": ErrorResponse, "description": "Database error"}},
)


def get_database(request: Request) -> Database:
    """
    Return the Database the application was built with.
    """
    return request.app.state.database


def get_repository(database: Database = Depends(get_database)) -> Generator[TodoRepository, None, None]:
    """
    Repository bound to a per-request session, closed once the request is done.
    """
    with database.session() as session:
        yield TodoRepository(session)


# Largest value a signed 64-bit INTEGER column can hold
MAX_TODO_ID = 2**63 - 1

TodoId = Annotated[int, Path(ge=1, le=MAX_TODO_ID, description="Todo identifier")]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": ErrorResponse, "description": "Validation error"},
    },
)
def create_todo(payload: TodoCreate, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    """
    Create a new Todo.
    """
    created = repo.create(payload)
    return TodoOut.model_validate(created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="List every Todo item, oldest first.",
    responses={200: {"description": "List retrieved successfully"}},
)
def list_todos(repo: TodoRepository = Depends(get_repository)) -> List[TodoOut]:
    return [TodoOut.model_validate(t) for t in repo.list()]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
    },
)
def get_todo(todo_id: TodoId, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    item = repo.get(todo_id)
    if item is None:
        raise _not_found()
    return TodoOut.model_validate(item)


def _apply_update(todo_id: int, payload: TodoUpdate, repo: TodoRepository) -> TodoOut:
    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    updated = repo.update(todo_id, changes)
    if updated is None:
        raise _not_found()
    return TodoOut.model_validate(updated)


_UPDATE_RESPONSES = {
    200: {"description": "Todo updated"},
    400: {"description": "Validation error or empty update"},
    404: {"description": "Todo not found"},
}


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Update fields of a Todo item. Fields omitted from the body keep their value.",
    responses=_UPDATE_RESPONSES,
)
def put_todo(todo_id: TodoId, payload: TodoUpdate, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    return _apply_update(todo_id, payload, repo)


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Patch Todo",
    description="Partially update fields of a Todo item.",
    responses=_UPDATE_RESPONSES,
)
def patch_todo(todo_id: TodoId, payload: TodoUpdate, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    """
    Partial update of a Todo item. Same semantics as PUT.
    """
    return _apply_update(todo_id, payload, repo)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=TodoDeleted,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(todo_id: TodoId, repo: TodoRepository = Depends(get_repository)) -> TodoDeleted:
    """
    Delete a Todo. Returns an acknowledgment on success, 404 if not found.
    """
    if not repo.delete(todo_id):
        raise _not_found()
    return TodoDeleted(id=todo_id)
