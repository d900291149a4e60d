"""
Todo routes. Every route requires a valid bearer token and only touches
the caller's own todos.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from app.dependencies import TodoServiceDep
from app.middleware.auth_middleware import get_current_user
from app.models.todo import MessageResponse, TodoCreate, TodoResponse, TodoUpdate
from app.models.user import TokenData

router = APIRouter(prefix="/api/todos", tags=["todos"])


@router.get("", response_model=List[TodoResponse])
async def list_todos(
    todo_service: TodoServiceDep,
    current_user: TokenData = Depends(get_current_user)
):
    todos = await todo_service.list(current_user.user_id)
    return [TodoResponse.from_document(todo) for todo in todos]


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
async def create_todo(
    payload: TodoCreate,
    todo_service: TodoServiceDep,
    current_user: TokenData = Depends(get_current_user)
):
    todo = await todo_service.create(current_user.user_id, payload.title)
    return TodoResponse.from_document(todo)


@router.patch("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    todo_service: TodoServiceDep,
    current_user: TokenData = Depends(get_current_user)
):
    """
    Apply a partial update. Only the fields present in the body change;
    ``updatedAt`` is refreshed either way.
    """
    changes = payload.model_dump(exclude_unset=True)
    todo = await todo_service.update(current_user.user_id, todo_id, changes)
    return TodoResponse.from_document(todo)


@router.delete("/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: str,
    todo_service: TodoServiceDep,
    current_user: TokenData = Depends(get_current_user)
):
    return await todo_service.delete(current_user.user_id, todo_id)
