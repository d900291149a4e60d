"""
FastAPI dependencies for the services built at startup.

The services live on ``app.state``; routes reach them through these
providers so tests can build the app around a different store.
"""

from typing import Annotated

from fastapi import Depends, Request

from app.services.auth_service import AuthService
from app.services.todo_service import TodoService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_todo_service(request: Request) -> TodoService:
    return request.app.state.todo_service


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]
