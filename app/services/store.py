"""
Storage interface for users and todos.

Exactly one implementation is active per process; ``create_store`` picks it
from ``settings.STORE_BACKEND`` at startup.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.config import Settings


class Store(ABC):

    name: str = "abstract"

    async def connect(self) -> None:
        """Open connections and ensure indexes."""

    async def disconnect(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> Dict[str, Any]:
        """Return connectivity details and document counts; raise StoreError if unreachable."""

    # Users

    @abstractmethod
    async def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a user; raise ConflictError if the email is taken."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        ...

    # Todos

    @abstractmethod
    async def list_todos(self, owner_id: str) -> List[Dict[str, Any]]:
        """Owner's todos, newest created first."""

    @abstractmethod
    async def create_todo(self, todo_data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def update_todo(
        self,
        owner_id: str,
        todo_id: str,
        fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply ``fields`` and return the updated todo, or None if absent."""

    @abstractmethod
    async def delete_todo(self, owner_id: str, todo_id: str) -> bool:
        ...


def create_store(settings: Settings) -> Store:
    if settings.STORE_BACKEND == "memory":
        from app.services.memory_store import MemoryStore
        return MemoryStore()

    from app.services.database import MongoStore
    return MongoStore(
        url=settings.MONGODB_URL,
        db_name=settings.MONGODB_DB_NAME,
        max_pool_size=settings.MONGODB_MAX_POOL_SIZE,
        server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS
    )
