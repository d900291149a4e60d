from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from typing import Optional, Dict, Any, List
from loguru import logger
from bson import ObjectId
from bson.errors import InvalidId
import re

from app.exceptions import ConflictError, StoreError
from app.services.store import Store


def mask_mongo_url(url: str) -> str:
    return re.sub(r":([^@/]+)@", ":******@", url)


def _to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _stringify_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc:
        doc["_id"] = str(doc["_id"])
    return doc


class MongoStore(Store):

    name = "mongodb"

    def __init__(
        self,
        url: str,
        db_name: str,
        max_pool_size: int = 10,
        server_selection_timeout_ms: int = 10000
    ):
        self.url = url
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None
        self.db = None

    async def connect(self):
        logger.info(f"Using MongoDB URI: {mask_mongo_url(self.url)}")
        try:
            self.client = AsyncIOMotorClient(
                self.url,
                maxPoolSize=self.max_pool_size,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                retryWrites=True,
                tz_aware=True
            )
            self.db = self.client[self.db_name]

            await self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB: {self.db_name}")

            await self.db.users.create_index("email", unique=True)
            await self.db.todos.create_index(
                [("owner_id", ASCENDING), ("created_at", DESCENDING)])

        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise StoreError(f"Failed to connect to MongoDB: {e}") from e

    async def disconnect(self):
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        if self.db is None:
            raise StoreError("Database not connected")
        return self.db[name]

    async def ping(self) -> Dict[str, Any]:
        if self.client is None:
            raise StoreError("Database not connected")
        try:
            await self.client.admin.command('ping')
            return {
                "connected": True,
                "name": self.db_name,
                "todos": await self.db.todos.count_documents({}),
                "users": await self.db.users.count_documents({})
            }
        except PyMongoError as e:
            raise StoreError(f"MongoDB ping failed: {e}") from e

    # Users

    async def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        collection = self.get_collection("users")
        user_doc = dict(user_data)

        try:
            result = await collection.insert_one(user_doc)
        except DuplicateKeyError as e:
            raise ConflictError("User with this email already exists", field="email") from e
        except PyMongoError as e:
            raise StoreError(f"Failed to create user: {e}") from e

        user_doc["_id"] = str(result.inserted_id)
        return user_doc

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        collection = self.get_collection("users")
        try:
            user = await collection.find_one({"email": email})
        except PyMongoError as e:
            raise StoreError(f"Failed to look up user: {e}") from e
        return _stringify_id(user)

    # Todos

    async def list_todos(self, owner_id: str) -> List[Dict[str, Any]]:
        collection = self.get_collection("todos")
        try:
            cursor = collection.find({"owner_id": owner_id}).sort(
                [("created_at", DESCENDING), ("_id", DESCENDING)])
            todos = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreError(f"Failed to list todos: {e}") from e

        for todo in todos:
            todo["_id"] = str(todo["_id"])
        return todos

    async def create_todo(self, todo_data: Dict[str, Any]) -> Dict[str, Any]:
        collection = self.get_collection("todos")
        todo_doc = dict(todo_data)
        try:
            result = await collection.insert_one(todo_doc)
        except PyMongoError as e:
            raise StoreError(f"Failed to create todo: {e}") from e

        todo_doc["_id"] = str(result.inserted_id)
        return todo_doc

    async def update_todo(
        self,
        owner_id: str,
        todo_id: str,
        fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        collection = self.get_collection("todos")
        oid = _to_object_id(todo_id)
        if oid is None:
            return None
        try:
            todo = await collection.find_one_and_update(
                {"_id": oid, "owner_id": owner_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise StoreError(f"Failed to update todo: {e}") from e
        return _stringify_id(todo)

    async def delete_todo(self, owner_id: str, todo_id: str) -> bool:
        collection = self.get_collection("todos")
        oid = _to_object_id(todo_id)
        if oid is None:
            return False
        try:
            result = await collection.delete_one({"_id": oid, "owner_id": owner_id})
        except PyMongoError as e:
            raise StoreError(f"Failed to delete todo: {e}") from e
        return result.deleted_count > 0
