from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from typing import Optional
from datetime import datetime


class TodoCreate(BaseModel):
    title: StrictStr


class TodoUpdate(BaseModel):
    title: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None


class TodoResponse(BaseModel):
    # Wire names follow the browser client: _id, createdAt, updatedAt
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    title: str
    completed: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_document(cls, doc: dict) -> "TodoResponse":
        return cls(
            id=doc["_id"],
            title=doc["title"],
            completed=doc["completed"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"]
        )


class MessageResponse(BaseModel):
    message: str
