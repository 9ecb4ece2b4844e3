from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskdesk.schemas.common import UtcDatetime

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

TaskStatus = Literal["pending", "completed"]

class TaskCreate(BaseModel):
    model_config = _camel

    title: str
    description: Optional[str] = None
    assigned_to: int
    status: TaskStatus = "pending"
    # Only honoured when CRUD routes are open and no token is sent
    created_by: Optional[int] = None

class TaskUpdate(BaseModel):
    model_config = _camel

    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None

class TaskOut(BaseModel):
    model_config = _camel

    id: int
    title: str
    description: Optional[str]
    assigned_to: int
    status: TaskStatus
    created_by: Optional[int]
    created_at: UtcDatetime
    updated_at: UtcDatetime
