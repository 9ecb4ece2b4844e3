from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from taskdesk.schemas.common import UtcDatetime

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class UserCreate(BaseModel):
    model_config = _camel

    name: str
    email: EmailStr
    password: str
    role: Literal["admin", "employee"] = "employee"

class UserUpdate(BaseModel):
    model_config = _camel

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Literal["admin", "employee"]] = None

class UserOut(BaseModel):
    model_config = _camel

    id: int
    name: str
    email: str
    role: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
