from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

class Token(BaseModel):
    access_token: str
    token_type: str

class UserRegister(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Optional[Literal["admin", "employee"]] = None

class UserLogin(BaseModel):
    # Plain str: a malformed email is just another failed login
    email: str
    password: str

class LoginOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    token_type: str = "bearer"
    role: str
    id: int
    name: str

class Identity(BaseModel):
    """Caller identity decoded from a verified access token."""
    id: int
    role: Literal["admin", "employee"]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
