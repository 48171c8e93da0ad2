from pydantic import EmailStr, Field

from dailysync.app.models.enums import Role
from .base import ApiModel, ORMBase


class UserCreate(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    role: Role = Role.USER
    is_active: bool = True


class UserOut(ORMBase):
    name: str
    email: str
    role: Role
    is_active: bool


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)
