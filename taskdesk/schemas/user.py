from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from taskdesk.utils.auth import check_password_length


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v):
        if not v.strip():
            raise ValueError("username cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_valid(cls, v):
        if not v:
            raise ValueError("password cannot be empty")
        return check_password_length(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("username", "email", mode="before")
    @classmethod
    def blank_means_unchanged(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr
    role: str


class UserRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class LoginResult(BaseModel):
    token: str
    user: UserOut
