from datetime import datetime

from pydantic import BaseModel, field_validator

USERNAME_MIN, USERNAME_MAX = 3, 50
PASSWORD_MIN, PASSWORD_MAX = 1, 128


def _check_password(v: str) -> str:
    if len(v) < PASSWORD_MIN:
        raise ValueError("Password must not be empty.")
    if len(v) > PASSWORD_MAX:
        raise ValueError(f"Password must be at most {PASSWORD_MAX} characters.")
    return v


class UserCreate(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_shape(cls, v: str) -> str:
        v = v.strip()
        if not (USERNAME_MIN <= len(v) <= USERNAME_MAX):
            raise ValueError(f"Username must be {USERNAME_MIN}-{USERNAME_MAX} characters.")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)


class UserLogin(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class UserResponse(BaseModel):
    id: int
    username: str
    created_at: datetime | None = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)


class DeleteAccountRequest(BaseModel):
    password: str
