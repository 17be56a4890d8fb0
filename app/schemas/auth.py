from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

class UserRegister(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=72)
    confirm_password: str = Field(..., alias="confirmPassword")

    @field_validator("username", "email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

class UserLogin(BaseModel):
    username: str
    password: str

class SessionUser(BaseModel):
    """Non-sensitive identity fields held in a session."""
    id: int
    username: str
    email: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str

class PublicUser(BaseModel):
    username: str
    email: str

class CurrentUserResponse(BaseModel):
    loggedIn: bool
    user: Optional[PublicUser] = None
