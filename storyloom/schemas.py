from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from fastapi_users import schemas

from .models import PageStatus

# =========================
# USER SCHEMAS
# =========================
class UserRead(schemas.BaseUser[int]):
    username: str
    created_at: Optional[datetime] = None

class UserCreate(schemas.BaseUserCreate):
    username: str = Field(min_length=3, max_length=64)

class UserUpdate(schemas.BaseUserUpdate):
    username: Optional[str] = Field(default=None, min_length=3, max_length=64)


class UserPublic(BaseModel):
    """Author-facing projection; credentials are never exposed."""
    id: int
    username: str
    email: EmailStr
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =========================
# COLLABORATOR SCHEMAS
# =========================
class CollaboratorRead(BaseModel):
    id: int
    work_id: int
    user_id: int
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user: UserPublic

    class Config:
        from_attributes = True


# =========================
# PAGE SCHEMAS
# =========================
class PageCreate(BaseModel):
    content: str = Field(min_length=1)

class PageUpdate(BaseModel):
    content: str = Field(min_length=1)

class PageRead(BaseModel):
    id: int
    work_id: int
    author_id: int
    content: str
    page_number: Optional[int] = None
    status: PageStatus
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: UserPublic

    class Config:
        from_attributes = True


class ContributorRank(BaseModel):
    user_id: int
    username: str
    page_count: int


class MessageRead(BaseModel):
    message: str


__all__ = [
    "UserRead", "UserCreate", "UserUpdate", "UserPublic",
    "CollaboratorRead", "PageCreate", "PageUpdate", "PageRead",
    "ContributorRank", "MessageRead",
]
