"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

from taskboard.domain.entities import TaskPriority, TaskStatus


# ---- Auth ----
class LoginRequest(BaseModel):
    username_or_email: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1)

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[Dict[str, Any]] = None

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: str = Field(..., min_length=4, max_length=100)
    password: str = Field(..., min_length=8, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=100)


# ---- User ----
class UserOut(BaseModel):
    id: str
    username: str
    email: str
    full_name: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None

class PasswordChangeRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8, max_length=50)


# ---- Board ----
class BoardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=300)
    color: Optional[str] = None

class BoardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=300)
    color: Optional[str] = None

class BoardOut(BaseModel):
    id: str
    name: str
    description: str = ""
    color: str
    owner_id: str
    members: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BoardMemberAdd(BaseModel):
    user_id: str

class OwnershipTransfer(BaseModel):
    new_owner_id: str

class BoardStatistics(BaseModel):
    board_id: str
    total: int
    by_status: Dict[str, int]
    overdue: int
    due_soon: int = 0
    members: int


# ---- Task ----
class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    board_id: str
    description: Optional[str] = Field(None, max_length=500)
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

class TaskStatusChange(BaseModel):
    status: TaskStatus

class TaskMove(BaseModel):
    status: TaskStatus
    index: int = Field(..., ge=0)

class TaskOut(BaseModel):
    id: str
    title: str
    description: str = ""
    status: TaskStatus
    priority: TaskPriority
    board_id: str
    created_by: str
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: List[str] = []
    position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    class Config:
        from_attributes = True


# ---- Generic ----
class MessageResponse(BaseModel):
    message: str
    detail: Optional[Any] = None
