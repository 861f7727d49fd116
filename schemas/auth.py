from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: str
    password: str


class AdminUserResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginSuccessResponse(BaseModel):
    success: bool = True
    token: str
    user: AdminUserResponse


class MeResponse(BaseModel):
    success: bool = True
    user: AdminUserResponse
