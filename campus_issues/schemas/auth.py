# File: campus_issues/schemas/auth.py

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

class RegisterIn(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8, max_length=512)

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=512)

class TokenPair(BaseModel):
    access_token: str
    token_type: str
    expires_in: int

class AdminLoginIn(BaseModel):
    admin_id: str = Field(min_length=1)
    password: str = Field(min_length=1)

class AdminSessionOut(BaseModel):
    admin_token: str | None = None
    subject: str
    issued_at: datetime
    expires_at: datetime
