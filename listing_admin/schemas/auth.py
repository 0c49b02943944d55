from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"


class VerifyOut(BaseModel):
    valid: bool
    role: Optional[str] = None
