from __future__ import annotations
from typing import Annotated

from fastapi import APIRouter, Depends

from listing_admin.core.config import settings
from listing_admin.core.deps import get_access_gate, get_token_status
from listing_admin.core.security import AccessGate, TokenStatus
from listing_admin.schemas.auth import LoginRequest, TokenOut, VerifyOut

router = APIRouter(prefix=settings.api_prefix, tags=["auth"])


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, gate: Annotated[AccessGate, Depends(get_access_gate)]):
    # AuthError -> 401 {"error": ...}
    return TokenOut(token=gate.issue_token(payload.password))


@router.get("/verify", response_model=VerifyOut)
def verify(status: Annotated[TokenStatus, Depends(get_token_status)]):
    # Always 200; the body says whether the token is usable.
    return VerifyOut(valid=status.valid, role=status.role)
