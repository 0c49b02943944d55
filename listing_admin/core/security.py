from __future__ import annotations
import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from listing_admin.core.config import Settings
from listing_admin.core.exceptions import AuthError

logger = logging.getLogger(__name__)

ADMIN_SUBJECT = "admin"
ADMIN_ROLE = "admin"


class TokenPayload(BaseModel):
    sub: str
    type: str    # "access"
    role: str
    jti: str
    iat: int
    exp: int


@dataclass(frozen=True)
class TokenStatus:
    valid: bool
    role: Optional[str] = None


class AccessGate:
    """Single shared-password login that hands out signed access tokens."""

    def __init__(self, conf: Settings):
        self.admin_password = conf.admin_password
        self.secret_key = conf.secret_key
        self.algorithm = conf.algorithm
        self.expires_delta = timedelta(minutes=conf.access_token_expire_minutes)

    def issue_token(self, password: str) -> str:
        if not password or not hmac.compare_digest(
            password.encode("utf-8"), self.admin_password.encode("utf-8")
        ):
            logger.warning("Rejected admin login")
            raise AuthError("Invalid password")

        now = datetime.now(timezone.utc)
        payload = {
            "sub": ADMIN_SUBJECT,
            "type": "access",
            "role": ADMIN_ROLE,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_delta).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> TokenStatus:
        """Never raises: anything unreadable, expired or mis-signed is invalid."""
        if not token:
            return TokenStatus(valid=False)
        try:
            data = TokenPayload(**jwt.decode(token, self.secret_key, algorithms=[self.algorithm]))
        except (JWTError, PydanticValidationError, TypeError):
            return TokenStatus(valid=False)
        if data.type != "access":
            return TokenStatus(valid=False)
        return TokenStatus(valid=True, role=data.role)
