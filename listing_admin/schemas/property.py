from __future__ import annotations
import enum
from datetime import datetime
from typing import List, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, field_validator

from listing_admin.utils.strings import norm_str

# largest value an Integer column holds on every supported backend
MAX_INT = 2**31 - 1

TRUTHY = {"true", "1", "yes", "on"}
FALSY = {"false", "0", "no", "off", ""}


class PropertyStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"


def parse_number(v, *, integer: bool = False) -> Optional[Union[int, float]]:
    """
    Turn a client value into a non-negative number.
      - None / "" -> None
      - "1,250,000", "$ 450000" -> 1250000, 450000
      - anything non-numeric or negative -> ValueError
      - whole numbers above MAX_INT -> ValueError
    """
    if v is None:
        return None
    if isinstance(v, bool):
        raise ValueError("must be a number")
    if isinstance(v, str):
        s = v.strip().replace(",", "")
        if s.startswith("$"):
            s = s[1:].strip()
        if s == "":
            return None
        try:
            v = float(s)
        except ValueError:
            raise ValueError(f"{v!r} is not a number")
    if not isinstance(v, (int, float)):
        raise ValueError("must be a number")
    if v != v or v in (float("inf"), float("-inf")):
        raise ValueError("must be a finite number")
    if v < 0:
        raise ValueError("must not be negative")
    if integer:
        if float(v) != int(v):
            raise ValueError("must be a whole number")
        if v > MAX_INT:
            raise ValueError(f"must be at most {MAX_INT}")
        return int(v)
    return float(v)


def parse_flag(v) -> Optional[bool]:
    if v is None or isinstance(v, bool):
        return v
    if isinstance(v, int) and v in (0, 1):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in TRUTHY:
            return True
        if s in FALSY:
            return False
    raise ValueError(f"{v!r} is not a boolean")


class PropertyFields(BaseModel):
    """
    Scalar listing fields as sent by the admin client, normalized.

    Only the keys the client actually sent are "set"; the update path relies on
    ``model_dump(exclude_unset=True)`` to leave everything else untouched.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    price: Optional[float] = None
    status: Optional[PropertyStatus] = None
    address: Optional[str] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft: Optional[int] = None
    type: Optional[str] = None
    lot_size: Optional[str] = None
    basement: Optional[str] = None
    description: Optional[str] = None
    listing_url: Optional[str] = None
    hot_deal: Optional[bool] = None

    @field_validator("name", "address", mode="before")
    @classmethod
    def _required_text(cls, v):
        s = norm_str(v) if not isinstance(v, (int, float)) else str(v)
        if s is None:
            raise ValueError("must not be empty")
        return s

    @field_validator("type", "lot_size", "basement", "description", mode="before")
    @classmethod
    def _optional_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return norm_str(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        if isinstance(v, PropertyStatus):
            return v
        s = norm_str(v)
        if s is None:
            raise ValueError("must not be empty")
        s = s.lower()
        allowed = [st.value for st in PropertyStatus]
        if s not in allowed:
            raise ValueError(f"must be one of {', '.join(allowed)}")
        return s

    @field_validator("price", "baths", mode="before")
    @classmethod
    def _decimal(cls, v):
        return parse_number(v)

    @field_validator("beds", "sqft", mode="before")
    @classmethod
    def _whole(cls, v):
        return parse_number(v, integer=True)

    @field_validator("hot_deal", mode="before")
    @classmethod
    def _flag(cls, v):
        return parse_flag(v)

    @field_validator("listing_url", mode="before")
    @classmethod
    def _url(cls, v):
        s = norm_str(v)
        if s is None:
            return None
        parts = urlsplit(s)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("must be an http(s) URL")
        return s


class PropertyOut(BaseModel):
    id: int
    name: str
    price: Optional[float] = None
    status: str
    address: str
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft: Optional[int] = None
    type: Optional[str] = None
    lot_size: Optional[str] = None
    basement: Optional[str] = None
    description: Optional[str] = None
    listing_url: Optional[str] = None
    hot_deal: bool = False
    cover_image: Optional[str] = None
    gallery_images: List[str] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("gallery_images", mode="before")
    @classmethod
    def _gallery(cls, v):
        return list(v or [])


class DeleteResult(BaseModel):
    success: bool = True
