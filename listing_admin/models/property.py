from __future__ import annotations
from datetime import datetime
from typing import Optional, List

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, func, false

from listing_admin.db.base import Base


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(32), index=True)
    address: Mapped[str] = mapped_column(String(512))
    beds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    baths: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sqft: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    lot_size: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    basement: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    listing_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    hot_deal: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)

    # --- Images (public URLs into the image bucket) ---
    cover_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    gallery_images: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
