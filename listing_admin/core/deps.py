from __future__ import annotations
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from listing_admin.core.config import settings
from listing_admin.core.exceptions import AuthError
from listing_admin.core.security import AccessGate, TokenStatus
from listing_admin.db.session import get_db
from listing_admin.services.images import ImageIngestor
from listing_admin.services.properties import PropertyService
from listing_admin.services.records import PropertyStore
from listing_admin.services.storage import ObjectStore, S3ObjectStore

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_access_gate() -> AccessGate:
    return AccessGate(settings)


@lru_cache
def get_object_store() -> ObjectStore:
    # One boto3 client per process, created on first use.
    return S3ObjectStore.from_settings(settings)


def get_token_status(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    gate: Annotated[AccessGate, Depends(get_access_gate)],
) -> TokenStatus:
    token = credentials.credentials if credentials else None
    return gate.verify(token)


def require_admin(status: Annotated[TokenStatus, Depends(get_token_status)]) -> TokenStatus:
    """
    FastAPI dependency: require a valid bearer token.

    Usage:
        router = APIRouter(dependencies=[Depends(require_admin)])
    """
    if not status.valid:
        raise AuthError("Invalid or missing token")
    return status


def get_image_ingestor(
    store: Annotated[ObjectStore, Depends(get_object_store)],
) -> ImageIngestor:
    return ImageIngestor(
        store,
        bucket=settings.storage_bucket,
        key_prefix=settings.storage_key_prefix,
        max_workers=settings.upload_workers,
    )


def get_property_service(
    db: Annotated[Session, Depends(get_db)],
    ingestor: Annotated[ImageIngestor, Depends(get_image_ingestor)],
) -> PropertyService:
    return PropertyService(
        PropertyStore(db, order=settings.list_order),
        ingestor,
        purge_images_on_delete=settings.purge_images_on_delete,
    )
