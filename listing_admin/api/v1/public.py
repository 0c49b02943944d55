from __future__ import annotations
from typing import Annotated, List

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from listing_admin.core.config import settings
from listing_admin.core.deps import get_property_service
from listing_admin.schemas.property import PropertyOut
from listing_admin.services.properties import PropertyService

# Read-only listing for the public site. Lives under its own prefix so the
# CORS layer can give it a GET-only policy.
router = APIRouter(prefix=f"{settings.public_prefix}/properties", tags=["public"])


@router.get("", response_model=List[PropertyOut])
async def list_public_properties(service: Annotated[PropertyService, Depends(get_property_service)]):
    props = await run_in_threadpool(service.list)
    return [PropertyOut.model_validate(p) for p in props]


@router.get("/{property_id}", response_model=PropertyOut)
async def get_public_property(property_id: int, service: Annotated[PropertyService, Depends(get_property_service)]):
    prop = await run_in_threadpool(service.get, property_id)
    return PropertyOut.model_validate(prop)
