from __future__ import annotations
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from listing_admin.core.config import settings
from listing_admin.core.deps import get_property_service, require_admin
from listing_admin.schemas.property import DeleteResult, PropertyOut
from listing_admin.services.gallery import parse_url_list
from listing_admin.services.images import UploadedFile
from listing_admin.services.properties import PropertyService

router = APIRouter(
    prefix=f"{settings.api_prefix}/properties",
    tags=["properties"],
    dependencies=[Depends(require_admin)],
)

ServiceDep = Annotated[PropertyService, Depends(get_property_service)]

# form keys a field may arrive under, when not just its own name
_WIRE_NAMES = {"lot_size": ("lot_size", "lot")}


# --- Helpers ---

async def property_form(
    request: Request,
    name: Annotated[Optional[str], Form()] = None,
    price: Annotated[Optional[str], Form()] = None,
    status: Annotated[Optional[str], Form()] = None,
    address: Annotated[Optional[str], Form()] = None,
    beds: Annotated[Optional[str], Form()] = None,
    baths: Annotated[Optional[str], Form()] = None,
    sqft: Annotated[Optional[str], Form()] = None,
    type: Annotated[Optional[str], Form()] = None,
    lot: Annotated[Optional[str], Form()] = None,
    lot_size: Annotated[Optional[str], Form()] = None,
    basement: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    listing_url: Annotated[Optional[str], Form()] = None,
    hot_deal: Annotated[Optional[str], Form()] = None,
) -> Dict[str, Any]:
    """
    Scalar form fields, keeping only the ones the client actually sent.

    FastAPI hands an emptied input over as None, the same as a missing one; the
    raw form tells them apart so that "" still reaches validation and clears
    the field.
    """
    sent = await request.form()
    raw = {
        "name": name,
        "price": price,
        "status": status,
        "address": address,
        "beds": beds,
        "baths": baths,
        "sqft": sqft,
        "type": type,
        "lot_size": lot_size if lot_size is not None else lot,
        "basement": basement,
        "description": description,
        "listing_url": listing_url,
        "hot_deal": hot_deal,
    }
    fields = {}
    for key, value in raw.items():
        if value is not None:
            fields[key] = value
        elif any(wire in sent for wire in _WIRE_NAMES.get(key, (key,))):
            fields[key] = ""
    return fields


FormDep = Annotated[Dict[str, Any], Depends(property_form)]


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    if upload is None:
        return None
    data = await upload.read()
    if not data and not upload.filename:
        # browsers send an empty part for an untouched file input
        return None
    return UploadedFile(data=data, filename=upload.filename, content_type=upload.content_type)


async def _read_uploads(uploads: Optional[List[UploadFile]]) -> List[UploadedFile]:
    files = []
    for up in uploads or []:
        f = await _read_upload(up)
        if f is not None:
            files.append(f)
    return files


# --- Endpoints ---

@router.get("", response_model=List[PropertyOut])
async def list_properties(service: ServiceDep):
    props = await run_in_threadpool(service.list)
    return [PropertyOut.model_validate(p) for p in props]


@router.get("/{property_id}", response_model=PropertyOut)
async def get_property(property_id: int, service: ServiceDep):
    prop = await run_in_threadpool(service.get, property_id)
    return PropertyOut.model_validate(prop)


@router.post("", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(
    service: ServiceDep,
    fields: FormDep,
    coverImage: Annotated[Optional[UploadFile], File()] = None,
    galleryImages: Annotated[Optional[List[UploadFile]], File()] = None,
):
    cover = await _read_upload(coverImage)
    gallery = await _read_uploads(galleryImages)

    prop = await run_in_threadpool(service.create, fields, cover, gallery)
    return PropertyOut.model_validate(prop)


@router.put("/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: int,
    service: ServiceDep,
    fields: FormDep,
    coverImage: Annotated[Optional[UploadFile], File()] = None,
    galleryImages: Annotated[Optional[List[UploadFile]], File()] = None,
    galleryOrder: Annotated[Optional[str], Form()] = None,
    removeGallery: Annotated[Optional[str], Form()] = None,
):
    cover = await _read_upload(coverImage)
    gallery = await _read_uploads(galleryImages)

    # unreadable instructions count as "not sent"
    order = parse_url_list(galleryOrder)
    remove = parse_url_list(removeGallery)

    prop = await run_in_threadpool(
        service.update, property_id, fields, cover, gallery, order, remove
    )
    return PropertyOut.model_validate(prop)


@router.delete("/{property_id}", response_model=DeleteResult)
async def delete_property(property_id: int, service: ServiceDep):
    await run_in_threadpool(service.delete, property_id)
    return DeleteResult(success=True)
