from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from listing_admin.core.exceptions import NotFoundError, ValidationError
from listing_admin.models.property import Property
from listing_admin.schemas.property import PropertyFields
from listing_admin.services.gallery import reconcile_gallery
from listing_admin.services.images import ImageIngestor, UploadedFile
from listing_admin.services.records import PropertyStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "status", "address")


def normalize_fields(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate client fields and return only the ones that were sent,
    as plain column values. Raises ValidationError on the first bad input.
    """
    try:
        fields = PropertyFields.model_validate(dict(raw))
    except PydanticValidationError as e:
        msgs = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
            msgs.append(f"{loc}: {msg}" if loc else msg)
        raise ValidationError("; ".join(msgs)) from e
    return fields.model_dump(mode="json", exclude_unset=True)


class PropertyService:
    """
    Create/update entry points for listings.

    Every write goes through the same steps: normalize fields, upload images,
    work out the gallery, then exactly one call to the record store. Any failure
    before that call leaves the stored record untouched.
    """

    def __init__(self, store: PropertyStore, ingestor: ImageIngestor, *, purge_images_on_delete: bool = False):
        self.store = store
        self.ingestor = ingestor
        self.purge_images_on_delete = purge_images_on_delete

    # --- reads ---

    def list(self) -> List[Property]:
        return self.store.list()

    def get(self, prop_id: int) -> Property:
        prop = self.store.get(prop_id)
        if prop is None:
            raise NotFoundError(f"Property {prop_id} not found")
        return prop

    # --- writes ---

    def create(
        self,
        raw_fields: Mapping[str, Any],
        cover: Optional[UploadedFile] = None,
        gallery: Sequence[UploadedFile] = (),
    ) -> Property:
        values = normalize_fields(raw_fields)
        missing = [f for f in REQUIRED_FIELDS if values.get(f) is None]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        values.setdefault("hot_deal", False)
        values["cover_image"] = self.ingestor.ingest_file(cover) if cover else None
        values["gallery_images"] = reconcile_gallery(None, new_urls=self.ingestor.ingest_many(gallery))

        prop = self.store.insert(values)
        logger.info("Created property %s (%d gallery image(s))", prop.id, len(prop.gallery_images or []))
        return prop

    def update(
        self,
        prop_id: int,
        raw_fields: Mapping[str, Any],
        cover: Optional[UploadedFile] = None,
        gallery: Sequence[UploadedFile] = (),
        order: Optional[Sequence[str]] = None,
        remove: Optional[Sequence[str]] = None,
    ) -> Property:
        existing = self.get(prop_id)
        values = normalize_fields(raw_fields)
        if "hot_deal" in values and values["hot_deal"] is None:
            values["hot_deal"] = False

        cover_url = self.ingestor.ingest_file(cover) if cover else existing.cover_image
        new_urls = self.ingestor.ingest_many(gallery)

        values["cover_image"] = cover_url
        values["gallery_images"] = reconcile_gallery(
            existing.gallery_images, order=order, remove=remove, new_urls=new_urls
        )

        prop = self.store.update(prop_id, values)
        if prop is None:
            # removed between the read and the write
            raise NotFoundError(f"Property {prop_id} not found")
        logger.info("Updated property %s (fields: %s)", prop_id, ", ".join(sorted(values)))
        return prop

    def delete(self, prop_id: int) -> None:
        prop = self.get(prop_id)
        urls = [prop.cover_image, *(prop.gallery_images or [])]
        if not self.store.delete(prop_id):
            raise NotFoundError(f"Property {prop_id} not found")
        logger.info("Deleted property %s", prop_id)

        if self.purge_images_on_delete:
            purged = self.ingestor.discard(urls)
            logger.info("Purged %d image(s) of property %s", purged, prop_id)
