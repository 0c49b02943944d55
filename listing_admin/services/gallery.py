from __future__ import annotations
import json
from typing import Iterable, List, Optional, Sequence


def parse_url_list(raw) -> Optional[List[str]]:
    """
    Read a gallery instruction sent by the client.

    Accepts a JSON array of strings (as text or already decoded) or the list of
    values a repeated multipart field produces. Returns None when the instruction
    is absent or unreadable, so callers fall back to the stored gallery.
    """
    if raw is None:
        return None

    if isinstance(raw, (list, tuple)):
        # repeated form field: ["url1", "url2"] or a single JSON-encoded entry
        if len(raw) == 1 and isinstance(raw[0], str) and raw[0].lstrip().startswith("["):
            return parse_url_list(raw[0])
        items = list(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            items = json.loads(s)
        except ValueError:
            return None
        if not isinstance(items, list):
            return None
    else:
        return None

    if not all(isinstance(x, str) for x in items):
        return None
    return [x.strip() for x in items if x.strip()]


def dedupe(urls: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for u in urls:
        if u not in seen:
            seen.add(u)
            out.append(u)
    return out


def reconcile_gallery(
    baseline: Optional[Sequence[str]],
    order: Optional[Sequence[str]] = None,
    remove: Optional[Sequence[str]] = None,
    new_urls: Sequence[str] = (),
) -> List[str]:
    """
    Next gallery for a property.

    ``order`` (when given) is the client's full list of surviving images, in the
    order it wants them; URLs it names that are not in ``baseline`` are ignored.
    Without it the stored ``baseline`` carries over.
    ``remove`` drops URLs whatever the ordering says. Fresh uploads go last, in
    upload order. The result never holds the same URL twice.
    """
    stored = list(baseline or [])
    if order is not None:
        # ordering may only rearrange or drop what is already stored
        known = set(stored)
        current = [u for u in order if u in known]
    else:
        current = stored
    if remove is not None:
        dropped = set(remove)
        current = [u for u in current if u not in dropped]
    return dedupe([*current, *new_urls])
