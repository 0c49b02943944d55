import re
from typing import Optional

_UNSAFE_RX = re.compile(r"[^A-Za-z0-9._-]")


def norm_str(s: Optional[str]) -> Optional[str]:
    if isinstance(s, str):
        s = s.strip()
        return s or None
    return None


def sanitize_filename(name: Optional[str], fallback: str = "upload") -> str:
    """
    Make a client filename safe to embed in a storage key:
      - keep only the last path component (both / and \\ separators)
      - whitespace runs -> "_"
      - anything outside [A-Za-z0-9._-] -> "_"
    """
    base = re.split(r"[\\/]", name or "")[-1]
    base = re.sub(r"\s+", "_", base.strip())
    base = _UNSAFE_RX.sub("_", base)
    base = base.lstrip(".")
    return base or fallback
