"""
Item identifiers and their public lookup URLs.

The item ID is the human-shareable key printed on labels (as text and as a
QR code of the public URL).  IDs are random tokens; uniqueness is enforced by
the store, which retries generation on collision.
"""

from __future__ import annotations

import secrets
from typing import Callable
from urllib.parse import quote

DEFAULT_ID_PREFIX = "JRS-"
ID_TOKEN_BYTES = 4

IdFactory = Callable[[], str]

# Path segments under which a scanned URL carries an item ID.
_SCAN_PATH_MARKERS = ("/items/", "/jerseys/")


def generate_item_id(prefix: str = DEFAULT_ID_PREFIX) -> str:
    """``JRS-`` followed by 8 upper-case hex characters."""
    return f"{prefix}{secrets.token_hex(ID_TOKEN_BYTES).upper()}"


def make_id_factory(prefix: str = DEFAULT_ID_PREFIX) -> IdFactory:
    return lambda: generate_item_id(prefix)


def public_item_url(base_url: str, item_id: str) -> str:
    """Deterministic lookup URL encoded into an item's label."""
    return f"{base_url.rstrip('/')}/items/{quote(item_id, safe='')}"


def extract_item_id(scanned: str | None) -> str | None:
    """
    Recover an item ID from scanner input.

    Accepts a bare ID or a full scanned URL such as
    ``http://host:4568/items/JRS-1A2B3C4D?x=1``.  Returns None for blank input.
    """
    value = (scanned or "").strip()
    if not value:
        return None
    for marker in _SCAN_PATH_MARKERS:
        if marker in value:
            value = value.rsplit(marker, 1)[1]
            value = value.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0]
            break
    value = value.strip().upper()
    return value or None
