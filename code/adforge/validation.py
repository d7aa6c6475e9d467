"""Pre-flight checks run before any request leaves the client."""
from __future__ import annotations

import re
from typing import Any

from adforge.errors import MissingFieldsError

_HEX_COLOR = re.compile(r"^#?[0-9a-fA-F]{6}$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def require(**fields: Any) -> None:
    """Raise MissingFieldsError naming every blank keyword argument.

    >>> require(script="Hi", avatar_image_url="")
    Traceback (most recent call last):
    ...
    adforge.errors.MissingFieldsError: Missing required fields: avatar_image_url
    """
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise MissingFieldsError(missing)


def normalize_hex(color: str) -> str:
    """Return ``#rrggbb`` for a 6-digit hex colour, with or without ``#``."""
    value = (color or "").strip()
    if not _HEX_COLOR.match(value):
        raise ValueError(f"Not a hex colour: {color!r}")
    return "#" + value.lstrip("#").lower()
