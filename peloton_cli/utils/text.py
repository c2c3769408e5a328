"""Text helpers."""

from __future__ import annotations

import re

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def sanitize_title(value: str) -> str:
    """Replace every character outside ``[A-Za-z0-9]`` with an underscore."""
    return _UNSAFE.sub("_", value)
