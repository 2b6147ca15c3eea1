"""Content fingerprints and the class names derived from them."""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Mapping

from stylescope.transforms.placeholder_expansion import PlaceholderValues, render_value


def normalize_source(source: str) -> str:
    """Strip indentation, trailing spaces and blank lines from *source*.

    Styles written inline in code differ mostly by indentation, which never
    changes the compiled output. A line following a backslash-newline is a
    string continuation and is kept verbatim.
    """
    lines: list[str] = []
    continued = False
    for line in source.splitlines():
        text = line if continued else line.strip()
        if text or continued:
            lines.append(text)
        continued = text.endswith("\\")
    return "\n".join(lines)


def _value_pairs(values: PlaceholderValues | None) -> list[list[str]]:
    if values is None:
        return []
    if isinstance(values, Mapping):
        return sorted([str(key), render_value(value)] for key, value in values.items())
    return [[str(index), render_value(value)] for index, value in enumerate(values)]


def fingerprint(source: str, values: PlaceholderValues | None = None, is_global: bool = False) -> str:
    """SHA-256 hex digest over the normalized source and resolved values."""
    payload = json.dumps(
        {
            "source": normalize_source(source),
            "values": _value_pairs(values),
            "global": is_global,
        },
        sort_keys=True,
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def class_name_for(digest: str, prefix: str = "stylescope", length: int = 8) -> str:
    """Short, stable class name for a fingerprint, e.g. ``stylescope-mfrggzdf``."""
    encoded = base64.b32encode(bytes.fromhex(digest)).decode("ascii").lower().rstrip("=")
    return f"{prefix}-{encoded[:length]}"
