"""Signed uploads for the image provider.

The provider accepts an upload when its ``signature`` field equals:

    hex(sha1("&".join(f"{key}={value}" for key in sorted(params)) + api_secret))

Every parameter is signed except ``file``, the upload body itself. Values
are rendered exactly as the browser client serializes them (``true``/``false``,
``1`` rather than ``1.0``), otherwise the provider computes a different
digest and rejects the upload.
"""

from __future__ import annotations

import hashlib
import time
from typing import Any

UNSIGNED_PARAMS = frozenset({"file"})

FEATURED_IMAGES_FOLDER = "featured-images"
INLINE_IMAGES_FOLDER = "inline-images"
UPLOAD_FOLDERS = (FEATURED_IMAGES_FOLDER, INLINE_IMAGES_FOLDER)


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_render(v) for v in value)
    return str(value)


def string_to_sign(params: dict[str, Any]) -> str:
    """Canonical ``key=value&...`` string, sorted by key."""
    return "&".join(
        f"{key}={_render(params[key])}" for key in sorted(params) if key not in UNSIGNED_PARAMS
    )


def sign_upload_params(params: dict[str, Any], api_secret: str) -> str:
    """Signature for an upload with the given parameters."""
    payload = string_to_sign(params) + api_secret
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()  # nosec B324 - provider-mandated


def build_upload_form(
    folder: str,
    api_key: str,
    api_secret: str,
    timestamp: int | None = None,
) -> dict[str, str]:
    """Form fields (minus the file) for a signed upload into ``folder``.

    Raises:
        ValueError: ``folder`` is not one of UPLOAD_FOLDERS
    """
    if folder not in UPLOAD_FOLDERS:
        raise ValueError(f"Unknown upload folder: {folder}")
    if timestamp is None:
        timestamp = int(time.time())
    params: dict[str, Any] = {"timestamp": timestamp, "folder": folder}
    return {
        "api_key": api_key,
        "timestamp": str(timestamp),
        "folder": folder,
        "signature": sign_upload_params(params, api_secret),
    }
