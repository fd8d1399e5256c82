"""Stable identifiers for syndicated content, tags and authors."""

from __future__ import annotations

import hashlib
import uuid

SYNDICATED_ID_PREFIX = "syndicated_"
MANUAL_ID_PREFIX = "content_"


def compute_fingerprint(title: str, link: str, published: str | None) -> str:
    """Hash title + link + raw publish date into a dedup fingerprint.

    MD5 is used for identity only, not for security.
    """
    payload = f"{title or ''}{link or ''}{published or ''}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()  # noqa: S324


def content_id_from_fingerprint(fingerprint: str) -> str:
    """Derive the content id for a syndicated item."""
    return f"{SYNDICATED_ID_PREFIX}{fingerprint[:12]}"


def id_from_string(value: str) -> str:
    """Short stable id for a tag or author name."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()[:8]  # noqa: S324


def generate_content_id() -> str:
    """Random id for manually authored content."""
    return f"{MANUAL_ID_PREFIX}{uuid.uuid4().hex[:12]}"
