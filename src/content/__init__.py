"""Content domain — canonical content lifecycle models and store.

A single ``Content`` model tracks a piece of content from draft
through publication, and ``ContentRepository`` is the persistence
port the manager and syndication service write through.
"""

from contentkit.content.models import (
    Content,
    ContentBody,
    ContentFormData,
    ContentSource,
    ContentStatus,
    ContentType,
    ContentUpdate,
    ContentVersion,
)
from contentkit.content.store import ContentRepository, JsonContentStore

__all__ = [
    "Content",
    "ContentBody",
    "ContentFormData",
    "ContentRepository",
    "ContentSource",
    "ContentStatus",
    "ContentType",
    "ContentUpdate",
    "ContentVersion",
    "JsonContentStore",
]
