"""Persistence port and a JSON-backed content store.

``ContentRepository`` is the contract the content manager and the
syndication service persist through.  ``JsonContentStore`` keeps all
records in a single JSON file, loaded on init and saved after every
write operation.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from contentkit.content.models import (
    Content,
    ContentStatus,
    ContentType,
    ContentVersion,
)
from contentkit.errors import ConflictError

logger = logging.getLogger(__name__)

STORE_FILENAME = ".contentkit-store.json"

# Alias to avoid shadowing by the list() methods below
_list = list


class ContentRepository(ABC):
    """Async persistence port for content records.

    Implementations must be safe to call from a single event loop; the
    core never mutates a record concurrently from within one run.
    Failures propagate to the calling operation.
    """

    @abstractmethod
    async def get(self, content_id: str) -> Content | None:
        """Return the record for ``content_id`` or None."""

    @abstractmethod
    async def save(self, content: Content, *, expected_version: int | None = None) -> None:
        """Insert or replace ``content`` by id.

        When ``expected_version`` is given, the stored record (if any)
        must still be at that version; otherwise ``ConflictError`` is
        raised and nothing is written.
        """

    @abstractmethod
    async def delete(self, content_id: str) -> bool:
        """Remove a record. Returns False when it did not exist."""

    @abstractmethod
    async def list(
        self,
        *,
        status: ContentStatus | None = None,
        content_type: ContentType | None = None,
    ) -> _list[Content]:
        """Return records, optionally filtered by status and/or type."""

    @abstractmethod
    async def list_fingerprints(self, feed_id: str | None = None) -> set[str]:
        """Fingerprints of stored syndicated records, optionally per feed."""

    @abstractmethod
    async def append_version(self, content_id: str, version: ContentVersion) -> None:
        """Append a snapshot to the version log of ``content_id``."""

    @abstractmethod
    async def list_versions(self, content_id: str) -> _list[ContentVersion]:
        """Return the version log of ``content_id``, oldest first."""


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    records: _list[Content] = Field(default_factory=_list)
    versions: dict[str, _list[ContentVersion]] = Field(default_factory=dict)


class JsonContentStore(ContentRepository):
    """JSON-backed store for content records.

    Loads the store file on init and saves after every mutation.
    """

    def __init__(self, output_dir: Path) -> None:
        self._path = output_dir / STORE_FILENAME
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt content store at %s, starting fresh", self._path)
            return _StoreData()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            self._data.model_dump_json(indent=2),
            encoding="utf-8",
        )

    def _find(self, content_id: str) -> Content | None:
        for record in self._data.records:
            if record.id == content_id:
                return record
        return None

    # ── Write operations ─────────────────────────────────────────

    async def save(self, content: Content, *, expected_version: int | None = None) -> None:
        existing = self._find(content.id)
        if expected_version is not None and existing is not None:
            if existing.version != expected_version:
                raise ConflictError(content.id, expected_version, existing.version)
        self._data.records = [r for r in self._data.records if r.id != content.id]
        self._data.records.append(content.model_copy(deep=True))
        self._save()

    async def delete(self, content_id: str) -> bool:
        before = len(self._data.records)
        self._data.records = [r for r in self._data.records if r.id != content_id]
        if len(self._data.records) == before:
            return False
        self._data.versions.pop(content_id, None)
        self._save()
        return True

    async def append_version(self, content_id: str, version: ContentVersion) -> None:
        self._data.versions.setdefault(content_id, []).append(version)
        self._save()

    # ── Read operations ──────────────────────────────────────────

    async def get(self, content_id: str) -> Content | None:
        record = self._find(content_id)
        return record.model_copy(deep=True) if record is not None else None

    async def list(
        self,
        *,
        status: ContentStatus | None = None,
        content_type: ContentType | None = None,
    ) -> _list[Content]:
        results = self._data.records
        if status is not None:
            results = [r for r in results if r.status == status]
        if content_type is not None:
            results = [r for r in results if r.type == content_type]
        return [r.model_copy(deep=True) for r in results]

    async def list_fingerprints(self, feed_id: str | None = None) -> set[str]:
        fingerprints: set[str] = set()
        for record in self._data.records:
            data = record.syndication_data
            if data is None:
                continue
            if feed_id is not None and data.feed_id != feed_id:
                continue
            fingerprints.add(data.fingerprint)
        return fingerprints

    async def list_versions(self, content_id: str) -> _list[ContentVersion]:
        return _list(self._data.versions.get(content_id, []))

    def exists(self, content_id: str) -> bool:
        """Check whether a record with this id exists."""
        return self._find(content_id) is not None
