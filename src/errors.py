"""Error taxonomy for the content pipeline.

Batch operations (feed syncs, bulk updates) log and skip per-item
failures; single-entity operations raise these to the caller.
"""

from __future__ import annotations


class ContentKitError(Exception):
    """Base error for all contentkit failures."""


class FeedFetchError(ContentKitError):
    """A feed could not be downloaded or parsed."""

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"RSS feed fetch failed for {url}: {cause}")


class ConversionError(ContentKitError):
    """A single feed item could not be turned into content."""

    def __init__(self, guid: str, cause: BaseException | str) -> None:
        self.guid = guid
        self.cause = cause
        super().__init__(f"Failed to convert feed item {guid!r}: {cause}")


class NotFoundError(ContentKitError):
    """No content exists for the requested id."""

    def __init__(self, content_id: str) -> None:
        self.content_id = content_id
        super().__init__(f"Content not found: {content_id}")


class ConflictError(ContentKitError):
    """The stored version moved on since the caller last read it."""

    def __init__(self, content_id: str, expected: int, actual: int) -> None:
        self.content_id = content_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict for {content_id}: expected {expected}, found {actual}"
        )


class InvalidTransitionError(ContentKitError):
    """A lifecycle transition is not allowed from the current status."""

    def __init__(self, content_id: str, current: str, target: str) -> None:
        self.content_id = content_id
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {content_id} from {current} to {target}")


class ValidationError(ContentKitError):
    """Input is too malformed to process."""
