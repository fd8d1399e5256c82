"""Content lifecycle orchestration.

Creates, updates, versions and transitions content records through
the publishing state machine::

    draft --(schedule)--> approved --(publish | time elapses)--> published
    draft --(publish)--> published
    published --(unpublish)--> draft
    any non-archived --(archive)--> archived --(restore)--> draft

Every operation persists through a ``ContentRepository``.  SEO
analysis is best-effort enrichment: when it fails the record is still
saved, just without ``ai_analysis``.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from contentkit.analytics import AnalyticsProvider, track_event
from contentkit.content.html import (
    html_to_plain_text,
    markdown_to_html,
    sanitize_html,
    truncate_text,
)
from contentkit.content.identity import generate_content_id
from contentkit.content.models import (
    EXCERPT_MAX_LENGTH,
    SEO_DESCRIPTION_MAX_LENGTH,
    SEO_TITLE_MAX_LENGTH,
    BodyFormat,
    Content,
    ContentAIAnalysis,
    ContentAuthor,
    ContentBody,
    ContentFormData,
    ContentPage,
    ContentSource,
    ContentStatus,
    ContentType,
    ContentUpdate,
    ContentVersion,
)
from contentkit.content.store import ContentRepository
from contentkit.content.text import count_words, reading_time
from contentkit.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from contentkit.seo.analyzer import SEOAnalyzer
from contentkit.seo.helpers import (
    generate_seo_description,
    generate_seo_slug,
    generate_seo_title,
)
from contentkit.seo.models import SEOAnalysis
from contentkit.seo.scoring import ContentScorer

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "published_at", "title")

# Fields whose change triggers a fresh SEO analysis
_ANALYSIS_TRIGGERS = frozenset({"title", "body", "seo_keywords"})


def build_body(raw: str, body_format: BodyFormat = BodyFormat.HTML) -> ContentBody:
    """Derive sanitized HTML and plain text from authored ``raw``."""
    rendered = markdown_to_html(raw) if body_format == BodyFormat.MARKDOWN else raw
    html = sanitize_html(rendered)
    return ContentBody(
        raw=raw,
        html=html,
        plain_text=html_to_plain_text(html),
        format=body_format,
    )


def apply_body_stats(content: Content) -> None:
    """Recompute word count, reading time and excerpt from the body."""
    content.word_count = count_words(content.body.plain_text)
    content.reading_time = reading_time(content.word_count)
    content.excerpt = truncate_text(content.body.plain_text, EXCERPT_MAX_LENGTH)


def clamp_seo_fields(content: Content) -> None:
    """Make the slug URL-safe and hold slug, meta title and meta description to their caps."""
    content.slug = generate_seo_slug(content.slug) or generate_seo_slug(content.title) or content.id
    content.seo_title = content.seo_title[:SEO_TITLE_MAX_LENGTH].rstrip()
    content.seo_description = truncate_text(content.seo_description, SEO_DESCRIPTION_MAX_LENGTH)


def apply_status(content: Content, status: ContentStatus, now: datetime) -> None:
    """Set ``status`` keeping ``published_at`` set iff published."""
    content.status = status
    if status == ContentStatus.PUBLISHED:
        content.published_at = content.published_at or now
        content.scheduled_at = None
    else:
        content.published_at = None


class ContentManager:
    """Lifecycle operations over content records."""

    def __init__(
        self,
        repository: ContentRepository,
        *,
        analyzer: SEOAnalyzer | None = None,
        scorer: ContentScorer | None = None,
        providers: Sequence[AnalyticsProvider] = (),
        site_name: str | None = None,
    ) -> None:
        self._repository = repository
        self._analyzer = analyzer or SEOAnalyzer()
        self._scorer = scorer or ContentScorer()
        self._providers = list(providers)
        self._site_name = site_name

    # ── Reads ────────────────────────────────────────────────────

    async def get_content(self, content_id: str) -> Content:
        """Return a record or raise ``NotFoundError``."""
        content = await self._repository.get(content_id)
        if content is None:
            raise NotFoundError(content_id)
        return content

    async def list_content(
        self,
        *,
        status: ContentStatus | None = None,
        content_type: ContentType | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ContentPage:
        """Filter, sort and paginate stored records."""
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by {sort_by!r}")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        records = await self._repository.list(status=status, content_type=content_type)
        if search:
            needle = search.lower()
            records = [
                r for r in records
                if needle in r.title.lower() or needle in r.body.plain_text.lower()
            ]

        records.sort(
            key=lambda r: (getattr(r, sort_by) is None, getattr(r, sort_by)),
            reverse=sort_order == "desc",
        )
        total = len(records)
        start = (page - 1) * limit
        return ContentPage(
            data=records[start:start + limit],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )

    def analyze_content(self, content: Content) -> SEOAnalysis:
        """Run the SEO analyzer over a record without persisting."""
        return self._analyzer.analyze(content)

    # ── Create / update ──────────────────────────────────────────

    async def create_content(
        self,
        form: ContentFormData,
        author_id: str,
        enable_seo: bool = True,
    ) -> Content:
        """Build and persist a new record at version 1."""
        now = datetime.now(tz=UTC)
        body = build_body(form.body, form.body_format)
        keywords = list(form.seo_keywords or [])

        if form.seo_title:
            seo_title = form.seo_title
        elif enable_seo:
            seo_title = generate_seo_title(form.title, keywords, self._site_name)
        else:
            seo_title = form.title

        if form.seo_description:
            seo_description = form.seo_description
        elif enable_seo:
            seo_description = generate_seo_description(body.plain_text, keywords)
        else:
            seo_description = form.description

        author_ids = dict.fromkeys([author_id, *form.author_ids])
        content = Content(
            id=generate_content_id(),
            slug=form.slug or generate_seo_slug(form.title, keywords),
            title=form.title,
            description=form.description,
            type=form.type,
            source=ContentSource.MANUAL,
            scheduled_at=form.scheduled_at,
            seo_title=seo_title,
            seo_description=seo_description,
            seo_keywords=keywords,
            featured_image=form.featured_image,
            authors=[ContentAuthor(id=a) for a in author_ids if a],
            created_at=now,
            updated_at=now,
            version=1,
            body=body,
        )
        apply_status(content, form.status, now)
        apply_body_stats(content)
        clamp_seo_fields(content)

        if enable_seo:
            content.ai_analysis = self._enrich(content)

        await self._repository.save(content)
        logger.info("Created content %s (%s)", content.id, content.slug)
        track_event(self._providers, "content_created", {"id": content.id, "author": author_id})
        return content

    async def update_content(
        self,
        content_id: str,
        update: ContentUpdate,
        create_version: bool = True,
        *,
        expected_version: int | None = None,
        editor_id: str = "system",
    ) -> Content:
        """Apply a partial update and bump the version by one.

        Args:
            content_id: Record to update.
            update: Fields to change; unset or null fields are left alone.
            create_version: Snapshot the pre-update state first.
            expected_version: Version the caller last read. When given
                and the stored record has moved on, ``ConflictError`` is
                raised and nothing is written.
            editor_id: Recorded as the author of the snapshot.

        Raises:
            NotFoundError: No record with this id.
            ConflictError: The stored version differs from the one read.
        """
        existing = await self.get_content(content_id)
        if expected_version is not None and existing.version != expected_version:
            raise ConflictError(content_id, expected_version, existing.version)

        now = datetime.now(tz=UTC)
        changes = update.changed_fields()
        updated = existing.model_copy(deep=True)

        snapshot: ContentVersion | None = None
        if create_version:
            snapshot = ContentVersion(
                id=f"version_{uuid.uuid4().hex[:12]}",
                content_id=content_id,
                version=existing.version,
                title=existing.title,
                body=existing.body.model_copy(deep=True),
                changes=_describe_changes(changes),
                created_by=editor_id,
                created_at=now,
            )
            updated.versions.append(snapshot)

        for field in ("title", "slug", "description", "scheduled_at", "featured_image",
                      "seo_title", "seo_description"):
            if field in changes:
                setattr(updated, field, changes[field])
        if "seo_keywords" in changes:
            updated.seo_keywords = list(changes["seo_keywords"])  # type: ignore[arg-type]
        if "body" in changes or "body_format" in changes:
            body_format = changes.get("body_format", existing.body.format)
            raw = changes.get("body", existing.body.raw)
            updated.body = build_body(str(raw), BodyFormat(body_format))
            apply_body_stats(updated)
        if "status" in changes:
            apply_status(updated, ContentStatus(changes["status"]), now)
        clamp_seo_fields(updated)

        updated.updated_at = now
        updated.version = existing.version + 1

        if _ANALYSIS_TRIGGERS & changes.keys() or "body_format" in changes:
            updated.ai_analysis = self._enrich(updated)

        await self._repository.save(updated, expected_version=existing.version)
        if snapshot is not None:
            await self._repository.append_version(content_id, snapshot)

        logger.info("Updated content %s to version %d", content_id, updated.version)
        track_event(self._providers, "content_updated", {"id": content_id, "version": updated.version})
        return updated

    async def duplicate_content(self, content_id: str, title: str | None = None) -> Content:
        """Clone a record as a fresh draft pointing back at the original."""
        original = await self.get_content(content_id)
        now = datetime.now(tz=UTC)
        new_title = title or f"{original.title} (Copy)"

        duplicate = original.model_copy(deep=True)
        duplicate.id = generate_content_id()
        duplicate.title = new_title
        duplicate.slug = generate_seo_slug(new_title)
        duplicate.status = ContentStatus.DRAFT
        duplicate.published_at = None
        duplicate.scheduled_at = None
        duplicate.created_at = now
        duplicate.updated_at = now
        duplicate.version = 1
        duplicate.versions = []
        duplicate.parent_id = original.id
        duplicate.syndication_data = None

        await self._repository.save(duplicate)
        logger.info("Duplicated %s as %s", content_id, duplicate.id)
        return duplicate

    # ── Status transitions ───────────────────────────────────────

    async def publish_content(self, content_id: str) -> Content:
        return await self._transition(
            content_id,
            ContentStatus.PUBLISHED,
            allowed_from={ContentStatus.DRAFT, ContentStatus.APPROVED},
            event="content_published",
        )

    async def unpublish_content(self, content_id: str) -> Content:
        return await self._transition(
            content_id,
            ContentStatus.DRAFT,
            allowed_from={ContentStatus.PUBLISHED},
            event="content_unpublished",
        )

    async def schedule_content(self, content_id: str, publish_at: datetime) -> Content:
        return await self._transition(
            content_id,
            ContentStatus.APPROVED,
            allowed_from={ContentStatus.DRAFT, ContentStatus.APPROVED},
            event="content_scheduled",
            scheduled_at=publish_at,
        )

    async def archive_content(self, content_id: str) -> Content:
        return await self._transition(
            content_id,
            ContentStatus.ARCHIVED,
            allowed_from={ContentStatus.DRAFT, ContentStatus.APPROVED, ContentStatus.PUBLISHED},
            event="content_archived",
        )

    async def restore_content(self, content_id: str) -> Content:
        return await self._transition(
            content_id,
            ContentStatus.DRAFT,
            allowed_from={ContentStatus.ARCHIVED},
            event="content_restored",
        )

    async def publish_due_content(self, now: datetime | None = None) -> list[Content]:
        """Publish approved records whose scheduled time has passed."""
        now = now or datetime.now(tz=UTC)
        published: list[Content] = []
        for content in await self._repository.list(status=ContentStatus.APPROVED):
            if content.scheduled_at is None or content.scheduled_at > now:
                continue
            try:
                published.append(await self.publish_content(content.id))
            except Exception:
                logger.warning("Failed to publish scheduled content %s", content.id, exc_info=True)
        logger.info("Published %d scheduled item(s)", len(published))
        return published

    # ── Bulk operations ──────────────────────────────────────────

    async def bulk_update_status(
        self, content_ids: Iterable[str], status: ContentStatus
    ) -> list[Content]:
        """Force ``status`` on each record; missing or failing ids are skipped."""
        results: list[Content] = []
        for content_id in content_ids:
            try:
                content = await self._repository.get(content_id)
                if content is None:
                    logger.warning("Bulk status update: %s not found", content_id)
                    continue
                now = datetime.now(tz=UTC)
                apply_status(content, status, now)
                content.updated_at = now
                await self._repository.save(content, expected_version=content.version)
                results.append(content)
            except Exception:
                logger.warning("Bulk status update failed for %s", content_id, exc_info=True)
        return results

    async def bulk_delete(self, content_ids: Iterable[str]) -> list[str]:
        """Delete each record; returns the ids actually deleted."""
        deleted: list[str] = []
        for content_id in content_ids:
            try:
                if await self._repository.delete(content_id):
                    deleted.append(content_id)
                else:
                    logger.warning("Bulk delete: %s not found", content_id)
            except Exception:
                logger.warning("Bulk delete failed for %s", content_id, exc_info=True)
        logger.info("Bulk deleted %d of the requested record(s)", len(deleted))
        return deleted

    # ── Internals ────────────────────────────────────────────────

    async def _transition(
        self,
        content_id: str,
        target: ContentStatus,
        *,
        allowed_from: set[ContentStatus],
        event: str,
        scheduled_at: datetime | None = None,
    ) -> Content:
        content = await self.get_content(content_id)
        if content.status not in allowed_from:
            raise InvalidTransitionError(content_id, content.status.value, target.value)

        now = datetime.now(tz=UTC)
        apply_status(content, target, now)
        if target == ContentStatus.PUBLISHED:
            content.published_at = now
        if scheduled_at is not None:
            content.scheduled_at = scheduled_at
        content.updated_at = now

        await self._repository.save(content, expected_version=content.version)
        logger.info("Content %s is now %s", content_id, target.value)
        track_event(self._providers, event, {"id": content_id})
        return content

    def _enrich(self, content: Content) -> ContentAIAnalysis | None:
        """Score ``content``; returns None when analysis fails."""
        try:
            seo = self._analyzer.analyze(content)
            return self._scorer.score(content, seo)
        except Exception:
            logger.warning("SEO analysis failed for %s", content.id, exc_info=True)
            return None


def _describe_changes(changes: dict[str, object]) -> str:
    if not changes:
        return "No field changes"
    return "Updated " + ", ".join(sorted(changes))
