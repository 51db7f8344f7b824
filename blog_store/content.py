"""Content entry parsing, validation and the in-memory index."""

from __future__ import annotations

import concurrent.futures
import datetime
import logging
import math
import re
from pathlib import Path
from urllib.parse import quote
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import ContentValidationError, NotFoundError
from .frontmatter import FrontmatterError, split_frontmatter
from .models import (
    ContentEntry,
    Page,
    ParsedEntry,
    ParseResult,
    RejectedEntry,
    SiteConfig,
)

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown", ".mdx")
KNOWN_FIELDS = frozenset({"title", "description", "date", "draft", "external", "url"})
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}(?:[T ]|\Z)")


class _InvalidField(Exception):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.reason = reason


def _require_text(
    metadata: Mapping[str, Any], name: str, allow_empty: bool = False
) -> str:
    if name not in metadata or metadata[name] is None:
        raise _InvalidField(name, "missing required field")
    value = metadata[name]
    if not isinstance(value, str):
        raise _InvalidField(name, f"must be a string, got {type(value).__name__}")
    if not allow_empty and not value.strip():
        raise _InvalidField(name, "must not be empty")
    return value.strip()


def _optional_flag(metadata: Mapping[str, Any], name: str) -> bool:
    value = metadata.get(name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _InvalidField(name, f"must be true or false, got {value!r}")
    return value


def _coerce_date(value: Any) -> datetime.date:
    """Accept YAML dates, datetimes and ISO 8601 strings."""
    if value is None:
        raise _InvalidField("date", "missing required field")
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE_RE.match(text):
            raise _InvalidField("date", f"not a valid calendar date: {value!r}")
        try:
            return datetime.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise _InvalidField("date", f"not a valid calendar date: {value!r}")


def parse_entry(
    identifier: str, text: str, source: Optional[str] = None
) -> ParseResult:
    """Parse one markdown source into a ParsedEntry or a RejectedEntry."""
    try:
        metadata, body = split_frontmatter(text)
    except FrontmatterError as exc:
        return RejectedEntry(
            identifier=identifier, field="frontmatter", reason=str(exc)
        )

    unknown = sorted(str(key) for key in metadata if key not in KNOWN_FIELDS)
    if unknown:
        logger.debug("Ignoring unknown frontmatter keys in %s: %s", identifier, unknown)

    try:
        title = _require_text(metadata, "title")
        description = _require_text(metadata, "description", allow_empty=True)
        published = _coerce_date(metadata.get("date"))
        draft = _optional_flag(metadata, "draft")
        external = _optional_flag(metadata, "external")

        url: Optional[str] = None
        if external:
            url = _require_text(metadata, "url")
        elif metadata.get("url") is not None:
            url = _require_text(metadata, "url")

        content: Optional[str] = body if body.strip() else None
        if not external and content is None:
            raise _InvalidField("body", "local entries need a markdown body")
    except _InvalidField as exc:
        return RejectedEntry(identifier=identifier, field=exc.field, reason=exc.reason)

    entry = ContentEntry(
        identifier=identifier,
        title=title,
        description=description,
        date=published,
        draft=draft,
        external=external,
        url=url,
        body=content,
        source=source,
    )
    logger.debug(
        "Parsed entry %s (date=%s, draft=%s, external=%s)",
        identifier,
        published.isoformat(),
        draft,
        external,
    )
    return ParsedEntry(entry=entry)


def identifier_for(root: Path, path: Path) -> str:
    """Derive the stable identifier (slug) from a path below the content root."""
    parts = path.relative_to(root).with_suffix("").parts
    if len(parts) > 1 and parts[-1] == "index":
        parts = parts[:-1]
    return "/".join(parts)


def discover_sources(root: Path) -> List[Tuple[str, Path]]:
    """Return (identifier, path) pairs for every markdown file below root."""
    sources: List[Tuple[str, Path]] = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
            continue
        relative = path.relative_to(root)
        if any(part.startswith((".", "_")) for part in relative.parts):
            logger.debug("Skipping hidden or private source %s", relative)
            continue
        sources.append((identifier_for(root, path), path))
    sources.sort(key=lambda item: (item[0], str(item[1])))
    return sources


def _load_source(identifier: str, path: Path) -> ParseResult:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return RejectedEntry(identifier=identifier, field="source", reason=str(exc))
    return parse_entry(identifier, text, source=str(path))


class ContentIndex:
    """Immutable, queryable collection of validated entries."""

    def __init__(self, entries: Iterable[ContentEntry]) -> None:
        ordered = sorted(
            entries, key=lambda item: (item.date, item.identifier), reverse=True
        )
        by_identifier: Dict[str, ContentEntry] = {}
        for entry in ordered:
            if entry.identifier in by_identifier:
                raise ContentValidationError(
                    entry.identifier, "identifier", "duplicate identifier"
                )
            by_identifier[entry.identifier] = entry
        self._ordered = tuple(ordered)
        self._by_identifier = by_identifier

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[ContentEntry]:
        return iter(self._ordered)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_identifier

    def _select(
        self, include_drafts: bool, external: Optional[bool]
    ) -> Iterator[ContentEntry]:
        for entry in self._ordered:
            if entry.draft and not include_drafts:
                continue
            if external is not None and entry.external != external:
                continue
            yield entry

    def list_published(self, external: Optional[bool] = None) -> Iterator[ContentEntry]:
        """Non-draft entries, newest first."""
        return self._select(include_drafts=False, external=external)

    def list_all(self, external: Optional[bool] = None) -> Iterator[ContentEntry]:
        """Every entry including drafts, newest first. Meant for local preview."""
        return self._select(include_drafts=True, external=external)

    def get_by_identifier(self, identifier: str) -> ContentEntry:
        try:
            return self._by_identifier[identifier]
        except KeyError:
            raise NotFoundError(identifier) from None

    def paginate(self, page: int, per_page: int, include_drafts: bool = False) -> Page:
        """Return one page of the listing; pages are numbered from 1."""
        if per_page < 1:
            raise ValueError("per_page must be at least 1.")

        entries = list(self._select(include_drafts=include_drafts, external=None))
        total_pages = max(1, math.ceil(len(entries) / per_page))
        if page < 1 or page > total_pages:
            raise NotFoundError(
                str(page), f"Page {page} is out of range (1-{total_pages})"
            )

        start = (page - 1) * per_page
        return Page(
            entries=entries[start : start + per_page],
            number=page,
            total_pages=total_pages,
        )


def _merge(results: Iterable[ParseResult], on_invalid: str) -> ContentIndex:
    entries: Dict[str, ContentEntry] = {}
    for result in results:
        if isinstance(result, RejectedEntry):
            if on_invalid == "skip":
                logger.warning(
                    "Skipping invalid entry %s (%s: %s)",
                    result.identifier,
                    result.field,
                    result.reason,
                )
                continue
            raise ContentValidationError(result.identifier, result.field, result.reason)

        entry = result.entry
        existing = entries.get(entry.identifier)
        if existing is not None:
            raise ContentValidationError(
                entry.identifier,
                "identifier",
                f"duplicate identifier (also defined by {existing.source})",
            )
        entries[entry.identifier] = entry

    return ContentIndex(entries.values())


def load_content_index(
    root: str, on_invalid: str = "fail", concurrency: int = 1
) -> ContentIndex:
    """Scan the content directory and build a validated index."""
    if on_invalid not in ("fail", "skip"):
        raise ValueError(f"on_invalid must be 'fail' or 'skip', got '{on_invalid}'")

    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Content directory not found: {root}")

    sources = discover_sources(root_path)
    logger.info("Discovered %d content sources under %s", len(sources), root_path)

    results: List[Optional[ParseResult]] = [None] * len(sources)
    if concurrency > 1 and len(sources) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=concurrency) as executor:
            future_to_position = {
                executor.submit(_load_source, identifier, path): position
                for position, (identifier, path) in enumerate(sources)
            }
            for future in concurrent.futures.as_completed(future_to_position):
                results[future_to_position[future]] = future.result()
    else:
        for position, (identifier, path) in enumerate(sources):
            results[position] = _load_source(identifier, path)

    index = _merge(results, on_invalid)
    logger.info("Indexed %d of %d content entries", len(index), len(sources))
    return index


def entry_link(site: SiteConfig, entry: ContentEntry, posts_path: str = "blog") -> str:
    """Absolute link for an entry: its own url when external, else its page."""
    if entry.external and entry.url:
        return entry.url
    prefix = posts_path.strip("/")
    path = f"{prefix}/{entry.identifier}" if prefix else entry.identifier
    return f"{site.base_url}/{quote(path)}/"
