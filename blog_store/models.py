"""Shared data models for blog_store."""

from __future__ import annotations

from dataclasses import dataclass
import datetime
from typing import List, Optional, Union


@dataclass(frozen=True)
class SiteConfig:
    """Site-wide values handed to everything that builds links or metadata."""

    title: str
    description: str
    author_name: str
    social_handle: str
    base_url: str


@dataclass(frozen=True)
class ContentEntry:
    """A validated blog entry parsed from a markdown source."""

    identifier: str
    title: str
    description: str
    date: datetime.date
    draft: bool = False
    external: bool = False
    url: Optional[str] = None
    body: Optional[str] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class ParsedEntry:
    """Successful parse of a single content source."""

    entry: ContentEntry

    @property
    def identifier(self) -> str:
        return self.entry.identifier


@dataclass(frozen=True)
class RejectedEntry:
    """A content source that failed validation, with the offending field."""

    identifier: str
    field: str
    reason: str


ParseResult = Union[ParsedEntry, RejectedEntry]


@dataclass(frozen=True)
class Page:
    """One page of a listing."""

    entries: List[ContentEntry]
    number: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages
