"""High-level orchestration for the blog_store application."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .config import SiteOverrides, load_site_config
from .content import ContentIndex, entry_link, load_content_index
from .models import ContentEntry, SiteConfig

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    content_dir: str
    on_invalid: str = "fail"
    concurrency: int = 1
    posts_path: str = "blog"
    include_drafts: bool = False
    entry_id: Optional[str] = None
    output_path: Optional[str] = None
    site: SiteOverrides = field(default_factory=SiteOverrides)


@dataclass
class RunResult:
    """Returned data after executing the app."""

    output_text: str
    payload: Any
    site: SiteConfig
    index: ContentIndex


def serialise_entry(
    site: SiteConfig,
    entry: ContentEntry,
    posts_path: str = "blog",
    include_body: bool = False,
) -> Dict[str, Any]:
    """Convert an entry to the JSON shape handed to the rendering side."""
    payload: Dict[str, Any] = {
        "id": entry.identifier,
        "title": entry.title,
        "description": entry.description,
        "date": entry.date.isoformat(),
        "draft": entry.draft,
        "external": entry.external,
        "link": entry_link(site, entry, posts_path),
    }
    if include_body and not entry.external:
        payload["body"] = entry.body
    return payload


def _save_output(path: str, text: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(text + "\n", encoding="utf-8")
    logger.info("Saved listing to %s", location)


def execute(
    config: RunConfig, environ: Optional[Mapping[str, str]] = None
) -> RunResult:
    """Load the site configuration and content, then build the JSON output."""
    # The base URL must resolve before any content is read.
    site = load_site_config(environ, overrides=config.site)

    index = load_content_index(
        config.content_dir,
        on_invalid=config.on_invalid,
        concurrency=config.concurrency,
    )

    payload: Any
    if config.entry_id:
        entry = index.get_by_identifier(config.entry_id)
        payload = serialise_entry(site, entry, config.posts_path, include_body=True)
    else:
        entries = index.list_all() if config.include_drafts else index.list_published()
        listing: List[Dict[str, Any]] = [
            serialise_entry(site, entry, config.posts_path) for entry in entries
        ]
        payload = {
            "site": {
                "title": site.title,
                "description": site.description,
                "author": site.author_name,
                "social_handle": site.social_handle,
                "base_url": site.base_url,
            },
            "entries": listing,
        }
        logger.info("Listing %d entries", len(listing))

    output_text = json.dumps(payload, indent=2, ensure_ascii=False)

    if config.output_path:
        _save_output(config.output_path, output_text)

    return RunResult(output_text=output_text, payload=payload, site=site, index=index)
