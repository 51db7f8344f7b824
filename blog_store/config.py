"""Configuration loading for the site and the content store."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit
from xml.etree import ElementTree as ET

from .errors import ConfigurationError
from .models import SiteConfig

logger = logging.getLogger(__name__)

SITE_TITLE = "thisisamank"
SITE_DESCRIPTION = "Welcome to my blog!"
TWITTER_HANDLE = "@thisisaman01"
MY_NAME = "Aman Kumar"

SITE_URL_VARIABLE = "SITE"

_DEFAULT_PORTS = {"http": 80, "https": 443}
ON_INVALID_CHOICES = ("fail", "skip")


@dataclass
class SiteOverrides:
    title: Optional[str] = None
    description: Optional[str] = None
    author_name: Optional[str] = None
    social_handle: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    content_dir: str
    env_file: Optional[str]
    on_invalid: str = "fail"
    concurrency: int = 1
    posts_path: str = "blog"
    site: SiteOverrides = field(default_factory=SiteOverrides)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def derive_base_url(url: str) -> str:
    """Return the origin (scheme, host and non-default port) of an absolute URL."""
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid site URL {url!r}: {exc}") from exc

    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise ConfigurationError(f"Site URL must be absolute: {url!r}")
    if scheme not in _DEFAULT_PORTS:
        raise ConfigurationError(
            f"Site URL must use http or https, got {parts.scheme!r}: {url!r}"
        )

    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def load_site_config(
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[SiteOverrides] = None,
) -> SiteConfig:
    """Build the site configuration from the environment-provided URL."""
    env = os.environ if environ is None else environ
    raw_url = (env.get(SITE_URL_VARIABLE) or "").strip()
    if not raw_url:
        raise ConfigurationError(
            f"{SITE_URL_VARIABLE} environment variable is not set; "
            "an absolute site URL is required."
        )

    base_url = derive_base_url(raw_url)
    overrides = overrides or SiteOverrides()
    site = SiteConfig(
        title=overrides.title or SITE_TITLE,
        description=overrides.description or SITE_DESCRIPTION,
        author_name=overrides.author_name or MY_NAME,
        social_handle=overrides.social_handle or TWITTER_HANDLE,
        base_url=base_url,
    )
    logger.info("Site '%s' configured with base URL %s", site.title, site.base_url)
    return site


def _resolve_path(config_path: Path, value: str) -> str:
    """Paths in config.xml are relative to the directory holding it."""
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = (config_path.parent / candidate).resolve()
    return str(candidate)


def parse_env_config(path: str) -> Dict[str, str]:
    """Read <variable name="..."> pairs (normally just SITE) from env.xml."""
    if not path:
        return {}

    logger.info("Reading build environment from %s", path)
    try:
        root = ET.parse(path).getroot()
    except (OSError, ET.ParseError) as exc:
        logger.warning("Could not read environment file %s: %s", path, exc)
        raise

    variables: Dict[str, str] = {}
    for node in root.findall("variable"):
        name = node.attrib.get("name")
        if name and node.text and node.text.strip():
            variables[name] = node.text.strip()
    if SITE_URL_VARIABLE not in variables:
        logger.debug("%s does not define %s", path, SITE_URL_VARIABLE)
    return variables


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    content_node = root.find("content")
    if content_node is None or not content_node.text or not content_node.text.strip():
        raise ValueError("Config missing <content> directory")
    content_dir = _resolve_path(config_path, content_node.text.strip())

    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    on_invalid = root.findtext("on-invalid", "fail").strip().lower()
    if on_invalid not in ON_INVALID_CHOICES:
        raise ValueError(
            f"<on-invalid> must be one of {', '.join(ON_INVALID_CHOICES)}; "
            f"got '{on_invalid}'"
        )

    concurrency = int(root.findtext("concurrency", "1"))
    if concurrency < 1:
        raise ValueError("<concurrency> must be at least 1.")

    posts_path = root.findtext("posts-path", "blog").strip().strip("/")

    site_node = root.find("site")
    site = SiteOverrides()
    if site_node is not None:
        site.title = site_node.findtext("title") or None
        site.description = site_node.findtext("description") or None
        site.author_name = site_node.findtext("author") or None
        site.social_handle = site_node.findtext("social-handle") or None

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        content_dir=content_dir,
        env_file=env_file,
        on_invalid=on_invalid,
        concurrency=concurrency,
        posts_path=posts_path,
        site=site,
        logging=logging_config,
    )
