"""Configuration settings for the SuperSALE preview server."""

import os
from pathlib import Path
from typing import Final, Iterable

from .resolver import PrefixRule

# Application settings
APP_NAME: Final[str] = "SuperSALE Preview Server"
APP_VERSION: Final[str] = "0.1.0"

# Environment and logging
ENVIRONMENT: Final[str] = os.getenv("PREVIEW_ENV", "development")
LOG_LEVEL: Final[int] = int(os.getenv("PREVIEW_LOG_LEVEL", "20"))  # INFO

# Server settings
HOST: Final[str] = os.getenv("PREVIEW_HOST", "127.0.0.1")
PORT: Final[int] = int(os.getenv("PREVIEW_PORT", "3000"))

# Paths
CONTENT_ROOT: Final[Path] = Path(os.getenv("PREVIEW_CONTENT_ROOT", os.getcwd()))
TEMPLATES_DIR: Final[Path] = Path(__file__).parent / "templates"

# SSI processing
MAX_INCLUDE_DEPTH: Final[int] = 10
SSI_EXTENSIONS: Final[frozenset[str]] = frozenset({".html", ".ssi"})

# Virtual prefix -> subdirectory of the content root ("" is the root itself)
SSI_PREFIXES: Final[tuple[tuple[str, str], ...]] = (
    ("/special/supersale/202509/", "9SS"),
    ("/special/supersale/202512/", "12SS"),
    ("/special/sales/template/html/", ""),
)

# MIME types served by the preview server
MIME_TYPES: Final[dict[str, str]] = {
    ".html": "text/html",
    ".ssi": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".xml": "application/xml",
    ".txt": "text/plain",
}
DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"

# Campaign pages: (label, URL path, entry document)
CAMPAIGNS: Final[tuple[tuple[str, str, str], ...]] = (
    ("September SuperSALE (9SS)", "/9SS/", "/9SS/index_sale.html"),
    ("December SuperSALE (12SS)", "/12SS/", "/12SS/index_sale_trvmkt.html"),
)

# Bare campaign directories are served through their entry document
PAGE_ALIASES: Final[dict[str, str]] = {
    alias: entry
    for _, url, entry in CAMPAIGNS
    for alias in (url, url.rstrip("/"))
}

# Edited files must show up on reload
NO_CACHE_HEADERS: Final[dict[str, str]] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def build_prefix_rules(
    content_root: Path, extra_rules: Iterable[PrefixRule] = ()
) -> tuple[PrefixRule, ...]:
    """Build the ordered prefix rule table for a content root.

    Extra rules are appended after the built-in ones, so a built-in prefix
    always shadows an overlapping extra prefix.

    Args:
        content_root: Directory holding the campaign checkouts
        extra_rules: Additional rules to append

    Returns:
        Immutable ordered tuple of prefix rules
    """
    rules = [
        PrefixRule(virtual_prefix=prefix, physical_base=content_root / subdir)
        for prefix, subdir in SSI_PREFIXES
    ]
    rules.extend(extra_rules)
    return tuple(rules)
