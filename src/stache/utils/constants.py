"""Shared constants for stache.

Extracted from the lexer and escaper to keep modules focused.
"""

from __future__ import annotations

# Default tag delimiters
DEFAULT_TAGS: tuple[str, str] = ("{{", "}}")

# One-character sigils that classify a tag; anything else is a plain name
TAG_SIGILS: frozenset[str] = frozenset("!#&/=>^{")

# Separator between the template text and the tags in a cache key
CACHE_KEY_SEPARATOR = ":"

# Default extension tried by FileSystemLoader for bare template names
TEMPLATE_EXTENSION = ".mustache"

# Characters replaced by the default HTML escaper
HTML_ENTITIES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
    "/": "&#x2F;",
    "`": "&#x60;",
    "=": "&#x3D;",
}
