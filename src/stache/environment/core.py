"""Stache Environment — one configured instance of the template engine.

An Environment owns everything that used to be process-wide state in
mustache implementations:

- ``tags``: default delimiter pair
- ``escape``: escaper applied to ``{{name}}`` output
- ``cache``: parsed-template cache (any get/set/clear object; None disables)
- ``loader``: default partials provider and `get_template()` source
- ``max_partial_depth``: optional guard against runaway partial recursion

Environments are independent: each holds its own cache. The module-level
functions in `stache` use a single default instance.

Thread-Safety:
Configuration is read at call time and is expected to be set up before
rendering starts. Parsing and rendering keep their state local to the
call, and the template cache locks around writes, so one Environment can
serve concurrent renders.

"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from stache._types import Token
from stache.cache import CacheProtocol, NullCache, TemplateCache, make_cache_key
from stache.context import Context
from stache.environment.exceptions import (
    ConfigurationError,
    ErrorCode,
    TemplateNotFoundError,
)
from stache.lexer import TagPair, normalize_tags
from stache.parser import parse_template
from stache.render_context import get_render_context, render_context
from stache.renderer import Partials, Renderer
from stache.template import Template
from stache.utils.constants import DEFAULT_TAGS
from stache.utils.html import html_escape

logger = logging.getLogger(__name__)

_DEFAULT_CACHE: Any = object()


class Environment:
    """Central configuration and entry point for parsing and rendering.

    Example:
            >>> env = Environment()
            >>> env.render("Hello, {{name}}!", {"name": "<World>"})
            'Hello, &lt;World&gt;!'

            >>> env = Environment(tags=("<%", "%>"), escape=str)
            >>> env.from_string("Hello, <% name %>!").render(name="<World>")
            'Hello, <World>!'

    Args:
        tags: Default delimiter pair, or one whitespace-separated string
        escape: ``str -> str`` escaper for ``{{name}}`` output
        cache: Template cache; a new TemplateCache by default, None to
            disable caching
        loader: Default partials provider, also used by `get_template()`
        max_partial_depth: Raise TemplateRuntimeError when partials nest
            deeper than this (no limit by default)

    Raises:
        ConfigurationError: If tags or cache are malformed
    """

    def __init__(
        self,
        *,
        tags: TagPair = DEFAULT_TAGS,
        escape: Callable[[str], str] = html_escape,
        cache: CacheProtocol | None = _DEFAULT_CACHE,
        loader: Any = None,
        max_partial_depth: int | None = None,
    ):
        self._tags = normalize_tags(tags)
        self.escape = escape
        self.loader = loader
        self.max_partial_depth = max_partial_depth
        self._cache: CacheProtocol = TemplateCache()
        if cache is not _DEFAULT_CACHE:
            self.cache = cache
        self._renderer = Renderer(self)

    @property
    def tags(self) -> tuple[str, str]:
        """Default delimiter pair. Assigning validates and normalizes it."""
        return self._tags

    @tags.setter
    def tags(self, tags: TagPair) -> None:
        self._tags = normalize_tags(tags)

    @property
    def cache(self) -> CacheProtocol:
        """The parsed-template cache. Assign None to disable caching."""
        return self._cache

    @cache.setter
    def cache(self, cache: CacheProtocol | None) -> None:
        if cache is None:
            self._cache = NullCache()
            return
        if not all(callable(getattr(cache, attr, None)) for attr in ("get", "set", "clear")):
            raise ConfigurationError(
                f"Invalid cache: {type(cache).__name__} must provide get(), set() and clear()",
                code=ErrorCode.INVALID_CACHE,
            )
        self._cache = cache

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    def parse(
        self,
        template: str,
        tags: TagPair | None = None,
        name: str | None = None,
    ) -> tuple[Token, ...]:
        """Parse template into a token tree, using the cache.

        Parsing ahead of time warms the cache so later renders of the same
        template skip the parse.

        Raises:
            ParseError: On an unclosed tag or unbalanced sections
            ConfigurationError: On a malformed tag pair
        """
        pair = self._tags if tags is None else normalize_tags(tags)
        key = make_cache_key(template, pair)
        tokens = self._cache.get(key)
        if tokens is not None:
            logger.debug("Template cache hit for %s", name or "<string>")
            return tokens

        logger.debug("Template cache miss; parsing %s (%d chars)", name or "<string>", len(template))
        tokens = parse_template(template, pair, name=name)
        self._cache.set(key, tokens)
        return tokens

    def render(
        self,
        template: str,
        view: Any = None,
        partials: Partials = None,
        tags: TagPair | None = None,
    ) -> str:
        """Render template with view.

        Args:
            template: Template source
            view: Data to render; an existing `Context` is reused as-is so
                nested renders share its ancestry
            partials: Mapping of name → source, a loader, or a callable
                taking the name. Defaults to the environment's loader.
            tags: Delimiter pair overriding the environment default

        Raises:
            ConfigurationError: If template is not a string or tags are malformed
            ParseError: On an unclosed tag or unbalanced sections
        """
        if not isinstance(template, str):
            raise ConfigurationError(
                f'Invalid template! Template should be a "str" but '
                f'"{type(template).__name__}" was given as the first '
                f"argument for render(template, view, partials)",
                code=ErrorCode.INVALID_TEMPLATE,
            )
        tokens = self.parse(template, tags)
        return self.render_tokens(tokens, view, partials, template, tags)

    def render_tokens(
        self,
        tokens: tuple[Token, ...],
        view: Any = None,
        partials: Partials = None,
        original_template: str | None = None,
        tags: TagPair | None = None,
        *,
        name: str | None = None,
    ) -> str:
        """Render an already parsed token tree.

        ``original_template`` is only needed when the tree contains lambda
        sections; without it they raise StructuralError.
        """
        context = view if isinstance(view, Context) else Context(view)
        if get_render_context() is not None:
            return self._renderer.render_tokens(tokens, context, partials, original_template, tags)
        with render_context(template_name=name, max_partial_depth=self.max_partial_depth):
            return self._renderer.render_tokens(tokens, context, partials, original_template, tags)

    def from_string(
        self,
        source: str,
        name: str | None = None,
        tags: TagPair | None = None,
    ) -> Template:
        """Parse source into a reusable Template.

        Raises:
            ConfigurationError: If source is not a string
            ParseError: On an unclosed tag or unbalanced sections
        """
        if not isinstance(source, str):
            raise ConfigurationError(
                f'Invalid template! Template should be a "str" but '
                f'"{type(source).__name__}" was given',
                code=ErrorCode.INVALID_TEMPLATE,
            )
        tokens = self.parse(source, tags, name=name)
        return Template(self, source, tokens, name=name, tags=tags)

    def get_template(self, name: str) -> Template:
        """Load a template by name through the environment's loader.

        Raises:
            TemplateNotFoundError: If there is no loader or it lacks the name
        """
        if self.loader is None or not hasattr(self.loader, "get_source"):
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured"
            )
        source, _filename = self.loader.get_source(name)
        return self.from_string(source, name=name)

    def clear_cache(self) -> None:
        """Drop all cached token trees."""
        self._cache.clear()

    def cache_info(self) -> dict[str, int]:
        """Return the cache's size and hit/miss counters, when it tracks them."""
        info = getattr(self._cache, "info", None)
        if info is None:
            return {}
        return info()

    def __repr__(self) -> str:
        return f"<Environment tags={self._tags!r} cache={type(self._cache).__name__}>"
