"""Stache Renderer — walks a token tree against a view chain.

Dispatch:
Each token type maps to a handler method through `_TOKEN_RENDERERS`
(O(1) lookup). Handlers return the text to emit, or None to emit nothing.
COMMENT and DELIMITER tokens have no handler; they were consumed at parse
time.

Sections:
    ```
    falsy (None, False, 0, "")  → nothing
    sequence                    → body once per element, element pushed
    callable                    → lambda(raw_section_source, render)
    True                        → body once, context unchanged
    anything else               → body once, value pushed
    ```

Values:
Variables are stringified the way JavaScript's ``String()`` treats JSON data,
so views loaded from JSON render as they do in other Mustache engines:
``True`` → ``true``, ``1.0`` → ``1``, ``[1, 2]`` → ``1,2``. Other values use
``str()``.

Lambdas receive the raw section text sliced from the original template,
so `render_tokens` needs that template whenever a tree contains lambda
sections. Partials become the original template of their own subtree.

"""

from __future__ import annotations

import logging
import math
import weakref
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from stache._types import Token, TokenType
from stache.context import Context, is_falsy, is_sequence
from stache.environment.exceptions import (
    ConfigurationError,
    ErrorCode,
    StructuralError,
    TemplateNotFoundError,
)
from stache.render_context import (
    get_render_context,
    reset_render_context,
    set_render_context,
)

if TYPE_CHECKING:
    from stache.environment import Environment
    from stache.lexer import TagPair

logger = logging.getLogger(__name__)

# Mapping of name -> source, a loader with get_source(), or callable(name), or None
Partials = Any

_TOKEN_RENDERERS: dict[TokenType, str] = {
    TokenType.TEXT: "_render_text",
    TokenType.NAME: "_render_escaped",
    TokenType.UNESCAPED: "_render_unescaped",
    TokenType.SECTION: "_render_section",
    TokenType.INVERTED: "_render_inverted",
    TokenType.PARTIAL: "_render_partial",
}


def to_string(value: Any) -> str:
    """Stringify a view value for output.

    Example:
        >>> to_string([1, 2.0, True, None])
        '1,2,true,'
    """
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    if is_sequence(value):
        return ",".join("" if item is None else to_string(item) for item in value)
    return str(value)


def indent_partial(partial: str, indentation: str, line_has_non_space: bool) -> str:
    """Prefix the non-empty lines of partial with indentation.

    Only spaces and tabs of indentation are used. The first line is left
    alone when the host line already had text before the partial tag.

    Example:
        >>> indent_partial("a\\nb\\n", "  ", False)
        '  a\\n  b\\n'
        >>> indent_partial("a\\nb", "  ", True)
        'a\\n  b'
    """
    prefix = "".join(c for c in indentation if c in " \t")
    lines = partial.split("\n")
    for index, line in enumerate(lines):
        if line and (index > 0 or not line_has_non_space):
            lines[index] = prefix + line
    return "\n".join(lines)


class Renderer:
    """Render token trees for one Environment.

    The renderer reads the environment's escaper, cache and loader at call
    time, so swapping ``env.escape`` takes effect on the next render.

    Uses ``weakref.ref(env)`` to avoid an Environment ↔ Renderer cycle.
    """

    __slots__ = ("__weakref__", "_env_ref", "_handlers")

    def __init__(self, env: Environment):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._handlers: dict[TokenType, Callable[..., str | None]] = {
            token_type: getattr(self, method) for token_type, method in _TOKEN_RENDERERS.items()
        }

    @property
    def env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError("Environment has been garbage collected")
        return env

    def render_tokens(
        self,
        tokens: tuple[Token, ...] | list[Token],
        context: Context,
        partials: Partials = None,
        original_template: str | None = None,
        tags: TagPair | None = None,
    ) -> str:
        """Render tokens against context.

        Args:
            tokens: Token tree from `Environment.parse`
            context: View chain to resolve names against
            partials: Mapping, callable, or loader providing partial sources
            original_template: Source the tokens were parsed from; required
                only for lambda sections
            tags: Tag pair used to parse partials and lambda output

        Raises:
            StructuralError: If a lambda section is reached without
                original_template
        """
        buf: list[str] = []
        append = buf.append
        handlers = self._handlers
        for token in tokens:
            handler = handlers.get(token.type)
            if handler is None:
                continue
            value = handler(token, context, partials, original_template, tags)
            if value is not None:
                append(value)
        return "".join(buf)

    def _render_text(self, token: Token, *_: Any) -> str:
        return token.value

    def _render_escaped(self, token: Token, context: Context, *_: Any) -> str | None:
        value = context.lookup(token.value)
        if value is None:
            return None
        return self.env.escape(to_string(value))

    def _render_unescaped(self, token: Token, context: Context, *_: Any) -> str | None:
        value = context.lookup(token.value)
        if value is None:
            return None
        return to_string(value)

    def _render_section(
        self,
        token: Token,
        context: Context,
        partials: Partials,
        original_template: str | None,
        tags: TagPair | None,
    ) -> str | None:
        value = context.lookup(token.value)

        if is_falsy(value):
            return None

        if is_sequence(value):
            return "".join(
                self.render_tokens(token.children, context.push(item), partials, original_template, tags)
                for item in value
            )

        if callable(value):
            if not isinstance(original_template, str):
                raise StructuralError(
                    "Cannot use higher-order sections without the original template"
                )

            def sub_render(template: str) -> str:
                return self.env.render(template, context, partials, tags)

            text = original_template[token.end : token.section_end]
            logger.debug("Calling lambda section %r", token.value)
            result = value(text, sub_render)
            return None if result is None else to_string(result)

        if value is True:
            return self.render_tokens(token.children, context, partials, original_template, tags)

        return self.render_tokens(token.children, context.push(value), partials, original_template, tags)

    def _render_inverted(
        self,
        token: Token,
        context: Context,
        partials: Partials,
        original_template: str | None,
        tags: TagPair | None,
    ) -> str | None:
        value = context.lookup(token.value)
        if is_falsy(value) or (is_sequence(value) and len(value) == 0):
            return self.render_tokens(token.children, context, partials, original_template, tags)
        return None

    def _render_partial(
        self,
        token: Token,
        context: Context,
        partials: Partials,
        original_template: str | None,
        tags: TagPair | None,
    ) -> str | None:
        source = self.resolve_partial(token.value, partials)
        if source is None:
            return None

        if token.tag_index == 0 and token.indentation:
            source = indent_partial(source, token.indentation, token.line_has_non_space)

        env = self.env
        tokens = env.parse(source, tags)

        render_ctx = get_render_context()
        if render_ctx is None:
            return self.render_tokens(tokens, context, partials, source, tags)

        render_ctx.check_partial_depth(token.value)
        reset_token = set_render_context(render_ctx.child_context(token.value))
        try:
            return self.render_tokens(tokens, context, partials, source, tags)
        finally:
            reset_render_context(reset_token)

    def resolve_partial(self, name: str, partials: Partials = None) -> str | None:
        """Return the source of partial name, or None if it does not exist.

        partials may be a mapping, a loader (``get_source(name)``), or a
        callable taking the name. Without one, the environment's loader is
        used.

        Raises:
            ConfigurationError: If partials is none of the above, or the
                partial source is not a string
        """
        if partials is None:
            partials = self.env.loader
            if partials is None:
                logger.debug("No partials provider for partial %r", name)
                return None

        if isinstance(partials, Mapping):
            source = partials.get(name)
        elif hasattr(partials, "get_source"):
            try:
                source, _filename = partials.get_source(name)
            except TemplateNotFoundError as e:
                logger.debug("Partial %r not found: %s", name, e)
                return None
        elif callable(partials):
            source = partials(name)
        else:
            raise ConfigurationError(
                f"Invalid partials: expected a mapping, loader or callable, "
                f"got {type(partials).__name__}",
                code=ErrorCode.INVALID_PARTIALS,
            )

        if source is None:
            logger.debug("Partial %r not found", name)
            return None
        if not isinstance(source, str):
            raise ConfigurationError(
                f"Partial {name!r} must be a string, got {type(source).__name__}",
                code=ErrorCode.INVALID_PARTIALS,
            )
        return source
