"""Stache RenderContext — per-render state kept out of the user's view.

The view chain (`stache.context.Context`) holds only user data. Bookkeeping
for a render call lives here instead, in a ContextVar:

- the template name, for error messages
- the stack of partials currently being rendered
- the partial nesting depth and its optional limit

Benefits:
    - No internal keys in the user's view (a view may use any name)
    - Thread-safe and async-safe via ContextVar
    - Lambdas that re-enter the renderer see the same render state

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field


@dataclass
class RenderContext:
    """Per-render state isolated from the view chain.

    Attributes:
        template_name: Current template name for error messages
        partial_depth: Number of partials being rendered inside each other
        max_partial_depth: Depth limit, or None for no limit
        partial_stack: Names of the partials being rendered, outermost first
    """

    template_name: str | None = None
    partial_depth: int = 0
    max_partial_depth: int | None = None
    partial_stack: list[str] = field(default_factory=list)

    def check_partial_depth(self, partial_name: str) -> None:
        """Raise if rendering partial_name would exceed the depth limit.

        Raises:
            TemplateRuntimeError: If depth >= max_partial_depth
        """
        if self.max_partial_depth is None or self.partial_depth < self.max_partial_depth:
            return
        from stache.environment.exceptions import TemplateRuntimeError

        raise TemplateRuntimeError(
            f"Maximum partial depth exceeded ({self.max_partial_depth}) "
            f"when rendering partial '{partial_name}'",
            template_name=self.template_name,
            partial_stack=[*self.partial_stack, partial_name],
            suggestion="Check for recursive partials: A → B → A",
        )

    def child_context(self, partial_name: str) -> RenderContext:
        """Create the context for rendering a partial one level deeper."""
        return RenderContext(
            template_name=self.template_name,
            partial_depth=self.partial_depth + 1,
            max_partial_depth=self.max_partial_depth,
            partial_stack=[*self.partial_stack, partial_name],
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "stache_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    max_partial_depth: int | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for the
    duration of the with block, restoring the previous one on exit.

    Example:
        with render_context(template_name="page.mustache") as ctx:
            html = renderer.render_tokens(tokens, Context(view))
    """
    ctx = RenderContext(template_name=template_name, max_partial_depth=max_partial_depth)
    token = set_render_context(ctx)
    try:
        yield ctx
    finally:
        reset_render_context(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token.

    Low-level form of `render_context()` for nested partial renders that
    restore the previous context manually.
    """
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    """Reset render context using a token from set_render_context."""
    _render_context.reset(token)
