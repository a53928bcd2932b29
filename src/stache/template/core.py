"""Stache Template — a parsed template bound to its Environment.

Architecture:
    ```
    Template
    ├── _env: Environment      # escaper, loader, cache, partial depth limit
    ├── _tokens: tuple[Token]  # parsed token tree (shared with the cache)
    ├── _source: str           # sliced by lambda sections
    └── _name, _tags           # error messages, partial parsing
    ```

The Environment caches token trees, never Template objects, so a Template
holds its Environment directly; there is no reference cycle to break.

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stache._types import Token
    from stache.environment import Environment
    from stache.lexer import TagPair


class Template:
    """Parsed template ready for rendering.

    Created by `Environment.from_string()` or `Environment.get_template()`.

    Example:
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{name}}!")
            >>> t.render(name="World")
            'Hello, World!'

            >>> t.render({"name": "World"})
            'Hello, World!'

    """

    __slots__ = ("_env", "_name", "_source", "_tags", "_tokens")

    def __init__(
        self,
        env: Environment,
        source: str,
        tokens: tuple[Token, ...],
        name: str | None = None,
        tags: TagPair | None = None,
    ):
        self._env = env
        self._source = source
        self._tokens = tokens
        self._name = name
        self._tags = tags

    @property
    def env(self) -> Environment:
        return self._env

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> str:
        return self._source

    @property
    def tokens(self) -> tuple[Token, ...]:
        """The parsed token tree."""
        return self._tokens

    def render(self, view: Any = None, partials: Any = None, /, **kwargs: Any) -> str:
        """Render the template.

        Keyword arguments are merged over a mapping view. For any other
        view they form an extra frame on top of it, so they shadow the
        view's members without replacing it.

        Args:
            view: Data to render
            partials: Mapping, loader or callable providing partial sources;
                defaults to the environment's loader
            **kwargs: Additional view values

        Raises:
            TemplateRuntimeError: If partials nest past ``max_partial_depth``
        """
        from stache.context import Context

        if kwargs:
            if view is None:
                view = kwargs
            elif isinstance(view, Mapping):
                view = {**view, **kwargs}
            else:
                base = view if isinstance(view, Context) else Context(view)
                view = base.push(kwargs)

        return self._env.render_tokens(
            self._tokens,
            view,
            partials,
            self._source,
            self._tags,
            name=self._name,
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
