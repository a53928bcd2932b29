"""Stache — logic-less Mustache templates for Python.

Renders Mustache templates: variables, sections, inverted sections,
partials, comments, lambdas and custom delimiters, with HTML escaping by
default.

Quickstart:
    >>> import stache
    >>> stache.render("Hello, {{name}}!", {"name": "World"})
    'Hello, World!'

Partials and lambdas:
    >>> stache.render("{{>user}}", {"name": "Ann"}, {"user": "<b>{{name}}</b>"})
    '<b>Ann</b>'
    >>> stache.render(
    ...     "{{#bold}}Hi {{name}}{{/bold}}",
    ...     {"name": "Ann", "bold": lambda: lambda text, render: f"<b>{render(text)}</b>"},
    ... )
    '<b>Hi Ann</b>'

Configured instances:
    >>> from stache import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("templates/"), tags=("<%", "%>"))
    >>> env.get_template("page").render(title="Home")

Architecture:
Template Source → Lexer → Parser → token tree → Renderer → str

Pipeline stages:
1. **Lexer**: Scans the source into a flat token stream, strips
   standalone lines and checks section balance
2. **Parser**: Merges text runs and nests section bodies
3. **Cache**: Token trees are cached per Environment, keyed by source
   and delimiters
4. **Renderer**: Walks the tree against a `Context` chain of views

The module-level `render`, `parse` and `clear_cache` functions use
`default_environment`. Reconfigure it directly, e.g.
``stache.default_environment.escape = str`` to disable escaping globally.

Thread-Safety:
Parsing and rendering keep their state local to the call. The template
cache locks around writes, so renders may run concurrently once an
Environment is configured.

Free-Threading (PEP 703):
Declares GIL-independence via `_Py_mod_gil = 0` attribute.

"""

from typing import Any

from stache._types import Token, TokenType
from stache.environment import (
    ChoiceLoader,
    ConfigurationError,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    ParseError,
    SourceSnippet,
    StructuralError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from stache.cache import NullCache, TemplateCache
from stache.context import Context
from stache.lexer import Scanner
from stache.render_context import RenderContext, get_render_context, render_context
from stache.renderer import Renderer
from stache.template import Template
from stache.utils.constants import DEFAULT_TAGS
from stache.utils.html import html_escape

__version__ = "0.1.0"

default_environment = Environment()


def render(
    template: str,
    view: Any = None,
    partials: Any = None,
    tags: Any = None,
) -> str:
    """Render template with view using the default environment.

    Raises:
        ConfigurationError: If template is not a string
        ParseError: On an unclosed tag or unbalanced sections
    """
    return default_environment.render(template, view, partials, tags)


def parse(template: str, tags: Any = None) -> tuple[Token, ...]:
    """Parse and cache template in the default environment."""
    return default_environment.parse(template, tags)


def clear_cache() -> None:
    """Clear the default environment's template cache."""
    default_environment.clear_cache()


__all__ = [
    "DEFAULT_TAGS",
    "ChoiceLoader",
    "ConfigurationError",
    "Context",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "NullCache",
    "ParseError",
    "RenderContext",
    "Renderer",
    "Scanner",
    "SourceSnippet",
    "StructuralError",
    "Template",
    "TemplateCache",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "__version__",
    "build_source_snippet",
    "clear_cache",
    "default_environment",
    "get_render_context",
    "html_escape",
    "parse",
    "render",
    "render_context",
]


# Free-threading declaration (PEP 703)
def __getattr__(name: str) -> object:
    """Module-level getattr for the free-threading declaration."""
    if name == "_Py_mod_gil":
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'stache' has no attribute {name!r}")
