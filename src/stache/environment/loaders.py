"""Template loaders for stache environments.

Loaders provide template source by name. They implement
`get_source(name)` returning `(source, filename)` and raise
`TemplateNotFoundError` when the name is unknown.

A loader serves two purposes:
- `Environment.get_template(name)` compiles a named template
- Any loader can be passed as the partials provider of a render call, and
  an environment's loader is the default provider for ``{{>name}}``.
  A loader miss during partial lookup renders nothing.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary
- `ChoiceLoader`: Try multiple loaders in order
- `FunctionLoader`: Wrap a callable as a loader

Thread-Safety:
All built-in loaders are safe for concurrent `get_source()` calls.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol, runtime_checkable

from stache.environment.exceptions import TemplateNotFoundError
from stache.utils.constants import TEMPLATE_EXTENSION

logger = logging.getLogger(__name__)


@runtime_checkable
class Loader(Protocol):
    def get_source(self, name: str) -> tuple[str, str | None]: ...


class FileSystemLoader:
    """Load templates from filesystem directories.

    Directories are searched in order; the first match wins. A bare name
    that is not a file is retried with the ``.mustache`` extension, so
    ``{{>header}}`` finds ``header.mustache``.

    Example:
            >>> loader = FileSystemLoader("templates/")
            >>> source, filename = loader.get_source("journeys")
            >>> filename
            'templates/journeys.mustache'

    Raises:
        TemplateNotFoundError: If template not found in any search path

    """

    __slots__ = ("_encoding", "_extension", "_paths")

    def __init__(
        self,
        paths: str | Path | Sequence[str | Path],
        encoding: str = "utf-8",
        extension: str = TEMPLATE_EXTENSION,
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding
        self._extension = extension

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from the first directory that has it."""
        candidates = [name]
        if self._extension and not name.endswith(self._extension):
            candidates.append(name + self._extension)

        for base in self._paths:
            for candidate in candidates:
                path = base / candidate
                if path.is_file():
                    return path.read_text(self._encoding), str(path)

        logger.debug("Template %r not found in %s", name, self._paths)
        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """List all templates with the loader's extension in search paths."""
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(f"*{self._extension}"):
                    templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Useful for tests and embedded partials.

    Example:
            >>> loader = DictLoader({"user": "<b>{{name}}</b>"})
            >>> env = Environment(loader=loader)
            >>> env.render("{{#users}}{{>user}}{{/users}}", {"users": [{"name": "Ann"}]})
            '<b>Ann</b>'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> loader = ChoiceLoader([
            ...     DictLoader({"nav": "<nav>Custom</nav>"}),
            ...     FileSystemLoader("templates/default/"),
            ... ])

    Raises:
        TemplateNotFoundError: If no loader can find the template
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self._loaders = list(loaders)

    def get_source(self, name: str) -> tuple[str, str | None]:
        """Try each loader in order, return first match."""
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        """Merge template lists from all loaders (deduplicated, sorted)."""
        templates: set[str] = set()
        for loader in self._loaders:
            if hasattr(loader, "list_templates"):
                templates.update(loader.list_templates())
        return sorted(templates)


class FunctionLoader:
    """Wrap a callable as a template loader.

    The function takes a template name and returns the source, a
    ``(source, filename)`` tuple, or ``None`` when the template does not
    exist.

    Example:
            >>> def load(name):
            ...     return {"greeting": "Hello, {{name}}!"}.get(name)
            >>> env = Environment(loader=FunctionLoader(load))
            >>> env.get_template("greeting").render(name="World")
            'Hello, World!'

    Raises:
        TemplateNotFoundError: If ``load_func`` returns ``None``
    """

    __slots__ = ("_load_func",)

    def __init__(
        self,
        load_func: Callable[[str], str | tuple[str, str | None] | None],
    ):
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[str, str | None]:
        """Call the load function and normalize the result."""
        result = self._load_func(name)

        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")

        if isinstance(result, str):
            return result, "<function>"

        return result
