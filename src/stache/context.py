"""Stache Context — the chain of view frames that names resolve against.

Each `Context` wraps one view value and points at its parent frame.
Sections push a new frame for the value they iterate or enter; lookups
start at the innermost frame and walk outward until a frame can answer.

    ```
    Context(view=item)          # {{#items}} pushes each element
      └── parent: Context(view=page)
            └── parent: None    # root frame wraps the render() view
    ```

Resolution Rules:
- ``.`` is the current frame's view.
- ``a.b.c`` (a dot after the first character) descends through members
  from each frame's view. A frame answers when the value holding the last
  segment is a keyed structure with that key, or a scalar that exposes it
  as an own member (``name.length`` on a string).
- ``name`` answers only from a frame whose view is a keyed structure with
  that key. Scalar views never answer a bare name, so ``{{length}}`` inside
  ``{{#name}}`` reads the parent frame, not the string's length.
- No answer anywhere resolves to None. Missing data is not an error.

Callables:
A resolved callable is invoked on every lookup and its return value is the
result. A callable taking one required positional argument receives the
view of the frame the lookup started from, so a function on the root view
can format each element of ``{{#items}}``. Anything else, including bound
methods and ``lambda: ...``, is called with no arguments. The raw
(uncalled) value is what each frame memoizes.

Thread-Safety:
A Context belongs to a single render call. Frames are never shared
between concurrent renders.

"""

from __future__ import annotations

import inspect
import math
from collections.abc import Mapping, Sequence
from numbers import Number
from typing import Any

_MISSING = object()


def is_scalar(value: Any) -> bool:
    """Strings and numbers (bools included)."""
    return isinstance(value, (str, Number))


def is_sequence(value: Any) -> bool:
    """Sequences that are not strings or bytes."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_falsy(value: Any) -> bool:
    """Falsy in the template sense: None, False, zero, NaN, or ``""``.

    Containers are never falsy by emptiness here; an empty list renders its
    section zero times and an empty mapping is entered once.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value
    if isinstance(value, Number) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def _index(value: Sequence[Any], name: str) -> int | None:
    if name.isdecimal():
        index = int(name)
        if index < len(value):
            return index
    return None


def has_key(value: Any, name: str) -> bool:
    """Whether a keyed structure defines name.

    Mappings answer by key membership, sequences by index or ``length``,
    other objects by public attribute. Scalars and None have no keys.
    """
    if value is None or is_scalar(value):
        return False
    if isinstance(value, Mapping):
        return name in value
    if is_sequence(value):
        return name == "length" or _index(value, name) is not None
    if name.startswith("_"):
        return False
    return hasattr(value, name)


def has_own_member(value: Any, name: str) -> bool:
    """Whether a scalar exposes name as an own member.

    Strings expose ``length`` and their character indexes; numbers expose
    nothing.
    """
    if isinstance(value, str):
        return name == "length" or _index(value, name) is not None
    return False


def get_member(value: Any, name: str) -> Any:
    """Read member name of value, or None when it has no such member."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(name)
    if isinstance(value, str) or is_sequence(value):
        if name == "length":
            return len(value)
        index = _index(value, name)
        return value[index] if index is not None else None
    if is_scalar(value) or name.startswith("_"):
        return None
    return getattr(value, name, None)


class Context:
    """A frame in the view chain.

    Example:
            >>> root = Context({"name": "World", "page": {"title": "Home"}})
            >>> root.lookup("page.title")
            'Home'
            >>> root.push({"title": "Inner"}).lookup("name")
            'World'
            >>> Context("abc").push({}).lookup("length") is None
            True
    """

    __slots__ = ("_cache", "parent", "view")

    def __init__(self, view: Any, parent: Context | None = None):
        self.view = view
        self.parent = parent
        self._cache: dict[str, Any] = {".": view}

    def push(self, view: Any) -> Context:
        """Create a child frame wrapping view."""
        return Context(view, self)

    def lookup(self, name: str) -> Any:
        """Resolve name against this frame and its ancestors.

        Returns None when no frame defines the name.
        """
        value = self._cache.get(name, _MISSING)
        if value is _MISSING:
            value = self._resolve(name)
            self._cache[name] = value

        if callable(value):
            value = _call(value, self.view)
        return value

    def _resolve(self, name: str) -> Any:
        dotted = name.find(".") > 0
        names = name.split(".") if dotted else None

        context: Context | None = self
        while context is not None:
            if names is not None:
                hit, value = _lookup_path(context.view, names)
            else:
                hit = has_key(context.view, name)
                value = get_member(context.view, name) if hit else None
            if hit:
                return value
            context = context.parent
        return None

    def __repr__(self) -> str:
        depth = 0
        frame = self.parent
        while frame is not None:
            depth += 1
            frame = frame.parent
        return f"<Context depth={depth} view={self.view!r}>"


def _lookup_path(view: Any, names: list[str]) -> tuple[bool, Any]:
    """Descend names from view; report whether the last segment was found."""
    value = view
    hit = False
    last = len(names) - 1
    for index, segment in enumerate(names):
        if value is None:
            break
        if index == last:
            hit = has_key(value, segment) or has_own_member(value, segment)
        value = get_member(value, segment)
    return hit, value


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _call(func: Any, view: Any) -> Any:
    """Call a view callable, passing view when it takes exactly one argument."""
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return func()
    required = [p for p in params if p.kind in _POSITIONAL and p.default is p.empty]
    if len(required) == 1:
        return func(view)
    return func()
