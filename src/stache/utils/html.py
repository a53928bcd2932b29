"""HTML escaping for stache variable output.

The default escaper substitutes entities for ``& < > " ' / ` =`` in a single
pass via `str.translate()`. Environments accept any ``str -> str`` callable
in its place.
"""

from __future__ import annotations

from stache.utils.constants import HTML_ENTITIES

_ESCAPE_TABLE = str.maketrans(HTML_ENTITIES)


def html_escape(value: str) -> str:
    """Escape HTML special characters.

    Example:
        >>> html_escape('<a href="/x">')
        '&lt;a href&#x3D;&quot;&#x2F;x&quot;&gt;'
    """
    return str(value).translate(_ESCAPE_TABLE)
