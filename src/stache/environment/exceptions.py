"""Exceptions for the stache template engine.

Exception Hierarchy:
TemplateError (base)
├── ConfigurationError        # Non-string template, bad tag pair or partials
├── TemplateSyntaxError       # Parse-time error in template source
│   └── ParseError            # Unclosed tag, unbalanced sections
├── StructuralError           # Lambda section without original source
├── TemplateRuntimeError      # Render-time error (partial depth)
└── TemplateNotFoundError     # Template not found by loader

Missing data is never an error: absent variables, sections and partials
render as nothing.

Error Messages:
Parse errors carry the offending tag name, the source offset, and the
derived line/column, and show the template line with a caret:

    ```
    Parse Error: Unclosed section "items" at 24
      --> page.mustache:3:0
       |
    >  3 | {{#items}}
         | ^
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for stache errors.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: CFG (configuration), PAR (parser), RUN (runtime),
    TPL (template loading)
    """

    # Configuration errors (S-CFG-xxx)
    INVALID_TEMPLATE = "S-CFG-001"
    INVALID_TAGS = "S-CFG-002"
    INVALID_PARTIALS = "S-CFG-003"
    INVALID_CACHE = "S-CFG-004"

    # Parser errors (S-PAR-xxx)
    UNCLOSED_TAG = "S-PAR-001"
    UNOPENED_SECTION = "S-PAR-002"
    UNCLOSED_SECTION = "S-PAR-003"

    # Runtime errors (S-RUN-xxx)
    MISSING_SOURCE = "S-RUN-001"
    PARTIAL_DEPTH = "S-RUN-002"

    # Template loading errors (S-TPL-xxx)
    TEMPLATE_NOT_FOUND = "S-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'parser', 'runtime')."""
        prefix = self.value.split("-")[1]
        return {
            "CFG": "configuration",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def offset_to_position(source: str, offset: int) -> tuple[int, int]:
    """Convert a source offset to a (1-based line, 0-based column) pair."""
    offset = max(0, min(offset, len(source)))
    lineno = source.count("\n", 0, offset) + 1
    col_offset = offset - (source.rfind("\n", 0, offset) + 1)
    return lineno, col_offset


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet with line numbers and a caret under the error."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>3} | {content}")
            if lineno == self.error_line and self.column is not None:
                parts.append(f"     | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


def format_partial_stack(stack: list[str] | None) -> str:
    """Format the chain of partials being rendered, outermost first.

    Example:
        >>> print(format_partial_stack(["page", "list", "item"]))
        Partial stack:
          • page
          • list
          • item
    """
    if not stack:
        return ""
    lines = ["Partial stack:"]
    lines.extend(f"  • {name}" for name in stack)
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all stache errors.

        >>> try:
        ...     stache.render(source, view)
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen summary prefixed by its code."""
        header = str(self).strip()
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class ConfigurationError(TemplateError, TypeError):
    """Invalid engine input: a non-string template or a bad tag pair.

    Also a `TypeError`, so callers checking for bad argument types catch it.

    Example:
            >>> stache.render(42, {})
        ConfigurationError: Invalid template! Template should be a "str" but "int" was given ...
    """

    code: ErrorCode | None = ErrorCode.INVALID_TEMPLATE

    def __init__(self, message: str, *, code: ErrorCode | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line.  If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.UNCLOSED_TAG

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"

        header = f"Parse Error: {self.message}\n  --> {location}"

        snippet = self.snippet()
        if snippet is not None:
            return f"{header}\n{snippet.format()}"
        return header

    def snippet(self, context_lines: int = 0) -> SourceSnippet | None:
        """Source lines around the error, or None without source."""
        if not self.source or not self.lineno:
            return None
        if not 0 < self.lineno <= len(self.source.splitlines()):
            return None
        return build_source_snippet(
            self.source,
            self.lineno,
            context_lines=context_lines,
            column=self.col_offset,
        )

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
        return f"{code_prefix}{self.message}\n  --> {location}"


class ParseError(TemplateSyntaxError):
    """Unclosed tag or unbalanced sections, with source offset and tag context.

    Attributes:
        tag: Name of the offending section, when there is one
        offset: Offset in the source where the problem was detected
        closing: Name of the close tag that did not match ``tag``
        suggestion: Optional hint for fixing the template
    """

    def __init__(
        self,
        message: str,
        offset: int,
        *,
        tag: str | None = None,
        closing: str | None = None,
        source: str | None = None,
        name: str | None = None,
        code: ErrorCode = ErrorCode.UNCLOSED_TAG,
        suggestion: str | None = None,
    ):
        self.offset = offset
        self.tag = tag
        self.closing = closing
        self.suggestion = suggestion
        self.code = code
        lineno = col_offset = None
        if source is not None:
            lineno, col_offset = offset_to_position(source, offset)
        super().__init__(
            message,
            lineno=lineno,
            name=name,
            source=source,
            col_offset=col_offset,
        )

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


class StructuralError(TemplateError, TypeError):
    """A lambda section was rendered without the original template source.

    Lambdas receive the raw, unrendered text of their section. That text is
    sliced from the source, so rendering a token tree with a lambda section
    requires the source that produced the tree.
    """

    code: ErrorCode | None = ErrorCode.MISSING_SOURCE


class TemplateRuntimeError(TemplateError):
    """Render-time error with context.

    Attributes:
        message: Error description
        template_name: Name of the template being rendered
        partial_stack: Partials being rendered, outermost first
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.PARTIAL_DEPTH

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        partial_stack: list[str] | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.partial_stack = partial_stack or []
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        if self.template_name:
            parts.append(f"  Location: {self.template_name}")
        if self.partial_stack:
            parts.append("")
            parts.append(format_partial_stack(self.partial_stack))
        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")
        return "\n".join(parts)


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader.

    Raised by `Environment.get_template(name)`. Partial lookups treat a
    loader miss as an absent partial instead.
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND
