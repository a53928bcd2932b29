"""Token types for the stache lexer and parser.

A template is tokenized into a flat stream of `Token` records, which the
parser then nests into a tree: section tokens own their body as
``children``.

Token Kinds:
- TEXT: literal text, emitted unchanged
- NAME: ``{{name}}``, escaped variable
- UNESCAPED: ``{{{name}}}`` or ``{{&name}}``
- SECTION / INVERTED: ``{{#name}}`` / ``{{^name}}``, own a body
- CLOSE: ``{{/name}}``, only present in the flat stream
- PARTIAL: ``{{>name}}``
- COMMENT: ``{{!text}}``
- DELIMITER: ``{{=<% %>=}}``

Tokens are frozen; nesting builds new section tokens with
`dataclasses.replace` instead of mutating the flat ones.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kind of a template token, keyed by the sigil that introduces it."""

    TEXT = "text"
    NAME = "name"
    UNESCAPED = "&"
    SECTION = "#"
    INVERTED = "^"
    CLOSE = "/"
    PARTIAL = ">"
    COMMENT = "!"
    DELIMITER = "="

    @classmethod
    def from_sigil(cls, sigil: str) -> TokenType:
        """Map a tag sigil to its token type (empty sigil -> NAME)."""
        if not sigil:
            return cls.NAME
        if sigil == "{":
            return cls.UNESCAPED
        return cls(sigil)


@dataclass(frozen=True, slots=True)
class Token:
    """A single template token.

    Attributes:
        type: Token kind
        value: Variable/section path, partial name, or literal text
        start: Offset of the token in the template source
        end: Offset just past the token in the template source
        children: Section body (SECTION and INVERTED only)
        section_end: Offset where the matching close tag starts, used to
            slice the raw section source for lambdas
        indentation: Whitespace preceding a partial tag on its line
        tag_index: Ordinal of a partial tag on its line (0 = first tag)
        line_has_non_space: Whether non-whitespace text preceded a partial
            tag on its line
    """

    type: TokenType
    value: str
    start: int
    end: int
    children: tuple[Token, ...] = ()
    section_end: int | None = None
    indentation: str = ""
    tag_index: int = 0
    line_has_non_space: bool = False

    @property
    def is_section(self) -> bool:
        return self.type in (TokenType.SECTION, TokenType.INVERTED)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.start}:{self.end})"
