"""Stache parser — builds the token tree from the lexer's flat stream.

Two passes over the lexer output:

1. **Squash**: merge runs of single-character TEXT tokens into one token.
2. **Nest**: move each section's tokens into its ``children`` and record
   where its close tag starts (``section_end``).

Section balance has already been verified by the lexer, so nesting never
fails. The resulting tree is a tuple of frozen tokens and is safe to share
between threads and cache entries.
"""

from __future__ import annotations

from dataclasses import replace

from stache._types import Token, TokenType
from stache.lexer import Lexer, TagPair


class Parser:
    """Parse one template source into a token tree.

    Example:
            >>> tree = Parser("{{#items}}<li>{{name}}</li>{{/items}}").parse()
            >>> section = tree[0]
            >>> section.type.name, section.value
            ('SECTION', 'items')
            >>> [t.value for t in section.children]
            ['<li>', 'name', '</li>']
    """

    def __init__(
        self,
        source: str,
        tags: TagPair | None = None,
        name: str | None = None,
    ):
        self.source = source
        self.tags = tags
        self.name = name

    def parse(self) -> tuple[Token, ...]:
        """Tokenize and nest the source.

        Raises:
            ParseError: On an unclosed tag or unbalanced sections
            ConfigurationError: On a malformed tag pair
        """
        if not self.source:
            return ()
        tokens = Lexer(self.source, self.tags, name=self.name).tokenize()
        return nest_tokens(squash_tokens(tokens))


def squash_tokens(tokens: list[Token]) -> list[Token]:
    """Combine consecutive TEXT tokens into a single token."""
    squashed: list[Token] = []
    for token in tokens:
        last = squashed[-1] if squashed else None
        if (
            token.type is TokenType.TEXT
            and last is not None
            and last.type is TokenType.TEXT
        ):
            squashed[-1] = replace(last, value=last.value + token.value, end=token.end)
        else:
            squashed.append(token)
    return squashed


def nest_tokens(tokens: list[Token]) -> tuple[Token, ...]:
    """Form the flat token list into a tree.

    Each section token is rebuilt with its body as ``children`` and the
    start offset of its close tag as ``section_end``. CLOSE tokens do not
    appear in the tree.
    """
    root: list[Token] = []
    collector = root
    # (open token, the collector it belongs to, its own body)
    sections: list[tuple[Token, list[Token], list[Token]]] = []

    for token in tokens:
        if token.is_section:
            body: list[Token] = []
            sections.append((token, collector, body))
            collector = body
        elif token.type is TokenType.CLOSE:
            section, parent, body = sections.pop()
            parent.append(
                replace(section, children=tuple(body), section_end=token.start)
            )
            collector = parent
        else:
            collector.append(token)

    return tuple(root)


def parse_template(
    source: str,
    tags: TagPair | None = None,
    name: str | None = None,
) -> tuple[Token, ...]:
    """Parse source into a token tree without caching."""
    return Parser(source, tags, name=name).parse()
