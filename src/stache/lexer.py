"""Stache lexer — converts template source into a flat token stream.

Architecture:
    ```
    Scanner        cursor over the source; match() / consume_until()
    Delimiters     compiled opening/closing patterns for one tag pair
    Lexer          scan loop: text, tags, standalone-line stripping,
                   section balance checking
    ```

Standalone Lines:
A line holding only section, inverted, close, partial, comment or
delimiter-change tags plus whitespace is removed from the output,
newline included. Text is scanned one character at a time into a per-line
buffer; when the line ends the buffer is either kept verbatim or stripped
of its whitespace text before being appended to the stream.

Complexity:
Each character of the source is visited a bounded number of times, so
tokenizing is O(n) in template length.

"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from stache._types import Token, TokenType
from stache.environment.exceptions import ConfigurationError, ErrorCode, ParseError
from stache.utils.constants import DEFAULT_TAGS, TAG_SIGILS

_WHITE_RE = re.compile(r"\s*")
_SPACE_RE = re.compile(r"\s+")
_EQUALS_RE = re.compile(r"\s*=")
_CURLY_RE = re.compile(r"\s*}")
_TAG_RE = re.compile("[" + re.escape("".join(sorted(TAG_SIGILS))) + "]")

TagPair = Sequence[str] | str


class Scanner:
    """A cursor over an immutable string.

    Example:
            >>> scanner = Scanner("Hello {{name}}")
            >>> scanner.consume_until(re.compile(r"\\{\\{"))
            'Hello '
            >>> scanner.match(re.compile(r"\\{\\{"))
            '{{'
            >>> scanner.pos
            8
    """

    __slots__ = ("pos", "string")

    def __init__(self, string: str):
        self.string = string
        self.pos = 0

    def at_end(self) -> bool:
        """True when the whole string has been consumed."""
        return self.pos == len(self.string)

    def match(self, pattern: re.Pattern[str]) -> str:
        """Consume and return the text matching at the current position.

        Returns an empty string and leaves the position unchanged when the
        pattern does not match here.
        """
        m = pattern.match(self.string, self.pos)
        if m is None:
            return ""
        text = m.group(0)
        self.pos += len(text)
        return text

    def consume_until(self, pattern: re.Pattern[str]) -> str:
        """Consume text up to the next match of pattern.

        Returns the skipped text, which is the entire remainder if the
        pattern never matches.
        """
        m = pattern.search(self.string, self.pos)
        end = len(self.string) if m is None else m.start()
        text = self.string[self.pos : end]
        self.pos = end
        return text


@dataclass(frozen=True, slots=True)
class Delimiters:
    """Compiled patterns for one opening/closing tag pair."""

    tags: tuple[str, str]
    opening: re.Pattern[str]
    closing: re.Pattern[str]
    closing_curly: re.Pattern[str]

    @classmethod
    def compile(cls, tags: TagPair) -> Delimiters:
        """Compile a tag pair, or a single whitespace-separated string.

        Raises:
            ConfigurationError: If tags is not exactly two strings
        """
        pair = normalize_tags(tags)
        open_tag, close_tag = pair
        return cls(
            tags=pair,
            opening=re.compile(re.escape(open_tag) + r"\s*"),
            closing=re.compile(r"\s*" + re.escape(close_tag)),
            closing_curly=re.compile(r"\s*" + re.escape("}" + close_tag)),
        )


def normalize_tags(tags: TagPair | None) -> tuple[str, str]:
    """Return tags as a two-string tuple.

    A single string such as ``"<% %>"`` is split on whitespace. Anything
    that does not yield exactly two non-empty strings raises
    ConfigurationError.
    """
    if tags is None:
        return DEFAULT_TAGS
    if isinstance(tags, str):
        tags = _SPACE_RE.split(tags)[:2]
    if (
        isinstance(tags, (list, tuple))
        and len(tags) == 2
        and all(isinstance(t, str) and t for t in tags)
    ):
        return (tags[0], tags[1])
    raise ConfigurationError(f"Invalid tags: {tags!r}", code=ErrorCode.INVALID_TAGS)


class Lexer:
    """Single-use tokenizer for one template source.

    Produces the flat token stream with standalone lines stripped and
    section balance verified. Adjacent text tokens are not squashed here;
    see `stache.parser`.

    Example:
            >>> [t.type.name for t in Lexer("Hi {{#a}}{{/a}}").tokenize()]
            ['TEXT', 'TEXT', 'TEXT', 'SECTION', 'CLOSE']
    """

    def __init__(
        self,
        source: str,
        tags: TagPair | None = None,
        name: str | None = None,
    ):
        self.source = source
        self.name = name
        self._delimiters = Delimiters.compile(tags if tags is not None else DEFAULT_TAGS)
        self._scanner = Scanner(source)
        self._tokens: list[Token] = []
        self._sections: list[Token] = []

        # Current-line state
        self._line: list[Token] = []
        self._spaces: set[int] = set()
        self._has_tag = False
        self._non_space = False
        self._line_has_non_space = False
        self._indentation = ""
        self._tag_index = 0

    def tokenize(self) -> list[Token]:
        """Scan the whole source and return the flat token list.

        Raises:
            ParseError: On an unclosed tag or unbalanced sections
        """
        scanner = self._scanner
        while not scanner.at_end():
            start = scanner.pos

            text = scanner.consume_until(self._delimiters.opening)
            for chr_ in text:
                self._push_text(chr_, start)
                start += 1

            if not scanner.match(self._delimiters.opening):
                break
            self._has_tag = True
            self._scan_tag(start)

        self._finish_line()

        if self._sections:
            open_section = self._sections[0]
            message = f'Unclosed section "{open_section.value}" at {scanner.pos}'
            if len(self._sections) > 1:
                names = ", ".join(f'"{s.value}"' for s in self._sections)
                message += f" (open sections: {names})"
            raise self._error(
                message,
                scanner.pos,
                tag=open_section.value,
                code=ErrorCode.UNCLOSED_SECTION,
            )
        return self._tokens

    def _push_text(self, chr_: str, start: int) -> None:
        if chr_.isspace():
            self._spaces.add(len(self._line))
            self._indentation += chr_
        else:
            self._non_space = True
            self._line_has_non_space = True
            self._indentation += " "

        self._line.append(Token(TokenType.TEXT, chr_, start, start + 1))

        if chr_ == "\n":
            self._finish_line()
            self._indentation = ""
            self._tag_index = 0
            self._line_has_non_space = False

    def _finish_line(self) -> None:
        """Flush the current line, dropping its whitespace if it is standalone."""
        if self._has_tag and not self._non_space:
            self._tokens.extend(
                token for i, token in enumerate(self._line) if i not in self._spaces
            )
        else:
            self._tokens.extend(self._line)
        self._line = []
        self._spaces = set()
        self._has_tag = False
        self._non_space = False

    def _scan_tag(self, start: int) -> None:
        scanner = self._scanner
        delimiters = self._delimiters

        sigil = scanner.match(_TAG_RE)
        token_type = TokenType.from_sigil(sigil)
        scanner.match(_WHITE_RE)

        if token_type is TokenType.DELIMITER:
            value = scanner.consume_until(_EQUALS_RE)
            scanner.match(_EQUALS_RE)
            scanner.consume_until(delimiters.closing)
        elif sigil == "{":
            value = scanner.consume_until(delimiters.closing_curly)
            scanner.match(_CURLY_RE)
            scanner.consume_until(delimiters.closing)
        else:
            value = scanner.consume_until(delimiters.closing)

        if not scanner.match(delimiters.closing):
            raise self._error(f"Unclosed tag at {scanner.pos}", scanner.pos)

        if token_type is TokenType.PARTIAL:
            token = Token(
                token_type,
                value,
                start,
                scanner.pos,
                indentation=self._indentation,
                tag_index=self._tag_index,
                line_has_non_space=self._line_has_non_space,
            )
        else:
            token = Token(token_type, value, start, scanner.pos)

        self._tag_index += 1
        self._line.append(token)

        if token.is_section:
            self._sections.append(token)
        elif token_type is TokenType.CLOSE:
            self._close_section(token)
        elif token_type in (TokenType.NAME, TokenType.UNESCAPED):
            self._non_space = True
        elif token_type is TokenType.DELIMITER:
            self._delimiters = Delimiters.compile(value)

    def _close_section(self, token: Token) -> None:
        if not self._sections:
            raise self._error(
                f'Unopened section "{token.value}" at {token.start}',
                token.start,
                tag=token.value,
                code=ErrorCode.UNOPENED_SECTION,
            )
        open_section = self._sections.pop()
        if open_section.value != token.value:
            raise self._error(
                f'Unclosed section "{open_section.value}" at {token.start}',
                token.start,
                tag=open_section.value,
                closing=token.value,
                code=ErrorCode.UNCLOSED_SECTION,
                suggestion=(
                    f'"{{{{/{token.value}}}}}" closes "{open_section.value}"; '
                    f'close "{open_section.value}" first'
                ),
            )

    def _error(
        self,
        message: str,
        offset: int,
        *,
        tag: str | None = None,
        closing: str | None = None,
        code: ErrorCode = ErrorCode.UNCLOSED_TAG,
        suggestion: str | None = None,
    ) -> ParseError:
        return ParseError(
            message,
            offset,
            tag=tag,
            closing=closing,
            source=self.source,
            name=self.name,
            code=code,
            suggestion=suggestion,
        )


def tokenize(source: str, tags: TagPair | None = None) -> list[Token]:
    """Tokenize source into the flat (unnested, unsquashed) token list."""
    return Lexer(source, tags).tokenize()
