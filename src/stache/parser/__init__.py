"""Stache parser package.

Template Source → Lexer (flat tokens) → Parser (squash + nest) → token tree
"""

from stache.environment.exceptions import ParseError
from stache.parser.core import Parser, nest_tokens, parse_template, squash_tokens

__all__ = [
    "ParseError",
    "Parser",
    "nest_tokens",
    "parse_template",
    "squash_tokens",
]
