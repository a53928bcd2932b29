"""Stache Environment package — engine configuration, loaders and errors.

Re-exports the public symbols so that ``from stache.environment import
Environment`` works without reaching into the submodules.

"""

from stache.environment.exceptions import (
    ConfigurationError,
    ErrorCode,
    ParseError,
    SourceSnippet,
    StructuralError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from stache.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
)
from stache.environment.core import Environment

__all__ = [
    "ChoiceLoader",
    "ConfigurationError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "Loader",
    "ParseError",
    "SourceSnippet",
    "StructuralError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
