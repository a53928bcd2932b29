"""Stache Template package — parsed templates ready for rendering.

Re-exports the public symbols so that ``from stache.template import Template``
works without reaching into the submodule.

"""

from stache.template.core import Template

__all__ = [
    "Template",
]
