"""Command-line rendering: ``stache TEMPLATE [--data FILE] [--partials DIR]``.

Renders one template file against JSON data and writes the result to
stdout or a file. Partials are loaded from a directory with
`FileSystemLoader`, so ``{{>header}}`` finds ``header.mustache``.

Example:
    ```
    $ echo '{"name": "World"}' | stache hello.mustache --data -
    Hello, World!
    ```

Errors from the engine are printed in their compact form and exit with
status 1.

"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from stache.environment import Environment, FileSystemLoader, TemplateError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stache",
        description="Render a Mustache template with JSON data",
    )
    parser.add_argument("template", help="Path to the template file")
    parser.add_argument(
        "--data",
        default=None,
        help="Path to a JSON file with the view, or '-' to read it from stdin",
    )
    parser.add_argument(
        "--partials",
        default=None,
        help="Directory to load partials from (defaults to the template's directory)",
    )
    parser.add_argument("--tags", default=None, help='Delimiters, e.g. "<% %>"')
    parser.add_argument("--output", "-o", default=None, help="Write output to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    return parser


def load_view(data: str | None) -> Any:
    """Read the JSON view from a path, from stdin for ``-``, or None."""
    if data is None:
        return None
    if data == "-":
        return json.load(sys.stdin)
    return json.loads(Path(data).read_text(encoding="utf-8"))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    template_path = Path(args.template)
    partials_dir = Path(args.partials) if args.partials else template_path.parent

    try:
        source = template_path.read_text(encoding="utf-8")
        view = load_view(args.data)
        env = Environment(loader=FileSystemLoader(partials_dir))
        if args.tags:
            env.tags = args.tags
        output = env.from_string(source, name=template_path.name).render(view)
    except TemplateError as e:
        print(e.format_compact(), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        print(f"stache: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.debug("Wrote %s", args.output)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
