"""CLI entrypoint for validating and inspecting the guide library."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from importlib.resources.abc import Traversable
from pathlib import Path

from . import __version__
from .content_loader import bundled_source
from .errors import GuideLibraryError
from .library import iter_guides, load_library
from .models import Library
from .schema import check_schemas
from .validation import GuideSlugScope

PrintFn = Callable[[str], None]


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="userguides", description="Validate declarative user guide content")
    parser.add_argument("command", nargs="?", default="validate", choices=["validate", "tree", "schema"])
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=None,
        help="directory containing guides/ (defaults to the bundled content)",
    )
    parser.add_argument(
        "--slug-scope",
        choices=[scope.value for scope in GuideSlugScope],
        default=GuideSlugScope.LIBRARY.value,
        help="where guide slugs must be unique",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="increase log verbosity")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = _parser().parse_args(argv)
    _configure_logging(args.verbose)
    source: Traversable = bundled_source() if args.content_dir is None else args.content_dir

    if args.command == "schema":
        return _schema_command(source, print_fn)

    try:
        library = load_library(source, slug_scope=GuideSlugScope(args.slug_scope))
    except GuideLibraryError as exc:
        print_fn(f"error: {exc}")
        return 1

    if args.command == "tree":
        _print_tree(library, print_fn)
        return 0

    guide_count = sum(1 for _ in iter_guides(library))
    print_fn(f"OK: {len(library.groups)} group(s), {guide_count} guide(s)")
    return 0


def _schema_command(source: Traversable, print_fn: PrintFn) -> int:
    """Check declaration files against the bundled JSON schemas."""
    try:
        issues = check_schemas(source)
    except OSError as exc:
        print_fn(f"error: {exc}")
        return 1
    for issue in issues:
        print_fn(f"{issue.path}: {issue.message}")
    if issues:
        print_fn(f"{len(issues)} schema issue(s) found")
        return 1
    print_fn("OK: all declarations match their schemas")
    return 0


def _print_tree(library: Library, print_fn: PrintFn) -> None:
    for group in library.groups:
        print_fn(f"{group.name} ({group.slug}) [{group.skill_level}]")
        for chapter in group.chapters:
            print_fn(f"  {chapter.name} ({chapter.slug})")
            for guide in chapter.guides:
                print_fn(f"    {guide.metadata.title} ({guide.slug}) - {len(guide.steps)} step(s)")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
