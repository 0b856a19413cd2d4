"""Load-and-validate entry point and read-only lookups over the guide tree."""

from __future__ import annotations

import logging
from functools import cache
from importlib.resources.abc import Traversable
from pathlib import Path

from .content_loader import bundled_source, load_tree
from .models import Chapter, Group, Guide, Library, guide_path, iter_guides
from .validation import GuideSlugScope, validate_library

logger = logging.getLogger(__name__)

__all__ = [
    "find_chapter",
    "find_group",
    "find_guide",
    "guide_path",
    "guides",
    "iter_guides",
    "load_library",
    "load_library_from_dir",
    "prerequisite_guides",
    "recommended_guides",
]


def load_library(
    source: Traversable | None = None, *, slug_scope: GuideSlugScope = GuideSlugScope.LIBRARY
) -> Library:
    """Load the whole content tree and run every validation check.

    ``source`` defaults to the content bundled with the package. Any failure
    raises a ``GuideLibraryError`` subclass; no partial library is returned.
    """
    root = bundled_source() if source is None else source
    library = load_tree(root)
    validate_library(library, slug_scope)
    logger.info(
        "Loaded guide library: %d group(s), %d chapter(s), %d guide(s)",
        len(library.groups),
        sum(len(group.chapters) for group in library.groups),
        sum(1 for _ in iter_guides(library)),
    )
    return library


def load_library_from_dir(path: Path, *, slug_scope: GuideSlugScope = GuideSlugScope.LIBRARY) -> Library:
    """Load a library from a directory for tests/tools."""
    return load_library(path, slug_scope=slug_scope)


@cache
def guides() -> Library:
    """Return the process-wide bundled library, loading it on first use.

    A failed load is not cached, so every call re-raises until the content is
    fixed. The integration layer decides whether that failure is fatal.
    """
    return load_library()


def find_group(library: Library, slug: str) -> Group | None:
    for group in library.groups:
        if group.slug == slug:
            return group
    return None


def find_chapter(library: Library, group_slug: str, chapter_slug: str) -> Chapter | None:
    group = find_group(library, group_slug)
    if group is None:
        return None
    for chapter in group.chapters:
        if chapter.slug == chapter_slug:
            return chapter
    return None


def find_guide(library: Library, slug: str) -> Guide | None:
    """Find a guide by its slug anywhere in the library."""
    for _, _, guide in iter_guides(library):
        if guide.slug == slug:
            return guide
    return None


def recommended_guides(library: Library, guide: Guide) -> list[Guide]:
    """Resolve a guide's recommended guide ids in declaration order."""
    return _resolve(library, guide.completion.recommended_guide_ids)


def prerequisite_guides(library: Library, guide: Guide) -> list[Guide]:
    """Resolve a guide's prerequisite slugs in declaration order."""
    return _resolve(library, guide.prerequisite_guide_slugs)


def _resolve(library: Library, slugs: tuple[str, ...]) -> list[Guide]:
    by_slug: dict[str, Guide] = {}
    for _, _, guide in iter_guides(library):
        by_slug.setdefault(guide.slug, guide)
    return [by_slug[slug] for slug in slugs if slug in by_slug]
