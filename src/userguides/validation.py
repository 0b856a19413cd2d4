"""Field and cross-reference validation for loaded guide content."""

from __future__ import annotations

import re
from enum import StrEnum
from urllib.parse import urlsplit

from .errors import CrossReferenceError, FieldValidationError
from .models import (
    DIFFICULTIES,
    RESOURCE_TYPES,
    SKILL_LEVELS,
    Chapter,
    Group,
    Guide,
    GuideDoc,
    Library,
    guide_path,
    iter_guides,
)

ALLOWED_URL_SCHEMES = ("http", "https")
_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class GuideSlugScope(StrEnum):
    """Where guide slugs must be unique."""

    LIBRARY = "library"
    CHAPTER = "chapter"


def _choices(values: tuple[str, ...]) -> str:
    return ", ".join(values[:-1]) + f", or {values[-1]}"


def validate_group(group: Group) -> None:
    """Validate required fields and the skill level of a group."""
    if not group.name:
        raise FieldValidationError(f"group {group.slug}: name cannot be empty")
    if not group.skill_level:
        raise FieldValidationError(f"group {group.slug}: skill level cannot be empty")
    if group.skill_level not in SKILL_LEVELS:
        raise FieldValidationError(
            f"group {group.slug}: invalid skill level {group.skill_level!r} (must be {_choices(SKILL_LEVELS)})"
        )


def validate_chapter(chapter: Chapter) -> None:
    """Validate required fields and declared variables of a chapter."""
    if not chapter.name:
        raise FieldValidationError(f"chapter {chapter.slug}: name cannot be empty")

    seen: set[str] = set()
    for index, variable in enumerate(chapter.variables):
        if not variable.name:
            raise FieldValidationError(f"chapter {chapter.slug}: variable at index {index} name cannot be empty")
        if variable.name in seen:
            raise FieldValidationError(f"chapter {chapter.slug}: duplicate variable name {variable.name!r}")
        seen.add(variable.name)
        if not variable.resource_type:
            raise FieldValidationError(
                f"chapter {chapter.slug}: variable {variable.name} resource type cannot be empty"
            )
        if variable.resource_type not in RESOURCE_TYPES:
            raise FieldValidationError(
                f"chapter {chapter.slug}: variable {variable.name} has invalid resource type "
                f"{variable.resource_type!r} (must be {_choices(RESOURCE_TYPES)})"
            )


def validate_guide(guide: Guide) -> None:
    """Validate a guide on its own, without looking at its siblings.

    Checks required fields, the difficulty enumeration, labels, every step
    and doc link, and that step orders form the dense sequence 1..N no
    matter in which order the steps were declared.
    """
    if not guide.slug:
        raise FieldValidationError(f"guide {guide.metadata.title!r}: slug cannot be empty")
    if not guide.metadata.title:
        raise FieldValidationError(f"guide {guide.slug}: title cannot be empty")
    if not guide.steps:
        raise FieldValidationError(f"guide {guide.slug}: must have at least one step")

    difficulty = guide.metadata.difficulty
    if difficulty and difficulty not in DIFFICULTIES:
        raise FieldValidationError(
            f"guide {guide.slug}: invalid difficulty {difficulty!r} (must be {_choices(DIFFICULTIES)})"
        )

    for index, label in enumerate(guide.metadata.labels):
        if not label.strip():
            raise FieldValidationError(f"guide {guide.slug}: label at index {index} is empty")

    orders: list[int] = []
    for step in guide.steps:
        if step.order <= 0:
            raise FieldValidationError(f"guide {guide.slug}: step order must be positive, got {step.order}")
        if not step.title:
            raise FieldValidationError(f"guide {guide.slug}: step {step.order} title cannot be empty")
        if not step.instruction:
            raise FieldValidationError(f"guide {guide.slug}: step {step.order} instruction cannot be empty")
        if step.order in orders:
            raise FieldValidationError(f"guide {guide.slug}: duplicate step order {step.order}")
        orders.append(step.order)

        for doc in step.docs:
            _validate_doc(guide.slug, step.order, doc)

    for position, order in enumerate(sorted(orders), start=1):
        if order != position:
            raise FieldValidationError(
                f"guide {guide.slug}: steps must be sequentially ordered starting at 1, "
                f"found order {order} at position {position}"
            )

    if guide.metadata.minutes_to_complete < 0:
        raise FieldValidationError(f"guide {guide.slug}: minutes to complete cannot be negative")

    _validate_reference_list(guide, "prerequisiteGuideSlugs", guide.prerequisite_guide_slugs)
    _validate_reference_list(guide, "recommendedGuideIds", guide.completion.recommended_guide_ids)
    if guide.slug in guide.prerequisite_guide_slugs:
        raise FieldValidationError(f"guide {guide.slug}: cannot list itself as a prerequisite")


def _validate_doc(guide_slug: str, step_order: int, doc: GuideDoc) -> None:
    prefix = f"guide {guide_slug}: step {step_order}"
    if not doc.title:
        raise FieldValidationError(f"{prefix} doc title cannot be empty")
    if not doc.url:
        raise FieldValidationError(f"{prefix} doc URL cannot be empty")

    malformed = f"{prefix} doc URL {doc.url!r} is malformed"
    if any(_is_control(char) for char in doc.url):
        raise FieldValidationError(f"{malformed}: contains a control character")
    try:
        parsed = urlsplit(doc.url)
        _ = parsed.port
    except ValueError as exc:
        raise FieldValidationError(f"{malformed}: {exc}") from exc
    if any(char.isspace() for char in parsed.netloc):
        raise FieldValidationError(f"{malformed}: host contains whitespace")
    if _INVALID_ESCAPE.search(doc.url):
        raise FieldValidationError(f"{malformed}: invalid percent escape")

    if parsed.scheme not in ALLOWED_URL_SCHEMES:
        raise FieldValidationError(f"{prefix} doc URL {doc.url!r} must use http or https scheme")
    if not parsed.netloc:
        raise FieldValidationError(f"{prefix} doc URL {doc.url!r} must include a host")


def _is_control(char: str) -> bool:
    return ord(char) < 0x20 or ord(char) == 0x7F


def _validate_reference_list(guide: Guide, field_name: str, values: tuple[str, ...]) -> None:
    seen: set[str] = set()
    for index, value in enumerate(values):
        if not value.strip():
            raise FieldValidationError(f"guide {guide.slug}: {field_name} entry at index {index} is empty")
        if value in seen:
            raise FieldValidationError(f"guide {guide.slug}: duplicate {field_name} entry {value!r}")
        seen.add(value)


def validate_library(library: Library, slug_scope: GuideSlugScope = GuideSlugScope.LIBRARY) -> None:
    """Run the checks that span more than one entity.

    Group slugs must be unique in the library, chapter slugs in their group
    and guide slugs in their chapter (or in the whole library, depending on
    ``slug_scope``). Every recommended guide and prerequisite must name an
    existing guide slug, and prerequisites must not form a cycle.
    """
    _validate_unique_slugs(library, slug_scope)

    known = {guide.slug for _, _, guide in iter_guides(library)}
    for group, chapter, guide in iter_guides(library):
        path = guide_path(group, chapter, guide)
        for recommended in guide.completion.recommended_guide_ids:
            if recommended not in known:
                raise CrossReferenceError(
                    f"guide {path} references non-existent guide in recommendedGuideIds: {recommended}"
                )
        for prerequisite in guide.prerequisite_guide_slugs:
            if prerequisite not in known:
                raise CrossReferenceError(
                    f"guide {path} references non-existent guide in prerequisiteGuideSlugs: {prerequisite}"
                )

    _validate_prerequisite_graph(library)


def _validate_unique_slugs(library: Library, slug_scope: GuideSlugScope) -> None:
    group_slugs: set[str] = set()
    library_guides: dict[str, str] = {}
    for group in library.groups:
        if group.slug in group_slugs:
            raise CrossReferenceError(f"duplicate group slug: {group.slug}")
        group_slugs.add(group.slug)

        chapter_slugs: set[str] = set()
        for chapter in group.chapters:
            if chapter.slug in chapter_slugs:
                raise CrossReferenceError(f"duplicate chapter slug {chapter.slug} in group {group.slug}")
            chapter_slugs.add(chapter.slug)

            chapter_path = f"{group.slug}/{chapter.slug}"
            guide_slugs: set[str] = set()
            for guide in chapter.guides:
                if guide.slug in guide_slugs:
                    raise CrossReferenceError(f"duplicate guide slug {guide.slug} in chapter {chapter_path}")
                guide_slugs.add(guide.slug)

                if slug_scope is GuideSlugScope.LIBRARY:
                    previous = library_guides.get(guide.slug)
                    if previous is not None:
                        raise CrossReferenceError(
                            f"duplicate guide slug {guide.slug} (in {previous} and {chapter_path})"
                        )
                    library_guides[guide.slug] = chapter_path


def _validate_prerequisite_graph(library: Library) -> None:
    """Reject prerequisite cycles with a depth-first walk on an explicit stack."""
    graph: dict[str, list[str]] = {}
    for _, _, guide in iter_guides(library):
        graph.setdefault(guide.slug, []).extend(guide.prerequisite_guide_slugs)

    visited: set[str] = set()
    for start in graph:
        if start in visited:
            continue
        path = [start]
        visiting = {start}
        pending = [iter(graph[start])]
        while pending:
            for prerequisite in pending[-1]:
                if prerequisite in visited:
                    continue
                if prerequisite in visiting:
                    cycle_path = path[path.index(prerequisite) :] + [prerequisite]
                    raise CrossReferenceError(f"circular guide prerequisites detected: {' -> '.join(cycle_path)}")
                visiting.add(prerequisite)
                path.append(prerequisite)
                pending.append(iter(graph.get(prerequisite, [])))
                break
            else:
                pending.pop()
                finished = path.pop()
                visiting.remove(finished)
                visited.add(finished)
