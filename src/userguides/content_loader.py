"""Assemble the group/chapter/guide tree from YAML declaration files."""

from __future__ import annotations

import logging
from dataclasses import replace
from importlib import resources
from importlib.resources.abc import Traversable
from typing import Any

import yaml

from .errors import ContentDecodeError, ContentReadError, GuideLibraryError
from .models import (
    Chapter,
    Group,
    Guide,
    GuideCompletion,
    GuideDoc,
    GuideMetadata,
    GuideStep,
    Library,
    Variable,
)
from .validation import validate_chapter, validate_group, validate_guide

logger = logging.getLogger(__name__)

CONTENT_PACKAGE = "userguides.content"
GUIDES_DIR = "guides"
GROUP_FILE = "group.yaml"
CHAPTER_FILE = "chapter.yaml"
GUIDE_SUFFIX = ".yaml"

_PLAIN_STRING_TAGS = frozenset({"tag:yaml.org,2002:bool", "tag:yaml.org,2002:timestamp"})


class DeclarationLoader(yaml.SafeLoader):
    """SafeLoader that leaves YAML 1.1 booleans (yes, off) and dates as strings."""


DeclarationLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _PLAIN_STRING_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def decode_yaml(text: str) -> Any:
    """Decode one declaration document."""
    return yaml.load(text, Loader=DeclarationLoader)


def bundled_source() -> Traversable:
    """Return the content root shipped inside the package."""
    return resources.files(CONTENT_PACKAGE)


def guides_root(source: Traversable) -> Traversable:
    """Resolve the ``guides`` collection of a content source."""
    if source.name == GUIDES_DIR:
        return source
    return source.joinpath(GUIDES_DIR)


def load_tree(source: Traversable) -> Library:
    """Load every group below ``source`` and validate each entity in place.

    Cross-entity checks are not run here; see ``validation.validate_library``.
    """
    root = guides_root(source)
    groups: list[Group] = []
    for entry in _list_dir(root, "read guides directory"):
        if not entry.is_dir():
            continue
        try:
            groups.append(_parse_group(entry))
        except GuideLibraryError as exc:
            raise exc.with_context(f"parse group {entry.name}") from exc

    library = Library(groups=tuple(groups))
    logger.debug("Assembled %d group(s) from %s", len(groups), root)
    return library


def _parse_group(node: Traversable) -> Group:
    raw = _read_declaration(node.joinpath(GROUP_FILE))
    group = Group(
        slug=node.name,
        name=_str(raw, "name"),
        description=_str(raw, "description"),
        skill_level=_str(raw, "skillLevel"),
        ordering=_int(raw, "ordering"),
    )
    validate_group(group)

    chapters: list[Chapter] = []
    for entry in _list_dir(node, "read group directory"):
        if not entry.is_dir():
            continue
        try:
            chapters.append(_parse_chapter(entry))
        except GuideLibraryError as exc:
            raise exc.with_context(f"parse chapter {entry.name}") from exc

    logger.debug("Loaded group %s with %d chapter(s)", group.slug, len(chapters))
    return replace(group, chapters=tuple(chapters))


def _parse_chapter(node: Traversable) -> Chapter:
    raw = _read_declaration(node.joinpath(CHAPTER_FILE))
    chapter = Chapter(
        slug=node.name,
        name=_str(raw, "name"),
        description=_str(raw, "description"),
        ordering=_int(raw, "ordering"),
        variables=tuple(_variable_from_dict(item) for item in _mappings(raw, "variables")),
    )
    validate_chapter(chapter)

    guides: list[Guide] = []
    for entry in _list_dir(node, "read chapter directory"):
        if entry.is_dir() or not entry.name.endswith(GUIDE_SUFFIX) or entry.name == CHAPTER_FILE:
            continue
        try:
            guides.append(_parse_guide(entry))
        except GuideLibraryError as exc:
            raise exc.with_context(f"parse guide {entry.name}") from exc

    logger.debug("Loaded chapter %s with %d guide(s)", chapter.slug, len(guides))
    return replace(chapter, guides=tuple(guides))


def _parse_guide(node: Traversable) -> Guide:
    raw = _read_declaration(node)
    metadata = _mapping(raw, "metadata")
    completion = _mapping(raw, "completion")
    guide = Guide(
        slug=_str(raw, "slug"),
        ordering=_int(raw, "ordering"),
        prerequisite_guide_slugs=_strings(raw, "prerequisiteGuideSlugs"),
        metadata=GuideMetadata(
            title=_str(metadata, "title"),
            description=_str(metadata, "description"),
            labels=_strings(metadata, "labels"),
            difficulty=_str(metadata, "difficulty"),
            minutes_to_complete=_int(metadata, "minutesToComplete"),
        ),
        steps=tuple(_step_from_dict(item) for item in _mappings(raw, "steps")),
        completion=GuideCompletion(
            success_message=_str(completion, "successMessage"),
            recommended_guide_ids=_strings(completion, "recommendedGuideIds"),
        ),
    )
    validate_guide(guide)
    return guide


def _step_from_dict(raw: dict[str, Any]) -> GuideStep:
    return GuideStep(
        order=_int(raw, "order"),
        title=_str(raw, "title"),
        instruction=_str(raw, "instruction"),
        hint=_str(raw, "hint"),
        validation_hint=_str(raw, "validationHint"),
        validation=_str(raw, "validation"),
        docs=tuple(GuideDoc(title=_str(doc, "title"), url=_str(doc, "url")) for doc in _mappings(raw, "docs")),
    )


def _variable_from_dict(raw: dict[str, Any]) -> Variable:
    return Variable(
        name=_str(raw, "name"),
        description=_str(raw, "description"),
        resource_type=_str(raw, "resourceType"),
    )


def _list_dir(node: Traversable, action: str) -> list[Traversable]:
    """List visible children of a collection, sorted by name."""
    try:
        entries = list(node.iterdir())
    except OSError as exc:
        raise ContentReadError(f"{action}: {exc}") from exc
    return sorted((entry for entry in entries if not entry.name.startswith(".")), key=lambda entry: entry.name)


def _read_declaration(node: Traversable) -> dict[str, Any]:
    """Read and decode one YAML declaration into a mapping."""
    try:
        text = node.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ContentReadError(f"read {node.name}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ContentDecodeError(f"parse {node.name}: {exc}") from exc

    try:
        raw = decode_yaml(text)
    except yaml.YAMLError as exc:
        raise ContentDecodeError(f"parse {node.name}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ContentDecodeError(f"parse {node.name}: document must be a mapping, got {type(raw).__name__}")
    return raw


def _str(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        raise ContentDecodeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return str(value)


def _int(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContentDecodeError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _list(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ContentDecodeError(f"field {key!r} must be a list, got {type(value).__name__}")
    return value


def _strings(raw: dict[str, Any], key: str) -> tuple[str, ...]:
    values = _list(raw, key)
    for index, value in enumerate(values):
        if value is None or isinstance(value, (list, dict)):
            raise ContentDecodeError(f"field {key!r} entry at index {index} must be a string")
    return tuple(str(value) for value in values)


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ContentDecodeError(f"field {key!r} must be a mapping, got {type(value).__name__}")
    return value


def _mappings(raw: dict[str, Any], key: str) -> list[dict[str, Any]]:
    values = _list(raw, key)
    for index, value in enumerate(values):
        if not isinstance(value, dict):
            raise ContentDecodeError(f"field {key!r} entry at index {index} must be a mapping")
    return values
