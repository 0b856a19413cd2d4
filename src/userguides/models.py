"""Core domain models for the user guide library."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

SKILL_LEVELS = ("BEGINNER", "ENABLER", "COMMANDER", "GUARDIAN")
DIFFICULTIES = ("easy", "medium", "hard")
RESOURCE_TYPES = ("stack", "policy", "aws_integration")


@dataclass(frozen=True)
class GuideDoc:
    """Reference documentation link attached to a step."""

    title: str
    url: str


@dataclass(frozen=True)
class GuideStep:
    """One instructional unit within a guide."""

    order: int
    title: str
    instruction: str
    hint: str = ""
    validation_hint: str = ""
    validation: str = ""
    docs: tuple[GuideDoc, ...] = ()


@dataclass(frozen=True)
class GuideMetadata:
    """Descriptive fields shown before a guide is started."""

    title: str
    description: str = ""
    labels: tuple[str, ...] = ()
    difficulty: str = ""
    minutes_to_complete: int = 0


@dataclass(frozen=True)
class GuideCompletion:
    """What a guide shows and recommends once finished."""

    success_message: str = ""
    recommended_guide_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Guide:
    """A single walkthrough composed of ordered steps."""

    slug: str
    ordering: int
    metadata: GuideMetadata
    steps: tuple[GuideStep, ...]
    completion: GuideCompletion = field(default_factory=GuideCompletion)
    prerequisite_guide_slugs: tuple[str, ...] = ()


@dataclass(frozen=True)
class Variable:
    """Typed placeholder declared at chapter scope."""

    name: str
    description: str
    resource_type: str


@dataclass(frozen=True)
class Chapter:
    """Ordered subdivision of a group."""

    slug: str
    name: str
    description: str
    ordering: int
    variables: tuple[Variable, ...] = ()
    guides: tuple[Guide, ...] = ()


@dataclass(frozen=True)
class Group:
    """Top-level content category tagged with a skill level."""

    slug: str
    name: str
    description: str
    skill_level: str
    ordering: int
    chapters: tuple[Chapter, ...] = ()


@dataclass(frozen=True)
class Library:
    """Root of the loaded guide tree."""

    groups: tuple[Group, ...] = ()


def iter_guides(library: Library) -> Iterator[tuple[Group, Chapter, Guide]]:
    """Yield every guide with its group and chapter in tree order."""
    for group in library.groups:
        for chapter in group.chapters:
            for guide in chapter.guides:
                yield group, chapter, guide


def guide_path(group: Group, chapter: Chapter, guide: Guide) -> str:
    return f"{group.slug}/{chapter.slug}/{guide.slug}"
