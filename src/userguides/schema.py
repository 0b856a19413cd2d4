"""Offline JSON Schema checks for group, chapter and guide declarations.

These schemas describe the same declaration shapes the loader reads, but
they are stricter about unknown keys. They are meant for editors and CI,
not for the runtime load path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import cache
from importlib import resources
from importlib.resources.abc import Traversable
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from .content_loader import CHAPTER_FILE, GROUP_FILE, GUIDE_SUFFIX, decode_yaml, guides_root

logger = logging.getLogger(__name__)

SCHEMA_PACKAGE = "userguides"
SCHEMA_DIR = "schemas"
DECLARATION_KINDS = ("group", "chapter", "guide")


@dataclass(frozen=True)
class SchemaIssue:
    """One schema violation found in a declaration file."""

    path: str
    message: str


@cache
def _validator(kind: str) -> Draft202012Validator:
    if kind not in DECLARATION_KINDS:
        raise ValueError(f"Unknown declaration kind: {kind}")
    resource = resources.files(SCHEMA_PACKAGE).joinpath(SCHEMA_DIR).joinpath(f"{kind}_schema.json")
    schema = json.loads(resource.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_declaration(kind: str, document: Any) -> list[str]:
    """Return schema violation messages for one decoded declaration."""
    errors = sorted(_validator(kind).iter_errors(document), key=lambda error: error.json_path)
    return [f"{error.json_path}: {error.message}" for error in errors]


def check_schemas(source: Traversable) -> list[SchemaIssue]:
    """Check every declaration file below ``source`` against its schema."""
    root = guides_root(source)
    issues: list[SchemaIssue] = []
    checked = 0
    for group_dir in _visible_dirs(root):
        issues.extend(_check_file(group_dir.joinpath(GROUP_FILE), "group", f"{group_dir.name}/{GROUP_FILE}"))
        checked += 1
        for chapter_dir in _visible_dirs(group_dir):
            chapter_path = f"{group_dir.name}/{chapter_dir.name}"
            issues.extend(_check_file(chapter_dir.joinpath(CHAPTER_FILE), "chapter", f"{chapter_path}/{CHAPTER_FILE}"))
            checked += 1
            for entry in sorted(chapter_dir.iterdir(), key=lambda item: item.name):
                if entry.is_dir() or entry.name.startswith("."):
                    continue
                if not entry.name.endswith(GUIDE_SUFFIX) or entry.name == CHAPTER_FILE:
                    continue
                issues.extend(_check_file(entry, "guide", f"{chapter_path}/{entry.name}"))
                checked += 1

    logger.info("Schema-checked %d declaration file(s), %d issue(s)", checked, len(issues))
    return issues


def _visible_dirs(node: Traversable) -> list[Traversable]:
    return sorted(
        (entry for entry in node.iterdir() if entry.is_dir() and not entry.name.startswith(".")),
        key=lambda entry: entry.name,
    )


def _check_file(node: Traversable, kind: str, display_path: str) -> list[SchemaIssue]:
    try:
        document = decode_yaml(node.read_text(encoding="utf-8-sig"))
    except OSError as exc:
        return [SchemaIssue(display_path, f"could not read file: {exc}")]
    except UnicodeDecodeError as exc:
        return [SchemaIssue(display_path, f"invalid UTF-8: {exc}")]
    except yaml.YAMLError as exc:
        return [SchemaIssue(display_path, f"invalid YAML: {exc}")]
    return [SchemaIssue(display_path, message) for message in validate_declaration(kind, document)]
