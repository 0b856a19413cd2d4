from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

TreeWriter = Callable[[dict[str, Any]], Path]


def _write(base: Path, tree: dict[str, Any]) -> None:
    """Write a nested mapping to disk.

    Keys ending in ``.yaml`` become files (mappings are dumped as YAML, strings
    are written verbatim); any other key with a mapping value is a directory.
    """
    base.mkdir(parents=True, exist_ok=True)
    for name, value in tree.items():
        target = base / name
        if isinstance(value, dict) and not name.endswith(".yaml"):
            _write(target, value)
        elif isinstance(value, str):
            target.write_text(value, encoding="utf-8")
        else:
            target.write_text(yaml.safe_dump(value, sort_keys=False), encoding="utf-8")


def guide_payload(slug: str, /, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "slug": slug,
        "ordering": 1,
        "metadata": {
            "title": f"Guide {slug}",
            "description": "",
            "labels": ["test"],
            "difficulty": "easy",
            "minutesToComplete": 5,
        },
        "steps": [
            {"order": 1, "title": "Step 1", "instruction": "Do this"},
            {"order": 2, "title": "Step 2", "instruction": "Do that"},
        ],
        "completion": {"successMessage": "Done", "recommendedGuideIds": []},
    }
    payload.update(overrides)
    return payload


def group_payload(name: str = "Group", skill_level: str = "BEGINNER") -> dict[str, Any]:
    return {"name": name, "description": "", "skillLevel": skill_level, "ordering": 1}


def chapter_payload(name: str = "Chapter", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name, "description": "", "ordering": 1}
    payload.update(overrides)
    return payload


@pytest.fixture
def write_tree(tmp_path: Path) -> TreeWriter:
    """Return a function that writes a content tree and returns its root."""
    counter = {"value": 0}

    def write(tree: dict[str, Any]) -> Path:
        counter["value"] += 1
        root = tmp_path / f"content-{counter['value']}"
        _write(root, tree)
        return root

    return write


@pytest.fixture
def simple_tree() -> dict[str, Any]:
    """A small valid tree: one group, two chapters, three guides."""
    return {
        "guides": {
            "foundations": {
                "group.yaml": group_payload("Foundations"),
                "basics": {
                    "chapter.yaml": chapter_payload(
                        "Basics",
                        variables=[{"name": "stack", "description": "A stack", "resourceType": "stack"}],
                    ),
                    "intro.yaml": guide_payload(
                        "intro", completion={"successMessage": "Done", "recommendedGuideIds": ["next-steps"]}
                    ),
                    "next-steps.yaml": guide_payload("next-steps", prerequisiteGuideSlugs=["intro"]),
                },
                "advanced": {
                    "chapter.yaml": chapter_payload("Advanced"),
                    "deep-dive.yaml": guide_payload("deep-dive", prerequisiteGuideSlugs=["intro", "next-steps"]),
                },
            }
        }
    }
