"""userguides package: load and validate declarative user guide content."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


def _version_from_pyproject() -> str | None:
    """Best-effort version lookup from local pyproject.toml for source runs."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.exists():
            continue
        try:
            with pyproject.open("rb") as handle:
                project = tomllib.load(handle).get("project", {})
        except tomllib.TOMLDecodeError:
            continue
        if project.get("name") == "userguides":
            return project.get("version")
    return None


_project_version = _version_from_pyproject()
if _project_version is not None:
    __version__ = _project_version
else:
    try:
        __version__ = version("userguides")
    except PackageNotFoundError:
        __version__ = "0+unknown"

from .errors import (  # noqa: E402
    ContentDecodeError,
    ContentReadError,
    CrossReferenceError,
    FieldValidationError,
    GuideLibraryError,
)
from .library import guides, load_library, load_library_from_dir  # noqa: E402
from .validation import GuideSlugScope  # noqa: E402

__all__ = [
    "ContentDecodeError",
    "ContentReadError",
    "CrossReferenceError",
    "FieldValidationError",
    "GuideLibraryError",
    "GuideSlugScope",
    "__version__",
    "guides",
    "load_library",
    "load_library_from_dir",
]
