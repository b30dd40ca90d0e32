"""Workspace discovery — dependency manifests and analyzable source files."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from riskscan.errors import FileAccessError

logger = logging.getLogger(__name__)

MANIFEST_NAMES = {"requirements.txt", "package.json"}

SOURCE_EXTENSIONS = {
    ".py",
    ".js",
    ".ts",
    ".jsx",
    ".tsx",
    ".java",
    ".c",
    ".cpp",
    ".cs",
    ".go",
    ".rb",
    ".php",
}

# Directories to always skip
_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    ".tox",
    ".eggs",
}

_REQUIREMENT_RE = re.compile(r"^([a-zA-Z0-9_\-]+)([=<>!~]+[^\s#]+)?")


@dataclass
class Dependency:
    """A single declared dependency."""

    name: str
    version: str | None
    file: str
    line: int

    @property
    def specifier(self) -> str:
        if Path(self.file).name == "package.json":
            return f"{self.name}@{self.version}"
        return f"{self.name}{self.version or ''}"


def discover_manifests(root: str | Path) -> list[Path]:
    """Find requirements.txt and package.json files under ``root``."""
    return [p for p in _walk(Path(root)) if p.name in MANIFEST_NAMES]


def discover_source_files(root: str | Path) -> list[Path]:
    """Find files whose extension is in the source allow-list."""
    return [p for p in _walk(Path(root)) if p.suffix.lower() in SOURCE_EXTENSIONS]


def parse_manifest(path: str | Path) -> list[Dependency]:
    """Dispatch on the manifest file name."""
    path = Path(path)
    if path.name == "requirements.txt":
        return parse_requirements_txt(path)
    if path.name == "package.json":
        return parse_package_json(path)
    raise ValueError(f"Unsupported manifest: {path.name}")


def parse_requirements_txt(path: str | Path) -> list[Dependency]:
    content = read_text(path)
    dependencies: list[Dependency] = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()
        # pip options such as -e, -r, --index-url
        if not stripped or stripped.startswith(("#", "-")):
            continue
        match = _REQUIREMENT_RE.match(stripped)
        if match:
            dependencies.append(
                Dependency(
                    name=match.group(1),
                    version=match.group(2),
                    file=str(path),
                    line=line_num,
                )
            )
    return dependencies


def parse_package_json(path: str | Path) -> list[Dependency]:
    data = json.loads(read_text(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: package.json must be an object")

    dependencies: list[Dependency] = []
    for section in ("dependencies", "devDependencies"):
        deps = data.get(section) or {}
        if not isinstance(deps, dict):
            raise ValueError(f"{path}: {section} must be an object")
        for name, version in deps.items():
            # JSON has no useful line info
            dependencies.append(
                Dependency(name=name, version=str(version), file=str(path), line=1)
            )
    return dependencies


def read_text(path: str | Path) -> str:
    """Read a UTF-8 file, mapping OS errors to FileAccessError."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(str(path), str(e)) from e


def _walk(directory: Path) -> Iterator[Path]:
    """Walk directory yielding regular files outside the skipped directories."""
    for root, dirs, files in os.walk(directory):
        # Prune skipped directories in-place
        dirs[:] = [
            d for d in dirs if d not in _SKIP_DIRS and not d.endswith(".egg-info")
        ]
        for name in files:
            yield Path(root) / name
