"""
File discovery and source loading.

Handles:
- Directory walking with exclusions
- Reading source text with encoding fallback
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator


DEFAULT_EXTENSIONS: tuple[str, ...] = (".lua",)

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "__pycache__",
    ".pytest_cache",
    "node_modules",
    "dist",
    "build",
)


def should_exclude_path(path: Path, exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS) -> bool:
    """Check if path lies inside an excluded directory."""
    excluded = set(exclude_dirs)
    return any(part in excluded for part in path.parts)


def iter_files(
    paths: Iterable[Path],
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS,
) -> Iterator[Path]:
    """
    Expand files and directories into the files to lint.

    Files named explicitly are always yielded; directories are walked
    recursively for matching extensions. Output order is sorted per directory
    so runs are reproducible.
    """
    seen: set[Path] = set()
    for path in paths:
        if path.is_dir():
            candidates = sorted(
                p for p in path.rglob("*")
                if p.is_file() and p.suffix in extensions
                and not should_exclude_path(p.relative_to(path), exclude_dirs)
            )
        else:
            candidates = [path]
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                yield candidate


def read_source(path: Path) -> str:
    """Read a source file. Handles encoding fallback."""
    data = path.read_bytes()
    # UTF-8 (BOM stripped if present), then latin-1 which always succeeds
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")
