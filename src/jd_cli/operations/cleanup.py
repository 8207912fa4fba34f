"""Find and measure node_modules directories."""

import os
from pathlib import Path

UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """Human readable size with two decimals above one kilobyte, e.g. ``1.50MB``."""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{size}B"
    return f"{value:.2f}{UNITS[unit]}"


def find_node_modules(root: Path, include_hidden: bool = False) -> list[Path]:
    """Top-level ``node_modules`` directories below ``root``.

    Nested ``node_modules`` inside a match are not listed separately, and
    hidden directories are skipped unless ``include_hidden``.
    """
    found = []
    for dirpath, dirnames, _ in os.walk(root):
        keep = []
        for name in sorted(dirnames):
            if name == "node_modules":
                found.append(Path(dirpath) / name)
            elif include_hidden or not name.startswith("."):
                keep.append(name)
        dirnames[:] = keep
    return found


def directory_size(path: Path) -> int:
    total = 0
    for dirpath, _, filenames in os.walk(path):
        for name in filenames:
            file_path = Path(dirpath) / name
            if not file_path.is_symlink():
                total += file_path.stat().st_size
    return total


def display_path(path: Path, root: Path, home: Path | None = None) -> str:
    """``path`` relative to ``root``, else to the home directory as ``~/...``."""
    home = home or Path.home()
    if path.is_relative_to(root):
        return str(path.relative_to(root))
    if path.is_relative_to(home):
        return f"~/{path.relative_to(home)}"
    return str(path)
