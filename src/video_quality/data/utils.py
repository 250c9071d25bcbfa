"""Utility functions for locating input videos."""

from pathlib import Path

VIDEO_EXTENSIONS: tuple[str, ...] = (".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v")


def get_files(root: Path, extensions: tuple[str, ...] = VIDEO_EXTENSIONS) -> list[Path]:
    """Recursively find files matching extensions under root.

    Args:
        root: Directory to search recursively, or a single file.
        extensions: Tuple of lowercase extensions including dot
            (e.g., (".mp4", ".avi")).

    Returns:
        Sorted list of matching file paths.  A single matching file is
        returned as a one-element list.
    """
    if root.is_file():
        return [root] if root.suffix.lower() in extensions else []
    return sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in extensions
    )
