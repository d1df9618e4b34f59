"""
Path utilities shared by all filesystem backends.

All functions are pure string manipulation; nothing here touches the disk.
Paths always use '/' as separator after normalization, whatever the host
platform.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from Utils.errors import ValidationError


_DRIVE_REGEX = re.compile(r"^([A-Za-z]):/")
_DUPLICATE_SEPARATORS_REGEX = re.compile(r"/+")
_INVALID_CHARS_REGEX = re.compile(r'[<>:"|?*]')
_RESERVED_NAMES_REGEX = re.compile(r"^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])$", re.IGNORECASE)


@dataclass(frozen=True)
class PathValidationResult:
    """Outcome of validate_path."""

    is_valid: bool
    error: Optional[str] = None


def _split_root(path: str) -> Tuple[str, str]:
    """Separate a leading drive ('C:/') or '/' from the rest of an already slash-converted path."""
    match = _DRIVE_REGEX.match(path)
    if match:
        return match.group(0), path[match.end():]
    if path.startswith("/"):
        return "/", path[1:]
    return "", path


def normalize_path(path: str) -> str:
    """
    Normalize a path for consistent handling across backends.

    Backslashes become forward slashes, repeated separators collapse, '.'
    segments disappear and '..' segments consume their parent. A '..' with no
    parent left to consume is kept literally, so '../../x' stays '../../x'.
    A leading '/' or drive letter is preserved and trailing separators are
    dropped.

    Args:
        path: The path to normalize

    Returns:
        The normalized path, '.' for an empty or fully resolved relative path

    Raises:
        ValidationError: If path is not a string
    """
    if not isinstance(path, str):
        raise ValidationError(f"Path must be a string, got {type(path).__name__}")

    if path == "":
        return "."

    normalized = _DUPLICATE_SEPARATORS_REGEX.sub("/", path.replace("\\", "/"))
    root, body = _split_root(normalized)

    segments: List[str] = []
    for segment in body.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments and segments[-1] != "..":
                segments.pop()
            else:
                segments.append("..")
        else:
            segments.append(segment)

    joined = "/".join(segments)
    if root:
        return root + joined
    return joined or "."


def join_path(*segments: str) -> str:
    """Join path segments with '/' and normalize the result."""
    non_empty = [segment for segment in segments if segment != ""]
    if not non_empty:
        return "."
    return normalize_path("/".join(non_empty))


def dirname(path: str) -> str:
    """
    Get the directory part of a path.

    Args:
        path: The path to inspect

    Returns:
        The parent directory, '.' for a bare name, the root for root-level entries
    """
    normalized = normalize_path(path)
    root, body = _split_root(normalized)

    if normalized in (".", "..") or body == "":
        return normalized

    index = body.rfind("/")
    if index == -1:
        return root or "."
    return root + body[:index]


def basename(path: str, ext: Optional[str] = None) -> str:
    """
    Get the last segment of a path.

    Args:
        path: The path to inspect
        ext: Optional extension to strip from the result (e.g. '.txt')

    Returns:
        The last path segment, '' for a root
    """
    normalized = normalize_path(path)
    _, body = _split_root(normalized)

    if body == "":
        return ""

    base = body[body.rfind("/") + 1:]
    if ext and base.endswith(ext) and base != ext:
        return base[: -len(ext)]
    return base


def extname(path: str) -> str:
    """Get the extension of the last path segment including the dot, '' when there is none."""
    base = basename(path)
    index = base.rfind(".")
    if index <= 0:
        return ""
    return base[index:]


def is_absolute(path: str) -> bool:
    """Check if a path starts at a root ('/' or a drive letter such as 'C:/')."""
    if not isinstance(path, str):
        return False
    return path.startswith("/") or path.startswith("\\") or bool(re.match(r"^[A-Za-z]:[\\/]", path))


def resolve_path(base: str, relative: str) -> str:
    """
    Resolve a path against a base directory.

    An absolute relative argument wins over the base, as with os.path.join.
    """
    normalized_relative = normalize_path(relative)
    if is_absolute(normalized_relative):
        return normalized_relative
    return join_path(normalize_path(base), normalized_relative)


def relative_path(from_path: str, to_path: str) -> str:
    """
    Compute the path that leads from one location to another.

    Args:
        from_path: The starting directory
        to_path: The target path

    Returns:
        The relative path, '.' when both are the same location
    """
    normalized_from = normalize_path(from_path)
    normalized_to = normalize_path(to_path)

    if normalized_from == normalized_to:
        return "."

    from_segments = [s for s in _split_root(normalized_from)[1].split("/") if s not in ("", ".")]
    to_segments = [s for s in _split_root(normalized_to)[1].split("/") if s not in ("", ".")]

    common = 0
    while (
        common < min(len(from_segments), len(to_segments))
        and from_segments[common] == to_segments[common]
    ):
        common += 1

    result = [".."] * (len(from_segments) - common) + to_segments[common:]
    return "/".join(result) or "."


def validate_path(path: str) -> PathValidationResult:
    """
    Check a path for characters and names that common platforms reject.

    Args:
        path: The path to check

    Returns:
        A PathValidationResult; never raises
    """
    if not isinstance(path, str):
        return PathValidationResult(False, "Path must be a string")

    if "\0" in path:
        return PathValidationResult(False, "Path contains null character")

    if _INVALID_CHARS_REGEX.search(path):
        return PathValidationResult(False, "Path contains invalid characters")

    if _RESERVED_NAMES_REGEX.match(basename(path)):
        return PathValidationResult(False, "Path uses reserved Windows name")

    return PathValidationResult(True)


def has_escaping_segments(path: str) -> bool:
    """Check if a normalized path climbs above its starting point."""
    _, body = _split_root(normalize_path(path))
    return body == ".." or body.startswith("../")
