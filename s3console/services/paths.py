"""Local path helpers for mapping object keys onto the filesystem."""

from __future__ import annotations

import os
from pathlib import Path

from s3console.services.errors import UnsafeObjectKeyError

KEY_SEPARATOR = "/"
PATH_SEPARATORS: tuple[str, ...] = ("/", "\\")


def is_file_path(path: str | os.PathLike[str]) -> bool:
    """Return True when ``path`` looks like a file rather than a directory.

    Purely syntactic: the path must not end in a separator and its last
    component must carry a non-blank extension after its final dot. A
    leading-dot name such as ``.env`` counts as an extension. The filesystem
    is never consulted.
    """
    text = os.fspath(path)
    if text.endswith(PATH_SEPARATORS):
        return False
    name = text
    for separator in PATH_SEPARATORS:
        name = name.rpartition(separator)[2]
    _, dot, extension = name.rpartition(".")
    return bool(dot) and bool(extension.strip(". \t"))


def ensure_directory_for(path: str | os.PathLike[str]) -> None:
    """Create the directory a file path lives in, or the directory path itself."""
    target = Path(path)
    directory = target.parent if is_file_path(path) else target
    directory.mkdir(parents=True, exist_ok=True)


def key_to_local_path(destination: str | os.PathLike[str], key: str) -> str:
    """Rebuild an object key as a path under ``destination``.

    The key is split on ``/`` and rejoined with the local separator. A key
    ending in ``/`` keeps a trailing separator so that it stays
    directory-like for ``is_file_path``.

    Raises:
        UnsafeObjectKeyError: If the key is absolute or climbs out of
            ``destination`` via ``..`` segments.
    """
    segments = [segment for segment in key.split(KEY_SEPARATOR) if segment]
    if key.startswith(KEY_SEPARATOR) or any(s in {".", ".."} for s in segments):
        raise UnsafeObjectKeyError(f"Object key escapes destination: {key!r}")
    if any(os.path.isabs(s) or os.path.splitdrive(s)[0] for s in segments):
        raise UnsafeObjectKeyError(f"Object key escapes destination: {key!r}")

    local = os.path.join(os.fspath(destination), *segments)
    if key.endswith(KEY_SEPARATOR):
        local = os.path.join(local, "")
    return local
