"""Source folder resolution and candidate enumeration for uploads."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from ..errors import FolderNotFoundError

logger = logging.getLogger(__name__)

MATCH_ALL = "*.*"


def clean_folder_name(folder: str) -> str:
    """Strip escaped quotes and surrounding whitespace from a folder parameter."""
    return folder.replace('\\"', "").replace('"', "").strip()


def resolve_folder(folder: str | None) -> Path:
    """
    Resolve a folder parameter to an existing directory.

    A leading ``.`` or ``~`` is expanded before the existence check.

    Raises:
        FolderNotFoundError: Missing parameter, or not an existing directory
    """
    if folder is None or not clean_folder_name(folder):
        raise FolderNotFoundError(folder, "is not defined")

    path = Path(clean_folder_name(folder)).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    path = path.resolve()

    if not path.is_dir():
        raise FolderNotFoundError(str(path))
    return path


def matches(name: str, file_name: str | None, filter_file: str | None) -> bool:
    """
    Check a file name against the explicit name or the glob filter.

    An explicit name wins over the filter. ``*.*`` and an empty filter
    match every name.
    """
    if file_name:
        return name == file_name
    if not filter_file or filter_file.strip() in ("", MATCH_ALL):
        return True
    return fnmatch.fnmatchcase(name, filter_file.strip())


def list_candidates(
    folder: Path,
    file_name: str | None = None,
    filter_file: str | None = None,
    limit: int = 0,
) -> list[Path]:
    """
    List the regular files of ``folder`` to process, in enumeration order.

    At most ``limit`` files are returned when ``limit`` is positive.

    Raises:
        FolderNotFoundError: The folder cannot be listed
    """
    candidates: list[Path] = []
    try:
        with os.scandir(folder) as entries:
            for entry in entries:
                if limit > 0 and len(candidates) >= limit:
                    break
                if not entry.is_file():
                    continue
                if matches(entry.name, file_name, filter_file):
                    candidates.append(Path(entry.path))
    except FileNotFoundError as e:
        raise FolderNotFoundError(str(folder)) from e
    except NotADirectoryError as e:
        raise FolderNotFoundError(str(folder), "is not a directory") from e
    except PermissionError as e:
        raise FolderNotFoundError(str(folder), "cannot be read") from e

    logger.debug(
        "Found %d candidate(s) in %s (fileName=%s, filter=%s, limit=%d)",
        len(candidates),
        folder,
        file_name,
        filter_file,
        limit,
    )
    return candidates
