"""Post-action policy applied to uploaded source files."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from ..errors import FolderNotFoundError, MoveFailedError
from .models import PostAction
from .source import resolve_folder

logger = logging.getLogger(__name__)


def resolve_policy(token: str | None) -> PostAction:
    """
    Resolve a policy token.

    An unknown token is logged and treated as UNCHANGED.
    """
    action = PostAction.parse(token)
    if action is None:
        logger.warning("Unknown policy [%s], source files are left unchanged", token)
        return PostAction.UNCHANGED
    return action


def archive_folder_for(action: PostAction, archive_folder: str | None) -> Path | None:
    """
    Resolve the archive folder when the action needs one.

    Raises:
        FolderNotFoundError: ARCHIVE without an existing archive folder
    """
    if action != PostAction.ARCHIVE:
        return None
    try:
        return resolve_folder(archive_folder)
    except FolderNotFoundError as e:
        raise FolderNotFoundError(
            e.folder, "cannot be used as archive folder (missing or not a directory)"
        ) from e


def _leave(source: Path, archive: Path | None) -> None:
    pass


def _delete(source: Path, archive: Path | None) -> None:
    try:
        source.unlink()
    except OSError as e:
        raise MoveFailedError(f"cannot apply policy DELETE to [{source}]: {e}") from e


def _archive(source: Path, archive: Path | None) -> None:
    if archive is None:
        raise FolderNotFoundError(None, "is not defined as archive folder")

    target = archive / source.name
    try:
        _move_exclusive(source, target)
    except FileExistsError as e:
        raise MoveFailedError(f"[{target}] already exists, cannot archive [{source}]") from e
    except OSError as e:
        raise MoveFailedError(f"cannot archive [{source}] to [{archive}]: {e}") from e


def _move_exclusive(source: Path, target: Path) -> None:
    """
    Move ``source`` to ``target``, never replacing an existing ``target``.

    Raises:
        FileExistsError: ``target`` already exists
        OSError: The move failed; ``source`` is left in place
    """
    try:
        os.link(source, target)
    except FileExistsError:
        raise
    except OSError:
        # No hard link across devices: copy into an exclusively created file
        with open(source, "rb") as src, open(target, "xb") as dst:
            try:
                shutil.copyfileobj(src, dst)
            except OSError:
                dst.close()
                target.unlink(missing_ok=True)
                raise
        shutil.copystat(source, target)

    try:
        source.unlink()
    except OSError:
        target.unlink(missing_ok=True)
        raise


_ACTIONS: dict[PostAction, Callable[[Path, Path | None], None]] = {
    PostAction.UNCHANGED: _leave,
    PostAction.DELETE: _delete,
    PostAction.ARCHIVE: _archive,
}


def apply_post_action(action: PostAction, source: Path, archive: Path | None = None) -> None:
    """
    Apply ``action`` to an uploaded source file.

    Raises:
        FolderNotFoundError: ARCHIVE without an archive folder
        MoveFailedError: The file could not be deleted or moved
    """
    _ACTIONS[action](source, archive)
    if action != PostAction.UNCHANGED:
        logger.debug("Applied %s to %s", action.value, source)
