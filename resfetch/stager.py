"""Publish a finished directory tree to its well-known destination."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

from .errors import StagingError
from .logging_config import stage_logger


def remove_tree(path: Path) -> None:
    """Remove ``path`` whether it is a file, a symlink or a directory tree.

    Directory contents are deleted deepest-first so every directory is empty
    when it is removed.
    """
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
        return
    for current, dirs, files in os.walk(path, topdown=False):
        for name in files:
            os.unlink(os.path.join(current, name))
        for name in dirs:
            child = os.path.join(current, name)
            if os.path.islink(child):
                os.unlink(child)
            else:
                os.rmdir(child)
    os.rmdir(path)


def _sibling(destination: Path, tag: str) -> Path:
    return destination.parent / f".{destination.name}.{tag}-{uuid.uuid4().hex[:8]}"


def _move_tree(source: Path, target: Path, log: logging.Logger) -> None:
    """Rename ``source`` to ``target``, copying only when crossing volumes."""
    try:
        os.replace(source, target)
        return
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
    log.debug("%s and %s are on different volumes; copying", source, target)
    try:
        shutil.copytree(source, target, symlinks=True)
    except (OSError, shutil.Error):
        if target.exists():
            remove_tree(target)
        raise
    remove_tree(source)


def _abandon_swap(staged: Path, previous: Optional[Path], destination: Path) -> None:
    """Restore the previous content and drop the staged tree after a failed swap.

    Raises:
        StagingError: when the previous content cannot be put back or the
            staged tree cannot be removed.
    """
    if previous is not None and not (destination.exists() or destination.is_symlink()):
        try:
            os.replace(previous, destination)
        except OSError as exc:
            raise StagingError(
                f"Failed to restore previous content of {destination} from {previous}: {exc}"
            ) from exc
    if staged.exists() or staged.is_symlink():
        try:
            remove_tree(staged)
        except OSError as exc:
            raise StagingError(f"Failed to remove abandoned staging tree {staged}: {exc}") from exc


def publish(source_dir: Path, destination: Path, logger: Optional[logging.Logger] = None) -> Path:
    """Replace ``destination`` with the tree at ``source_dir``.

    The new tree is first moved next to the destination, then swapped in with
    renames, so ``destination`` always holds either the old or the new
    content. Anything previously at ``destination`` is removed entirely.

    Raises:
        StagingError: on permission, move or removal failures. A failure to
            remove the previous content is reported even though the new
            content is already in place.
    """
    log = stage_logger(logger, __name__)
    source_dir = Path(source_dir)
    destination = Path(destination)
    if not source_dir.is_dir():
        raise StagingError(f"Cannot publish {source_dir}: not a directory")

    log.info("Moving downloaded files to: %s", destination)
    staged = _sibling(destination, "staging")
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        _move_tree(source_dir, staged, log)
    except (OSError, shutil.Error) as exc:
        raise StagingError(f"Failed to stage {source_dir} next to {destination}: {exc}") from exc

    previous: Optional[Path] = None
    try:
        if destination.exists() or destination.is_symlink():
            previous = _sibling(destination, "previous")
            os.replace(destination, previous)
        os.replace(staged, destination)
    except OSError as exc:
        _abandon_swap(staged, previous, destination)
        raise StagingError(f"Failed to move {staged} into {destination}: {exc}") from exc

    if previous is not None:
        try:
            remove_tree(previous)
        except OSError as exc:
            raise StagingError(f"Published {destination} but could not remove previous content at {previous}: {exc}") from exc
    return destination


__all__ = ["remove_tree", "publish"]
