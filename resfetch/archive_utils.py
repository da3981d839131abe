"""Compressed tar extraction with path traversal protection."""

from __future__ import annotations

import logging
import os
import tarfile
import zlib
from pathlib import Path
from typing import Optional

from .constants import ARCHIVE_SUFFIXES
from .errors import (
    ArchiveFormatError,
    ExtractionError,
    PathTraversalError,
    UnsafeEntryError,
    UnsupportedFormatError,
)
from .logging_config import stage_logger

_CHUNK_SIZE = 64 * 1024

_MAGIC_NUMBERS = {
    b"BZh": "bz2",
    b"\x1f\x8b": "gz",
}


def archive_suffix(file_name: str) -> Optional[str]:
    """Return the recognized compressed-tar suffix of ``file_name``, if any."""
    lower = file_name.lower()
    for suffix in ARCHIVE_SUFFIXES:
        if lower.endswith(suffix) and len(lower) > len(suffix):
            return suffix
    return None


def is_supported_archive(file_name: str) -> bool:
    return archive_suffix(file_name) is not None


def extraction_dir_name(file_name: str) -> str:
    """Strip the recognized archive suffix from ``file_name``."""
    suffix = archive_suffix(file_name)
    if suffix is None:
        raise UnsupportedFormatError(f"Unsupported archive format: {file_name}")
    return file_name[: -len(suffix)]


def detect_compression(archive: Path) -> str:
    """Identify the compression layer from the file's leading bytes.

    The suffix only names the extraction directory; a ``.tgz`` that really
    holds bzip2 data still decompresses as bzip2.
    """
    with open(archive, "rb") as handle:
        head = handle.read(3)
    for magic, mode in _MAGIC_NUMBERS.items():
        if head.startswith(magic):
            return mode
    raise ArchiveFormatError(f"{archive.name} is neither bzip2 nor gzip compressed")


def is_within_root(root: Path, target: Path) -> bool:
    return target == root or root in target.parents


def _resolve_member(root: Path, name: str) -> Path:
    target = Path(os.path.normpath(root / name))
    if not is_within_root(root, target):
        raise PathTraversalError(f"Path traversal blocked for archive entry {name!r}")
    return target


def _read_chunk(source, member: tarfile.TarInfo) -> bytes:
    try:
        return source.read(_CHUNK_SIZE)
    except OSError as exc:
        raise ArchiveFormatError(f"Corrupt data in archive entry {member.name!r}: {exc}") from exc


def _make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExtractionError(f"Failed to create directory {path}: {exc}") from exc


def _write_member(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    """Copy one file entry to ``target``.

    Read failures come from the decompressor and are format errors; write
    failures are local I/O errors.
    """
    source = tar.extractfile(member)
    if source is None:
        raise ArchiveFormatError(f"Archive entry {member.name!r} has no readable content")
    _make_dirs(target.parent)
    try:
        with source, open(target, "wb") as out_file:
            while True:
                chunk = _read_chunk(source, member)
                if not chunk:
                    break
                out_file.write(chunk)
    except OSError as exc:
        raise ExtractionError(f"Failed to write {target}: {exc}") from exc


def extract(archive: Path, output_parent: Path, logger: Optional[logging.Logger] = None) -> Path:
    """Unpack ``archive`` into a new directory under ``output_parent``.

    Entries are processed in stored order. The first entry that resolves
    outside the extraction root aborts the whole extraction with
    :class:`PathTraversalError`; nothing after it is written. Files written
    before a failure are not rolled back, so on any error the returned
    directory must be considered unusable.

    Raises:
        UnsupportedFormatError: the file name has no recognized suffix.
        ArchiveFormatError: the compression stream or tar structure is bad.
        ExtractionError: writing an entry to local storage failed.
        PathTraversalError: an entry escapes the extraction root, or is a
            link or device entry (:class:`UnsafeEntryError`).
    """
    log = stage_logger(logger, __name__)
    archive = Path(archive)
    extract_dir = Path(output_parent) / extraction_dir_name(archive.name)
    mode = detect_compression(archive)
    extract_dir.mkdir(parents=True, exist_ok=True)
    root = extract_dir.resolve()
    log.info("Extracting %s (%s) to %s", archive.name, mode, extract_dir)

    count = 0
    try:
        # Stream mode reads entries strictly first-to-last.
        with tarfile.open(archive, mode=f"r|{mode}") as tar:
            for member in tar:
                target = _resolve_member(root, member.name)
                if member.isdir():
                    _make_dirs(target)
                elif member.isfile():
                    _write_member(tar, member, target)
                else:
                    raise UnsafeEntryError(
                        f"Refusing to extract link or special entry {member.name!r}"
                    )
                count += 1
    except (tarfile.TarError, EOFError, zlib.error) as exc:
        raise ArchiveFormatError(f"Malformed archive {archive.name}: {exc}") from exc
    except OSError as exc:
        # Writes are converted above, so what remains comes from reading the stream.
        raise ArchiveFormatError(f"Malformed archive {archive.name}: {exc}") from exc

    log.debug("Extracted %d entries from %s", count, archive.name)
    return extract_dir


__all__ = [
    "archive_suffix",
    "is_supported_archive",
    "extraction_dir_name",
    "detect_compression",
    "is_within_root",
    "extract",
]
