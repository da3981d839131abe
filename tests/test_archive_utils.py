from __future__ import annotations

import builtins
import errno
import io
import tarfile

import pytest

from resfetch import archive_utils
from resfetch.errors import (
    ArchiveFormatError,
    ExtractionError,
    PathTraversalError,
    UnsafeEntryError,
    UnsupportedFormatError,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("bundle.tar.bz2", "bundle"),
        ("Bundle.TAR.BZ2", "Bundle"),
        ("bundle.tgz", "bundle"),
        ("bundle.tar.gz", "bundle"),
        ("voices-1.2.tbz2", "voices-1.2"),
    ],
)
def test_extraction_dir_name_strips_suffix(name, expected):
    assert archive_utils.extraction_dir_name(name) == expected


@pytest.mark.parametrize("name", ["thing.zip", "bundle.tar", "bundle.bz2", ".tar.bz2", "download"])
def test_unrecognized_names_are_unsupported(name):
    assert not archive_utils.is_supported_archive(name)
    with pytest.raises(UnsupportedFormatError):
        archive_utils.extraction_dir_name(name)


def test_extract_bzip2_archive(make_archive, tmp_path, read_tree):
    archive = make_archive(
        "bundle.tar.bz2",
        [("a.txt", b"alpha"), ("sub/", None), ("sub/b.txt", b"\x00\x01beta")],
    )

    root = archive_utils.extract(archive, tmp_path / "out")

    assert root == tmp_path / "out" / "bundle"
    assert read_tree(root) == {"a.txt": b"alpha", "sub/b.txt": b"\x00\x01beta"}


def test_extract_creates_missing_parents_and_empty_dirs(make_archive, tmp_path):
    archive = make_archive("deep.tar.bz2", [("x/y/z.txt", b"z"), ("empty/", None)])

    root = archive_utils.extract(archive, tmp_path)

    assert (root / "x" / "y" / "z.txt").read_bytes() == b"z"
    assert (root / "empty").is_dir()


def test_later_entries_overwrite_earlier_ones(make_archive, tmp_path):
    archive = make_archive("dup.tar.bz2", [("f.txt", b"first"), ("f.txt", b"second")])

    root = archive_utils.extract(archive, tmp_path)

    assert (root / "f.txt").read_bytes() == b"second"


def test_compression_follows_content_not_suffix(make_archive, tmp_path):
    # bzip2 data behind a gzip-style name still decompresses.
    archive = make_archive("mislabelled.tgz", [("a.txt", b"a")], compression="bz2")

    assert archive_utils.detect_compression(archive) == "bz2"
    root = archive_utils.extract(archive, tmp_path)

    assert root.name == "mislabelled"
    assert (root / "a.txt").read_bytes() == b"a"


def test_gzip_archive_is_supported(make_archive, tmp_path):
    archive = make_archive("bundle.tar.gz", [("a.txt", b"gz")], compression="gz")

    root = archive_utils.extract(archive, tmp_path)

    assert (root / "a.txt").read_bytes() == b"gz"


def test_traversal_entry_aborts_extraction(make_archive, tmp_path):
    out = tmp_path / "work" / "out"
    archive = make_archive(
        "evil.tar.bz2",
        [("ok.txt", b"ok"), ("../../etc/passthrough", b"pwned"), ("later.txt", b"never")],
    )

    with pytest.raises(PathTraversalError, match="passthrough"):
        archive_utils.extract(archive, out)

    assert not (tmp_path / "work" / "etc").exists()
    assert not (out / "etc").exists()
    assert (out / "evil" / "ok.txt").exists()
    assert not (out / "evil" / "later.txt").exists()


def test_absolute_entry_is_blocked(make_archive, tmp_path):
    archive = make_archive("abs.tar.bz2", [(str(tmp_path / "escaped.txt"), b"x")])

    with pytest.raises(PathTraversalError):
        archive_utils.extract(archive, tmp_path / "out")

    assert not (tmp_path / "escaped.txt").exists()


def test_dot_segments_inside_root_are_allowed(make_archive, tmp_path):
    archive = make_archive("dots.tar.bz2", [("./a/../b.txt", b"b"), ("./", None)])

    root = archive_utils.extract(archive, tmp_path)

    assert (root / "b.txt").read_bytes() == b"b"


def test_symlink_entry_is_rejected(tmp_path):
    archive = tmp_path / "link.tar.bz2"
    with tarfile.open(archive, "w:bz2") as tar:
        info = tarfile.TarInfo("shortcut")
        info.type = tarfile.SYMTYPE
        info.linkname = "/etc/passwd"
        tar.addfile(info)

    with pytest.raises(UnsafeEntryError):
        archive_utils.extract(archive, tmp_path / "out")

    assert not (tmp_path / "out" / "link" / "shortcut").exists()


def test_unknown_compression_is_format_error(tmp_path):
    archive = tmp_path / "plain.tar.bz2"
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        tar.addfile(tarfile.TarInfo("empty.txt"))
    archive.write_bytes(buffer.getvalue())

    with pytest.raises(ArchiveFormatError):
        archive_utils.extract(archive, tmp_path / "out")


def test_corrupt_bzip2_stream_is_format_error(tmp_path):
    archive = tmp_path / "broken.tar.bz2"
    archive.write_bytes(b"BZh91AY&SY" + b"\xff" * 64)

    with pytest.raises(ArchiveFormatError):
        archive_utils.extract(archive, tmp_path / "out")


def test_is_within_root(tmp_path):
    root = tmp_path / "root"
    assert archive_utils.is_within_root(root, root)
    assert archive_utils.is_within_root(root, root / "a" / "b")
    assert not archive_utils.is_within_root(root, tmp_path / "rootkit")
    assert not archive_utils.is_within_root(root, tmp_path)


def test_disk_full_while_writing_is_extraction_error(make_archive, tmp_path, monkeypatch):
    archive = make_archive("bundle.tar.bz2", [("a.txt", b"alpha")])

    class FullDisk(io.BytesIO):
        def write(self, data):
            raise OSError(errno.ENOSPC, "No space left on device")

    def fake_open(file, mode="r", *args, **kwargs):
        if "w" in mode:
            return FullDisk()
        return builtins.open(file, mode, *args, **kwargs)

    monkeypatch.setattr(archive_utils, "open", fake_open, raising=False)

    with pytest.raises(ExtractionError) as exc_info:
        archive_utils.extract(archive, tmp_path / "out")

    assert not isinstance(exc_info.value, ArchiveFormatError)
    assert exc_info.value.__cause__.errno == errno.ENOSPC
