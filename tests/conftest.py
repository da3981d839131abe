"""Shared fixtures: archive builders, a local HTTP server, stable temp dirs on WSL."""

from __future__ import annotations

import io
import os
import platform
import sys
import tarfile
import tempfile
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from types import SimpleNamespace

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def _is_wsl() -> bool:
    release = platform.release().lower()
    version = platform.version().lower()
    return "microsoft" in release or "microsoft" in version


if _is_wsl() and os.path.isdir("/tmp"):
    os.environ["TMPDIR"] = "/tmp"
    os.environ["TEMP"] = "/tmp"
    os.environ["TMP"] = "/tmp"
    tempfile.tempdir = "/tmp"


def build_tar(path: Path, entries, compression: str = "bz2") -> Path:
    """Write a compressed tar at ``path``.

    ``entries`` is a list of ``(name, content)`` pairs; ``content`` of
    ``None`` adds a directory entry. Entries are stored in the given order.
    """
    with tarfile.open(path, f"w:{compression}") as tar:
        for name, content in entries:
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
    return path


@pytest.fixture
def make_archive(tmp_path):
    """Factory building archives inside a per-test directory."""
    archive_dir = tmp_path / "archives"
    archive_dir.mkdir()

    def _make(name: str, entries, compression: str = "bz2") -> Path:
        return build_tar(archive_dir / name, entries, compression)

    return _make


@pytest.fixture
def http_server(tmp_path, monkeypatch):
    """Serve ``tmp_path/served`` over HTTP on a random local port."""
    for var in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("no_proxy", "*")
    monkeypatch.setenv("NO_PROXY", "*")

    root = tmp_path / "served"
    root.mkdir()
    requests = []

    class Handler(SimpleHTTPRequestHandler):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, directory=str(root), **kwargs)

        def do_GET(self):
            requests.append({"path": self.path, "user_agent": self.headers.get("User-Agent")})
            super().do_GET()

        def log_message(self, format, *args):  # noqa: A002
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield SimpleNamespace(
            root=root,
            url=f"http://127.0.0.1:{server.server_address[1]}",
            requests=requests,
        )
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def tree(path: Path) -> dict:
    """Map every file below ``path`` (relative, posix style) to its bytes."""
    return {
        p.relative_to(path).as_posix(): p.read_bytes()
        for p in sorted(path.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def read_tree():
    return tree
