"""Download a remote resource to local storage."""

from __future__ import annotations

import logging
import shutil
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constants import (
    CONNECT_TIMEOUT_SECONDS,
    DOWNLOAD_CHUNK_SIZE,
    PLACEHOLDER_FILE_NAME,
    READ_TIMEOUT_SECONDS,
    USER_AGENT,
)
from .errors import RetrievalError
from .logging_config import stage_logger


@dataclass(frozen=True)
class DownloadedArtifact:
    """A file written by :func:`fetch`."""

    local_path: Path
    derived_file_name: str


def file_name_from_url(url: str) -> str:
    """Return the last path segment of ``url`` without its query string.

    >>> file_name_from_url("https://host/path/archive.tar.bz2?token=x")
    'archive.tar.bz2'
    >>> file_name_from_url("https://host/")
    'download'
    """
    base = url.split("?", 1)[0]
    name = base.rsplit("/", 1)[-1]
    if not name.strip():
        return PLACEHOLDER_FILE_NAME
    return name


def _open(url: str):
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    # urlopen's timeout bounds the connect phase; the read timeout is applied
    # to the socket once the response headers have arrived.
    response = urllib.request.urlopen(request, timeout=CONNECT_TIMEOUT_SECONDS)  # noqa: S310
    sock = getattr(getattr(getattr(response, "fp", None), "raw", None), "_sock", None)
    if sock is not None:
        sock.settimeout(READ_TIMEOUT_SECONDS)
    return response


def fetch(url: str, work_dir: Path, logger: Optional[logging.Logger] = None) -> DownloadedArtifact:
    """Stream ``url`` into ``work_dir``, overwriting any file of the same name.

    Raises:
        RetrievalError: on connection errors, timeouts, HTTP error statuses
            or write failures. Nothing is retried.
    """
    log = stage_logger(logger, __name__)
    file_name = file_name_from_url(url)
    destination = Path(work_dir) / file_name
    log.info("Downloading %s -> %s", url, destination)

    try:
        with _open(url) as response, destination.open("wb") as out_file:
            shutil.copyfileobj(response, out_file, DOWNLOAD_CHUNK_SIZE)
    except urllib.error.HTTPError as exc:
        raise RetrievalError(f"Fetch failed for {url}: HTTP {exc.code} {exc.reason}") from exc
    except urllib.error.URLError as exc:
        raise RetrievalError(f"Fetch failed for {url}: {exc.reason}") from exc
    except (socket.timeout, TimeoutError) as exc:
        raise RetrievalError(f"Fetch failed for {url}: timed out") from exc
    except (OSError, ValueError) as exc:
        raise RetrievalError(f"Fetch failed for {url}: {exc}") from exc

    return DownloadedArtifact(local_path=destination, derived_file_name=file_name)


__all__ = ["DownloadedArtifact", "file_name_from_url", "fetch"]
