"""Fetch, extract and stage a remote resource archive.

One run is strictly sequential::

    fetch(url) -> [extract(archive)] -> publish(tree, destination) -> register(parent)

Every stage failure is re-raised as a single :class:`PipelineError` carrying
the URL and the original cause.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import archive_utils, retriever, stager
from .constants import WORK_DIR_PREFIX
from .errors import ConfigurationError, PipelineError, UnsupportedFormatError
from .logging_config import stage_logger
from .registry import ResourceRegistry


@dataclass(frozen=True)
class FetchRequest:
    """What to fetch and how to treat it."""

    source_url: str
    extract: bool = True
    skip: bool = False


def _content_to_stage(
    request: FetchRequest,
    artifact: retriever.DownloadedArtifact,
    work_dir: Path,
    log: logging.Logger,
) -> Path:
    if not request.extract:
        return work_dir
    if not archive_utils.is_supported_archive(artifact.derived_file_name):
        raise UnsupportedFormatError(f"Unsupported archive format: {artifact.derived_file_name}")
    # Extract beside the download so the archive itself is not staged.
    return archive_utils.extract(artifact.local_path, work_dir / "extracted", logger=log)


def run(
    request: FetchRequest,
    destination: Path,
    registry: Optional[ResourceRegistry] = None,
    *,
    work_root: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> Optional[Path]:
    """Execute one pipeline run.

    Returns the published destination, or ``None`` when the request is
    skipped.

    Raises:
        ConfigurationError: ``request.source_url`` is empty. Raised before any
            network or filesystem activity and not wrapped.
        PipelineError: any stage failed; ``.cause`` holds the stage error.
    """
    log = stage_logger(logger, __name__)
    if request.skip:
        log.info("fetch: execution skipped")
        return None
    url = (request.source_url or "").strip()
    if not url:
        raise ConfigurationError("A source URL must be provided (RESFETCH_URL or --url)")

    destination = Path(destination)
    work_dir: Optional[Path] = None
    try:
        work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX, dir=work_root))
        download_dir = work_dir / "download"
        download_dir.mkdir()
        artifact = retriever.fetch(url, download_dir, logger=log)
        content = _content_to_stage(request, artifact, download_dir, log)
        stager.publish(content, destination, logger=log)
        resource_dir = destination.parent.resolve()
        if registry is not None:
            registry.register(str(resource_dir))
            log.info("Added resource directory: %s", resource_dir)
    except Exception as exc:
        if work_dir is not None:
            log.debug("Leaving working directory %s for inspection", work_dir)
        raise PipelineError(url, exc) from exc

    shutil.rmtree(work_dir, ignore_errors=True)
    return destination


__all__ = ["FetchRequest", "run"]
