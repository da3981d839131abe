"""Environment-backed configuration for resfetch.

Every setting can come from a ``RESFETCH_*`` environment variable; the CLI
layers its own flags on top. Values are read lazily so tests and callers can
pass a custom mapping instead of ``os.environ``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from .constants import DEFAULT_DESTINATION_SUBPATH, DEFAULT_REGISTRY_SUBPATH
from .pipeline import FetchRequest


def env_bool(environ: Mapping[str, str], key: str, default: bool = False) -> bool:
    value = environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class FetchSettings:
    """Resolve environment configuration for a fetch run."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._environ.get(key, default)

    def url(self) -> str:
        return (self.get("RESFETCH_URL") or "").strip()

    def extract(self) -> bool:
        return env_bool(self._environ, "RESFETCH_EXTRACT", True)

    def skip(self) -> bool:
        return env_bool(self._environ, "RESFETCH_SKIP", False)

    def basedir(self) -> Path:
        raw = (self.get("RESFETCH_BASEDIR") or "").strip()
        return Path(raw) if raw else Path.cwd()

    def destination(self) -> Path:
        raw = (self.get("RESFETCH_DESTINATION") or "").strip()
        if raw:
            return Path(raw)
        return self.basedir().joinpath(*DEFAULT_DESTINATION_SUBPATH)

    def registry_path(self) -> Path:
        raw = (self.get("RESFETCH_REGISTRY_PATH") or "").strip()
        if raw:
            return Path(raw)
        return self.basedir().joinpath(*DEFAULT_REGISTRY_SUBPATH)

    def schedule_cron(self) -> str:
        return (self.get("RESFETCH_SCHEDULE_CRON") or "").strip()

    def to_request(
        self,
        url: Optional[str] = None,
        extract: Optional[bool] = None,
        skip: Optional[bool] = None,
    ) -> FetchRequest:
        """Build a request, letting explicit arguments override the environment."""
        return FetchRequest(
            source_url=self.url() if url is None else url.strip(),
            extract=self.extract() if extract is None else extract,
            skip=self.skip() if skip is None else skip,
        )


__all__ = ["env_bool", "FetchSettings"]
