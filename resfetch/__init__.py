"""resfetch - fetch, unpack and publish remote resource archives.

Provides:
* A hardened HTTP(S) retriever (fixed timeouts and client header)
* Compressed tar extraction that refuses path traversal
* Swap-based publishing of the extracted tree to a fixed destination
* A thin CLI wrapper (`resfetch`)

The pipeline entry point is :func:`resfetch.pipeline.run`.
"""

from ._version import __version__
from .logging_config import configure_logging  # noqa: F401
from .pipeline import FetchRequest, run  # noqa: F401
from .registry import ResourceDatabase, ResourceList, ResourceRegistry  # noqa: F401
from .config import FetchSettings  # noqa: F401

__all__ = [
    "__version__",
    "configure_logging",
    "FetchRequest",
    "run",
    "ResourceDatabase",
    "ResourceList",
    "ResourceRegistry",
    "FetchSettings",
]
