"""
Constants and exit codes for resfetch.
"""

from ._version import __version__

USER_AGENT = f"resfetch/{__version__} (python)"
CONNECT_TIMEOUT_SECONDS = 30
READ_TIMEOUT_SECONDS = 60
DOWNLOAD_CHUNK_SIZE = 64 * 1024

PLACEHOLDER_FILE_NAME = "download"
WORK_DIR_PREFIX = "resfetch-"

# Longest suffixes first so ".tar.bz2" wins over shorter matches.
ARCHIVE_SUFFIXES = (".tar.bz2", ".tar.gz", ".tbz2", ".tbz", ".tgz")

DEFAULT_DESTINATION_SUBPATH = ("target", "generated-resources", "models")
DEFAULT_REGISTRY_SUBPATH = ("target", "resfetch-resources.json")

MAX_SLEEP_INTERVAL_SECONDS = 30


class ExitCodes:
    """Exit codes for different error conditions."""
    OK = 0
    FETCH_FAILED = 1
    CONFIGURATION_ERROR = 2
    RETRIEVAL_ERROR = 3
    FORMAT_ERROR = 4
    SECURITY_ERROR = 5
    STAGING_ERROR = 6
    CORRUPTED_REGISTRY = 7
    EXTRACTION_ERROR = 8
