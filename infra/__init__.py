"""Infrastructure adapters – concrete implementations of domain ports."""

from .browser import (
    ExecutorTimings,
    PlaywrightActionExecutor,
    PlaywrightBrowserSession,
    PlaywrightJobPortal,
)
from .config import FileSystemConfigProvider
from .data import JsonDataSource
from .logs import FileSystemDebugArtifactStore
from .runtime import StructuredLogger, SystemClock, UuidIdGenerator
from .storage import S3FileFetcher

__all__ = [
    "PlaywrightBrowserSession",
    "PlaywrightActionExecutor",
    "ExecutorTimings",
    "PlaywrightJobPortal",
    "FileSystemConfigProvider",
    "JsonDataSource",
    "FileSystemDebugArtifactStore",
    "S3FileFetcher",
    "SystemClock",
    "UuidIdGenerator",
    "StructuredLogger",
]
