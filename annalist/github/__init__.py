"""GitHub REST commit source with local response caching."""

from __future__ import annotations

from .config import GitHubSourceConfig
from .errors import GitHubConfigError, RemoteFetchError
from .fetcher import CachedFetcher, FetchResult
from .loaders import CommitDetailLoader, CommitListLoader
from .models import CommitDetail, CommitRef, FileChange
from .observability import FetchEventLogger, FetchEventType

__all__ = [
    "CachedFetcher",
    "CommitDetail",
    "CommitDetailLoader",
    "CommitListLoader",
    "CommitRef",
    "FetchEventLogger",
    "FetchEventType",
    "FetchResult",
    "FileChange",
    "GitHubConfigError",
    "GitHubSourceConfig",
    "RemoteFetchError",
]
