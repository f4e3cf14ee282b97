"""
Repository discovery and content retrieval.

Provides access checks, tree walking, extension-filtered scanning and
locator-based content fetching on top of the GitHub client.
"""

from .access import RepositoryAccessGuard, AccessResult, CredentialStatus
from .walker import TreeWalker, TreeEntry, EntryKind
from .scanner import FileScanner, RepositoryFile, DEFAULT_EXTENSIONS, build_raw_url
from .fetcher import ContentFetcher, RawLocation

__all__ = [
    # Access
    "RepositoryAccessGuard",
    "AccessResult",
    "CredentialStatus",
    # Walker
    "TreeWalker",
    "TreeEntry",
    "EntryKind",
    # Scanner
    "FileScanner",
    "RepositoryFile",
    "DEFAULT_EXTENSIONS",
    "build_raw_url",
    # Fetcher
    "ContentFetcher",
    "RawLocation",
]
