"""Document retrieval and caching.

This module provides the in-process document cache shared by the schema and
template registries, and the retriever that fills it from local files or
remote URIs. Cache keys are namespaced by the callers (``schemas:available``,
``<name>:<version>``, ``hydration:<model>:<version>``, template paths).
"""

import asyncio
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from .errors import RetrievalError
from .logging import LogEvent, log_debug, log_error

# A fetched document: raw text as read, or parsed JSON once a registry has parsed it
Document = Union[str, Dict[str, Any], List[Any]]


class DocumentCache:
    """Thread-safe in-memory document store."""

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: Dict[str, Document] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Document]:
        """Return the cached document for ``key`` or None."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, document: Document) -> None:
        """Store ``document`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = document

    def delete(self, key: str) -> bool:
        """Remove ``key`` from the cache.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self, prefix: Optional[str] = None) -> int:
        """Remove all entries, or only those whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if prefix is None:
                count = len(self._entries)
                self._entries.clear()
                return count
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def keys(self) -> List[str]:
        """Return a snapshot of the cached keys."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DocumentRetriever:
    """Fetches documents from disk or over HTTP and memoizes them by key.

    The blocking reads run in a worker thread so callers can await many of
    them concurrently.
    """

    def __init__(self, cache: Optional[DocumentCache] = None, timeout: float = 10.0) -> None:
        """Initialize the retriever.

        Args:
            cache: Cache to read from and write to. A new one is created if None.
            timeout: Timeout in seconds for remote requests
        """
        self.cache = cache if cache is not None else DocumentCache()
        self.timeout = timeout

    def get_from_cache(self, key: str) -> Optional[Document]:
        """Return the cached document for ``key`` without fetching."""
        return self.cache.get(key)

    def save_to_cache(self, key: str, document: Document) -> None:
        """Store ``document`` under ``key``."""
        self.cache.put(key, document)

    async def get_from_uri(self, uri: str) -> str:
        """Fetch a remote document without touching the cache.

        Raises:
            RetrievalError: If the request fails or does not return 200
        """
        return await asyncio.to_thread(self._read_uri, uri)

    async def get_from_local(self, path: str) -> str:
        """Read a local document without touching the cache.

        Raises:
            RetrievalError: If the file cannot be read
        """
        return await asyncio.to_thread(self._read_local, path)

    async def get_from_cache_or_uri(self, key: str, uri: str) -> Document:
        """Return the cached document for ``key``, fetching ``uri`` on a miss."""
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        document = await self.get_from_uri(uri)
        self.cache.put(key, document)
        return document

    async def get_from_cache_or_local(self, key: str, path: str) -> Document:
        """Return the cached document for ``key``, reading ``path`` on a miss."""
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        document = await self.get_from_local(path)
        self.cache.put(key, document)
        return document

    async def get_from_cache_or_source(self, key: str, source: str, local: bool) -> Document:
        """Dispatch to the local or remote cache-or-fetch variant."""
        if local:
            return await self.get_from_cache_or_local(key, source)
        return await self.get_from_cache_or_uri(key, source)

    async def get_from_source(self, source: str, local: bool) -> str:
        """Dispatch to the local or remote uncached fetch."""
        if local:
            return await self.get_from_local(source)
        return await self.get_from_uri(source)

    def _read_uri(self, uri: str) -> str:
        log_debug(LogEvent.RETRIEVAL, "Fetching remote document", uri=uri)
        try:
            response = requests.get(uri, timeout=self.timeout)
        except requests.RequestException as e:
            log_error(LogEvent.RETRIEVAL, f"Failed to fetch remote document: {e}", uri=uri)
            raise RetrievalError(f"Failed to fetch {uri}: {e}", source=uri) from e

        try:
            if response.status_code != 200:
                log_error(LogEvent.RETRIEVAL, f"HTTP error {response.status_code}", uri=uri)
                raise RetrievalError(f"HTTP error {response.status_code} fetching {uri}", source=uri)
            return response.text
        finally:
            # Ensure response is closed to prevent resource leaks
            response.close()

    def _read_local(self, path: str) -> str:
        log_debug(LogEvent.RETRIEVAL, "Reading local document", path=path)
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log_error(LogEvent.RETRIEVAL, f"Failed to read local document: {e}", path=path)
            raise RetrievalError(f"Failed to read {path}: {e}", source=path) from e
