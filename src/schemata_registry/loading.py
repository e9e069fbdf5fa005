"""Helpers shared by the schema and template registries."""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class LoadResult:
    """Outcome of loading or prefetching one catalog entry."""

    key: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Return the result as a plain dictionary."""
        return {"key": self.key, "success": self.success, "error": self.error}


def parse_document(document: Any) -> Any:
    """Parse a fetched document if it is still text.

    Raises:
        ValueError: If the text is not valid JSON
    """
    if isinstance(document, (str, bytes)):
        return json.loads(document)
    return document


async def gather_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[LoadResult]],
    limit: int,
) -> List[LoadResult]:
    """Run ``worker`` over ``items`` with at most ``limit`` in flight.

    Results come back in input order. Workers are expected to report their own
    failures in the returned :class:`LoadResult`.
    """
    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> LoadResult:
        async with semaphore:
            return await worker(item)

    return list(await asyncio.gather(*(run(item) for item in items)))
