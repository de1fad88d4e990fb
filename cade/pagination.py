"""
Pagination / windowing
======================

The sorted result is shown as a growing prefix ("load more"):

    displayed = sorted[0 : page_size * page]
    has_more  = len(displayed) < len(sorted)

`window` is the pure computation. `Paginator` holds the only mutable piece
of the pipeline (the current page) and guards the asynchronous load-more
trigger so that a double click cannot skip a page, and so that a filter or
sort change can abort a pending load.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar
import asyncio

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 12


@dataclass(frozen=True)
class Window(Generic[T]):
    displayed: List[T]
    has_more: bool


def window(items: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Window[T]:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    displayed = list(items[: page_size * page])
    return Window(displayed=displayed, has_more=len(displayed) < len(items))


class Paginator:
    """Current page plus the load-more state machine.

    States are page = 1, 2, 3, ...; `reset()` returns to page 1 and
    `load_more()` advances only while more items remain.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self.page_size = page_size
        self.page = 1
        self._delay: Optional[asyncio.Future] = None

    @property
    def loading(self) -> bool:
        return self._delay is not None

    def has_more(self, total: int) -> bool:
        return self.page * self.page_size < total

    def reset(self) -> None:
        self.cancel()
        self.page = 1

    def load_more(self, total: int) -> bool:
        """Advance one page. Returns False (and changes nothing) at the end."""
        if not self.has_more(total):
            return False
        self.page += 1
        return True

    async def load_more_async(self, total: int, delay: float = 0.5) -> bool:
        """Load the next page after `delay` seconds.

        Calls made while another load is pending are ignored, and a load
        cancelled through `cancel()`/`reset()` leaves the page unchanged.
        """
        if self.loading or not self.has_more(total):
            return False
        fut = self._delay = asyncio.ensure_future(asyncio.sleep(delay))
        try:
            await fut
        except asyncio.CancelledError:
            # still ours: the caller's task was cancelled, not this load
            if self._delay is fut:
                self._delay = None
                raise
        if self._delay is not fut:
            logger.debug("Load more cancelled", page=self.page)
            return False
        self._delay = None
        return self.load_more(total)

    def cancel(self) -> None:
        """Abort the pending load; a new one may start right away."""
        if self._delay is not None:
            self._delay.cancel()
        self._delay = None
