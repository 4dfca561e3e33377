"""Closable handoff channel between the directory producer and the workers."""

import queue
from typing import Generic, Iterator, TypeVar

from ..exceptions import ChannelClosedError


T = TypeVar("T")


class _Closed:
    """Marker placed on the queue by close()."""


_CLOSED = _Closed()


class HandoffChannel(Generic[T]):
    """
    Single-producer, multi-consumer queue with close semantics.

    send() blocks while the channel is full. After close(), receivers drain
    the remaining items and then stop; the close marker is put back by each
    receiver that sees it so every sibling stops too.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        if self._closed:
            raise ChannelClosedError("send on closed channel")
        self._queue.put(item)

    def close(self) -> None:
        """Close the channel; must be called by the producer only."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if isinstance(item, _Closed):
                # The marker is always the last item, so the queue is empty
                # here and this put cannot block.
                self._queue.put(item)
                return
            yield item  # type: ignore[misc]
