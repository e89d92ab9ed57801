"""Singly-linked FIFO queue used by the flow traversal."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class _QueueItem(Generic[T]):
    __slots__ = ("value", "behind")

    def __init__(self, value: T):
        self.value = value
        self.behind: Optional[_QueueItem[T]] = None


class Queue(Generic[T]):
    """
    Unbounded FIFO queue with O(1) enqueue and dequeue.

    ``dequeue`` returns None when the queue is empty, so callers that may
    store None values should check ``is_empty`` first. Not thread-safe.

    Examples:
        >>> queue = Queue()
        >>> queue.enqueue("a")
        >>> queue.enqueue("b")
        >>> queue.dequeue()
        'a'
        >>> len(queue)
        1
    """

    def __init__(self):
        self._front: Optional[_QueueItem[T]] = None
        self._back: Optional[_QueueItem[T]] = None
        self._length = 0

    @property
    def is_empty(self) -> bool:
        return self._length == 0

    def __len__(self) -> int:
        return self._length

    def enqueue(self, value: T) -> None:
        item = _QueueItem(value)
        if self._back is None:
            self._front = item
            self._back = item
        else:
            self._back.behind = item
            self._back = item
        self._length += 1

    def dequeue(self) -> Optional[T]:
        if self._front is None:
            return None
        value = self._front.value
        self._front = self._front.behind
        self._length -= 1
        if self._length == 0:
            self._front = None
            self._back = None
        return value
