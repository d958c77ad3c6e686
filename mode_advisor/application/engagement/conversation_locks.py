"""
Per-conversation serialization.

Score folding must happen in message-creation order, so work on the same
conversation is serialized while different conversations never contend.
Locks are reference-counted and dropped once no request holds them.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ConversationLockRegistry:
    """Hands out one lock per conversation id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, conversation_id: str) -> Iterator[None]:
        """Hold the conversation's lock for the duration of the block."""
        with self._guard:
            lock, holders = self._locks.get(conversation_id, (threading.Lock(), 0))
            self._locks[conversation_id] = (lock, holders + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                _, holders = self._locks[conversation_id]
                if holders <= 1:
                    del self._locks[conversation_id]
                else:
                    self._locks[conversation_id] = (lock, holders - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
