"""
Growable receive buffer for streamed HTTP responses.

The poller feeds each chunk delivered by the HTTP client into
:meth:`ReceiveBuffer.append`; once the transfer has finished, the
extractor reads the accumulated bytes via :attr:`ReceiveBuffer.data`.

Invariants:
- The byte at index ``length`` is always ``0`` (NUL terminator), so
  ``capacity >= length + 1`` holds at all times, including for a freshly
  constructed buffer.
- Growth is by exact need: when a chunk and its terminator do not fit,
  storage grows by ``len(chunk) + 1`` bytes. There is no multiplier, so
  capacity after appends totalling ``T`` bytes is at least ``T + 1`` and
  never more than traffic has required.
- Capacity never shrinks. ``reset()`` only rewinds ``length`` so the same
  storage is reused across poll cycles.

The buffer is owned by a single poll cycle; it is not thread-safe.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-103)

TODO:
- None
"""

import logging

logger = logging.getLogger(__name__)


class ReceiveBuffer:
    """Contiguous, NUL-terminated byte accumulator with exact-need growth."""

    def __init__(self) -> None:
        # One byte reserved for the terminator of the empty buffer.
        self._storage = bytearray(1)
        self._length: int = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Number of bytes currently allocated."""
        return len(self._storage)

    @property
    def remaining(self) -> int:
        """Allocated bytes past the valid data, terminator slot included."""
        return len(self._storage) - self._length

    @property
    def data(self) -> bytes:
        """Copy of the valid data, without the terminator."""
        return bytes(self._storage[: self._length])

    def terminated(self) -> bytes:
        """Copy of the valid data followed by its NUL terminator."""
        return bytes(self._storage[: self._length + 1])

    def __len__(self) -> int:
        return self._length

    def reset(self) -> None:
        """Discard the contents, keeping the allocated storage."""
        self._length = 0
        self._storage[0] = 0

    def append(self, chunk: bytes) -> int:
        """Append *chunk* after the valid data and re-terminate.

        Args:
            chunk: Bytes received from the transport. May be empty.

        Returns:
            Number of bytes accepted: ``len(chunk)`` on success, ``0`` if
            the storage could not grow. On failure the buffer is left
            exactly as it was.
        """
        size = len(chunk)
        if size >= self.remaining:
            try:
                self._grow(size + 1)
            except MemoryError:
                logger.error(
                    "Receive buffer could not grow by %d bytes "
                    "(capacity %d, length %d)",
                    size + 1,
                    self.capacity,
                    self._length,
                )
                return 0

        end = self._length + size
        self._storage[self._length : end] = chunk
        self._storage[end] = 0
        self._length = end
        return size

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _grow(self, extra: int) -> None:
        """Extend storage by exactly *extra* zeroed bytes."""
        self._storage.extend(bytes(extra))
