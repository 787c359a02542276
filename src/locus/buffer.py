"""Scratch buffer -- one reusable byte buffer for file contents.

The buffer is sized to the largest file read so far.  Reading a smaller
file reuses the existing capacity; a larger one grows it exactly once.
The view returned by :meth:`ScratchBuffer.read` is only valid until the
next call, after which its bytes are overwritten.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import ShortReadError

logger = logging.getLogger(__name__)


class ScratchBuffer:
    """Growable read buffer owned by a single file-processing unit.

    Not thread-safe: each worker keeps its own instance.
    """

    def __init__(self, initial_capacity: int = 0) -> None:
        self._buf = bytearray(initial_capacity)
        self._grow_count = 0

    @property
    def capacity(self) -> int:
        return len(self._buf)

    @property
    def grow_count(self) -> int:
        """How many times the buffer had to be reallocated."""
        return self._grow_count

    def read(self, path: str | os.PathLike[str]) -> memoryview:
        """Read *path* into the buffer and return a view of its bytes.

        Raises ``OSError`` when the file cannot be opened or read, and
        :class:`ShortReadError` when it shrank between stat and read.
        """
        with open(path, "rb") as fh:
            size = os.fstat(fh.fileno()).st_size
            if size > len(self._buf):
                logger.debug("Growing scratch buffer %d -> %d bytes", len(self._buf), size)
                # A fresh bytearray leaves any stale view pointing at the old one.
                self._buf = bytearray(size)
                self._grow_count += 1

            view = memoryview(self._buf)[:size]
            read = 0
            while read < size:
                n = fh.readinto(view[read:])
                if not n:
                    break
                read += n

        if read != size:
            raise ShortReadError(
                f"Failed to read entire file: {Path(path)} ({read} of {size} bytes)"
            )
        return view
