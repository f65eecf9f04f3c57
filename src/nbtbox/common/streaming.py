from collections.abc import Iterator
from io import RawIOBase
from threading import Lock as ThreadLock
from typing import IO


class ByteStreamReader(RawIOBase, IO[bytes]):
    """A non-seekable binary file over an iterator of byte chunks.

    Chunks are pulled only as far as a read needs them, so a decoder reading a document from a
    network response or a generator never holds more than one chunk beyond what it consumed.
    Closing the reader also closes the iterator when it is a generator.
    """

    def __init__(self, chunks: Iterator[bytes]) -> None:
        super().__init__()
        self._chunks = chunks
        self._pending = bytearray()
        self._position = 0
        self._lock = ThreadLock()
        self._is_closed = False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def tell(self) -> int:
        """The number of bytes consumed so far."""
        return self._position

    def read(self, size: int | None = -1) -> bytes:
        """Read up to size bytes - everything that is left when size is negative or None."""
        if self._is_closed:
            msg = "Cannot read from a closed stream."
            raise ValueError(msg)
        with self._lock:
            if size is None or size < 0:
                self._pending.extend(b"".join(self._chunks))
                size = len(self._pending)
            else:
                while len(self._pending) < size:
                    if (chunk := next(self._chunks, None)) is None:
                        break
                    self._pending += chunk
            data = bytes(self._pending[:size])
            del self._pending[:size]
            self._position += len(data)
            return data

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        memoryview(buffer)[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if not self._is_closed:
            self._is_closed = True
            if (close := getattr(self._chunks, "close", None)) is not None:
                close()
        super().close()

    @property
    def closed(self) -> bool:
        return self._is_closed
