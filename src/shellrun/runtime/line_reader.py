"""Line reader for one subprocess output stream.

shellrun runtime module v0.1.0

A LineReader drains an asyncio.StreamReader into a private list of lines.
The StreamReader's limit (set when the process is created) caps how many
bytes one line may occupy; a longer line becomes a LineTooLongError instead
of being truncated.

After an oversized line the reader stops collecting but keeps discarding
input until EOF, so the child never blocks on a full pipe. A failing read
ends the reader at once, since the broken stream would only fail again.
"""

from __future__ import annotations

import asyncio
import logging

from ..errors import LineTooLongError, ReadError, StreamName

__all__ = ["LineReader"]

logger = logging.getLogger(__name__)

# Chunk size used when discarding the remainder of a failed stream
DISCARD_CHUNK_SIZE = 4096


class LineReader:
    """Collects the lines of one stream.

    Attributes:
        name: "stdout" or "stderr"
        max_line_size: Line limit the stream was created with
    """

    def __init__(
        self,
        stream: asyncio.StreamReader | None,
        name: StreamName,
        max_line_size: int,
    ) -> None:
        self.name = name
        self.max_line_size = max_line_size
        self._stream = stream
        self._lines: list[str] = []
        self._error: ReadError | None = None
        self._done = False

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def error(self) -> ReadError | None:
        """Terminal error, meaningful once done is True."""
        return self._error

    @property
    def done(self) -> bool:
        return self._done

    def text(self) -> str:
        """Collected lines joined with newlines."""
        return "\n".join(self._lines)

    async def read_all(self) -> None:
        """Drain the stream to EOF.

        Never raises for stream problems: they are stored in error.
        """
        try:
            if self._stream is not None:
                await self._collect(self._stream)
        finally:
            self._done = True

    async def _collect(self, stream: asyncio.StreamReader) -> None:
        while True:
            try:
                raw = await stream.readline()
            except ValueError as e:
                # StreamReader turns a limit overrun into ValueError
                self._fail(LineTooLongError(self.name, self.max_line_size, cause=e))
                break
            except OSError as e:
                self._fail(ReadError(self.name, e))
                return
            if not raw:
                return
            self._lines.append(_decode_line(raw))

        await self._discard(stream)

    async def _discard(self, stream: asyncio.StreamReader) -> None:
        discarded = 0
        try:
            while chunk := await stream.read(DISCARD_CHUNK_SIZE):
                discarded += len(chunk)
        except OSError as e:
            logger.debug(f"Stopped discarding {self.name}: {e}")
        logger.debug(f"Discarded {discarded} bytes of {self.name} after error")

    def _fail(self, error: ReadError) -> None:
        logger.debug(f"Reader {self.name} failed: {error}")
        if error.cause is not None:
            error.__cause__ = error.cause
        self._error = error


def _decode_line(raw: bytes) -> str:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")
