"""Decoding of streamed completion responses.

The completion endpoint streams server-sent events, one ``data: <json>``
frame per line, terminated by ``data: [DONE]``. Each JSON frame carries a
content delta at ``choices[0].delta.content``.
"""

import codecs
import json
import logging
from typing import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class SSEDecoder:
    """Incremental decoder turning text chunks into content deltas.

    A frame whose JSON cannot be parsed yet is kept in the buffer and retried
    once more data arrives. After the sentinel the decoder is finished and
    ignores any further input.
    """

    def __init__(self):
        self._buffer = ""
        self.done = False

    def feed(self, text: str) -> list[str]:
        """Add a chunk and return the deltas of every complete frame."""
        if self.done:
            return []
        self._buffer += text
        return self._drain(final=False)

    def flush(self) -> list[str]:
        """Decode whatever is left at end of stream, skipping malformed frames."""
        if self.done:
            return []
        if self._buffer and not self._buffer.endswith("\n"):
            self._buffer += "\n"
        deltas = self._drain(final=True)
        self._buffer = ""
        return deltas

    def _drain(self, final: bool) -> list[str]:
        deltas: list[str] = []
        while not self.done:
            newline_index = self._buffer.find("\n")
            if newline_index == -1:
                break

            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1:]

            if line.endswith("\r"):
                line = line[:-1]
            if line.startswith(":") or line.strip() == "":
                continue
            if not line.startswith("data: "):
                continue

            payload = line[6:].strip()
            if payload == DONE_SENTINEL:
                self.done = True
                break

            try:
                frame = json.loads(payload)
            except json.JSONDecodeError:
                if final:
                    logger.warning(f"Skipping malformed completion frame: {payload[:80]!r}")
                    continue
                # Incomplete frame: put it back and wait for more data
                self._buffer = line + "\n" + self._buffer
                break

            content = _delta_content(frame)
            if content:
                deltas.append(content)
        return deltas


def _delta_content(frame: object) -> str | None:
    if not isinstance(frame, dict):
        return None
    choices = frame.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else None


async def iter_sse_deltas(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily yield content deltas from a byte stream until the sentinel.

    The returned iterator is finite and cannot be restarted.
    """
    decoder = SSEDecoder()
    # Multi-byte characters may be split across chunks
    text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    async for chunk in chunks:
        for delta in decoder.feed(text_decoder.decode(chunk)):
            yield delta
        if decoder.done:
            return

    tail = decoder.feed(text_decoder.decode(b"", final=True))
    for delta in tail + decoder.flush():
        yield delta


def format_sse(data: str) -> str:
    """Format a single ``data:`` frame."""
    return f"data: {data}\n\n"
