# Copyright 2025 the mistral-client authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Server-sent event decoding for streamed completions.

The wire format is a sequence of frames separated by a blank line, each
carrying one JSON document in a ``data:`` field, ending with ``data: [DONE]``::

    data: {"choices": [{"delta": {"content": "Hel"}}]}

    data: {"choices": [{"delta": {"content": "lo"}}]}

    data: [DONE]

:class:`StreamDecoder` is transport-agnostic: feed it bytes as they arrive and
it yields one :class:`~mistral_client.models.StreamEvent` per complete frame.
:class:`EventStream` and :class:`AsyncEventStream` drive it from a streaming
``httpx`` response and own that response until the sequence is finished or
abandoned.
"""

from __future__ import annotations

import asyncio
import codecs
import json
import weakref
from typing import Any, AsyncIterator, Iterator, Optional

import httpx

from .exceptions import DecodeError, NetworkError
from .logging_config import LogContext, get_logger
from .models import StreamEvent
from .result import ApiResult, Err, Ok

logger = get_logger("mistral_client.streaming")

SENTINEL = "[DONE]"
_FIELDS = frozenset({"data", "event", "id", "retry"})


class StreamDecoder:
    """Incremental decoder from raw bytes to stream events.

    Chunks may split frames, lines and even multi-byte characters anywhere.
    After the ``[DONE]`` sentinel or a malformed frame, ``done`` is set and
    further input is ignored.
    """

    def __init__(self) -> None:
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        # Buffer prefix known to hold no frame separator
        self._searched = 0
        # A chunk ending in "\r" may be half of a "\r\n"
        self._held_cr = False
        self.done = False

    def feed(self, chunk: bytes) -> Iterator[StreamEvent]:
        """Append a chunk and return an iterator over the frames it completes.

        Raises:
            DecodeError: From the returned iterator, on a frame that is not
                valid JSON; or immediately, on invalid UTF-8.
        """
        if not self.done:
            try:
                text = self._text.decode(chunk)
            except UnicodeDecodeError as exc:
                self.done = True
                raise DecodeError(f"Stream is not valid UTF-8: {exc}") from exc
            if self._held_cr:
                text = "\r" + text
            self._held_cr = text.endswith("\r")
            if self._held_cr:
                text = text[:-1]
            self._buffer += text.replace("\r\n", "\n")
        return self._drain()

    def close(self) -> None:
        """Signal end of input.

        Raises:
            DecodeError: If an unterminated frame is left in the buffer.
        """
        if self.done:
            return
        self.done = True
        try:
            self._buffer += self._text.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Stream ended inside a UTF-8 sequence: {exc}") from exc
        leftover, self._buffer = self._buffer.strip(), ""
        if leftover:
            raise DecodeError(f"Stream ended mid-frame: {leftover[:200]!r}")

    def _drain(self) -> Iterator[StreamEvent]:
        while not self.done:
            end = self._buffer.find("\n\n", self._searched)
            if end < 0:
                self._searched = max(len(self._buffer) - 1, 0)
                return
            frame = self._buffer[:end]
            self._buffer = self._buffer[end + 2:]
            self._searched = 0
            event = self._decode_frame(frame)
            if event is not None:
                yield event

    def _decode_frame(self, frame: str) -> Optional[StreamEvent]:
        data_lines = []
        bare_lines = []
        for line in frame.split("\n"):
            if not line or line.startswith(":"):
                continue
            field, sep, value = line.partition(":")
            if sep and field in _FIELDS:
                if field == "data":
                    data_lines.append(value[1:] if value.startswith(" ") else value)
                continue
            bare_lines.append(line)

        text = "\n".join(data_lines or bare_lines).strip()
        if not text:
            return None
        if text == SENTINEL:
            self.done = True
            return None
        try:
            payload = json.loads(text)
        except ValueError as exc:
            self.done = True
            raise DecodeError(f"Malformed stream frame {text[:200]!r}: {exc}") from exc
        return StreamEvent(payload=payload)


class EventStream:
    """Lazy sequence of stream events read from a streaming response.

    Iterating yields ``Ok(StreamEvent)`` in wire order and, when the stream
    fails, one final ``Err`` carrying a NetworkError or DecodeError. The
    response is closed when iteration ends for any reason, on close(), on
    leaving a ``with`` block, or when the stream is dropped unreleased::

        with client.chat.stream(model="mistral-small-latest", messages=msgs).unwrap() as stream:
            for result in stream:
                print(result.unwrap().payload)
    """

    def __init__(self, response: httpx.Response, context: Optional[LogContext] = None):
        self._response = response
        self._decoder = StreamDecoder()
        self._log = context or LogContext(logger)
        self._iterator: Optional[Iterator[ApiResult[StreamEvent]]] = None
        self._released = False
        self.events_received = 0
        # Closes the response if the stream is dropped without being released
        self._finalizer = weakref.finalize(self, response.close)

    @property
    def response(self) -> httpx.Response:
        return self._response

    def __iter__(self) -> "EventStream":
        return self

    def __next__(self) -> ApiResult[StreamEvent]:
        if self._iterator is None:
            self._iterator = self._events()
        return next(self._iterator)

    def payloads(self) -> Iterator[Any]:
        """Iterate over event payloads, raising the terminal error if any."""
        for result in self:
            yield result.unwrap().payload

    def _events(self) -> Iterator[ApiResult[StreamEvent]]:
        if self._released:
            return
        try:
            for chunk in self._response.iter_bytes():
                for event in self._decoder.feed(chunk):
                    self.events_received += 1
                    yield Ok(event)
                if self._decoder.done:
                    return
            self._decoder.close()
        except DecodeError as exc:
            self._log.warning("Stream decode failed", error=exc.detail)
            yield Err(exc)
        except httpx.DecodingError as exc:
            self._log.warning("Stream content decoding failed", error=str(exc))
            yield Err(DecodeError(f"Stream content could not be decoded: {exc}"))
        except (httpx.TransportError, httpx.StreamError) as exc:
            self._log.error("Stream interrupted", error=str(exc))
            yield Err(NetworkError(f"Stream interrupted: {exc}"))
        finally:
            self._release()

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._finalizer.detach()
        self._response.close()
        self._log.debug("Stream closed", events=self.events_received)

    def close(self) -> None:
        """Stop the stream and release the connection."""
        if self._iterator is not None:
            self._iterator.close()
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class AsyncEventStream:
    """Async counterpart of :class:`EventStream`::

        result = await client.chat.stream(model="mistral-small-latest", messages=msgs)
        async with result.unwrap() as stream:
            async for item in stream:
                print(item.unwrap().payload)
    """

    def __init__(self, response: httpx.Response, context: Optional[LogContext] = None):
        self._response = response
        self._decoder = StreamDecoder()
        self._log = context or LogContext(logger)
        self._iterator: Optional[AsyncIterator[ApiResult[StreamEvent]]] = None
        self._released = False
        self.events_received = 0
        self._finalizer = weakref.finalize(self, _schedule_aclose, _running_loop(), response)

    @property
    def response(self) -> httpx.Response:
        return self._response

    def __aiter__(self) -> "AsyncEventStream":
        return self

    async def __anext__(self) -> ApiResult[StreamEvent]:
        if self._iterator is None:
            self._iterator = self._events()
        return await self._iterator.__anext__()

    async def payloads(self) -> AsyncIterator[Any]:
        async for result in self:
            yield result.unwrap().payload

    async def _events(self) -> AsyncIterator[ApiResult[StreamEvent]]:
        if self._released:
            return
        try:
            async for chunk in self._response.aiter_bytes():
                for event in self._decoder.feed(chunk):
                    self.events_received += 1
                    yield Ok(event)
                if self._decoder.done:
                    return
            self._decoder.close()
        except DecodeError as exc:
            self._log.warning("Stream decode failed", error=exc.detail)
            yield Err(exc)
        except httpx.DecodingError as exc:
            self._log.warning("Stream content decoding failed", error=str(exc))
            yield Err(DecodeError(f"Stream content could not be decoded: {exc}"))
        except (httpx.TransportError, httpx.StreamError) as exc:
            self._log.error("Stream interrupted", error=str(exc))
            yield Err(NetworkError(f"Stream interrupted: {exc}"))
        finally:
            await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._finalizer.detach()
        await self._response.aclose()
        self._log.debug("Stream closed", events=self.events_received)

    async def aclose(self) -> None:
        """Stop the stream and release the connection."""
        if self._iterator is not None:
            await self._iterator.aclose()
        await self._release()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()


# Pending close tasks for abandoned async responses
_closing: set = set()


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _schedule_aclose(loop: Optional[asyncio.AbstractEventLoop], response: httpx.Response) -> None:
    """Close an abandoned async response on the loop that opened it."""
    if response.is_closed or loop is None or loop.is_closed():
        return

    def _start() -> None:
        task = loop.create_task(response.aclose())
        _closing.add(task)
        task.add_done_callback(_closing.discard)

    loop.call_soon_threadsafe(_start)
