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

"""Tests for stream decoding and event streams."""

import asyncio
import gc

import httpx
import pytest

from mistral_client.exceptions import DecodeError, NetworkError
from mistral_client.result import Err, Ok
from mistral_client.streaming import AsyncEventStream, EventStream, StreamDecoder

from conftest import sse_body


# ── Helpers ──────────────────────────────────────────────────────────────────


def decode_all(*chunks: bytes) -> list:
    decoder = StreamDecoder()
    payloads = []
    for chunk in chunks:
        payloads.extend(event.payload for event in decoder.feed(chunk))
    decoder.close()
    return payloads


def streaming_response(chunks) -> httpx.Response:
    def body():
        for chunk in chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    return httpx.Response(200, content=body())


def async_streaming_response(chunks) -> httpx.Response:
    async def body():
        for chunk in chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    return httpx.Response(200, content=body())


# ── StreamDecoder ────────────────────────────────────────────────────────────


class TestStreamDecoder:
    def test_frame_split_across_chunks(self):
        """A frame split over three chunks yields exactly one event."""
        assert decode_all(b'data: {"a"', b":1}\n", b"\n") == [{"a": 1}]

    def test_done_split_across_chunks(self):
        decoder = StreamDecoder()
        events = []
        for chunk in (b'data: {"a":1}\n', b"\n", b"data: [DONE]\n\n"):
            events.extend(decoder.feed(chunk))
        decoder.close()

        assert [e.payload for e in events] == [{"a": 1}]
        assert decoder.done

    def test_truncated_document(self):
        decoder = StreamDecoder()
        assert list(decoder.feed(b'data: {"a":')) == []
        with pytest.raises(DecodeError):
            decoder.close()

    def test_multiple_frames_in_one_chunk(self):
        assert decode_all(b'data: {"a":1}\n\ndata: {"b":2}\n\n') == [{"a": 1}, {"b": 2}]

    def test_byte_at_a_time(self, chunk_payloads):
        raw = sse_body(*chunk_payloads)
        assert decode_all(*(raw[i:i + 1] for i in range(len(raw)))) == chunk_payloads

    def test_multibyte_character_split(self):
        raw = 'data: {"text": "Comté ✓"}\n\n'.encode("utf-8")
        split = raw.index("é".encode("utf-8")) + 1
        assert decode_all(raw[:split], raw[split:]) == [{"text": "Comté ✓"}]

    def test_crlf_line_endings(self):
        assert decode_all(b'data: {"a":1}\r\n\r\ndata: {"b":2}\r', b"\n\r\n") == [
            {"a": 1},
            {"b": 2},
        ]

    def test_done_sentinel_stops_decoding(self):
        decoder = StreamDecoder()
        events = list(decoder.feed(b'data: {"a":1}\n\ndata: [DONE]\n\ndata: {"b":2}\n\n'))
        assert [e.payload for e in events] == [{"a": 1}]
        assert decoder.done
        assert list(decoder.feed(b'data: {"c":3}\n\n')) == []
        decoder.close()

    def test_data_without_space(self):
        assert decode_all(b'data:{"a":1}\n\n') == [{"a": 1}]

    def test_multiline_data_joined(self):
        assert decode_all(b'data: {"a":\ndata: 1}\n\n') == [{"a": 1}]

    def test_comments_and_other_fields_ignored(self):
        raw = b': keep-alive\n\nevent: message\nid: 7\nretry: 100\ndata: {"a":1}\n\n'
        assert decode_all(raw) == [{"a": 1}]

    def test_bare_json_frame(self):
        assert decode_all(b'{"a":1}\n\n') == [{"a": 1}]

    def test_blank_frames_skipped(self):
        assert decode_all(b'\n\n\n\ndata: {"a":1}\n\n') == [{"a": 1}]

    def test_empty_stream(self):
        assert decode_all() == []
        assert decode_all(b"") == []

    def test_trailing_whitespace_is_clean_end(self):
        assert decode_all(b'data: {"a":1}\n\n\n') == [{"a": 1}]

    def test_truncated_frame(self):
        decoder = StreamDecoder()
        assert list(decoder.feed(b'data: {"a":1}\n\ndata: {"b"')) != []
        with pytest.raises(DecodeError, match="mid-frame"):
            decoder.close()

    def test_unterminated_done_is_truncation(self):
        decoder = StreamDecoder()
        assert list(decoder.feed(b"data: [DONE]")) == []
        with pytest.raises(DecodeError):
            decoder.close()

    def test_malformed_frame(self):
        decoder = StreamDecoder()
        events = decoder.feed(b'data: {"a":1}\n\ndata: {not json}\n\ndata: {"b":2}\n\n')
        assert next(events).payload == {"a": 1}
        with pytest.raises(DecodeError, match="Malformed"):
            next(events)
        assert decoder.done
        assert list(decoder.feed(b'data: {"c":3}\n\n')) == []

    def test_invalid_utf8(self):
        decoder = StreamDecoder()
        with pytest.raises(DecodeError):
            decoder.feed(b"data: \xff\xfe\n\n")

    def test_carriage_return_split_from_line_feed(self):
        assert decode_all(b'data: {"a":1}\r', b"\n\r", b"\n") == [{"a": 1}]

    def test_large_frame_in_small_chunks(self):
        text = "x" * 50_000
        raw = sse_body({"text": text})
        assert decode_all(*(raw[i:i + 7] for i in range(0, len(raw), 7))) == [{"text": text}]

    def test_stream_ending_inside_character(self):
        decoder = StreamDecoder()
        list(decoder.feed("data: é".encode("utf-8")[:-1]))
        with pytest.raises(DecodeError):
            decoder.close()


# ── EventStream ──────────────────────────────────────────────────────────────


class TestEventStream:
    def test_yields_ok_events(self, chunk_payloads):
        stream = EventStream(streaming_response([sse_body(*chunk_payloads)]))
        results = list(stream)
        assert all(isinstance(r, Ok) for r in results)
        assert [r.value.payload for r in results] == chunk_payloads
        assert stream.events_received == 3
        assert stream.response.is_closed

    def test_payloads(self, chunk_payloads):
        with EventStream(streaming_response([sse_body(*chunk_payloads)])) as stream:
            assert list(stream.payloads()) == chunk_payloads

    def test_network_error_mid_stream(self):
        response = streaming_response([b'data: {"a":1}\n\n', httpx.ReadError("connection reset")])
        stream = EventStream(response)
        results = list(stream)

        assert isinstance(results[0], Ok)
        assert results[0].value.payload == {"a": 1}
        assert isinstance(results[1], Err)
        assert isinstance(results[1].error, NetworkError)
        assert len(results) == 2
        assert response.is_closed

    def test_truncated_stream(self):
        stream = EventStream(streaming_response([b'data: {"a":1}\n\ndata: {"b"']))
        results = list(stream)
        assert [r.ok for r in results] == [True, False]
        assert results[1].kind == "decode"

    def test_malformed_frame_terminates(self):
        stream = EventStream(
            streaming_response([b'data: oops\n\n', b'data: {"b":2}\n\n'])
        )
        results = list(stream)
        assert len(results) == 1
        assert isinstance(results[0].error, DecodeError)

    def test_payloads_raise_terminal_error(self):
        stream = EventStream(
            streaming_response([b'data: {"a":1}\n\n', httpx.ReadError("connection reset")])
        )
        received = []
        with pytest.raises(NetworkError):
            for payload in stream.payloads():
                received.append(payload)
        assert received == [{"a": 1}]

    def test_stops_at_done_without_reading_further(self):
        consumed = []

        def body():
            consumed.append(1)
            yield b'data: {"a":1}\n\ndata: [DONE]\n\n'
            consumed.append(2)
            yield b'data: {"b":2}\n\n'

        response = httpx.Response(200, content=body())
        assert [r.value.payload for r in EventStream(response)] == [{"a": 1}]
        assert consumed == [1]
        assert response.is_closed

    def test_close_after_partial_consumption(self, chunk_payloads):
        response = streaming_response([sse_body(p) for p in chunk_payloads])
        stream = EventStream(response)
        assert next(stream).ok
        stream.close()
        assert response.is_closed
        assert list(stream) == []

    def test_close_before_iteration(self):
        response = streaming_response([b'data: {"a":1}\n\n'])
        stream = EventStream(response)
        stream.close()
        assert response.is_closed
        assert list(stream) == []

    def test_dropped_before_iteration_releases_response(self, chunk_payloads):
        response = streaming_response([sse_body(*chunk_payloads)])
        stream = EventStream(response)
        del stream
        gc.collect()
        assert response.is_closed

    def test_dropped_mid_iteration_releases_response(self, chunk_payloads):
        response = streaming_response([sse_body(p) for p in chunk_payloads])
        stream = EventStream(response)
        assert next(stream).ok
        del stream
        gc.collect()
        assert response.is_closed

    def test_context_manager_releases_on_break(self, chunk_payloads):
        response = streaming_response([sse_body(*chunk_payloads)])
        with EventStream(response) as stream:
            for _ in stream:
                break
        assert response.is_closed


class TestAsyncEventStream:
    @pytest.mark.asyncio
    async def test_yields_ok_events(self, chunk_payloads):
        response = async_streaming_response([sse_body(*chunk_payloads)])
        stream = AsyncEventStream(response)
        results = [r async for r in stream]
        assert [r.value.payload for r in results] == chunk_payloads
        assert response.is_closed

    @pytest.mark.asyncio
    async def test_payloads(self):
        response = async_streaming_response([b'data: {"a"', b":1}\n", b"\n"])
        async with AsyncEventStream(response) as stream:
            assert [p async for p in stream.payloads()] == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_network_error_mid_stream(self):
        response = async_streaming_response(
            [b'data: {"a":1}\n\n', httpx.ReadError("connection reset")]
        )
        results = [r async for r in AsyncEventStream(response)]
        assert [r.ok for r in results] == [True, False]
        assert isinstance(results[1].error, NetworkError)
        assert response.is_closed

    @pytest.mark.asyncio
    async def test_aclose_after_partial_consumption(self, chunk_payloads):
        response = async_streaming_response([sse_body(p) for p in chunk_payloads])
        stream = AsyncEventStream(response)
        first = await stream.__anext__()
        assert first.ok
        await stream.aclose()
        assert response.is_closed

    @pytest.mark.asyncio
    async def test_dropped_before_iteration_releases_response(self, chunk_payloads):
        response = async_streaming_response([sse_body(*chunk_payloads)])
        stream = AsyncEventStream(response)
        del stream
        gc.collect()
        for _ in range(3):
            await asyncio.sleep(0)
        assert response.is_closed
