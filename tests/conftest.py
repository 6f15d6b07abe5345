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
Pytest configuration for mistral-client tests.
"""
import json
import os

import httpx
import pytest

from mistral_client import AsyncMistralClient, ClientDefaults, MistralClient
from mistral_client.config import reset_defaults

pytest_plugins = ['pytest_asyncio']

TEST_API_KEY = "test-key-123"
TEST_BASE_URL = "https://api.test.local"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from MISTRAL_* variables, config files and cached defaults."""
    for key in list(os.environ):
        if key.startswith("MISTRAL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def defaults():
    return ClientDefaults()


def json_response(status_code: int = 200, payload=None, headers=None) -> httpx.Response:
    """Build a JSON httpx.Response the way the API sends it."""
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(payload if payload is not None else {}).encode(),
        headers={"content-type": "application/json", **(headers or {})},
    )


def sse_body(*payloads, done: bool = True) -> bytes:
    frames = [f"data: {json.dumps(p)}\n\n" for p in payloads]
    if done:
        frames.append("data: [DONE]\n\n")
    return "".join(frames).encode()


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return json_response(200, {})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def make_client(defaults):
    """Build a MistralClient whose transport is a Recorder."""
    created = []

    def _make(*responses, **kwargs):
        recorder = Recorder(*responses)
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("base_url", TEST_BASE_URL)
        kwargs.setdefault("defaults", defaults)
        client = MistralClient(
            http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
            **kwargs,
        )
        created.append(client)
        return client, recorder

    yield _make
    for client in created:
        client.close()


@pytest.fixture
def make_async_client(defaults):
    def _make(*responses, **kwargs):
        recorder = Recorder(*responses)
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("base_url", TEST_BASE_URL)
        kwargs.setdefault("defaults", defaults)
        client = AsyncMistralClient(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
            **kwargs,
        )
        return client, recorder

    return _make


@pytest.fixture
def library_list_payload():
    return {
        "data": [
            {
                "id": "1",
                "name": "My Library",
            }
        ]
    }


@pytest.fixture
def chat_response_payload():
    """Standard chat completion response matching server format."""
    return {
        "id": "cmpl-83f575cf654b4a83b99d342f644db292",
        "object": "chat.completion",
        "created": 1702997889,
        "model": "open-mistral-7b",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": "Comté, without a doubt.",
                },
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": 15,
            "completion_tokens": 6,
            "total_tokens": 21,
        },
    }


@pytest.fixture
def chunk_payloads():
    """Streamed chat.completion.chunk objects."""
    return [
        {
            "id": "cmpl-9d2c56da16394e009cafbbde9cb5d725",
            "model": "open-mistral-7b",
            "choices": [{"index": 0, "delta": {"role": "assistant"}, "finish_reason": None}],
        },
        {
            "id": "cmpl-9d2c56da16394e009cafbbde9cb5d725",
            "object": "chat.completion.chunk",
            "model": "open-mistral-7b",
            "choices": [{"index": 0, "delta": {"content": "Comté"}, "finish_reason": None}],
        },
        {
            "id": "cmpl-9d2c56da16394e009cafbbde9cb5d725",
            "object": "chat.completion.chunk",
            "model": "open-mistral-7b",
            "choices": [{"index": 0, "delta": {"content": "!"}, "finish_reason": "stop"}],
        },
    ]
