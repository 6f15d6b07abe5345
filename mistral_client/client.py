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

"""Synchronous and asynchronous clients for the Mistral API."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from .config import ClientDefaults, merge_options
from .dispatcher import AsyncDispatcher, ConfigInput, Dispatcher
from .models import HttpMethod, Mode, MultipartSpec
from .resources import (
    Agents,
    AsyncAgents,
    AsyncChat,
    AsyncConversations,
    AsyncDocuments,
    AsyncEmbeddings,
    AsyncLibraries,
    AsyncModels,
    Chat,
    Conversations,
    Documents,
    Embeddings,
    Libraries,
    Models,
)
from .result import ApiResult
from .retry import AsyncRetryingDispatcher, RetryingDispatcher


def _client_options(
    api_key: Optional[str],
    base_url: Optional[str],
    http_options: Optional[Mapping[str, Any]],
) -> dict[str, Any]:
    options = {"api_key": api_key, "base_url": base_url, "http_options": http_options}
    return {k: v for k, v in options.items() if v is not None}


# ── Synchronous client ──────────────────────────────────────────────────────


class MistralClient:
    """Synchronous Mistral client.

    Options given here apply to every call and sit between per-call
    ``config=`` options and the process-wide defaults.

    Example::

        client = MistralClient(api_key="...")
        result = client.chat.complete(
            model="mistral-small-latest",
            messages=[{"role": "user", "content": "What is the best French cheese?"}],
        )
        if result.ok:
            print(result.value["choices"][0]["message"]["content"])
        client.close()
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        defaults: Optional[ClientDefaults] = None,
        http_client: Optional[httpx.Client] = None,
        max_retries: int = 0,
        backoff: float = 1.0,
    ):
        self._options = _client_options(api_key, base_url, http_options)
        dispatcher = Dispatcher(defaults=defaults, http_client=http_client)
        if max_retries:
            dispatcher = RetryingDispatcher(dispatcher, max_retries=max_retries, backoff=backoff)
        self._dispatcher = dispatcher

        self.models = Models(self)
        self.chat = Chat(self)
        self.embeddings = Embeddings(self)
        self.agents = Agents(self)
        self.libraries = Libraries(self)
        self.documents = Documents(self)
        self.conversations = Conversations(self)

    # -- low-level --------------------------------------------------------

    def _request(
        self,
        method: Union[HttpMethod, str],
        path: str,
        params: Any = None,
        *,
        config: ConfigInput = None,
        mode: Mode = Mode.SYNC,
        multipart: Optional[MultipartSpec] = None,
    ) -> ApiResult[Any]:
        return self._dispatcher.send(
            method,
            path,
            params,
            config=merge_options(self._options, config),
            mode=mode,
            multipart=multipart,
        )

    # -- lifecycle --------------------------------------------------------

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ── Asynchronous client ─────────────────────────────────────────────────────


class AsyncMistralClient:
    """Asynchronous Mistral client.

    Example::

        async with AsyncMistralClient(api_key="...") as client:
            result = await client.libraries.list()
            print(result.unwrap()["data"])
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        defaults: Optional[ClientDefaults] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        max_retries: int = 0,
        backoff: float = 1.0,
    ):
        self._options = _client_options(api_key, base_url, http_options)
        dispatcher = AsyncDispatcher(defaults=defaults, http_client=http_client)
        if max_retries:
            dispatcher = AsyncRetryingDispatcher(
                dispatcher, max_retries=max_retries, backoff=backoff
            )
        self._dispatcher = dispatcher

        self.models = AsyncModels(self)
        self.chat = AsyncChat(self)
        self.embeddings = AsyncEmbeddings(self)
        self.agents = AsyncAgents(self)
        self.libraries = AsyncLibraries(self)
        self.documents = AsyncDocuments(self)
        self.conversations = AsyncConversations(self)

    # -- low-level --------------------------------------------------------

    async def _request(
        self,
        method: Union[HttpMethod, str],
        path: str,
        params: Any = None,
        *,
        config: ConfigInput = None,
        mode: Mode = Mode.SYNC,
        multipart: Optional[MultipartSpec] = None,
    ) -> ApiResult[Any]:
        return await self._dispatcher.send(
            method,
            path,
            params,
            config=merge_options(self._options, config),
            mode=mode,
            multipart=multipart,
        )

    # -- lifecycle --------------------------------------------------------

    async def close(self) -> None:
        await self._dispatcher.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
