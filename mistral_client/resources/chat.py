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

"""Chat completions (``client.chat``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..models import Mode
from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


class Chat(SyncResource):
    """Synchronous chat completions resource."""

    def complete(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Create a chat completion.

        Args:
            params: Request body fields (``model``, ``messages``, ``temperature``...).
                Keyword arguments are merged over it.
            config: Per-call options (``api_key``, ``base_url``, ``http_options``).

        Returns:
            ``Ok(completion)``, or ``Ok(EventStream)`` when ``stream=True``
            is passed, which is the same as calling :meth:`stream`.
        """
        body = merge_params(params, kwargs)
        if body.get("stream"):
            return self.stream(body, config=config)
        return self._client._request("POST", CHAT_COMPLETIONS_PATH, body, config=config)

    def stream(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Create a streamed chat completion.

        Returns:
            ``Ok(EventStream)`` once the server accepted the request; each
            event payload is a ``chat.completion.chunk`` object.
        """
        body = merge_params(params, kwargs)
        body["stream"] = True
        return self._client._request(
            "POST", CHAT_COMPLETIONS_PATH, body, config=config, mode=Mode.STREAM
        )


class AsyncChat(AsyncResource):
    """Async chat completions resource."""

    async def complete(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        body = merge_params(params, kwargs)
        if body.get("stream"):
            return await self.stream(body, config=config)
        return await self._client._request("POST", CHAT_COMPLETIONS_PATH, body, config=config)

    async def stream(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        body = merge_params(params, kwargs)
        body["stream"] = True
        return await self._client._request(
            "POST", CHAT_COMPLETIONS_PATH, body, config=config, mode=Mode.STREAM
        )
