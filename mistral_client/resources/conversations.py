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

"""Conversations (``client.conversations``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params, segment

CONVERSATIONS_PATH = "/v1/conversations"


def conversation_path(conversation_id: Optional[str]) -> str:
    """Path of one conversation; the collection path for ``None``."""
    if conversation_id is None:
        return CONVERSATIONS_PATH
    return f"{CONVERSATIONS_PATH}/{segment(conversation_id)}"


def conversation_history_path(conversation_id: str) -> str:
    return f"{conversation_path(conversation_id)}/history"


class Conversations(SyncResource):
    def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return self._client._request(
            "GET", CONVERSATIONS_PATH, merge_params(params, kwargs), config=config
        )

    def create_or_continue(
        self,
        conversation_id: Optional[str],
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        """Start a conversation (``conversation_id=None``) or append to one.

        Example::

            client.conversations.create_or_continue(
                "conv123",
                messages=[{"role": "user", "content": "How are you?"}],
            )
        """
        return self._client._request(
            "POST", conversation_path(conversation_id), merge_params(params, kwargs), config=config
        )

    def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return self.create_or_continue(None, params, config=config, **kwargs)

    def update(
        self,
        conversation_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return self.create_or_continue(conversation_id, params, config=config, **kwargs)

    def history(
        self,
        conversation_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        """Fetch the message history of a conversation."""
        return self._client._request(
            "GET",
            conversation_history_path(conversation_id),
            merge_params(params, kwargs),
            config=config,
        )


class AsyncConversations(AsyncResource):
    async def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", CONVERSATIONS_PATH, merge_params(params, kwargs), config=config
        )

    async def create_or_continue(
        self,
        conversation_id: Optional[str],
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "POST", conversation_path(conversation_id), merge_params(params, kwargs), config=config
        )

    async def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self.create_or_continue(None, params, config=config, **kwargs)

    async def update(
        self,
        conversation_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self.create_or_continue(conversation_id, params, config=config, **kwargs)

    async def history(
        self,
        conversation_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET",
            conversation_history_path(conversation_id),
            merge_params(params, kwargs),
            config=config,
        )
