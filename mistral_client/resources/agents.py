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

"""Agent management and agent completions (``client.agents``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..models import Mode
from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params, segment

AGENTS_PATH = "/v1/agents"
AGENT_COMPLETIONS_PATH = "/v1/agents/completions"


def agent_path(agent_id: str) -> str:
    return f"{AGENTS_PATH}/{segment(agent_id)}"


class Agents(SyncResource):
    """Synchronous agents resource."""

    def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """List agents. Keyword arguments become query parameters."""
        return self._client._request("GET", AGENTS_PATH, merge_params(params, kwargs), config=config)

    def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Create an agent.

        Example::

            client.agents.create(
                name="Support bot",
                model="mistral-large-latest",
                instructions="You are a helpful assistant",
            )
        """
        return self._client._request("POST", AGENTS_PATH, merge_params(params, kwargs), config=config)

    def get(self, agent_id: str, *, config=None) -> ApiResult[Any]:
        return self._client._request("GET", agent_path(agent_id), config=config)

    def update(
        self,
        agent_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        """Update an agent in place (``PATCH``); only the given fields change."""
        return self._client._request(
            "PATCH", agent_path(agent_id), merge_params(params, kwargs), config=config
        )

    def complete(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Run an agent completion (``agent_id``, ``messages``...).

        Passing ``stream=True`` is the same as calling :meth:`stream`.
        """
        body = merge_params(params, kwargs)
        if body.get("stream"):
            return self.stream(body, config=config)
        return self._client._request("POST", AGENT_COMPLETIONS_PATH, body, config=config)

    def stream(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        body = merge_params(params, kwargs)
        body["stream"] = True
        return self._client._request(
            "POST", AGENT_COMPLETIONS_PATH, body, config=config, mode=Mode.STREAM
        )


class AsyncAgents(AsyncResource):
    """Async agents resource."""

    async def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", AGENTS_PATH, merge_params(params, kwargs), config=config
        )

    async def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "POST", AGENTS_PATH, merge_params(params, kwargs), config=config
        )

    async def get(self, agent_id: str, *, config=None) -> ApiResult[Any]:
        return await self._client._request("GET", agent_path(agent_id), config=config)

    async def update(
        self,
        agent_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "PATCH", agent_path(agent_id), merge_params(params, kwargs), config=config
        )

    async def complete(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        body = merge_params(params, kwargs)
        if body.get("stream"):
            return await self.stream(body, config=config)
        return await self._client._request("POST", AGENT_COMPLETIONS_PATH, body, config=config)

    async def stream(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        body = merge_params(params, kwargs)
        body["stream"] = True
        return await self._client._request(
            "POST", AGENT_COMPLETIONS_PATH, body, config=config, mode=Mode.STREAM
        )
