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

"""Document library management (``client.libraries``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params, segment

LIBRARIES_PATH = "/v1/libraries"


def library_path(library_id: str) -> str:
    return f"{LIBRARIES_PATH}/{segment(library_id)}"


class Libraries(SyncResource):
    def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """List libraries.

        Returns:
            ``Ok({"data": [{"id": ..., "name": ..., ...}, ...]})``
        """
        return self._client._request(
            "GET", LIBRARIES_PATH, merge_params(params, kwargs), config=config
        )

    def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Create a library (``name``, ``description``)."""
        return self._client._request(
            "POST", LIBRARIES_PATH, merge_params(params, kwargs), config=config
        )

    def get(self, library_id: str, *, config=None) -> ApiResult[Any]:
        return self._client._request("GET", library_path(library_id), config=config)

    def update(
        self,
        library_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return self._client._request(
            "PUT", library_path(library_id), merge_params(params, kwargs), config=config
        )

    def delete(self, library_id: str, *, config=None) -> ApiResult[Any]:
        return self._client._request("DELETE", library_path(library_id), config=config)


class AsyncLibraries(AsyncResource):
    async def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", LIBRARIES_PATH, merge_params(params, kwargs), config=config
        )

    async def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "POST", LIBRARIES_PATH, merge_params(params, kwargs), config=config
        )

    async def get(self, library_id: str, *, config=None) -> ApiResult[Any]:
        return await self._client._request("GET", library_path(library_id), config=config)

    async def update(
        self,
        library_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "PUT", library_path(library_id), merge_params(params, kwargs), config=config
        )

    async def delete(self, library_id: str, *, config=None) -> ApiResult[Any]:
        return await self._client._request("DELETE", library_path(library_id), config=config)
