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

"""Model listing (``client.models``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params

MODELS_PATH = "/v1/models"


class Models(SyncResource):
    def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """List the models available to the API key (``GET /v1/models``)."""
        return self._client._request("GET", MODELS_PATH, merge_params(params, kwargs), config=config)


class AsyncModels(AsyncResource):
    async def list(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", MODELS_PATH, merge_params(params, kwargs), config=config
        )
