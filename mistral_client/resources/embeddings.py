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

"""Embeddings (``client.embeddings``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params

EMBEDDINGS_PATH = "/v1/embeddings"


class Embeddings(SyncResource):
    def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        """Create embedding vectors for the input text.

        Example::

            client.embeddings.create(
                model="mistral-embed",
                input=["Embed this sentence.", "As well as this one."],
            )
        """
        return self._client._request(
            "POST", EMBEDDINGS_PATH, merge_params(params, kwargs), config=config
        )


class AsyncEmbeddings(AsyncResource):
    async def create(
        self, params: Optional[Mapping[str, Any]] = None, /, *, config=None, **kwargs: Any
    ) -> ApiResult[Any]:
        return await self._client._request(
            "POST", EMBEDDINGS_PATH, merge_params(params, kwargs), config=config
        )
