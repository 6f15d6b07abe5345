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

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote


def segment(value: Any) -> str:
    """Quote an id for use as one path segment."""
    return quote(str(value), safe="")


def merge_params(params: Optional[Mapping[str, Any]], extra: Mapping[str, Any]) -> dict[str, Any]:
    return {**(params or {}), **extra}


class SyncResource:
    """Resource bound to a :class:`~mistral_client.client.MistralClient`."""

    def __init__(self, client):
        self._client = client


class AsyncResource:
    """Resource bound to an :class:`~mistral_client.client.AsyncMistralClient`."""

    def __init__(self, client):
        self._client = client
