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

"""Opt-in retry wrappers around a dispatcher.

A request is sent again when it failed with a NetworkError or with one of
``retry_statuses``. The wait is the server's ``Retry-After`` when present,
otherwise a constant ``backoff``. Streams are only retried before the first
event, since a failed send never produced one.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, Sequence

from .exceptions import HTTPStatusError, MistralError, NetworkError
from .logging_config import LogContext, get_logger
from .result import ApiResult

logger = get_logger("mistral_client.retry")

RETRY_STATUSES = (429, 500, 502, 503, 504)


def should_retry(error: MistralError, retry_statuses: Sequence[int]) -> bool:
    if isinstance(error, NetworkError):
        return True
    return isinstance(error, HTTPStatusError) and error.status_code in retry_statuses


def retry_delay(error: MistralError, backoff: float) -> float:
    if isinstance(error, HTTPStatusError) and error.rate_limit.retry_after is not None:
        return max(error.rate_limit.retry_after, 0.0)
    return backoff


class RetryingDispatcher:
    """Wraps a :class:`~mistral_client.dispatcher.Dispatcher` with retries."""

    def __init__(
        self,
        dispatcher,
        max_retries: int = 2,
        backoff: float = 1.0,
        retry_statuses: Sequence[int] = RETRY_STATUSES,
        sleep: Optional[Callable[[float], Any]] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.dispatcher = dispatcher
        self.max_retries = max_retries
        self.backoff = backoff
        self.retry_statuses = tuple(retry_statuses)
        self._sleep = sleep or time.sleep

    def send(self, method, path: str, params: Any = None, **kwargs: Any) -> ApiResult[Any]:
        attempt = 0
        while True:
            result = self.dispatcher.send(method, path, params, **kwargs)
            if result.ok or attempt >= self.max_retries:
                return result
            if not should_retry(result.error, self.retry_statuses):
                return result
            attempt += 1
            wait = retry_delay(result.error, self.backoff)
            LogContext(logger, path=path).info(
                "Retrying request", attempt=attempt, wait=wait, kind=result.error.kind
            )
            self._sleep(wait)

    def close(self) -> None:
        self.dispatcher.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class AsyncRetryingDispatcher:
    """Wraps an :class:`~mistral_client.dispatcher.AsyncDispatcher` with retries."""

    def __init__(
        self,
        dispatcher,
        max_retries: int = 2,
        backoff: float = 1.0,
        retry_statuses: Sequence[int] = RETRY_STATUSES,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.dispatcher = dispatcher
        self.max_retries = max_retries
        self.backoff = backoff
        self.retry_statuses = tuple(retry_statuses)
        self._sleep = sleep

    async def send(self, method, path: str, params: Any = None, **kwargs: Any) -> ApiResult[Any]:
        attempt = 0
        while True:
            result = await self.dispatcher.send(method, path, params, **kwargs)
            if result.ok or attempt >= self.max_retries:
                return result
            if not should_retry(result.error, self.retry_statuses):
                return result
            attempt += 1
            wait = retry_delay(result.error, self.backoff)
            LogContext(logger, path=path).info(
                "Retrying request", attempt=attempt, wait=wait, kind=result.error.kind
            )
            await (self._sleep or asyncio.sleep)(wait)

    async def close(self) -> None:
        await self.dispatcher.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
