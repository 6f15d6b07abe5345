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
Shared request dispatcher.

Every resource call ends up in :meth:`Dispatcher.send` (or its async twin):
resolve configuration, build the request, send it over ``httpx`` and turn the
outcome into an :data:`~mistral_client.result.ApiResult`. Nothing in this
module raises for API, network or decoding failures; they come back as
``Err`` values.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Union

import httpx

from .config import ClientDefaults, get_defaults, resolve
from .exceptions import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    HTTPStatusError,
    MistralError,
    NetworkError,
)
from .logging_config import LogContext, get_logger
from .models import EffectiveConfig, HttpMethod, Mode, MultipartSpec, OutgoingRequest
from .multipart import encode_spec
from .request import build_request
from .result import ApiResult, Err, Ok
from .streaming import AsyncEventStream, EventStream

logger = get_logger("mistral_client.dispatcher")

DEFAULT_TIMEOUT = 60.0

ConfigInput = Optional[Union[Mapping[str, Any], EffectiveConfig]]

_TIMEOUT_KEYS = {
    "connect_timeout": "connect",
    "read_timeout": "read",
    "write_timeout": "write",
    "pool_timeout": "pool",
}


# ── Helpers ─────────────────────────────────────────────────────────────────


def transport_timeout(options: Mapping[str, Any]) -> httpx.Timeout:
    """Build the per-request timeout from transport options.

    Raises:
        ConfigurationError: If a timeout is neither a number of seconds nor None.
    """
    timeout = options.get("timeout", DEFAULT_TIMEOUT)
    _check_seconds("timeout", timeout)
    kwargs = {}
    for key, field in _TIMEOUT_KEYS.items():
        if key in options:
            _check_seconds(key, options[key])
            kwargs[field] = options[key]
    return httpx.Timeout(timeout, **kwargs)


def _check_seconds(name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number of seconds or None, got {value!r}")


def _prepare(
    method: Union[HttpMethod, str],
    path: str,
    params: Any,
    config: ConfigInput,
    multipart: Optional[MultipartSpec],
    defaults: Optional[ClientDefaults],
    environ: Optional[Mapping[str, str]],
) -> Tuple[EffectiveConfig, OutgoingRequest, Optional[bytes]]:
    effective = resolve(config, defaults=defaults, environ=environ)
    body = encode_spec(multipart) if multipart is not None else None
    request = build_request(effective, method, path, params, multipart=body)
    try:
        content = request.content()
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"Request body is not JSON serialisable: {exc}") from exc
    return effective, request, content


def _build_http_request(
    http: Union[httpx.Client, httpx.AsyncClient],
    effective: EffectiveConfig,
    request: OutgoingRequest,
    content: Optional[bytes],
) -> httpx.Request:
    try:
        return http.build_request(
            request.method.value,
            request.url,
            headers=request.headers,
            content=content,
            timeout=transport_timeout(effective.transport_options),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Request could not be built: {exc}") from exc


def _coerce_mode(mode: Union[Mode, str]) -> Mode:
    try:
        return Mode(mode)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown dispatch mode: {mode!r}") from exc


def _declares_json(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    return content_type == "application/json" or content_type.endswith("+json")


def _status_error(response: httpx.Response, log: LogContext) -> Err:
    error = HTTPStatusError.from_response(
        response.status_code, response.text, response.headers
    )
    log.warning("API returned error status", status=response.status_code)
    return Err(error)


def _decode_body(response: httpx.Response, log: LogContext) -> ApiResult[Any]:
    """Decode a fully read response."""
    if not response.is_success:
        return _status_error(response, log)

    log.debug("Response received", status=response.status_code)
    if not response.content.strip():
        return Ok({})
    declared = _declares_json(response)
    if declared or "content-type" not in response.headers:
        try:
            return Ok(response.json())
        except ValueError as exc:
            if declared:
                log.warning("Response body is not valid JSON", status=response.status_code)
                return Err(DecodeError(f"Response body is not valid JSON: {exc}"))
    # Plain-text endpoints such as document text content
    return Ok({"content": response.text})


# ── Synchronous dispatcher ──────────────────────────────────────────────────


class Dispatcher:
    """Sends API requests over a blocking ``httpx.Client``.

    Args:
        defaults: Process-wide defaults used when resolving per-call options;
            the global defaults, loaded once here, when omitted.
        http_client: Transport to use. When omitted the dispatcher creates
            and owns one, and close() shuts it down.
        environ: Environment to read MISTRAL_API_KEY from; os.environ when
            omitted.
    """

    def __init__(
        self,
        defaults: Optional[ClientDefaults] = None,
        http_client: Optional[httpx.Client] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._defaults = defaults if defaults is not None else get_defaults()
        self._environ = environ
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client()

    def send(
        self,
        method: Union[HttpMethod, str],
        path: str,
        params: Any = None,
        *,
        config: ConfigInput = None,
        mode: Union[Mode, str] = Mode.SYNC,
        multipart: Optional[MultipartSpec] = None,
    ) -> ApiResult[Any]:
        """Send one request.

        Returns:
            ``Ok(json)`` in sync mode, ``Ok(EventStream)`` in stream mode, or
            ``Err(MistralError)`` for any failure before that point.
        """
        log = LogContext(logger, method=str(getattr(method, "value", method)).upper(), path=path)
        try:
            mode = _coerce_mode(mode)
            effective, request, content = _prepare(
                method, path, params, config, multipart, self._defaults, self._environ
            )
            http_request = _build_http_request(self._http, effective, request, content)
        except MistralError as exc:
            log.warning("Request not sent", error=exc.detail, kind=exc.kind)
            return Err(exc)

        log.debug("Dispatching request", mode=mode.value)
        try:
            response = self._http.send(http_request, stream=mode is Mode.STREAM)
        except httpx.TransportError as exc:
            log.error("Request failed", error=str(exc))
            return Err(NetworkError(f"{request.method.value} {path} failed: {exc}"))
        except httpx.DecodingError as exc:
            log.warning("Response content could not be decoded", error=str(exc))
            return Err(DecodeError(f"Response content could not be decoded: {exc}"))

        if mode is Mode.SYNC:
            return _decode_body(response, log)

        if response.is_success:
            log.debug("Stream opened", status=response.status_code)
            return Ok(EventStream(response, context=log))
        try:
            response.read()
        except httpx.HTTPError as exc:
            log.error("Failed reading error body", error=str(exc))
            return Err(NetworkError(f"{request.method.value} {path} failed: {exc}"))
        finally:
            response.close()
        return _status_error(response, log)

    # -- lifecycle --------------------------------------------------------

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# ── Asynchronous dispatcher ─────────────────────────────────────────────────


class AsyncDispatcher:
    """Sends API requests over an ``httpx.AsyncClient``; see :class:`Dispatcher`."""

    def __init__(
        self,
        defaults: Optional[ClientDefaults] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._defaults = defaults if defaults is not None else get_defaults()
        self._environ = environ
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient()

    async def send(
        self,
        method: Union[HttpMethod, str],
        path: str,
        params: Any = None,
        *,
        config: ConfigInput = None,
        mode: Union[Mode, str] = Mode.SYNC,
        multipart: Optional[MultipartSpec] = None,
    ) -> ApiResult[Any]:
        log = LogContext(logger, method=str(getattr(method, "value", method)).upper(), path=path)
        try:
            mode = _coerce_mode(mode)
            effective, request, content = _prepare(
                method, path, params, config, multipart, self._defaults, self._environ
            )
            http_request = _build_http_request(self._http, effective, request, content)
        except MistralError as exc:
            log.warning("Request not sent", error=exc.detail, kind=exc.kind)
            return Err(exc)

        log.debug("Dispatching request", mode=mode.value)
        try:
            response = await self._http.send(http_request, stream=mode is Mode.STREAM)
        except httpx.TransportError as exc:
            log.error("Request failed", error=str(exc))
            return Err(NetworkError(f"{request.method.value} {path} failed: {exc}"))
        except httpx.DecodingError as exc:
            log.warning("Response content could not be decoded", error=str(exc))
            return Err(DecodeError(f"Response content could not be decoded: {exc}"))

        if mode is Mode.SYNC:
            return _decode_body(response, log)

        if response.is_success:
            log.debug("Stream opened", status=response.status_code)
            return Ok(AsyncEventStream(response, context=log))
        try:
            await response.aread()
        except httpx.HTTPError as exc:
            log.error("Failed reading error body", error=str(exc))
            return Err(NetworkError(f"{request.method.value} {path} failed: {exc}"))
        finally:
            await response.aclose()
        return _status_error(response, log)

    # -- lifecycle --------------------------------------------------------

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
