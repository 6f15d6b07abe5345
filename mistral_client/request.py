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

"""Turns a resolved configuration plus method/path/params into an OutgoingRequest."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from . import __version__
from .exceptions import ConfigurationError
from .models import EffectiveConfig, HttpMethod, MultipartBody, OutgoingRequest

USER_AGENT = f"mistral-client-python/{__version__}"

# Headers that transport_options["headers"] may not replace
_PROTECTED_HEADERS = frozenset({"authorization", "content-type"})


def build_request(
    config: EffectiveConfig,
    method: Union[HttpMethod, str],
    path: str,
    params: Any = None,
    multipart: Optional[MultipartBody] = None,
) -> OutgoingRequest:
    """Build the request for one API call.

    GET and DELETE carry ``params`` in the query string; ``None`` values are
    dropped and list values repeat the key. POST, PUT and PATCH carry them as
    a JSON body, unless ``multipart`` is given (POST only).

    Raises:
        ConfigurationError: On an empty API key, an invalid base URL, a path
            that is empty or not absolute, multipart on a non-POST method, or
            a header that cannot be sent (non-ASCII or containing a line break).
    """
    method = _coerce_method(method)

    if not config.api_key:
        raise ConfigurationError("API key is empty")
    if not path or not path.startswith("/"):
        raise ConfigurationError(f"Request path must start with '/', got {path!r}")
    base_url = _validate_base_url(config.base_url)
    url = base_url + path

    headers: dict[str, str] = {
        "Authorization": f"Bearer {config.api_key}",
        "Accept": "application/json",
    }
    body: Any = None

    if multipart is not None:
        if method is not HttpMethod.POST:
            raise ConfigurationError(f"Multipart bodies require POST, got {method.value}")
        headers["Content-Type"] = multipart.content_type
        body = multipart
    elif method.has_body:
        headers["Content-Type"] = "application/json"
        body = _json_body(params)
    else:
        url = _with_query(url, params)

    headers["User-Agent"] = USER_AGENT
    _merge_extra_headers(headers, config.transport_options.get("headers"))
    _check_header_values(headers)

    return OutgoingRequest(method=method, url=url, headers=headers, body=body)


def _coerce_method(method: Union[HttpMethod, str]) -> HttpMethod:
    try:
        return HttpMethod(method.upper() if isinstance(method, str) else method)
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported HTTP method: {method!r}") from exc


def _validate_base_url(base_url: Any) -> str:
    if not isinstance(base_url, str) or not base_url:
        raise ConfigurationError(f"Invalid base URL: {base_url!r}")
    try:
        parsed = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"Invalid base URL {base_url!r}: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(f"Base URL must be an absolute http(s) URL, got {base_url!r}")
    if parsed.query or parsed.fragment:
        raise ConfigurationError(f"Base URL may not carry a query or fragment: {base_url!r}")
    return base_url.rstrip("/")


def _json_body(params: Any) -> Any:
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    return params


def _query_pairs(params: Mapping[str, Any]) -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, item) for item in value if item is not None)
        else:
            pairs.append((key, value))
    return pairs


def _with_query(url: str, params: Any) -> str:
    if not params:
        return url
    if not isinstance(params, Mapping):
        raise ConfigurationError("Query parameters must be a mapping")
    pairs = _query_pairs(params)
    if not pairs:
        return url
    return str(httpx.URL(url, params=pairs))


def _merge_extra_headers(headers: dict[str, str], extra: Any) -> None:
    if not extra:
        return
    if not isinstance(extra, Mapping):
        raise ConfigurationError("http_options['headers'] must be a mapping")
    for name, value in extra.items():
        if name.lower() in _PROTECTED_HEADERS:
            continue
        existing = next((k for k in headers if k.lower() == name.lower()), None)
        if existing is not None:
            del headers[existing]
        headers[name] = str(value)


def _check_header_values(headers: Mapping[str, str]) -> None:
    for name, value in headers.items():
        if "\r" in value or "\n" in value:
            raise ConfigurationError(f"Header {name!r} contains a line break")
        try:
            name.encode("ascii")
            value.encode("ascii")
        except UnicodeEncodeError as exc:
            # Never echo the value, it may be the API key
            raise ConfigurationError(f"Header {name!r} is not ASCII: {exc.reason}") from exc
