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

"""Error taxonomy for the Mistral client.

Every failure the dispatcher can report is one of these classes. Inside the
library they are raised like any other exception; the dispatcher catches them
at its boundary and hands them back wrapped in :class:`~mistral_client.result.Err`.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from .models import RateLimitInfo


class MistralError(Exception):
    """Base exception for all Mistral client errors."""

    kind: str = "error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(MistralError):
    """Missing or invalid credential, base URL, path or option."""

    kind = "configuration"


class NetworkError(MistralError):
    """Connection, timeout or TLS failure, or a stream cut off mid-way."""

    kind = "network"


class DecodeError(MistralError):
    """A response body or stream frame is not valid JSON, or a stream ended mid-frame."""

    kind = "decode"


class FileAccessError(MistralError):
    """The upload source file could not be opened or read."""

    kind = "file_access"

    def __init__(self, detail: str, path: Optional[str] = None):
        self.path = path
        super().__init__(detail)


class EncodeError(MistralError):
    """No collision-free multipart boundary could be generated."""

    kind = "encode"


class HTTPStatusError(MistralError):
    """The server answered with a non-success status.

    Attributes:
        status_code: HTTP status code.
        body: Decoded JSON body when the body parses, otherwise the raw text.
        text: Raw response body.
        headers: Response headers.
        rate_limit: Rate-limit metadata parsed from the headers.
    """

    kind = "http_status"

    def __init__(
        self,
        status_code: int,
        body: Any = None,
        *,
        text: str = "",
        headers: Optional[Mapping[str, str]] = None,
        detail: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        self.text = text
        self.headers = dict(headers or {})
        self.rate_limit = RateLimitInfo.from_headers(self.headers)
        super().__init__(detail or _describe(status_code, body, text))

    @classmethod
    def from_response(
        cls,
        status_code: int,
        text: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "HTTPStatusError":
        """Build the most specific error class for a status code."""
        try:
            body: Any = json.loads(text) if text else None
        except ValueError:
            body = text

        if status_code == 401:
            error_cls: type[HTTPStatusError] = AuthenticationError
        elif status_code == 429:
            error_cls = RateLimitError
        elif status_code >= 500:
            error_cls = ServerError
        else:
            error_cls = HTTPStatusError
        return error_cls(status_code, body, text=text, headers=headers)


class AuthenticationError(HTTPStatusError):
    """Raised when authentication fails (HTTP 401)."""


class RateLimitError(HTTPStatusError):
    """Raised when rate limit is exceeded (HTTP 429).

    Attributes:
        retry_after: Seconds to wait before retrying.
    """

    @property
    def retry_after(self) -> Optional[float]:
        return self.rate_limit.retry_after


class ServerError(HTTPStatusError):
    """Raised on server-side errors (HTTP 5xx)."""


def _describe(status_code: int, body: Any, text: str) -> str:
    message = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail") or body.get("error")
    if not message:
        message = text or "no response body"
    return f"HTTP {status_code}: {message}"
