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

"""Value types passed between the configuration, request and transport layers."""

from __future__ import annotations

import json
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


DEFAULT_BASE_URL = "https://api.mistral.ai"

# Option mappings held by frozen models are read-only views over a private copy
ReadOnlyOptions = Annotated[
    Mapping[str, Any],
    AfterValidator(lambda value: MappingProxyType(dict(value))),
    PlainSerializer(dict),
]


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def has_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


class Mode(str, Enum):
    """How the dispatcher consumes the response."""

    SYNC = "sync"
    STREAM = "stream"


# ── Configuration ───────────────────────────────────────────────────────────


class EffectiveConfig(BaseModel):
    """Fully resolved settings for one call."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    transport_options: ReadOnlyOptions = Field(default_factory=dict, validate_default=True)


# ── Requests ────────────────────────────────────────────────────────────────


class Part(BaseModel):
    """One section of a multipart/form-data body."""

    model_config = ConfigDict(frozen=True)

    name: str
    filename: Optional[str] = None
    content_type: str = "text/plain"
    content: bytes = b""

    def header_bytes(self) -> bytes:
        disposition = f'form-data; name="{_quote(self.name)}"'
        if self.filename is not None:
            disposition += f'; filename="{_quote(self.filename)}"'
        return (
            f"Content-Disposition: {disposition}\r\n"
            f"Content-Type: {self.content_type}\r\n\r\n"
        ).encode("utf-8")


class MultipartBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    boundary: str
    parts: tuple[Part, ...]

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def to_bytes(self) -> bytes:
        delimiter = f"--{self.boundary}\r\n".encode("ascii")
        chunks = []
        for part in self.parts:
            chunks.append(delimiter)
            chunks.append(part.header_bytes())
            chunks.append(part.content)
            chunks.append(b"\r\n")
        chunks.append(f"--{self.boundary}--\r\n".encode("ascii"))
        return b"".join(chunks)


class MultipartSpec(BaseModel):
    """What to upload: a file on disk plus plain form fields."""

    file_path: str
    field_name: str = "file"
    filename: Optional[str] = None
    extra_params: dict[str, Any] = Field(default_factory=dict)


class OutgoingRequest(BaseModel):
    """A fully specified HTTP request, ready for the transport."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    def content(self) -> Optional[bytes]:
        """Serialise the body for the wire."""
        if self.body is None:
            return None
        if isinstance(self.body, MultipartBody):
            return self.body.to_bytes()
        if isinstance(self.body, (bytes, bytearray)):
            return bytes(self.body)
        return json.dumps(self.body, separators=(",", ":")).encode("utf-8")


# ── Responses ───────────────────────────────────────────────────────────────


class StreamEvent(BaseModel):
    """One decoded frame of a streamed completion."""

    model_config = ConfigDict(frozen=True)

    payload: Any


class RateLimitInfo(BaseModel):
    """Rate limit information extracted from response headers."""
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[float] = None
    retry_after: Optional[float] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo":
        lowered = {k.lower(): v for k, v in headers.items()}

        def _num(key: str, cast):
            v = lowered.get(key)
            if v is None:
                return None
            try:
                return cast(v)
            except ValueError:
                return None

        return cls(
            limit=_num("x-ratelimit-limit", int),
            remaining=_num("x-ratelimit-remaining", int),
            reset=_num("x-ratelimit-reset", float),
            retry_after=_num("retry-after", float),
        )


def _quote(value: str) -> str:
    return value.replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")
