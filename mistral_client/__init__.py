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

"""Mistral API Python client.

Usage::

    from mistral_client import MistralClient, AsyncMistralClient

    # Synchronous
    client = MistralClient(api_key="...")
    result = client.chat.complete(
        model="mistral-small-latest",
        messages=[{"role": "user", "content": "Hello!"}],
    )
    print(result.unwrap()["choices"][0]["message"]["content"])

    # Streaming
    with client.chat.stream(model="mistral-small-latest", messages=msgs).unwrap() as stream:
        for payload in stream.payloads():
            print(payload["choices"][0]["delta"].get("content", ""), end="")
    client.close()

    # Asynchronous
    async with AsyncMistralClient(api_key="...") as client:
        result = await client.libraries.list()
"""

__version__ = "0.1.0"

from .client import AsyncMistralClient, MistralClient
from .config import ClientDefaults, configure, get_defaults, reset_defaults, resolve
from .dispatcher import AsyncDispatcher, Dispatcher
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    FileAccessError,
    HTTPStatusError,
    MistralError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from .logging_config import setup_logging
from .models import (
    EffectiveConfig,
    HttpMethod,
    Mode,
    MultipartBody,
    MultipartSpec,
    OutgoingRequest,
    Part,
    RateLimitInfo,
    StreamEvent,
)
from .multipart import encode_file
from .request import build_request
from .result import ApiResult, Err, Ok
from .retry import AsyncRetryingDispatcher, RetryingDispatcher
from .streaming import AsyncEventStream, EventStream, StreamDecoder

__all__ = [
    # Clients
    "MistralClient",
    "AsyncMistralClient",
    # Core
    "Dispatcher",
    "AsyncDispatcher",
    "RetryingDispatcher",
    "AsyncRetryingDispatcher",
    "build_request",
    "encode_file",
    "StreamDecoder",
    "EventStream",
    "AsyncEventStream",
    # Configuration
    "ClientDefaults",
    "configure",
    "get_defaults",
    "reset_defaults",
    "resolve",
    "setup_logging",
    # Values
    "ApiResult",
    "Ok",
    "Err",
    "EffectiveConfig",
    "HttpMethod",
    "Mode",
    "MultipartBody",
    "MultipartSpec",
    "OutgoingRequest",
    "Part",
    "RateLimitInfo",
    "StreamEvent",
    # Exceptions
    "MistralError",
    "ConfigurationError",
    "NetworkError",
    "HTTPStatusError",
    "AuthenticationError",
    "RateLimitError",
    "ServerError",
    "DecodeError",
    "FileAccessError",
    "EncodeError",
]
