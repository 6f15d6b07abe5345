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

"""multipart/form-data encoding for document uploads."""

from __future__ import annotations

import json
import mimetypes
import os
import uuid
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from .exceptions import EncodeError, FileAccessError
from .logging_config import get_logger
from .models import MultipartBody, MultipartSpec, Part

logger = get_logger("mistral_client.multipart")

MAX_BOUNDARY_ATTEMPTS = 5
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def generate_boundary() -> str:
    return f"----MistralFormBoundary{uuid.uuid4().hex}"


def encode_file(
    file_path: Union[str, os.PathLike],
    field_name: str = "file",
    filename: Optional[str] = None,
    extra_params: Optional[Mapping[str, Any]] = None,
    boundary_factory: Callable[[], str] = generate_boundary,
) -> MultipartBody:
    """Encode a file and plain form fields as a multipart body.

    Args:
        file_path: File to upload; read fully into memory.
        field_name: Form field the file is sent under.
        filename: Name reported to the server; the file's basename if omitted.
        extra_params: Additional text fields. ``None`` values are skipped,
            strings are sent verbatim and anything else as JSON.
        boundary_factory: Source of candidate boundaries.

    Raises:
        FileAccessError: The file cannot be opened or read.
        EncodeError: Every candidate boundary occurred inside the content.
    """
    path = Path(file_path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise FileAccessError(
            f"Cannot read upload file {str(path)!r}: {exc.strerror or exc}",
            path=str(path),
        ) from exc

    name = filename or path.name
    content_type = mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE

    parts = [Part(name=field_name, filename=name, content_type=content_type, content=content)]
    for key, value in (extra_params or {}).items():
        if value is None:
            continue
        parts.append(Part(name=key, content_type="text/plain", content=_field_bytes(value)))

    for _ in range(MAX_BOUNDARY_ATTEMPTS):
        boundary = boundary_factory()
        marker = boundary.encode("ascii")
        if not any(marker in part.content for part in parts):
            return MultipartBody(boundary=boundary, parts=tuple(parts))
        logger.debug("Multipart boundary collided with content, regenerating")

    raise EncodeError(
        f"Could not find a multipart boundary absent from the content "
        f"after {MAX_BOUNDARY_ATTEMPTS} attempts"
    )


def encode_spec(spec: MultipartSpec, **kwargs: Any) -> MultipartBody:
    return encode_file(
        spec.file_path,
        field_name=spec.field_name,
        filename=spec.filename,
        extra_params=spec.extra_params,
        **kwargs,
    )


def _field_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return json.dumps(value).encode("utf-8")
