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

"""Documents inside a library (``client.documents``)."""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional, Union

from ..models import MultipartSpec
from ..result import ApiResult
from ._base import AsyncResource, SyncResource, merge_params, segment
from .libraries import library_path

UPLOAD_FIELD = "file"


def documents_path(library_id: str) -> str:
    return f"{library_path(library_id)}/documents"


def document_path(library_id: str, document_id: str) -> str:
    return f"{documents_path(library_id)}/{segment(document_id)}"


def document_text_content_path(library_id: str, document_id: str) -> str:
    return f"{document_path(library_id, document_id)}/text_content"


def _upload(
    file_path: Union[str, os.PathLike],
    filename: Optional[str],
    params: Mapping[str, Any],
) -> MultipartSpec:
    return MultipartSpec(
        file_path=os.fspath(file_path),
        field_name=UPLOAD_FIELD,
        filename=filename,
        extra_params=dict(params),
    )


class Documents(SyncResource):
    """Synchronous documents resource."""

    def list(
        self,
        library_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return self._client._request(
            "GET", documents_path(library_id), merge_params(params, kwargs), config=config
        )

    def get(
        self,
        library_id: str,
        document_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return self._client._request(
            "GET",
            document_path(library_id, document_id),
            merge_params(params, kwargs),
            config=config,
        )

    def create(
        self,
        library_id: str,
        file_path: Union[str, os.PathLike],
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        filename: Optional[str] = None,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        """Upload a file as a new document.

        Args:
            library_id: Target library.
            file_path: File to upload.
            params: Extra form fields; keyword arguments are merged over it.
            filename: Name to report instead of the file's basename, e.g. the
                original name of a file saved under a temporary path.
            config: Per-call options.

        Returns:
            ``Ok(document)``, or ``Err(FileAccessError)`` when the file cannot
            be read.
        """
        return self._client._request(
            "POST",
            documents_path(library_id),
            config=config,
            multipart=_upload(file_path, filename, merge_params(params, kwargs)),
        )

    def delete(self, library_id: str, document_id: str, *, config=None) -> ApiResult[Any]:
        return self._client._request(
            "DELETE", document_path(library_id, document_id), config=config
        )

    def text_content(self, library_id: str, document_id: str, *, config=None) -> ApiResult[Any]:
        """Fetch the extracted text of a document, as ``{"content": ...}``."""
        return self._client._request(
            "GET", document_text_content_path(library_id, document_id), config=config
        )


class AsyncDocuments(AsyncResource):
    """Async documents resource."""

    async def list(
        self,
        library_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", documents_path(library_id), merge_params(params, kwargs), config=config
        )

    async def get(
        self,
        library_id: str,
        document_id: str,
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET",
            document_path(library_id, document_id),
            merge_params(params, kwargs),
            config=config,
        )

    async def create(
        self,
        library_id: str,
        file_path: Union[str, os.PathLike],
        params: Optional[Mapping[str, Any]] = None,
        /,
        *,
        filename: Optional[str] = None,
        config=None,
        **kwargs: Any,
    ) -> ApiResult[Any]:
        return await self._client._request(
            "POST",
            documents_path(library_id),
            config=config,
            multipart=_upload(file_path, filename, merge_params(params, kwargs)),
        )

    async def delete(self, library_id: str, document_id: str, *, config=None) -> ApiResult[Any]:
        return await self._client._request(
            "DELETE", document_path(library_id, document_id), config=config
        )

    async def text_content(
        self, library_id: str, document_id: str, *, config=None
    ) -> ApiResult[Any]:
        return await self._client._request(
            "GET", document_text_content_path(library_id, document_id), config=config
        )
