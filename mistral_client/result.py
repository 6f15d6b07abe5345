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

"""Success/failure values returned by every public operation.

Usage::

    result = client.libraries.list()
    if result.ok:
        print(result.value["data"])
    else:
        print(result.error.kind, result.error.detail)

    # or, to get exceptions instead
    libraries = client.libraries.list().unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .exceptions import MistralError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    ok = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: MistralError

    ok = False

    @property
    def kind(self) -> str:
        return self.error.kind

    def unwrap(self) -> Any:
        """Raise the carried error."""
        raise self.error


ApiResult = Union[Ok[T], Err]
