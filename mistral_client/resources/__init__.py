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

"""Per-resource API namespaces, attached to the clients as attributes."""

from .agents import Agents, AsyncAgents
from .chat import AsyncChat, Chat
from .conversations import AsyncConversations, Conversations
from .documents import AsyncDocuments, Documents
from .embeddings import AsyncEmbeddings, Embeddings
from .libraries import AsyncLibraries, Libraries
from .models import AsyncModels, Models

__all__ = [
    "Agents",
    "AsyncAgents",
    "Chat",
    "AsyncChat",
    "Conversations",
    "AsyncConversations",
    "Documents",
    "AsyncDocuments",
    "Embeddings",
    "AsyncEmbeddings",
    "Libraries",
    "AsyncLibraries",
    "Models",
    "AsyncModels",
]
