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

"""Tests for request construction."""

import json

import httpx
import pytest

from mistral_client.exceptions import ConfigurationError
from mistral_client.models import EffectiveConfig, HttpMethod, MultipartBody, Part
from mistral_client.request import USER_AGENT, build_request


@pytest.fixture
def config():
    return EffectiveConfig(api_key="sk-test", base_url="https://api.test.local")


def _query(url: str) -> list:
    return httpx.URL(url).params.multi_items()


class TestUrl:
    def test_url_is_base_plus_path(self, config):
        request = build_request(config, "GET", "/v1/models")
        assert request.url == "https://api.test.local/v1/models"

    def test_trailing_slash_on_base_url(self):
        config = EffectiveConfig(api_key="k", base_url="https://api.test.local/")
        assert build_request(config, "GET", "/v1/models").url == "https://api.test.local/v1/models"

    def test_base_url_with_prefix(self):
        config = EffectiveConfig(api_key="k", base_url="http://proxy.local:8080/mistral")
        request = build_request(config, "GET", "/v1/models")
        assert request.url == "http://proxy.local:8080/mistral/v1/models"

    @pytest.mark.parametrize("path", ["", "v1/models"])
    def test_relative_path_rejected(self, config, path):
        with pytest.raises(ConfigurationError):
            build_request(config, "GET", path)

    @pytest.mark.parametrize(
        "base_url",
        ["", "api.mistral.ai", "ftp://api.mistral.ai", "https://", "https://api.test.local?x=1"],
    )
    def test_invalid_base_url_rejected(self, base_url):
        config = EffectiveConfig(api_key="k", base_url=base_url)
        with pytest.raises(ConfigurationError):
            build_request(config, "GET", "/v1/models")

    def test_empty_api_key_rejected(self):
        config = EffectiveConfig(api_key="", base_url="https://api.test.local")
        with pytest.raises(ConfigurationError):
            build_request(config, "GET", "/v1/models")

    def test_unknown_method_rejected(self, config):
        with pytest.raises(ConfigurationError):
            build_request(config, "TRACE", "/v1/models")


class TestQueryParams:
    def test_none_values_omitted(self, config):
        request = build_request(config, "GET", "/v1/libraries", {"foo": "bar", "baz": None})
        assert request.url == "https://api.test.local/v1/libraries?foo=bar"
        assert request.body is None
        assert request.content() is None

    def test_list_values_repeat_key(self, config):
        request = build_request(config, "GET", "/v1/agents", {"tag": ["a", "b"], "page": 2})
        assert _query(request.url) == [("tag", "a"), ("tag", "b"), ("page", "2")]

    def test_booleans_lowercase(self, config):
        request = build_request(config, "GET", "/v1/conversations", {"a": True, "b": False})
        assert _query(request.url) == [("a", "true"), ("b", "false")]

    def test_values_are_percent_encoded(self, config):
        request = build_request(config, "GET", "/v1/agents", {"q": "a b&c"})
        assert _query(request.url) == [("q", "a b&c")]
        assert "a b&c" not in request.url

    def test_empty_params_no_query(self, config):
        assert "?" not in build_request(config, "GET", "/v1/models", {}).url
        assert "?" not in build_request(config, "GET", "/v1/models", {"x": None}).url

    def test_delete_uses_query(self, config):
        request = build_request(config, HttpMethod.DELETE, "/v1/libraries/1", {"force": "true"})
        assert _query(request.url) == [("force", "true")]
        assert "Content-Type" not in request.headers

    def test_non_mapping_query_rejected(self, config):
        with pytest.raises(ConfigurationError):
            build_request(config, "GET", "/v1/models", ["a", "b"])


class TestJsonBody:
    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
    def test_params_become_json_body(self, config, method):
        params = {"model": "mistral-small-latest", "messages": [{"role": "user", "content": "hi"}]}
        request = build_request(config, method, "/v1/chat/completions", params)
        assert request.url == "https://api.test.local/v1/chat/completions"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content()) == params

    def test_none_params_send_empty_object(self, config):
        request = build_request(config, "POST", "/v1/libraries")
        assert request.content() == b"{}"

    def test_method_case_insensitive(self, config):
        assert build_request(config, "post", "/v1/libraries").method is HttpMethod.POST


class TestHeaders:
    def test_standard_headers(self, config):
        headers = build_request(config, "GET", "/v1/models").headers
        assert headers["Authorization"] == "Bearer sk-test"
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == USER_AGENT

    def test_extra_headers_added(self):
        config = EffectiveConfig(
            api_key="k",
            base_url="https://api.test.local",
            transport_options={"headers": {"X-Request-Id": "abc", "User-Agent": "mine/1.0"}},
        )
        headers = build_request(config, "GET", "/v1/models").headers
        assert headers["X-Request-Id"] == "abc"
        assert headers["User-Agent"] == "mine/1.0"

    def test_extra_headers_cannot_replace_protected(self):
        config = EffectiveConfig(
            api_key="k",
            base_url="https://api.test.local",
            transport_options={
                "headers": {"authorization": "Bearer other", "Content-Type": "text/plain"}
            },
        )
        headers = build_request(config, "POST", "/v1/libraries", {}).headers
        assert headers["Authorization"] == "Bearer k"
        assert headers["Content-Type"] == "application/json"
        assert "authorization" not in headers

    def test_non_mapping_headers_rejected(self):
        config = EffectiveConfig(
            api_key="k", base_url="https://api.test.local", transport_options={"headers": "x"}
        )
        with pytest.raises(ConfigurationError):
            build_request(config, "GET", "/v1/models")

    def test_non_ascii_api_key_rejected(self):
        config = EffectiveConfig(api_key="sk-été", base_url="https://api.test.local")
        with pytest.raises(ConfigurationError, match="Authorization") as excinfo:
            build_request(config, "GET", "/v1/models")
        assert "é" not in str(excinfo.value)

    @pytest.mark.parametrize("value", ["✓", "a\nb", "a\rb"])
    def test_unsendable_extra_header_rejected(self, value):
        config = EffectiveConfig(
            api_key="k",
            base_url="https://api.test.local",
            transport_options={"headers": {"X-Tag": value}},
        )
        with pytest.raises(ConfigurationError, match="X-Tag"):
            build_request(config, "GET", "/v1/models")


class TestMultipart:
    @pytest.fixture
    def body(self):
        return MultipartBody(
            boundary="b0undary",
            parts=(Part(name="file", filename="a.txt", content=b"hello"),),
        )

    def test_multipart_body_and_content_type(self, config, body):
        request = build_request(config, "POST", "/v1/libraries/1/documents", multipart=body)
        assert request.headers["Content-Type"] == "multipart/form-data; boundary=b0undary"
        assert request.content() == body.to_bytes()

    def test_multipart_requires_post(self, config, body):
        with pytest.raises(ConfigurationError):
            build_request(config, "PUT", "/v1/libraries/1/documents", multipart=body)
