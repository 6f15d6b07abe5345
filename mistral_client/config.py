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
Mistral client configuration.

Two layers live here:

1. Process-wide defaults (:class:`ClientDefaults`), loaded once at startup from
   constructor values, ``MISTRAL_CLIENT_*`` environment variables (``__`` as
   nested separator) and an optional YAML file, then frozen.
2. Per-call resolution (:func:`resolve`), which merges explicit call-site
   options over those defaults and the ``MISTRAL_API_KEY`` credential into an
   immutable :class:`~mistral_client.models.EffectiveConfig`.

Resolution priority (highest to lowest):
1. Explicit per-call options (``api_key``, ``base_url``, ``http_options``)
2. Process-wide defaults
3. ``MISTRAL_API_KEY`` environment variable (credential only)
4. Built-in default base URL
"""
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Type, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .exceptions import ConfigurationError
from .models import DEFAULT_BASE_URL, EffectiveConfig, ReadOnlyOptions

API_KEY_ENV = "MISTRAL_API_KEY"
CONFIG_PATH_ENV = "MISTRAL_CLIENT_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "mistral_client.yaml"

EXPLICIT_KEYS = frozenset({"api_key", "base_url", "http_options"})


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in allowed:
            raise ValueError(f"level must be one of {allowed}, got '{v}'")
        return v.upper()


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from a YAML file."""

    def __init__(self, settings_cls: Type[BaseSettings], yaml_file: Optional[Path] = None):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._yaml_data: Optional[dict] = None

    def _load_yaml(self) -> dict:
        if self._yaml_data is not None:
            return self._yaml_data

        if self.yaml_file and self.yaml_file.exists():
            self._yaml_data = load_yaml_config(self.yaml_file)
        else:
            self._yaml_data = {}

        return self._yaml_data

    def get_field_value(
        self, field: Any, field_name: str
    ) -> Tuple[Any, str, bool]:
        yaml_data = self._load_yaml()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, field_value is not None

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml()


class CredentialFreeEnvSource(EnvSettingsSource):
    """MISTRAL_CLIENT_* variables, minus the API key.

    MISTRAL_API_KEY is the only environment credential; it is read per call
    by resolve().
    """

    def __call__(self) -> dict[str, Any]:
        data = super().__call__()
        data.pop("api_key", None)
        return data


# YAML file consulted by the next ClientDefaults() construction
_yaml_config_path: Optional[Path] = None


class ClientDefaults(BaseSettings):
    """
    Process-wide defaults, set once at startup and read-only afterwards.

    Loaded from:
    1. Values passed to the constructor
    2. Environment variables with MISTRAL_CLIENT_ prefix
       (e.g. MISTRAL_CLIENT_BASE_URL, MISTRAL_CLIENT_LOGGING__LEVEL);
       api_key is never taken from here
    3. YAML configuration file (if provided)
    4. Default values defined in this model
    """
    model_config = SettingsConfigDict(
        env_prefix="MISTRAL_CLIENT_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    api_key: Optional[str] = Field(default=None, repr=False)
    base_url: Optional[str] = None
    http_options: ReadOnlyOptions = Field(default_factory=dict, validate_default=True)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        yaml_source = YamlConfigSettingsSource(settings_cls, _yaml_config_path)
        return (init_settings, CredentialFreeEnvSource(settings_cls), yaml_source)


def load_yaml_config(path: Union[str, Path]) -> dict:
    """
    Read a defaults file. An empty file yields no values.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If the file contains invalid YAML.
        ConfigurationError: If the top level is not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_defaults(path: Optional[Union[str, Path]] = None, **values: Any) -> ClientDefaults:
    """
    Build a ClientDefaults from constructor values, the environment and an
    optional YAML file.
    """
    global _yaml_config_path

    _yaml_config_path = Path(path) if path else None
    try:
        return ClientDefaults(**values)
    finally:
        _yaml_config_path = None


# Global defaults singleton
_defaults: Optional[ClientDefaults] = None


def configure(
    defaults: Optional[ClientDefaults] = None,
    *,
    path: Optional[Union[str, Path]] = None,
    **values: Any,
) -> ClientDefaults:
    """
    Install the process-wide defaults. Call once at startup.

    Either pass a ready ClientDefaults, or values (and optionally a YAML path)
    to build one.
    """
    global _defaults

    if defaults is None:
        defaults = load_defaults(path, **values)
    _defaults = defaults
    return _defaults


def get_defaults() -> ClientDefaults:
    """
    Get the process-wide defaults.

    On first call without a prior configure(), loads from:
    1. Path specified in MISTRAL_CLIENT_CONFIG_PATH
    2. ./mistral_client.yaml if it exists
    3. Environment and default values only
    """
    global _defaults

    if _defaults is None:
        config_path = os.getenv(CONFIG_PATH_ENV)

        if config_path:
            _defaults = load_defaults(config_path)
        elif Path(DEFAULT_CONFIG_FILE).exists():
            _defaults = load_defaults(DEFAULT_CONFIG_FILE)
        else:
            _defaults = load_defaults()

    return _defaults


def reset_defaults() -> None:
    """
    Reset the process-wide defaults.

    Primarily used for testing to ensure a clean state between tests.
    """
    global _defaults, _yaml_config_path
    _defaults = None
    _yaml_config_path = None


# ── Per-call resolution ─────────────────────────────────────────────────────


def resolve(
    explicit: Optional[Union[Mapping[str, Any], EffectiveConfig]] = None,
    defaults: Optional[ClientDefaults] = None,
    environ: Optional[Mapping[str, str]] = None,
    require_auth: bool = True,
) -> EffectiveConfig:
    """
    Merge explicit options, defaults and the environment credential.

    Args:
        explicit: Per-call options. An EffectiveConfig is returned as is.
        defaults: Process-wide defaults. When omitted, the defaults installed
            with configure() are used if any, otherwise the built-in values.
            Nothing is loaded from the environment or disk here.
        environ: Environment mapping; only MISTRAL_API_KEY is read from it.
            os.environ when omitted.
        require_auth: Fail when no API key is found at any level.

    Raises:
        ConfigurationError: On unknown option keys, a non-mapping
            http_options, or a missing API key.
    """
    if isinstance(explicit, EffectiveConfig):
        return explicit

    explicit = dict(explicit or {})
    unknown = set(explicit) - EXPLICIT_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration option(s): {', '.join(sorted(unknown))}"
        )

    if defaults is None:
        defaults = _defaults if _defaults is not None else ClientDefaults.model_construct()
    if environ is None:
        environ = os.environ

    api_key = _first(explicit.get("api_key"), defaults.api_key, environ.get(API_KEY_ENV))
    if api_key is None:
        if require_auth:
            raise ConfigurationError(
                f"No API key configured; pass api_key, configure defaults or set {API_KEY_ENV}"
            )
        api_key = ""

    base_url = _first(explicit.get("base_url"), defaults.base_url, DEFAULT_BASE_URL)

    http_options = explicit.get("http_options") or {}
    if not isinstance(http_options, Mapping):
        raise ConfigurationError("http_options must be a mapping")

    return EffectiveConfig(
        api_key=api_key,
        base_url=base_url,
        transport_options={**defaults.http_options, **http_options},
    )


def merge_options(
    base: Optional[Mapping[str, Any]],
    override: Optional[Union[Mapping[str, Any], EffectiveConfig]],
) -> Union[dict[str, Any], EffectiveConfig]:
    """
    Layer per-call options over client-level options before resolution.

    http_options are merged shallowly; an EffectiveConfig override wins outright.
    """
    if isinstance(override, EffectiveConfig):
        return override
    merged = dict(base or {})
    for key, value in (override or {}).items():
        if key == "http_options" and isinstance(value, Mapping):
            merged[key] = {**(merged.get(key) or {}), **value}
        else:
            merged[key] = value
    return merged


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None
