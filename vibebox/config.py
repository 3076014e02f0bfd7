"""TOML-based provider configuration.

Loads ~/.vibebox/defaults.toml (global) and vibebox.toml (project),
merges them, and resolves named provider entries into ProviderConfig
instances ready for ``ProviderFactory.create``.

Example vibebox.toml:

    [providers.cmcc]
    type = "chinamobile"
    region = "cn-jiangsu-1a"

    [providers.cmcc.options]
    network_id = "net-123"

Credentials may be set inline (``access_key_id``/``access_key_secret``) or
through ``<TYPE>_ACCESS_KEY_ID`` / ``<TYPE>_ACCESS_KEY_SECRET`` environment
variables, e.g. CHINAMOBILE_ACCESS_KEY_ID.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from vibebox.api.provider import Credentials, ProviderConfig
from vibebox.core.exceptions import ConfigurationError

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".vibebox" / "defaults.toml"
PROJECT_CONFIG_NAME = "vibebox.toml"

_KNOWN_KEYS = frozenset(
    {"type", "region", "endpoint", "access_key_id", "access_key_secret", "options"}
)


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("providers", {})
    return merged


def _env_credentials(provider_type: str, env: Mapping[str, str]) -> tuple[str, str]:
    prefix = provider_type.upper().replace("-", "_")
    return (
        env.get(f"{prefix}_ACCESS_KEY_ID", ""),
        env.get(f"{prefix}_ACCESS_KEY_SECRET", ""),
    )


def build_provider_config(
    name: str,
    raw: RawConfig,
    *,
    env: Mapping[str, str] | None = None,
) -> ProviderConfig:
    """Turn one ``[providers.<name>]`` table into a ProviderConfig.

    Raises:
        ConfigurationError: Missing ``type``, unknown keys, or non-table options.
    """
    raw = dict(raw)
    provider_type = raw.get("type")
    if not provider_type:
        raise ConfigurationError(f"Provider '{name}' missing 'type' field")

    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        raise ConfigurationError(
            f"Provider '{name}' has unknown keys: {', '.join(unknown)}. "
            f"Valid: {', '.join(sorted(_KNOWN_KEYS))}"
        )

    options = raw.get("options", {})
    if not isinstance(options, dict):
        raise ConfigurationError(f"Provider '{name}' options must be a table")

    env_id, env_secret = _env_credentials(provider_type, os.environ if env is None else env)
    return ProviderConfig(
        type=provider_type,
        credentials=Credentials(
            access_key_id=raw.get("access_key_id") or env_id,
            access_key_secret=raw.get("access_key_secret") or env_secret,
        ),
        region=raw.get("region"),
        endpoint=raw.get("endpoint"),
        options=options,
    )


def load_provider_config(
    name: str,
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ProviderConfig:
    config = load_config(project_dir=project_dir, global_path=global_path)

    providers = config["providers"]
    if name not in providers:
        raise KeyError(
            f"Provider '{name}' not found. Available: {', '.join(providers) or 'none'}"
        )

    return build_provider_config(name, providers[name], env=env)
