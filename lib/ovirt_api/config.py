from __future__ import annotations

import os
import tomllib
from typing import Any

from platformdirs import user_config_dir

from .config_types import AUTH_METHODS, ClientConfig
from .errors import ConfigError

APP_NAME = "ovirt-api"
CONFIG_FILENAME = "config.toml"
DEFAULT_API_PATH = "/ovirt-engine/api"

ENV_URL = "OVIRT_URL"
ENV_USERNAME = "OVIRT_USERNAME"
ENV_PASSWORD = "OVIRT_PASSWORD"
ENV_AUTH = "OVIRT_AUTH"
ENV_INSECURE = "OVIRT_INSECURE"

_TRUTHY = {"1", "true", "yes", "on"}


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def normalize_base_url(raw: str | None) -> str:
    """
    Turn a bare engine address into its API root.

    ``engine.example.com`` becomes ``https://engine.example.com/ovirt-engine/api``;
    an explicit scheme or path is kept as given.
    """
    value = (raw or "").strip().rstrip("/")
    if not value:
        return ""
    if "://" not in value:
        value = f"https://{value}"

    scheme, _, rest = value.partition("://")
    if "/" not in rest:
        value = f"{scheme}://{rest}{DEFAULT_API_PATH}"
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _read_toml(path: str) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid config file {path}: {e}") from e


def load_config(profile: str | None = None, *, path: str | None = None) -> ClientConfig:
    """
    Build a ClientConfig from the config file and the environment.

    Top-level keys of the file are defaults, ``[profiles.<name>]`` overrides
    them and ``OVIRT_*`` environment variables override both.
    """
    data = _read_toml(path or config_path())

    merged: dict[str, Any] = {k: v for k, v in data.items() if k != "profiles"}
    if profile:
        profiles_raw = data.get("profiles") or {}
        prof = profiles_raw.get(profile) if isinstance(profiles_raw, dict) else None
        if not isinstance(prof, dict):
            raise ConfigError(f"profile {profile!r} not found")
        merged.update(prof)

    env_map = {
        "base_url": ENV_URL,
        "username": ENV_USERNAME,
        "password": ENV_PASSWORD,
        "auth": ENV_AUTH,
        "insecure": ENV_INSECURE,
    }
    for key, env_name in env_map.items():
        env_value = os.getenv(env_name, "").strip()
        if env_value:
            merged[key] = env_value

    base_url = normalize_base_url(str(merged.get("base_url") or ""))
    if not base_url:
        raise ConfigError(f"engine URL is not configured (set base_url or {ENV_URL})")

    auth = str(merged.get("auth") or "token").strip().lower()
    if auth not in AUTH_METHODS:
        raise ConfigError(f"unknown auth method {auth!r}, expected one of {', '.join(AUTH_METHODS)}")

    retry = merged.get("retry_on_unauthorized")
    timeout_s = merged.get("timeout_s")
    try:
        timeout = float(timeout_s) if timeout_s is not None else 30.0
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid timeout_s: {timeout_s!r}") from e

    return ClientConfig(
        base_url=base_url,
        username=str(merged.get("username") or ""),
        password=str(merged.get("password") or ""),
        auth=auth,
        insecure=_as_bool(merged.get("insecure", False)),
        debug=_as_bool(merged.get("debug", False)),
        retry_on_unauthorized=_as_bool(retry) if retry is not None else None,
        timeout_s=timeout,
    )
