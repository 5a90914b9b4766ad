"""Cluster settings resolved from defaults, a TOML file, the environment and overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from hellochain.constants import CLUSTER_URLS, COUNTER_ACCOUNT_SPACE, DEFAULT_SEED, Commitment

# Load environment variables from .env file
load_dotenv()

CONFIG_FILE_ENV = "HELLOCHAIN_CONFIG_FILE"
DEFAULT_CONFIG_FILE = ".hellochain.toml"
DEFAULT_PAYER_KEYPAIR = str(Path("~/.config/solana/id.json").expanduser())
DEFAULT_PROGRAM_KEYPAIR = "dist/program/helloworld-keypair.json"

ENV_KEYS = {
    "rpc_url": "HELLOCHAIN_RPC_URL",
    "commitment": "HELLOCHAIN_COMMITMENT",
    "payer_keypair": "HELLOCHAIN_PAYER_KEYPAIR",
    "program_id": "HELLOCHAIN_PROGRAM_ID",
    "program_keypair": "HELLOCHAIN_PROGRAM_KEYPAIR",
    "seed": "HELLOCHAIN_SEED",
    "account_space": "HELLOCHAIN_ACCOUNT_SPACE",
    "request_timeout": "HELLOCHAIN_REQUEST_TIMEOUT",
    "confirm_attempts": "HELLOCHAIN_CONFIRM_ATTEMPTS",
    "confirm_interval": "HELLOCHAIN_CONFIRM_INTERVAL",
    "airdrop": "HELLOCHAIN_AIRDROP",
}

_INT_KEYS = {"account_space", "confirm_attempts"}
_FLOAT_KEYS = {"request_timeout", "confirm_interval"}
_BOOL_KEYS = {"airdrop"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class ClusterSettings:
    """Everything the program client needs to reach the cluster and the program."""

    rpc_url: str = CLUSTER_URLS["localhost"]
    commitment: str = Commitment.CONFIRMED.value
    payer_keypair: str = DEFAULT_PAYER_KEYPAIR
    program_id: str | None = None
    program_keypair: str = DEFAULT_PROGRAM_KEYPAIR
    seed: str = DEFAULT_SEED
    account_space: int = COUNTER_ACCOUNT_SPACE
    request_timeout: float = 30.0
    confirm_attempts: int = 30
    confirm_interval: float = 1.0
    airdrop: bool = True

    @property
    def commitment_level(self) -> Commitment:
        """Return the commitment as an enum member."""
        return Commitment(self.commitment)


def resolve_rpc_url(value: str) -> str:
    """Map cluster monikers such as ``devnet`` to their endpoint URL."""
    return CLUSTER_URLS.get(value, value)


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw file or environment value to the field's type."""
    if value is None:
        return None
    if key in _INT_KEYS:
        return int(value)
    if key in _FLOAT_KEYS:
        return float(value)
    if key in _BOOL_KEYS:
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean value for {key}: {value!r}")
    return str(value)


def _read_config_file(path: str | os.PathLike[str] | None) -> dict[str, Any]:
    """Return the ``[cluster]`` table of a TOML file, or an empty dict when absent."""
    if path is None:
        return {}
    config_path = Path(path)
    if not config_path.is_file():
        return {}

    with config_path.open("rb") as handle:
        data = tomllib.load(handle)

    cluster = data.get("cluster", {})
    if not isinstance(cluster, dict):
        raise ValueError(f"[cluster] section must be a table in {config_path}")
    return cluster


def _default_config_path(environ: Mapping[str, str]) -> str | None:
    """Pick the config file named in the environment, else ``.hellochain.toml`` in the cwd."""
    configured = environ.get(CONFIG_FILE_ENV)
    if configured:
        return configured
    candidate = Path.cwd() / DEFAULT_CONFIG_FILE
    return str(candidate) if candidate.is_file() else None


def load_cluster_settings(
    *,
    environ: Mapping[str, str] | None = None,
    config_file: str | os.PathLike[str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ClusterSettings:
    """
    Resolve cluster settings with precedence overrides > environment > file > defaults.

    Parameters:
        environ: Environment mapping, defaults to ``os.environ``.
        config_file: Explicit TOML path. When omitted, ``HELLOCHAIN_CONFIG_FILE`` or
            ``.hellochain.toml`` in the current directory is used if present.
        overrides: Explicit values, typically from CLI options. ``None`` values are ignored.

    Returns:
        ClusterSettings: The merged settings.

    Raises:
        ValueError: On unknown override keys, malformed files or unparsable values.
    """
    env = os.environ if environ is None else environ
    known_keys = {field.name for field in fields(ClusterSettings)}

    merged: dict[str, Any] = {}
    path = config_file if config_file is not None else _default_config_path(env)
    for key, value in _read_config_file(path).items():
        if key not in known_keys:
            raise ValueError(f"Unsupported [cluster] key: {key}")
        merged[key] = _coerce(key, value)

    for key, env_name in ENV_KEYS.items():
        env_value = env.get(env_name)
        if env_value:
            merged[key] = _coerce(key, env_value)

    for key, value in (overrides or {}).items():
        if key not in known_keys:
            raise ValueError(f"Unsupported cluster override key: {key}")
        if value is not None:
            merged[key] = _coerce(key, value)

    if "rpc_url" in merged:
        merged["rpc_url"] = resolve_rpc_url(merged["rpc_url"])
    if "commitment" in merged and merged["commitment"] not in {c.value for c in Commitment}:
        raise ValueError(f"Unsupported commitment: {merged['commitment']}")

    return replace(ClusterSettings(), **merged)
