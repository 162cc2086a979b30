"""Configuration file loading for toolchain-config library."""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Union

from loguru import logger

from .constants import DEFAULT_COMPILERS
from .exceptions import ConfigNotFoundError, InvalidConfigError
from .types import CompilerSettings, NetworkProfile, ToolchainConfig

_NETWORK_FIELDS = (
    "url",
    "mnemonic_env",
    "address_index",
    "num_addresses",
    "network_id",
    "gas",
    "derivation_path",
)

_COMPILER_FIELDS = ("version",)


def _parse_network(name: str, data: Any) -> NetworkProfile:
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Network '{name}' must be an object")

    unknown = sorted(set(data) - set(_NETWORK_FIELDS))
    if unknown:
        raise InvalidConfigError(
            f"Network '{name}' has unknown fields: {', '.join(unknown)}"
        )
    if "url" not in data:
        raise InvalidConfigError(f"Network '{name}' is missing required field 'url'")

    return NetworkProfile(name=name, **data)


def _parse_compiler(name: str, data: Any) -> CompilerSettings:
    if not isinstance(data, dict) or "version" not in data:
        raise InvalidConfigError(f"Compiler '{name}' must be an object with a 'version'")

    unknown = sorted(set(data) - set(_COMPILER_FIELDS))
    if unknown:
        raise InvalidConfigError(
            f"Compiler '{name}' has unknown fields: {', '.join(unknown)}"
        )

    return CompilerSettings(version=data["version"], name=name)


def config_from_dict(data: Dict[str, Any]) -> ToolchainConfig:
    """
    Build a ToolchainConfig from the toolchain wire format.

    Args:
        data: {"networks": {name: {...}}, "compilers": {name: {"version": ...}}}
              A missing "compilers" section falls back to the default solc pin.

    Returns:
        Validated ToolchainConfig

    Raises:
        InvalidConfigError: If the structure or any field is invalid
    """
    if not isinstance(data, dict):
        raise InvalidConfigError("Configuration root must be an object")

    networks_data = data.get("networks", {})
    if not isinstance(networks_data, dict):
        raise InvalidConfigError("'networks' must be an object")

    compilers_data = data.get("compilers")
    if compilers_data is None:
        compilers_data = copy.deepcopy(DEFAULT_COMPILERS)
    if not isinstance(compilers_data, dict):
        raise InvalidConfigError("'compilers' must be an object")

    networks = {name: _parse_network(name, cfg) for name, cfg in networks_data.items()}
    compilers = {name: _parse_compiler(name, cfg) for name, cfg in compilers_data.items()}

    return ToolchainConfig(networks=networks, compilers=compilers)


def load_config(path: Union[Path, str]) -> ToolchainConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to networks.json

    Returns:
        Validated ToolchainConfig

    Raises:
        ConfigNotFoundError: If the path is not an existing file
        InvalidConfigError: If the file is not valid JSON or fails validation
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidConfigError(f"Invalid JSON in {config_path}: {e}") from e

    config = config_from_dict(data)
    logger.debug(
        "Loaded {} network(s) from {}", len(config.networks), config_path
    )
    return config


def save_config(config: ToolchainConfig, path: Union[Path, str]) -> str:
    """
    Save configuration to a JSON file.

    Creates parent directories if they don't exist. The seed phrase is
    never written; only the name of its environment variable is.

    Args:
        config: Configuration to save
        path: Destination file

    Returns:
        Path where configuration was saved
    """
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)

    return str(config_path)
