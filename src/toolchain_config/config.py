"""Toolchain configuration entry point."""

import copy
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from loguru import logger

from .constants import DEFAULT_COMPILERS, DEFAULT_NETWORKS
from .loader import config_from_dict, load_config
from .paths import get_config_path
from .provider import HDWalletProvider
from .types import NetworkProfile, ToolchainConfig

# Single local network, solc pinned to the 0.4 line
DEFAULT_CONFIG: ToolchainConfig = config_from_dict(
    {"networks": DEFAULT_NETWORKS, "compilers": DEFAULT_COMPILERS}
)


def get_config(config_path: Optional[Union[Path, str]] = None) -> ToolchainConfig:
    """
    Return the toolchain configuration.

    Args:
        config_path: Explicit config file. If None, the default location
                     (./.toolchain-config/networks.json or
                     $TOOLCHAIN_CONFIG_PATH) is used when it exists,
                     otherwise the built-in defaults.

    Returns:
        A fresh ToolchainConfig; mutating it does not affect later calls

    Raises:
        ConfigNotFoundError: If an explicit config_path does not exist
        InvalidConfigError: If the config file fails validation
    """
    if config_path is not None:
        return load_config(config_path)

    default_path = get_config_path()
    if default_path.is_file():
        return load_config(default_path)

    logger.debug("No config file at {}, using built-in defaults", default_path)
    return copy.deepcopy(DEFAULT_CONFIG)


def _provider_factory(
    profile: NetworkProfile, environ: Optional[Mapping[str, str]]
) -> Callable[[], HDWalletProvider]:
    def provider() -> HDWalletProvider:
        return profile.provider(environ=environ)

    return provider


def module_exports(
    config: Optional[ToolchainConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the record the host toolchain consumes.

    Each network entry carries a zero-argument "provider" factory; the seed
    phrase is only read when the factory is called.

    Args:
        config: Configuration to export (defaults to get_config())
        environ: Mapping to read seed phrases from (defaults to os.environ)

    Returns:
        {"networks": {name: {"provider", "network_id", "gas"}},
         "compilers": {name: {"version"}}}
    """
    if config is None:
        config = get_config()

    networks: Dict[str, Any] = {}
    for name, profile in config.networks.items():
        networks[name] = {
            "provider": _provider_factory(profile, environ),
            "network_id": profile.network_id,
            "gas": profile.gas,
        }

    return {
        "networks": networks,
        "compilers": {name: settings.to_dict() for name, settings in config.compilers.items()},
    }
