"""
toolchain-config: network profiles and compiler pins for smart-contract toolchains
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DEFAULT_CONFIG, get_config, module_exports
from .exceptions import (
    CompilerNotFoundError,
    ConfigError,
    ConfigNotFoundError,
    InvalidConfigError,
    InvalidMnemonicError,
    InvalidVersionRangeError,
    MissingSecretError,
    NetworkMismatchError,
    NetworkNotFoundError,
    ProviderError,
    VersionNotFoundError,
)
from .loader import config_from_dict, load_config, save_config
from .provider import HDWalletProvider, resolve_mnemonic
from .types import CompilerSettings, NetworkProfile, ToolchainConfig
from .versions import parse_version_range, select_compiler_version

try:
    __version__ = version("toolchain-config")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DEFAULT_CONFIG",
    "get_config",
    "module_exports",
    "config_from_dict",
    "load_config",
    "save_config",
    "HDWalletProvider",
    "resolve_mnemonic",
    "NetworkProfile",
    "CompilerSettings",
    "ToolchainConfig",
    "parse_version_range",
    "select_compiler_version",
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidConfigError",
    "NetworkNotFoundError",
    "CompilerNotFoundError",
    "InvalidVersionRangeError",
    "VersionNotFoundError",
    "InvalidMnemonicError",
    "MissingSecretError",
    "NetworkMismatchError",
    "ProviderError",
]
