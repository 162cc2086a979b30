"""Data types and dataclasses for toolchain-config library."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlparse

from .constants import (
    DEFAULT_COMPILER,
    DEFAULT_DERIVATION_PATH,
    MNEMONIC_ENV,
    SUPPORTED_URL_SCHEMES,
    WILDCARD_NETWORK_ID,
)
from .exceptions import CompilerNotFoundError, InvalidConfigError, NetworkNotFoundError
from .provider import HDWalletProvider, resolve_mnemonic
from .versions import VersionRange, parse_version_range


def _require_int(name: str, value: Any, minimum: int) -> None:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfigError(f"{name} must be >= {minimum}, got {value}")


@dataclass
class NetworkProfile:
    """Connection and wallet settings for one network."""

    # Required fields
    name: str  # e.g., "development"
    url: str  # JSON-RPC endpoint

    # Optional fields
    mnemonic_env: str = MNEMONIC_ENV  # env var holding the seed phrase
    address_index: int = 0
    num_addresses: int = 50
    network_id: str = WILDCARD_NETWORK_ID  # "*" matches any node
    gas: int = 0  # 0 = estimate per transaction
    derivation_path: str = DEFAULT_DERIVATION_PATH

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidConfigError(f"Network name must be a non-empty string, got {self.name!r}")

        if not isinstance(self.url, str):
            raise InvalidConfigError(f"Network '{self.name}': url must be a string")
        parsed = urlparse(self.url)
        if parsed.scheme not in SUPPORTED_URL_SCHEMES or not parsed.netloc:
            raise InvalidConfigError(
                f"Network '{self.name}': unsupported endpoint URL '{self.url}'"
            )

        if not isinstance(self.mnemonic_env, str) or not self.mnemonic_env:
            raise InvalidConfigError(f"Network '{self.name}': mnemonic_env must be a non-empty string")

        _require_int(f"Network '{self.name}': address_index", self.address_index, 0)
        _require_int(f"Network '{self.name}': num_addresses", self.num_addresses, 1)
        _require_int(f"Network '{self.name}': gas", self.gas, 0)

        # Numeric ids are accepted and stored as strings
        if isinstance(self.network_id, int) and not isinstance(self.network_id, bool):
            self.network_id = str(self.network_id)
        if not isinstance(self.network_id, str) or not (
            self.network_id == WILDCARD_NETWORK_ID or self.network_id.isdigit()
        ):
            raise InvalidConfigError(
                f"Network '{self.name}': network_id must be '*' or a numeric string, "
                f"got {self.network_id!r}"
            )

        if not isinstance(self.derivation_path, str) or not self.derivation_path.startswith("m/"):
            raise InvalidConfigError(
                f"Network '{self.name}': derivation_path must start with 'm/', "
                f"got {self.derivation_path!r}"
            )

    @property
    def gas_is_auto(self) -> bool:
        """True when the gas limit is left to per-transaction estimation."""
        return self.gas == 0

    def matches_network_id(self, network_id: Any) -> bool:
        """
        Check a node's network id against this profile.

        Args:
            network_id: Id reported by the node (str or int)

        Returns:
            True if the profile uses the wildcard or the ids are equal
        """
        return self.network_id == WILDCARD_NETWORK_ID or self.network_id == str(network_id)

    def provider(
        self,
        mnemonic: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> HDWalletProvider:
        """
        Build the wallet provider for this network.

        Args:
            mnemonic: Seed phrase (defaults to ${mnemonic_env})
            environ: Mapping to read the seed phrase from (defaults to os.environ)
            **kwargs: Extra HDWalletProvider arguments (e.g. session)

        Returns:
            HDWalletProvider over [address_index, address_index + num_addresses)

        Raises:
            MissingSecretError: If no mnemonic given and the env var is unset
            InvalidMnemonicError: If the seed phrase is invalid
        """
        if mnemonic is None:
            mnemonic = resolve_mnemonic(self.mnemonic_env, environ)

        return HDWalletProvider(
            mnemonic,
            self.url,
            self.address_index,
            self.num_addresses,
            derivation_path=self.derivation_path,
            gas=self.gas,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the toolchain's per-network record (name is the key)."""
        return {
            "url": self.url,
            "mnemonic_env": self.mnemonic_env,
            "address_index": self.address_index,
            "num_addresses": self.num_addresses,
            "network_id": self.network_id,
            "gas": self.gas,
            "derivation_path": self.derivation_path,
        }


@dataclass
class CompilerSettings:
    """Compiler version pin."""

    version: str  # semantic-version range, e.g. "^0.4.24"
    name: str = DEFAULT_COMPILER

    def __post_init__(self) -> None:
        if not isinstance(self.version, str) or not self.version.strip():
            raise InvalidConfigError(
                f"Compiler '{self.name}': version must be a non-empty string"
            )
        # Fail at load time rather than at compile time
        self._range = parse_version_range(self.version)

    @property
    def version_range(self) -> VersionRange:
        return self._range

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version}


@dataclass
class ToolchainConfig:
    """Networks and compilers consumed by the host toolchain."""

    networks: Dict[str, NetworkProfile] = field(default_factory=dict)
    compilers: Dict[str, CompilerSettings] = field(default_factory=dict)

    def has_network(self, network: str) -> bool:
        return network in self.networks

    def network_names(self) -> List[str]:
        return sorted(self.networks)

    def network(self, network: str) -> NetworkProfile:
        """
        Get a network profile by name.

        Raises:
            NetworkNotFoundError: If network not configured
        """
        if network not in self.networks:
            raise NetworkNotFoundError(
                f"Network '{network}' not configured "
                f"(available: {', '.join(self.network_names()) or 'none'})"
            )
        return self.networks[network]

    def compiler(self, name: str = DEFAULT_COMPILER) -> CompilerSettings:
        """
        Get compiler settings by name.

        Raises:
            CompilerNotFoundError: If compiler not configured
        """
        if name not in self.compilers:
            raise CompilerNotFoundError(f"Compiler '{name}' not configured")
        return self.compilers[name]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the toolchain wire format."""
        return {
            "networks": {name: profile.to_dict() for name, profile in self.networks.items()},
            "compilers": {name: settings.to_dict() for name, settings in self.compilers.items()},
        }
