"""Custom exception classes for toolchain-config library."""


class ConfigError(Exception):
    """Base exception for toolchain configuration errors."""

    pass


class ConfigNotFoundError(ConfigError, FileNotFoundError):
    """Raised when a configuration file is not found."""

    pass


class InvalidConfigError(ConfigError, ValueError):
    """Raised when a configuration value is missing or ill-typed."""

    pass


class NetworkNotFoundError(ConfigError, ValueError):
    """Raised when requested network is not configured."""

    pass


class CompilerNotFoundError(ConfigError, ValueError):
    """Raised when requested compiler is not configured."""

    pass


class InvalidVersionRangeError(ConfigError, ValueError):
    """Raised when a version or version range cannot be parsed."""

    pass


class VersionNotFoundError(ConfigError, ValueError):
    """Raised when no available version satisfies a range."""

    pass


class InvalidMnemonicError(ConfigError, ValueError):
    """Raised when a seed phrase fails BIP-39 validation."""

    pass


class MissingSecretError(ConfigError, KeyError):
    """Raised when the seed phrase environment variable is unset."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message
        return str(self.args[0]) if self.args else ""


class NetworkMismatchError(ConfigError, RuntimeError):
    """Raised when the node reports a different network id than configured."""

    pass


class ProviderError(ConfigError, RuntimeError):
    """Raised when a JSON-RPC call to the node fails."""

    pass
