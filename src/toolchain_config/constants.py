"""Configuration constants for toolchain-config library."""

# Network id accepted by any node
WILDCARD_NETWORK_ID = "*"

# BIP-44 prefix for Ethereum accounts; account i lives at {prefix}/{i}
DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0"

# Environment variables
MNEMONIC_ENV = "TOOLCHAIN_MNEMONIC"
CONFIG_PATH_ENV = "TOOLCHAIN_CONFIG_PATH"

SUPPORTED_URL_SCHEMES = ("http", "https")

DEFAULT_COMPILER = "solc"

# Local development node (ganache / hardhat style)
DEFAULT_NETWORKS = {
    "development": {
        "url": "http://127.0.0.1:8545/",
        "mnemonic_env": MNEMONIC_ENV,
        "address_index": 0,
        "num_addresses": 50,
        "network_id": WILDCARD_NETWORK_ID,
        "gas": 0,  # 0 = estimate per transaction
    },
}

DEFAULT_COMPILERS = {
    "solc": {
        "version": "^0.4.24",
    },
}

# JSON-RPC transport tuning
RPC_TIMEOUT = 30
RPC_POOL_SIZE = 20
RPC_MAX_RETRIES = 3
RPC_BACKOFF_FACTOR = 0.5
RPC_RETRY_STATUSES = (500, 502, 503, 504)
