"""HD wallet provider for toolchain-config library.

Derives a fixed window of accounts from a BIP-39 seed phrase and signs
transactions locally before handing them to the node over JSON-RPC.
"""

import os
from typing import Any, Dict, List, Mapping, Optional, Union

import requests
from eth_account import Account
from eth_account.datastructures import SignedTransaction
from eth_account.hdaccount import key_from_seed, seed_from_mnemonic
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.providers import HTTPProvider

from .constants import (
    DEFAULT_DERIVATION_PATH,
    MNEMONIC_ENV,
    RPC_BACKOFF_FACTOR,
    RPC_MAX_RETRIES,
    RPC_POOL_SIZE,
    RPC_RETRY_STATUSES,
    RPC_TIMEOUT,
    WILDCARD_NETWORK_ID,
)
from .exceptions import (
    InvalidConfigError,
    InvalidMnemonicError,
    MissingSecretError,
    NetworkMismatchError,
    ProviderError,
)


def resolve_mnemonic(
    env_var: str = MNEMONIC_ENV, environ: Optional[Mapping[str, str]] = None
) -> str:
    """
    Read a seed phrase from the environment.

    Args:
        env_var: Environment variable holding the phrase
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Seed phrase with surrounding whitespace collapsed

    Raises:
        MissingSecretError: If the variable is unset or blank
    """
    if environ is None:
        environ = os.environ

    phrase = " ".join(environ.get(env_var, "").split())
    if not phrase:
        raise MissingSecretError(
            f"Seed phrase not found: set ${env_var} to a BIP-39 mnemonic"
        )
    return phrase


def create_session() -> requests.Session:
    """Create a pooled HTTP session that retries transient node errors."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=RPC_POOL_SIZE,
        pool_maxsize=RPC_POOL_SIZE,
        max_retries=Retry(
            total=RPC_MAX_RETRIES,
            backoff_factor=RPC_BACKOFF_FACTOR,
            status_forcelist=RPC_RETRY_STATUSES,
            allowed_methods=frozenset(["POST"]),
        ),
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class HDWalletProvider:
    """Signs transactions with accounts derived from a seed phrase."""

    def __init__(
        self,
        mnemonic: str,
        url: str,
        address_index: int = 0,
        num_addresses: int = 50,
        derivation_path: str = DEFAULT_DERIVATION_PATH,
        session: Optional[requests.Session] = None,
        gas: int = 0,
    ):
        """
        Derive accounts and prepare the JSON-RPC connection.

        Args:
            mnemonic: BIP-39 seed phrase
            url: JSON-RPC endpoint (http or https)
            address_index: Index of the first derived account
            num_addresses: Number of accounts to derive
            derivation_path: HD path prefix; account i is {prefix}/{i}
            session: HTTP session to use (defaults to a pooled session)
            gas: Default gas limit for send_transaction, 0 to estimate

        Raises:
            InvalidMnemonicError: If the seed phrase fails BIP-39 validation
            InvalidConfigError: If the account window is out of range
        """
        if address_index < 0:
            raise InvalidConfigError(f"address_index must be >= 0, got {address_index}")
        if num_addresses < 1:
            raise InvalidConfigError(f"num_addresses must be >= 1, got {num_addresses}")

        try:
            seed = seed_from_mnemonic(" ".join(mnemonic.split()), passphrase="")
        except ValidationError as e:
            raise InvalidMnemonicError(f"Invalid BIP-39 mnemonic: {e}") from e

        prefix = derivation_path.rstrip("/")
        self.url = url
        self.derivation_path = prefix
        self.address_index = address_index
        self.gas = gas
        self.accounts: List[LocalAccount] = [
            Account.from_key(key_from_seed(seed, f"{prefix}/{i}"))
            for i in range(address_index, address_index + num_addresses)
        ]
        self._by_address: Dict[str, LocalAccount] = {
            account.address.lower(): account for account in self.accounts
        }
        self._session = session
        self._web3: Optional[Web3] = None

        logger.debug(
            "Derived {} accounts from {}/{} for {}",
            num_addresses,
            prefix,
            address_index,
            url,
        )

    @property
    def addresses(self) -> List[str]:
        """Checksummed addresses of the derived accounts, in index order."""
        return [account.address for account in self.accounts]

    def get_account(self, address_or_index: Union[str, int]) -> LocalAccount:
        """
        Look up a derived account.

        Args:
            address_or_index: Address (any case) or position in the window

        Returns:
            The matching local account

        Raises:
            KeyError: If the address was not derived by this provider
            IndexError: If the position is outside the window
            TypeError: If given a bool
        """
        if isinstance(address_or_index, bool):
            raise TypeError("Account index must be an int or address, not bool")
        if isinstance(address_or_index, int):
            if not 0 <= address_or_index < len(self.accounts):
                raise IndexError(
                    f"Account index {address_or_index} outside window of {len(self.accounts)}"
                )
            return self.accounts[address_or_index]

        try:
            return self._by_address[address_or_index.lower()]
        except KeyError:
            raise KeyError(f"Address {address_or_index} not managed by this provider") from None

    @property
    def web3(self) -> Web3:
        """Web3 instance bound to the endpoint through the shared session."""
        if self._web3 is None:
            if self._session is None:
                self._session = create_session()
            provider = HTTPProvider(
                self.url,
                session=self._session,
                request_kwargs={"timeout": RPC_TIMEOUT},
                exception_retry_configuration=None,
            )
            self._web3 = Web3(provider)
        return self._web3

    def chain_network_id(self) -> str:
        """
        Query the node's network id (net_version).

        Raises:
            ProviderError: If the RPC call fails
        """
        try:
            return str(self.web3.net.version)
        except (requests.RequestException, Web3Exception) as e:
            raise ProviderError(f"Failed to query network id from {self.url}: {e}") from e

    def verify_network(self, network_id: str) -> str:
        """
        Check that the node serves the configured network.

        Args:
            network_id: Configured network id, or "*" for any

        Returns:
            Network id reported by the node

        Raises:
            NetworkMismatchError: If a non-wildcard id differs from the node's
            ProviderError: If the RPC call fails
        """
        actual = self.chain_network_id()
        if network_id != WILDCARD_NETWORK_ID and actual != str(network_id):
            raise NetworkMismatchError(
                f"Node at {self.url} reports network id {actual}, expected {network_id}"
            )
        return actual

    def sign_transaction(
        self, tx: Dict[str, Any], sender: Optional[Union[str, int]] = None
    ) -> SignedTransaction:
        """
        Sign a fully populated transaction locally.

        Args:
            tx: Transaction fields (nonce, gas, chainId, fee fields, ...)
            sender: Signing account address or window position
                    (defaults to tx["from"], then the first account)

        Returns:
            Signed transaction (raw_transaction, hash, v, r, s)
        """
        if sender is None:
            sender = tx.get("from", 0)
        account = self.get_account(sender)
        # eth_account compares "from" against the checksummed address
        fields = {k: v for k, v in tx.items() if k != "from"}
        return account.sign_transaction(fields)

    def send_transaction(
        self,
        tx: Dict[str, Any],
        sender: Optional[Union[str, int]] = None,
        gas: Optional[int] = None,
    ) -> str:
        """
        Fill, sign, and submit a transaction.

        Missing nonce, chainId and gasPrice are fetched from the node. The gas
        limit comes from tx["gas"], then the gas argument, then the provider's
        default; a missing or 0 gas at every level means the node estimates it.

        Args:
            tx: Partial transaction (to, value, data, ...)
            sender: Signing account address or window position
            gas: Gas limit, 0 for automatic estimation (defaults to self.gas)

        Returns:
            Transaction hash as 0x-prefixed hex string

        Raises:
            ProviderError: If any RPC call fails
        """
        if sender is None:
            sender = tx.get("from", 0)
        account = self.get_account(sender)
        if gas is None:
            gas = self.gas

        fields = dict(tx)
        fields["from"] = account.address
        w3 = self.web3

        try:
            if "nonce" not in fields:
                fields["nonce"] = w3.eth.get_transaction_count(account.address, "pending")
            if "chainId" not in fields:
                fields["chainId"] = w3.eth.chain_id
            if "gasPrice" not in fields and "maxFeePerGas" not in fields:
                fields["gasPrice"] = w3.eth.gas_price
            if not fields.get("gas"):
                if gas:
                    fields["gas"] = gas
                else:
                    fields["gas"] = w3.eth.estimate_gas(
                        {k: v for k, v in fields.items() if k not in ("chainId", "gas")}
                    )

            signed = account.sign_transaction(fields)
            tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        except (requests.RequestException, Web3Exception) as e:
            raise ProviderError(f"Failed to send transaction via {self.url}: {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(
            "Sent transaction {} from {} (nonce={}, gas={})",
            tx_hash_hex,
            account.address,
            fields["nonce"],
            fields["gas"],
        )
        return tx_hash_hex
