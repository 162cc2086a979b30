"""Integration tests for HDWalletProvider against a mocked JSON-RPC node."""

import json
from typing import Any, Dict, List

import pytest
import requests
import responses
from eth_account import Account

from toolchain_config.exceptions import NetworkMismatchError, ProviderError
from toolchain_config.provider import HDWalletProvider
from toolchain_config.types import NetworkProfile

RPC_URL = "http://127.0.0.1:8545/"
TX_HASH = "0x" + "ab" * 32

NODE_RESULTS = {
    "net_version": "1337",
    "eth_chainId": "0x539",
    "eth_getTransactionCount": "0x7",
    "eth_gasPrice": "0x3b9aca00",
    "eth_estimateGas": "0x5208",
    "eth_sendRawTransaction": TX_HASH,
}


class MockNode:
    """Records JSON-RPC calls and answers from a method -> result table."""

    def __init__(self, results: Dict[str, Any]):
        self.results = dict(results)
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, request):
        payload = json.loads(request.body)
        self.calls.append(payload)

        method = payload["method"]
        body: Dict[str, Any] = {"jsonrpc": "2.0", "id": payload["id"]}
        if method in self.results:
            body["result"] = self.results[method]
        else:
            body["error"] = {"code": -32601, "message": f"Method {method} not found"}
        return (200, {}, json.dumps(body))

    def methods(self) -> List[str]:
        return [call["method"] for call in self.calls]

    def params(self, method: str) -> List[Any]:
        return [call["params"] for call in self.calls if call["method"] == method]


@pytest.fixture
def rpc_mock():
    """Intercept HTTP calls; unregistered URLs raise ConnectionError."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def node(rpc_mock) -> MockNode:
    mock = MockNode(NODE_RESULTS)
    rpc_mock.add_callback(
        responses.POST, RPC_URL, callback=mock, content_type="application/json"
    )
    return mock


@pytest.fixture
def provider(test_mnemonic: str) -> HDWalletProvider:
    return HDWalletProvider(
        test_mnemonic, RPC_URL, 0, 3, session=requests.Session()
    )


class TestNetworkVerification:
    """Test network id queries and verification."""

    def test_chain_network_id(self, node: MockNode, provider: HDWalletProvider):
        assert provider.chain_network_id() == "1337"
        assert node.methods() == ["net_version"]

    def test_wildcard_accepts_any(self, node: MockNode, provider: HDWalletProvider):
        assert provider.verify_network("*") == "1337"

    def test_matching_id(self, node: MockNode, provider: HDWalletProvider):
        assert provider.verify_network("1337") == "1337"

    def test_mismatched_id(self, node: MockNode, provider: HDWalletProvider):
        with pytest.raises(NetworkMismatchError, match="expected 1"):
            provider.verify_network("1")

    def test_profile_network_id_check(self, node: MockNode, provider: HDWalletProvider):
        profile = NetworkProfile(name="development", url=RPC_URL, network_id="1337")

        assert profile.matches_network_id(provider.chain_network_id())

    def test_connection_error(self, rpc_mock, provider: HDWalletProvider):
        # Nothing registered: responses refuses the connection
        with pytest.raises(ProviderError, match="network id"):
            provider.chain_network_id()

    def test_rpc_error(self, rpc_mock, provider: HDWalletProvider):
        mock = MockNode({})
        rpc_mock.add_callback(
            responses.POST, RPC_URL, callback=mock, content_type="application/json"
        )

        with pytest.raises(ProviderError):
            provider.chain_network_id()


class TestSendTransaction:
    """Test transaction filling, signing and submission."""

    def test_auto_gas_estimates(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        tx_hash = provider.send_transaction({"to": known_addresses[1], "value": 10})

        assert tx_hash == TX_HASH
        assert "eth_estimateGas" in node.methods()
        assert node.methods()[-1] == "eth_sendRawTransaction"

    def test_explicit_gas_skips_estimate(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction({"to": known_addresses[1], "value": 10}, gas=9999999)

        assert "eth_estimateGas" not in node.methods()

    def test_zero_tx_gas_estimates(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction({"to": known_addresses[1], "value": 1, "gas": 0})

        assert "eth_estimateGas" in node.methods()
        assert "gas" not in node.params("eth_estimateGas")[0][0]
        raw = node.params("eth_sendRawTransaction")[0][0]
        assert Account.recover_transaction(raw) == known_addresses[0]

    def test_zero_tx_gas_uses_argument(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction(
            {"to": known_addresses[1], "value": 1, "gas": 0}, gas=50000
        )

        assert "eth_estimateGas" not in node.methods()

    def test_raw_transaction_fields(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction({"to": known_addresses[1], "value": 10}, gas=50000)

        raw = node.params("eth_sendRawTransaction")[0][0]
        assert Account.recover_transaction(raw) == known_addresses[0]

        # Same fields signed locally give the same raw bytes
        expected = provider.sign_transaction(
            {
                "to": known_addresses[1],
                "value": 10,
                "nonce": 7,
                "chainId": 1337,
                "gasPrice": 1_000_000_000,
                "gas": 50000,
            }
        )
        assert raw == "0x" + expected.raw_transaction.hex().removeprefix("0x")

    def test_sender_by_index(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction({"to": known_addresses[0], "value": 1}, sender=2)

        raw = node.params("eth_sendRawTransaction")[0][0]
        assert Account.recover_transaction(raw) == known_addresses[2]
        nonce_params = node.params("eth_getTransactionCount")[0]
        assert nonce_params[0].lower() == known_addresses[2].lower()
        assert nonce_params[1] == "pending"

    def test_sender_from_tx_field(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction(
            {"from": known_addresses[1].lower(), "to": known_addresses[0], "value": 1}
        )

        raw = node.params("eth_sendRawTransaction")[0][0]
        assert Account.recover_transaction(raw) == known_addresses[1]

    def test_prefilled_fields_not_queried(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        provider.send_transaction(
            {
                "to": known_addresses[1],
                "value": 1,
                "nonce": 0,
                "chainId": 1337,
                "gasPrice": 1,
                "gas": 21000,
            }
        )

        assert node.methods() == ["eth_sendRawTransaction"]

    def test_rejected_transaction(
        self, rpc_mock, provider: HDWalletProvider, known_addresses: list
    ):
        results = dict(NODE_RESULTS)
        del results["eth_sendRawTransaction"]
        mock = MockNode(results)
        rpc_mock.add_callback(
            responses.POST, RPC_URL, callback=mock, content_type="application/json"
        )

        with pytest.raises(ProviderError, match="send transaction"):
            provider.send_transaction({"to": known_addresses[1], "value": 1})

    def test_unknown_sender(self, provider: HDWalletProvider, known_addresses: list):
        with pytest.raises(KeyError):
            provider.send_transaction(
                {"to": known_addresses[0], "value": 1},
                sender="0x0000000000000000000000000000000000000001",
            )

    def test_negative_sender_index(
        self, node: MockNode, provider: HDWalletProvider, known_addresses: list
    ):
        with pytest.raises(IndexError):
            provider.send_transaction({"to": known_addresses[0], "value": 1}, sender=-1)

        assert node.methods() == []


class TestWeb3Binding:
    """Test the lazily created Web3 instance."""

    def test_web3_cached(self, provider: HDWalletProvider):
        assert provider.web3 is provider.web3

    def test_default_session_created(self, test_mnemonic: str):
        provider = HDWalletProvider(test_mnemonic, RPC_URL, 0, 1)

        assert provider.web3 is not None
        assert isinstance(provider._session, requests.Session)


class TestProfileGas:
    """The profile's gas limit becomes the provider default."""

    def test_profile_gas_skips_estimate(
        self, node: MockNode, test_mnemonic: str, known_addresses: list
    ):
        profile = NetworkProfile(name="development", url=RPC_URL, gas=9999999, num_addresses=1)
        provider = profile.provider(session=requests.Session())

        provider.send_transaction({"to": known_addresses[1], "value": 1})

        assert provider.gas == 9999999
        assert "eth_estimateGas" not in node.methods()

    def test_profile_auto_gas_estimates(
        self, node: MockNode, test_mnemonic: str, known_addresses: list
    ):
        profile = NetworkProfile(name="development", url=RPC_URL, num_addresses=1)
        provider = profile.provider(session=requests.Session())

        provider.send_transaction({"to": known_addresses[1], "value": 1})

        assert "eth_estimateGas" in node.methods()
