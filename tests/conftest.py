"""Shared pytest fixtures for toolchain-config tests."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

# Well-known development seed phrase (hardhat / anvil default accounts)
TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_ADDRESSES = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
]


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample networks.json fixture."""
    with open(fixtures_dir / "sample_config.json") as f:
        return json.load(f)


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for tests."""
    config_dir = tmp_path / ".toolchain-config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def temp_config_file(temp_config_dir: Path, sample_config_json: Dict[str, Any]) -> Path:
    """Create a temporary networks.json file with sample data."""
    config_path = temp_config_dir / "networks.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_json, f, indent=2)
    return config_path


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch) -> Path:
    """Run in an empty directory with no config path override."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TOOLCHAIN_CONFIG_PATH", raising=False)
    return tmp_path


@pytest.fixture
def test_mnemonic(monkeypatch) -> str:
    """Export the development seed phrase as $TOOLCHAIN_MNEMONIC."""
    monkeypatch.setenv("TOOLCHAIN_MNEMONIC", TEST_MNEMONIC)
    return TEST_MNEMONIC


@pytest.fixture
def known_addresses() -> list:
    """First three accounts derived from the development seed phrase."""
    return list(TEST_ADDRESSES)
