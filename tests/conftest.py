"""
Mint Wrapper Test Fixtures
"""

import pytest
from solders.keypair import Keypair

from mint_wrapper.client import MintWrapperClient
from mint_wrapper.state.ledger import LocalLedger


@pytest.fixture
def wallet() -> Keypair:
    """Deterministic wallet keypair."""
    return Keypair.from_seed(bytes([1] * 32))


@pytest.fixture
def minter_keypair() -> Keypair:
    """Deterministic minter authority keypair."""
    return Keypair.from_seed(bytes([2] * 32))


@pytest.fixture
def other_keypair() -> Keypair:
    """Keypair with no role anywhere."""
    return Keypair.from_seed(bytes([3] * 32))


@pytest.fixture
def base_keypair() -> Keypair:
    """Deterministic wrapper base keypair."""
    return Keypair.from_seed(bytes([4] * 32))


@pytest.fixture
def mint_keypair() -> Keypair:
    """Deterministic token mint keypair."""
    return Keypair.from_seed(bytes([5] * 32))


@pytest.fixture
def ledger() -> LocalLedger:
    """Empty local ledger."""
    return LocalLedger()


@pytest.fixture
def client(wallet, ledger) -> MintWrapperClient:
    """Client bound to the wallet, reading from the local ledger."""
    return MintWrapperClient(wallet.pubkey(), ledger)
