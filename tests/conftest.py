"""Test configuration and fixtures for Softee."""
import pytest
from softee.core import CoinLedger, InMemoryCollection, ManualClock, SofteeLedger

START = 1_700_000_000
RATE = 5
THRESHOLD = 60
POOL = 1_000_000


@pytest.fixture
def clock():
    """Clock frozen at a known time."""
    return ManualClock(START)


@pytest.fixture
def collection(clock):
    """Empty collection sharing the test clock."""
    return InMemoryCollection(clock=clock)


@pytest.fixture
def coin():
    return CoinLedger(symbol="SOFT")


@pytest.fixture
def ledger(collection, coin, clock):
    """Ledger open for staking and harvesting, with a funded pool."""
    ledger = SofteeLedger(collection, "admin", clock=clock)
    ledger.init_coin("admin", coin)
    ledger.set_harvest_rate("admin", RATE)
    ledger.set_harvest_time_threshold("admin", THRESHOLD)
    ledger.open_staking("admin")
    ledger.open_harvest("admin")
    coin.mint(ledger.address, POOL)
    return ledger


@pytest.fixture
def alice_items(collection):
    """Three items minted to alice."""
    return collection.mint("alice", 3)


@pytest.fixture
def env_setup(tmp_path, monkeypatch):
    """Point the sandbox at a temporary directory."""
    monkeypatch.setenv("SOFTEE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SOFTEE_LOG_LEVEL", "DEBUG")
    return tmp_path
