"""Unit tests for reward accrual and payout."""
import pytest
from unittest.mock import MagicMock
from softee.core import (
    CoinLedger,
    CoinNotInitialized,
    HarvestClosed,
    InsufficientBalance,
    LedgerConfig,
    ManualClock,
    OwnershipOracle,
    SofteeLedger,
    StakeRecord,
    TokenOwnership,
    VaultStore,
)
from softee.core.harvest import HarvestEngine, elapsed_seconds
from softee.core.staking import StakingEngine

RATE = 5
THRESHOLD = 60


def test_harvest_at_threshold(ledger, coin, clock, alice_items):
    """Harvesting right at the threshold pays rate * threshold, then nothing."""
    ledger.stake("alice", [alice_items[0]])
    clock.advance(THRESHOLD)

    assert ledger.harvest("alice", [alice_items[0]]) == RATE * THRESHOLD
    assert ledger.vault.get(alice_items[0]).last_harvested == clock.now()
    assert coin.balance_of("alice") == RATE * THRESHOLD

    assert ledger.harvest("alice", [alice_items[0]]) == 0
    assert coin.balance_of("alice") == RATE * THRESHOLD


def test_harvest_below_threshold_keeps_time(ledger, clock, alice_items):
    """Too-early harvests accrue nothing and do not restart the clock."""
    ledger.stake("alice", alice_items)
    staked_at = clock.now()

    clock.advance(THRESHOLD - 1)
    assert ledger.harvest("alice", alice_items) == 0
    assert ledger.vault.get(alice_items[0]).last_harvested == staked_at

    clock.advance(1)
    assert ledger.harvest("alice", alice_items) == 3 * RATE * THRESHOLD


def test_harvest_is_linear_in_time(ledger, clock, alice_items):
    """Reward is rate times whole seconds elapsed, per item."""
    ledger.stake("alice", alice_items[:2])
    clock.advance(1234)
    assert ledger.harvest("alice", alice_items[:2]) == 2 * RATE * 1234


def test_distributed_is_sum_of_harvests(ledger, coin, clock, alice_items):
    """The distributed counter equals everything paid out."""
    ledger.stake("alice", alice_items)
    paid = []
    for seconds in (30, 90, 60, 10, 500):
        clock.advance(seconds)
        paid.append(ledger.harvest("alice", alice_items))

    assert paid[0] == 0
    assert ledger.distributed == sum(paid)
    assert coin.balance_of("alice") == sum(paid)


def test_harvest_when_closed(ledger, clock, alice_items):
    """Closed harvest fails; reopening loses no accrued time."""
    ledger.stake("alice", [alice_items[0]])
    ledger.close_harvest("admin")
    clock.advance(200)

    with pytest.raises(HarvestClosed):
        ledger.harvest("alice", [alice_items[0]])
    assert ledger.distributed == 0

    ledger.open_harvest("admin")
    assert ledger.harvest("alice", [alice_items[0]]) == RATE * 200


def test_harvest_skips_ineligible_items(ledger, collection, clock, alice_items):
    """Foreign, unstaked and transferred items earn nothing."""
    bob_item = collection.mint("bob")[0]
    ledger.stake("bob", [bob_item])
    ledger.stake("alice", alice_items[:2])
    collection.transfer("alice", "bob", alice_items[1])
    clock.advance(100)

    assert ledger.harvest("alice", [bob_item, alice_items[1], alice_items[2], alice_items[0]]) == RATE * 100
    # bob received the item but never staked it
    assert ledger.harvest("bob", [alice_items[1]]) == 0
    assert ledger.harvest("bob", [bob_item]) == RATE * 100


def test_duplicate_ids_harvest_once(ledger, clock, alice_items):
    """Repeating an id in a batch does not double its reward."""
    ledger.stake("alice", [alice_items[0]])
    clock.advance(100)
    assert ledger.harvest("alice", [alice_items[0], alice_items[0]]) == RATE * 100


def test_payout_failure_leaves_state(ledger, coin, clock, alice_items):
    """An underfunded pool fails the harvest without moving harvest times."""
    ledger.stake("alice", alice_items)
    staked_at = clock.now()
    coin.transfer(ledger.address, "admin", coin.balance_of(ledger.address))
    clock.advance(100)

    with pytest.raises(InsufficientBalance):
        ledger.harvest("alice", alice_items)
    assert ledger.distributed == 0
    assert all(ledger.vault.get(i).last_harvested == staked_at for i in alice_items)

    coin.mint(ledger.address, 10_000)
    assert ledger.harvest("alice", alice_items) == 3 * RATE * 100


def test_harvest_without_coin(collection, clock):
    """Nothing to pay is fine without a coin; something to pay is not."""
    ledger = SofteeLedger(collection, "admin", clock=clock)
    ledger.open_staking("admin")
    ledger.open_harvest("admin")
    ledger.set_harvest_rate("admin", RATE)
    items = collection.mint("alice", 1)
    ledger.stake("alice", items)

    assert ledger.harvest("alice", items) == 0
    clock.advance(10)
    with pytest.raises(CoinNotInitialized):
        ledger.harvest("alice", items)


def test_rate_is_read_once_per_batch():
    """Settings changed mid-batch do not affect the batch."""
    config = LedgerConfig(harvest_rate=2, harvest_time_threshold=0, harvest_opened=True)
    vault = VaultStore()
    for item_id in (0, 1):
        vault.set(item_id, StakeRecord(holder="alice", stake_start=10, last_harvested=100))

    def ownership(item_id):
        config.harvest_rate = 1000
        return TokenOwnership(addr="alice", start_timestamp=10)

    oracle = MagicMock(spec=OwnershipOracle)
    oracle.explicit_ownership_of.side_effect = ownership
    payout = MagicMock()
    engine = HarvestEngine(StakingEngine(vault, oracle, config, ManualClock(200)), payout)

    assert engine.harvest("alice", [0, 1]) == 2 * 2 * 100
    payout.assert_called_once_with("alice", 400)
    assert engine.distributed == 400
    assert vault.get(0).last_harvested == 200


def test_zero_total_skips_payout():
    """Nothing is transferred when nothing accrued."""
    config = LedgerConfig(harvest_rate=3, harvest_opened=True)
    vault = VaultStore()
    vault.set(7, StakeRecord(holder="alice", stake_start=10, last_harvested=200))
    oracle = MagicMock(spec=OwnershipOracle)
    oracle.explicit_ownership_of.return_value = TokenOwnership(addr="alice", start_timestamp=10)
    payout = MagicMock()
    engine = HarvestEngine(StakingEngine(vault, oracle, config, ManualClock(200)), payout)

    assert engine.harvest("alice", [7]) == 0
    payout.assert_not_called()


def test_elapsed_seconds():
    """Elapsed time is now minus last harvest, floored at zero."""
    assert elapsed_seconds(100, 40) == 60
    assert elapsed_seconds(100, 100) == 0
    assert elapsed_seconds(100, 150) == 0


def test_future_harvest_time_accrues_nothing():
    """A harvest time ahead of the clock is treated as no time elapsed."""
    config = LedgerConfig(harvest_rate=3, harvest_time_threshold=0, harvest_opened=True)
    vault = VaultStore()
    vault.set(1, StakeRecord(holder="alice", stake_start=10, last_harvested=10_000))
    oracle = MagicMock(spec=OwnershipOracle)
    oracle.explicit_ownership_of.return_value = TokenOwnership(addr="alice", start_timestamp=10)
    engine = HarvestEngine(StakingEngine(vault, oracle, config, ManualClock(500)), MagicMock())

    assert engine.harvest("alice", [1]) == 0
    assert vault.get(1).last_harvested == 10_000


def test_ledger_coin_is_bound(ledger, coin):
    assert isinstance(ledger.coin, CoinLedger)
    assert ledger.coin is coin
