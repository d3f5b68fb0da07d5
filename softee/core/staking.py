"""Staking engine: stake, unstake and staked-state queries."""
from typing import Iterable, List, Optional
from loguru import logger

from .config import LedgerConfig
from .errors import StakingClosed
from .oracle import OwnershipOracle, TokenOwnership, is_zero_address
from .stake import StakeRecord
from .vault import VaultStore


def is_valid_stake(record: Optional[StakeRecord], ownership: TokenOwnership) -> bool:
    """Check a stored record against live ownership.

    A record only counts while the collection still reports the same holder
    and the same ownership start time, and the item is not burned. Anything
    else means the item changed hands after it was staked.
    """
    if record is None or ownership.burned or is_zero_address(ownership.addr):
        return False
    return record.holder == ownership.addr and record.stake_start == ownership.start_timestamp


class StakingEngine:
    """Best-effort batch staking on top of the vault and the collection."""

    def __init__(self, vault: VaultStore, oracle: OwnershipOracle, config: LedgerConfig, clock):
        self.vault = vault
        self.oracle = oracle
        self.config = config
        self.clock = clock

    def owned_by(self, caller: str, item_id: int) -> Optional[TokenOwnership]:
        """Get ownership of an item if ``caller`` currently holds it."""
        ownership = self.oracle.explicit_ownership_of(item_id)
        if ownership.burned:
            logger.debug(f"Skipping item {item_id}: burned")
            return None
        if is_zero_address(caller) or ownership.addr != caller:
            logger.debug(f"Skipping item {item_id}: not held by {caller}")
            return None
        return ownership

    def stake(self, caller: str, item_ids: Iterable[int]) -> None:
        """Stake every item in the batch that ``caller`` holds.

        Items not held by the caller, burned, or already staked are skipped
        without failing the batch. Restaking a staked item keeps its harvest
        time.

        Raises:
            StakingClosed: If staking is not open
        """
        if not self.config.staking_opened:
            raise StakingClosed("Staking is closed")

        item_ids = list(item_ids)
        now = self.clock.now()
        count = 0
        for item_id in item_ids:
            ownership = self.owned_by(caller, item_id)
            if ownership is None:
                continue
            if is_valid_stake(self.vault.get(item_id), ownership):
                logger.debug(f"Skipping item {item_id}: already staked")
                continue
            self.vault.set(item_id, StakeRecord(
                holder=caller,
                stake_start=ownership.start_timestamp,
                last_harvested=now,
            ))
            count += 1

        logger.info(f"{caller} staked {count} of {len(item_ids)} items")

    def unstake(self, caller: str, item_ids: Iterable[int]) -> None:
        """Remove the caller's stakes. Never gated, so holders can always exit."""
        item_ids = list(item_ids)
        count = 0
        for item_id in item_ids:
            ownership = self.owned_by(caller, item_id)
            if ownership is None:
                continue
            if not is_valid_stake(self.vault.get(item_id), ownership):
                logger.debug(f"Skipping item {item_id}: not staked")
                continue
            self.vault.delete(item_id)
            count += 1

        logger.info(f"{caller} unstaked {count} of {len(item_ids)} items")

    def is_staked(self, item_id: int) -> bool:
        return is_valid_stake(self.vault.get(item_id), self.oracle.explicit_ownership_of(item_id))

    def filter_staked(self, item_ids: Iterable[int]) -> List[int]:
        """Keep the staked items, in input order."""
        return [item_id for item_id in item_ids if self.is_staked(item_id)]

    def staked(self, holder: str) -> List[int]:
        """Get the items ``holder`` currently has staked.

        This walks every item the holder owns. For holders with very large
        collections, page through ``tokens_of_owner`` and call
        ``filter_staked`` on each chunk instead.
        """
        return self.filter_staked(self.oracle.tokens_of_owner(holder))
