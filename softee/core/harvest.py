"""Harvest accounting: time-based reward accrual and payout."""
from typing import Callable, Dict, Iterable
from loguru import logger

from .errors import HarvestClosed
from .staking import StakingEngine, is_valid_stake


def elapsed_seconds(now: int, last_harvested: int) -> int:
    """Seconds since the last harvest, never negative.

    Always ``now - last_harvested``. A harvest time in the future cannot
    happen, and counts as no time elapsed if it ever does.
    """
    if last_harvested >= now:
        return 0
    return now - last_harvested


class HarvestEngine:
    """Accrues reward on staked items and pays it out in one transfer.

    Args:
        staking: Engine whose vault and collection decide eligibility
        payout: Called as ``payout(to, amount)``; must raise on failure
        distributed: Total already paid out, when restoring saved state
    """

    def __init__(self, staking: StakingEngine, payout: Callable[[str, int], None], distributed: int = 0):
        self.staking = staking
        self.payout = payout
        self.distributed = distributed

    @property
    def config(self):
        return self.staking.config

    def accrue(self, caller: str, item_ids: Iterable[int], rate: int, threshold: int, now: int) -> Dict[int, int]:
        """Work out what each eligible item earns, without changing any state.

        Returns:
            Reward per eligible item id, in input order
        """
        vault = self.staking.vault
        accruals: Dict[int, int] = {}
        for item_id in item_ids:
            if item_id in accruals:
                # Already harvested earlier in this batch, nothing left to accrue
                continue
            ownership = self.staking.owned_by(caller, item_id)
            if ownership is None:
                continue
            record = vault.get(item_id)
            if not is_valid_stake(record, ownership):
                logger.debug(f"Skipping item {item_id}: not staked")
                continue
            if record.last_harvested >= now:
                logger.debug(f"Skipping item {item_id}: harvested at {record.last_harvested}, now is {now}")
                continue
            elapsed = elapsed_seconds(now, record.last_harvested)
            if elapsed < threshold:
                logger.debug(f"Skipping item {item_id}: {elapsed}s elapsed, threshold is {threshold}s")
                continue
            accruals[item_id] = rate * elapsed
        return accruals

    def harvest(self, caller: str, item_ids: Iterable[int]) -> int:
        """Collect reward on the caller's staked items.

        Rate and threshold are read once, so a batch is priced consistently.
        The payout happens before any harvest time moves; if it fails nothing
        is recorded.

        Args:
            caller: Holder collecting the reward
            item_ids: Items to harvest; ineligible ones are skipped

        Returns:
            Amount paid to the caller, 0 if nothing was eligible

        Raises:
            HarvestClosed: If harvesting is not open
        """
        if not self.config.harvest_opened:
            raise HarvestClosed("Harvesting is closed")

        rate = self.config.harvest_rate
        threshold = self.config.harvest_time_threshold
        now = self.staking.clock.now()

        accruals = self.accrue(caller, item_ids, rate, threshold, now)
        total = sum(accruals.values())
        if total > 0:
            self.payout(caller, total)

        vault = self.staking.vault
        for item_id in accruals:
            record = vault.get(item_id)
            vault.set(item_id, record.model_copy(update={"last_harvested": now}))
        self.distributed += total

        logger.info(f"{caller} harvested {total} from {len(accruals)} items")
        return total
