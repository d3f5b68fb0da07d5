"""Controller-only configuration of the ledger."""
import functools
from loguru import logger

from .errors import (
    CoinAlreadyInitialized,
    CoinNotInitialized,
    InvalidTimelockDecrease,
    Unauthorized,
    WithdrawalsLocked,
)


def only_controller(method):
    """Reject callers other than the controller, then run under the ledger lock."""
    @functools.wraps(method)
    def wrapper(self, caller, *args, **kwargs):
        if caller != self.controller:
            raise Unauthorized(f"{caller} is not the controller")
        with self._lock:
            return method(self, caller, *args, **kwargs)
    return wrapper


class AdminMixin:
    """Setters for the ledger settings.

    Expects ``controller``, ``config``, ``clock``, ``address``, ``_coin`` and
    ``_lock`` on the ledger it is mixed into.
    """

    @only_controller
    def init_coin(self, caller: str, coin) -> None:
        """Bind the reward coin. Only allowed once."""
        if self._coin is not None:
            raise CoinAlreadyInitialized(f"Coin already bound to {self.config.coin}")
        self._coin = coin
        self.config.coin = coin.symbol
        logger.info(f"Reward coin set to {coin.symbol}")

    @only_controller
    def set_coin_withdraw_timelock(self, caller: str, value: int) -> None:
        if value < self.config.coin_withdraw_timelock:
            raise InvalidTimelockDecrease(
                f"Timelock {value} is earlier than current {self.config.coin_withdraw_timelock}"
            )
        self.config.coin_withdraw_timelock = value
        logger.info(f"Coin withdrawals locked until {value}")

    @only_controller
    def set_harvest_rate(self, caller: str, value: int) -> None:
        self.config.harvest_rate = value
        logger.info(f"Harvest rate set to {value} per second")

    @only_controller
    def set_harvest_time_threshold(self, caller: str, value: int) -> None:
        self.config.harvest_time_threshold = value
        logger.info(f"Harvest threshold set to {value}s")

    @only_controller
    def open_harvest(self, caller: str) -> None:
        self.config.harvest_opened = True
        logger.info("Harvesting opened")

    @only_controller
    def close_harvest(self, caller: str) -> None:
        self.config.harvest_opened = False
        logger.info("Harvesting closed")

    @only_controller
    def open_staking(self, caller: str) -> None:
        self.config.staking_opened = True
        logger.info("Staking opened")

    @only_controller
    def close_staking(self, caller: str) -> None:
        self.config.staking_opened = False
        logger.info("Staking closed")

    @only_controller
    def withdraw_coin(self, caller: str) -> int:
        """Send the whole reward pool to the controller.

        Returns:
            Amount withdrawn

        Raises:
            WithdrawalsLocked: Before the withdrawal timelock
            CoinNotInitialized: If no coin is bound
        """
        now = self.clock.now()
        if now < self.config.coin_withdraw_timelock:
            raise WithdrawalsLocked(
                f"Withdrawals locked for another {self.config.coin_withdraw_timelock - now}s"
            )
        if self._coin is None:
            raise CoinNotInitialized("No reward coin bound")
        amount = self._coin.balance_of(self.address)
        self._pay(caller, amount)
        logger.info(f"Withdrew {amount} {self._coin.symbol} to {caller}")
        return amount
