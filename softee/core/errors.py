"""Errors raised by the Softee ledger.

Every error here fails the whole call: no state is mutated when one is raised.
Per-item ineligibility inside a batch is never an error, the item is skipped.
"""


class SofteeError(Exception):
    """Base class for all ledger errors."""


class StakingClosed(SofteeError):
    """Staking is not open."""


class HarvestClosed(SofteeError):
    """Harvesting is not open."""


class CoinAlreadyInitialized(SofteeError):
    """The reward coin can only be bound once."""


class CoinNotInitialized(SofteeError):
    """No reward coin has been bound yet."""


class WithdrawalsLocked(SofteeError):
    """The coin withdrawal timelock has not elapsed."""


class InvalidTimelockDecrease(SofteeError):
    """The coin withdrawal deadline can only move later."""


class Unauthorized(SofteeError):
    """Caller is not the ledger controller."""


class InsufficientBalance(SofteeError):
    """Sender does not hold enough coin for a transfer."""


class TransferFailed(SofteeError):
    """The coin ledger refused a transfer."""


class ConfigError(SofteeError):
    """Configuration file could not be read."""
