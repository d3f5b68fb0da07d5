"""Softee ledger core."""
from .clock import ManualClock, SystemClock
from .coin import CoinLedger
from .config import LedgerConfig, load_config, setup_logging
from .errors import (
    CoinAlreadyInitialized,
    CoinNotInitialized,
    ConfigError,
    HarvestClosed,
    InsufficientBalance,
    InvalidTimelockDecrease,
    SofteeError,
    StakingClosed,
    TransferFailed,
    Unauthorized,
    WithdrawalsLocked,
)
from .ledger import SofteeLedger
from .oracle import ZERO_ADDRESS, InMemoryCollection, OwnershipOracle, TokenOwnership
from .sandbox import Sandbox
from .stake import StakeRecord
from .vault import VaultStore
