"""The Softee ledger: staking, harvesting and administration behind one lock."""
import threading
from typing import Dict, Iterable, List, Optional
from .admin import AdminMixin
from .clock import SystemClock
from .coin import CoinLedger
from .config import LedgerConfig
from .errors import CoinNotInitialized, ConfigError, TransferFailed
from .harvest import HarvestEngine
from .oracle import OwnershipOracle
from .staking import StakingEngine
from .vault import VaultStore

DEFAULT_LEDGER_ADDRESS = "softee.vault"


class SofteeLedger(AdminMixin):
    """Soft staking ledger for one collection.

    Items never leave their holder's wallet. A stake stays valid only while
    the collection reports the same holder and ownership start, so a transfer
    or burn unstakes the item without any hook into the collection.

    Every call takes the ledger lock, so concurrent batches cannot interleave
    their updates.
    """

    def __init__(
        self,
        oracle: OwnershipOracle,
        controller: str,
        config: Optional[LedgerConfig] = None,
        clock=None,
        address: str = DEFAULT_LEDGER_ADDRESS,
        coin: Optional[CoinLedger] = None,
        vault: Optional[VaultStore] = None,
        distributed: int = 0,
    ):
        self.oracle = oracle
        self.controller = controller
        self.address = address
        self.config = config or LedgerConfig()
        self.clock = clock or SystemClock()
        self.vault = vault if vault is not None else VaultStore()
        self._coin = coin
        if coin is not None:
            self.config.coin = coin.symbol
        self._lock = threading.RLock()
        self.staking = StakingEngine(self.vault, oracle, self.config, self.clock)
        self.harvesting = HarvestEngine(self.staking, self._pay, distributed)

    def _pay(self, to: str, amount: int) -> None:
        if self._coin is None:
            raise CoinNotInitialized("No reward coin bound")
        if not self._coin.transfer(self.address, to, amount):
            raise TransferFailed(f"Transfer of {amount} to {to} was refused")

    # Mutations

    def stake(self, caller: str, item_ids: Iterable[int]) -> None:
        with self._lock:
            self.staking.stake(caller, item_ids)

    def unstake(self, caller: str, item_ids: Iterable[int]) -> None:
        with self._lock:
            self.staking.unstake(caller, item_ids)

    def harvest(self, caller: str, item_ids: Iterable[int]) -> int:
        with self._lock:
            return self.harvesting.harvest(caller, item_ids)

    # Queries

    def is_staked(self, item_id: int) -> bool:
        with self._lock:
            return self.staking.is_staked(item_id)

    def filter_staked(self, item_ids: Iterable[int]) -> List[int]:
        with self._lock:
            return self.staking.filter_staked(item_ids)

    def staked(self, holder: str) -> List[int]:
        with self._lock:
            return self.staking.staked(holder)

    @property
    def distributed(self) -> int:
        with self._lock:
            return self.harvesting.distributed

    @property
    def harvest_rate(self) -> int:
        return self.config.harvest_rate

    @property
    def harvest_time_threshold(self) -> int:
        return self.config.harvest_time_threshold

    @property
    def coin_withdraw_timelock(self) -> int:
        return self.config.coin_withdraw_timelock

    @property
    def harvest_opened(self) -> bool:
        return self.config.harvest_opened

    @property
    def staking_opened(self) -> bool:
        return self.config.staking_opened

    @property
    def coin(self) -> Optional[CoinLedger]:
        return self._coin

    # Persistence

    def to_dict(self) -> Dict:
        with self._lock:
            return {
                "controller": self.controller,
                "address": self.address,
                "config": self.config.model_dump(),
                "distributed": self.distributed,
                "vault": self.vault.records(),
            }

    @classmethod
    def from_dict(cls, data: Dict, oracle: OwnershipOracle, clock=None,
                  coin: Optional[CoinLedger] = None) -> "SofteeLedger":
        """Restore a ledger saved with ``to_dict``.

        ``coin`` is only bound if the saved ledger had a coin bound.

        Raises:
            ConfigError: If ``coin`` is not the coin the ledger was bound to
        """
        config = LedgerConfig(**data.get("config", {}))
        if config.coin is None:
            coin = None
        elif coin is not None and coin.symbol != config.coin:
            raise ConfigError(f"Saved ledger was bound to {config.coin}, got {coin.symbol}")
        return cls(
            oracle=oracle,
            controller=data["controller"],
            config=config,
            clock=clock,
            address=data.get("address", DEFAULT_LEDGER_ADDRESS),
            coin=coin,
            vault=VaultStore.from_records(data.get("vault", {})),
            distributed=int(data.get("distributed", 0)),
        )
