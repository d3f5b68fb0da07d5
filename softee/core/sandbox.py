"""Local sandbox: a collection, a reward coin and a ledger saved to disk."""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
from loguru import logger
from pydantic import BaseModel

from .clock import SystemClock
from .coin import CoinLedger
from .config import LedgerConfig
from .ledger import SofteeLedger
from .oracle import InMemoryCollection

SANDBOX_FILE = "sandbox.json"


class SandboxState(BaseModel):
    """On-disk layout of a sandbox."""
    collection: Dict[str, Any]
    coin: Dict[str, Any]
    ledger: Dict[str, Any]


class Sandbox:
    """Everything the ledger talks to, sharing one clock."""

    def __init__(self, collection: InMemoryCollection, coin: CoinLedger, ledger: SofteeLedger,
                 path: Optional[Path] = None):
        self.collection = collection
        self.coin = coin
        self.ledger = ledger
        self.path = path

    @classmethod
    def create(cls, controller: str, path: Optional[Union[str, Path]] = None, clock=None,
               config: Optional[LedgerConfig] = None, symbol: str = "SOFT") -> "Sandbox":
        """Start a fresh sandbox with the reward coin already bound."""
        clock = clock or SystemClock()
        collection = InMemoryCollection(clock=clock)
        coin = CoinLedger(symbol=symbol)
        ledger = SofteeLedger(collection, controller, config=config, clock=clock)
        ledger.init_coin(controller, coin)
        return cls(collection, coin, ledger, Path(path) if path else None)

    @classmethod
    def load(cls, path: Union[str, Path], clock=None) -> "Sandbox":
        """Load a saved sandbox.

        Raises:
            FileNotFoundError: If nothing was saved at ``path``
        """
        path = Path(path)
        with open(path) as f:
            state = SandboxState(**json.load(f))
        clock = clock or SystemClock()
        collection = InMemoryCollection.from_dict(state.collection, clock=clock)
        coin = CoinLedger.from_dict(state.coin)
        ledger = SofteeLedger.from_dict(state.ledger, collection, clock=clock, coin=coin)
        logger.debug(f"Loaded sandbox from {path}")
        return cls(collection, coin, ledger, path)

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the sandbox to disk and return where it went."""
        path = Path(path) if path else self.path
        if path is None:
            raise ValueError("No path to save the sandbox to")
        path.parent.mkdir(parents=True, exist_ok=True)
        state = SandboxState(
            collection=self.collection.to_dict(),
            coin=self.coin.to_dict(),
            ledger=self.ledger.to_dict(),
        )
        with open(path, 'w') as f:
            json.dump(state.model_dump(), f, indent=2)
        self.path = path
        logger.debug(f"Saved sandbox to {path}")
        return path

    def fund(self, amount: int) -> int:
        """Add reward coin to the ledger's pool and return the new pool balance."""
        self.coin.mint(self.ledger.address, amount)
        return self.pool_balance

    @property
    def pool_balance(self) -> int:
        return self.coin.balance_of(self.ledger.address)
