"""Ownership oracle for the staked collection."""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from loguru import logger
from pydantic import BaseModel

from .clock import SystemClock

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: Optional[str]) -> bool:
    """Check whether an address is unset."""
    return not address or address == ZERO_ADDRESS


class TokenOwnership(BaseModel):
    """Ownership of an item as reported by the collection."""
    addr: str = ZERO_ADDRESS
    start_timestamp: int = 0
    burned: bool = False


class OwnershipOracle(ABC):
    """Source of truth for who owns what, and since when."""

    @abstractmethod
    def explicit_ownership_of(self, item_id: int) -> TokenOwnership:
        """Get current ownership of an item.

        Items that were never minted report the zero address.
        """
        pass

    @abstractmethod
    def tokens_of_owner(self, holder: str) -> List[int]:
        """Get every item currently held by an address."""
        pass


class InMemoryCollection(OwnershipOracle):
    """Sequentially minted collection kept in memory.

    Ownership start time is reset on every mint and transfer, which is what
    invalidates stale stake records after an item changes hands.
    """

    def __init__(self, clock=None, start_token_id: int = 0):
        self.clock = clock or SystemClock()
        self.start_token_id = start_token_id
        self._next_token_id = start_token_id
        self._ownerships: Dict[int, TokenOwnership] = {}

    @property
    def next_token_id(self) -> int:
        return self._next_token_id

    def mint(self, to: str, quantity: int = 1) -> List[int]:
        """Mint ``quantity`` new items to ``to``.

        Args:
            to: Receiving address
            quantity: Number of items to mint

        Returns:
            Ids of the minted items
        """
        if is_zero_address(to):
            raise ValueError("Cannot mint to the zero address")
        if quantity <= 0:
            raise ValueError("Mint quantity must be positive")

        now = self.clock.now()
        minted = []
        for _ in range(quantity):
            item_id = self._next_token_id
            self._ownerships[item_id] = TokenOwnership(addr=to, start_timestamp=now)
            minted.append(item_id)
            self._next_token_id += 1
        logger.debug(f"Minted {minted} to {to}")
        return minted

    def _require_live(self, item_id: int) -> TokenOwnership:
        ownership = self._ownerships.get(item_id)
        if ownership is None or ownership.burned:
            raise KeyError(f"Item {item_id} does not exist")
        return ownership

    def transfer(self, sender: str, to: str, item_id: int) -> None:
        """Move an item between holders, restarting its ownership clock."""
        ownership = self._require_live(item_id)
        if ownership.addr != sender:
            raise PermissionError(f"{sender} does not own item {item_id}")
        if is_zero_address(to):
            raise ValueError("Cannot transfer to the zero address")
        self._ownerships[item_id] = TokenOwnership(addr=to, start_timestamp=self.clock.now())
        logger.debug(f"Transferred item {item_id} from {sender} to {to}")

    def burn(self, item_id: int) -> None:
        """Destroy an item. The last holder stays on record, flagged burned."""
        ownership = self._require_live(item_id)
        self._ownerships[item_id] = TokenOwnership(
            addr=ownership.addr,
            start_timestamp=self.clock.now(),
            burned=True,
        )
        logger.debug(f"Burned item {item_id}")

    def explicit_ownership_of(self, item_id: int) -> TokenOwnership:
        ownership = self._ownerships.get(item_id)
        if ownership is None:
            return TokenOwnership()
        return ownership.model_copy()

    def tokens_of_owner(self, holder: str) -> List[int]:
        return [
            item_id for item_id, ownership in sorted(self._ownerships.items())
            if not ownership.burned and ownership.addr == holder
        ]

    def to_dict(self) -> Dict:
        return {
            "start_token_id": self.start_token_id,
            "next_token_id": self._next_token_id,
            "ownerships": {
                str(item_id): ownership.model_dump()
                for item_id, ownership in self._ownerships.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict, clock=None) -> "InMemoryCollection":
        collection = cls(clock=clock, start_token_id=data.get("start_token_id", 0))
        collection._next_token_id = data.get("next_token_id", collection.start_token_id)
        collection._ownerships = {
            int(item_id): TokenOwnership(**ownership)
            for item_id, ownership in data.get("ownerships", {}).items()
        }
        return collection
