"""Fungible reward coin balances."""
from typing import Dict
from loguru import logger

from .errors import InsufficientBalance
from .oracle import is_zero_address


class CoinLedger:
    """Balance ledger for the reward coin.

    The staking ledger holds its reward pool here under its own address and
    pays harvests out of it.
    """

    def __init__(self, symbol: str = "SOFT"):
        self.symbol = symbol
        self._balances: Dict[str, int] = {}

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def mint(self, to: str, amount: int) -> None:
        """Credit newly created coin to an account."""
        if is_zero_address(to):
            raise ValueError("Cannot mint to the zero address")
        if amount < 0:
            raise ValueError("Mint amount must not be negative")
        self._balances[to] = self.balance_of(to) + amount
        logger.debug(f"Minted {amount} {self.symbol} to {to}")

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move coin between accounts.

        Args:
            sender: Account debited
            to: Account credited
            amount: Whole coin units

        Returns:
            True once the transfer is applied

        Raises:
            InsufficientBalance: If ``sender`` holds less than ``amount``
        """
        if amount < 0:
            raise ValueError("Transfer amount must not be negative")
        if is_zero_address(to):
            raise ValueError("Cannot transfer to the zero address")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {balance} {self.symbol}, cannot send {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        logger.debug(f"Transferred {amount} {self.symbol} from {sender} to {to}")
        return True

    def to_dict(self) -> Dict:
        return {"symbol": self.symbol, "balances": dict(self._balances)}

    @classmethod
    def from_dict(cls, data: Dict) -> "CoinLedger":
        coin = cls(symbol=data.get("symbol", "SOFT"))
        coin._balances = {account: int(amount) for account, amount in data.get("balances", {}).items()}
        return coin
