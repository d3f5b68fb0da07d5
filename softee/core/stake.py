"""Stake records kept by the vault."""
from pydantic import BaseModel

from .oracle import ZERO_ADDRESS


class StakeRecord(BaseModel):
    """Record of an item staked by its holder."""
    holder: str = ZERO_ADDRESS
    stake_start: int = 0  # ownership start reported by the collection when staked
    last_harvested: int = 0
