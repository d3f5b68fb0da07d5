"""Vault store: item id to stake record."""
from typing import Dict, Optional

from .stake import StakeRecord


class VaultStore:
    """Plain keyed storage of stake records.

    Holds no validation. A stored record may be stale once its item changes
    hands, so callers must check it against the collection before trusting it.
    """

    def __init__(self):
        self._records: Dict[int, StakeRecord] = {}

    def get(self, item_id: int) -> Optional[StakeRecord]:
        return self._records.get(item_id)

    def set(self, item_id: int, record: StakeRecord) -> None:
        self._records[item_id] = record

    def delete(self, item_id: int) -> None:
        self._records.pop(item_id, None)

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> Dict[str, Dict]:
        """Dump all records keyed by stringified item id."""
        return {str(item_id): record.model_dump() for item_id, record in self._records.items()}

    @classmethod
    def from_records(cls, records: Dict[str, Dict]) -> "VaultStore":
        vault = cls()
        for item_id, record in records.items():
            vault.set(int(item_id), StakeRecord(**record))
        return vault
