from typing import Dict, Iterable, Iterator, List, Optional

from dispute_ledger.models import TransactionRecord


class TransactionLog:
    """
    Owns every transaction record in input order.
    Applied deposits are indexed by transaction id so that disputes, resolves
    and chargebacks can find them. The index stores positions into the list,
    and status updates happen on the owned record.
    """

    def __init__(self, records: Optional[Iterable[TransactionRecord]] = None):
        self._records: List[TransactionRecord] = []
        self._deposit_index: Dict[int, int] = {}
        if records is not None:
            self.append_in_order(records)

    def append_in_order(self, records: Iterable[TransactionRecord]) -> None:
        """Append records as given, without reordering or deduplication."""
        self._records.extend(records)

    def index_deposit(self, transaction_id: int, position: int) -> None:
        """Register an applied deposit. A repeated id points at the latest one."""
        if not 0 <= position < len(self._records):
            raise IndexError(f"position {position} outside log of {len(self._records)} records")
        self._deposit_index[transaction_id] = position

    def find_deposit(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Return the indexed deposit record, or None if no deposit was applied under this id."""
        position = self._deposit_index.get(transaction_id)
        if position is None:
            return None
        return self._records[position]

    def is_indexed(self, transaction_id: int) -> bool:
        return transaction_id in self._deposit_index

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, position: int) -> TransactionRecord:
        return self._records[position]

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self._records)
