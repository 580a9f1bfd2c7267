import logging
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from dispute_ledger.account_ledger import AccountLedger
from dispute_ledger.csv_adapter import read_transactions, write_accounts
from dispute_ledger.errors import ProcessError
from dispute_ledger.models import Account, ProcessingStats, TransactionRecord
from dispute_ledger.transaction_log import TransactionLog
from dispute_ledger.transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies a transaction log to client accounts, strictly in input order.
    Keeps a cursor into the log so that records appended later can be
    processed by another run_batch call without touching earlier ones.
    """

    def __init__(self, records: Optional[Iterable[TransactionRecord]] = None):
        self._log = TransactionLog(records)
        self._ledger = AccountLedger()
        self._processor = TransactionProcessor(self._log, self._ledger)
        self._stats = ProcessingStats()
        self._cursor = 0

    @classmethod
    def from_csv(cls, filepath: str) -> "PaymentsEngine":
        """Build an engine from a CSV file. Raises ParseError before anything is processed."""
        return cls(read_transactions(filepath))

    @property
    def log(self) -> TransactionLog:
        return self._log

    @property
    def ledger(self) -> AccountLedger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def cursor(self) -> int:
        return self._cursor

    def append_transactions(self, records: Iterable[TransactionRecord]) -> None:
        """Queue more records behind the ones already in the log."""
        self._log.append_in_order(records)

    def run_batch(self) -> Tuple[int, int]:
        """
        Process every record from the cursor to the end of the log.

        Returns:
            (successes, failures) for this batch only.
        """
        start = self._cursor
        successes = 0
        failures = 0
        logger.info(f"Processing records {start} to {len(self._log)}")

        while self._cursor < len(self._log):
            try:
                self._processor.process_record(self._cursor)
            except ProcessError as e:
                failures += 1
                self._stats.record_failure()
                logger.warning(f"Error on transaction record #{self._cursor}: {e}")
            else:
                successes += 1
                self._stats.record_success()
            self._cursor += 1

        logger.info(f"Processed: {successes}, Failed: {failures}")
        return successes, failures

    def get_all_accounts(self) -> Dict[int, Account]:
        """Return all accounts (for final output)."""
        return self._ledger.get_all_accounts()

    def sorted_accounts(self) -> List[Account]:
        return self._ledger.sorted_accounts()

    def write_accounts(self, stream: TextIO) -> None:
        write_accounts(self._ledger.sorted_accounts(), stream)
