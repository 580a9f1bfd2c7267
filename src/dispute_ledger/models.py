from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionStatus(Enum):
    NOMINAL = "nominal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


@dataclass
class TransactionRecord:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    status: TransactionStatus = TransactionStatus.NOMINAL

    @property
    def amount_or_zero(self) -> Decimal:
        # Deposits and withdrawals without an amount move nothing.
        return self.amount if self.amount is not None else ZERO

    def __repr__(self) -> str:
        return f"TransactionRecord({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount}, status={self.status.value})"


@dataclass(frozen=True)
class Account:
    """
    Balance snapshot for one client.
    Every operation returns a new Account; the ledger stores whole snapshots.
    """

    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False

    def credit(self, amount: Decimal) -> "Account":
        return replace(self, available=self.available + amount, total=self.total + amount)

    def debit(self, amount: Decimal) -> "Account":
        return replace(self, available=self.available - amount, total=self.total - amount)

    def hold(self, amount: Decimal) -> "Account":
        return replace(self, available=self.available - amount, held=self.held + amount)

    def release_hold(self, amount: Decimal) -> "Account":
        return replace(self, available=self.available + amount, held=self.held - amount)

    def charge_back(self, amount: Decimal) -> "Account":
        return replace(self, held=self.held - amount, total=self.total - amount, locked=True)


class ProcessingStats:
    """Counters for one engine run."""

    def __init__(self):
        self.processed = 0
        self.failed = 0

    def record_success(self):
        self.processed += 1

    def record_failure(self):
        self.failed += 1
