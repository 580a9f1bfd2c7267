from typing import Optional, Tuple

from dispute_ledger.account_ledger import AccountLedger
from dispute_ledger.errors import (
    DisputeAfterWithdrawal,
    InsufficientFunds,
    InvalidChargeback,
    InvalidDispute,
    InvalidResolve,
    TransactionNotFound,
)
from dispute_ledger.models import Account, TransactionRecord, TransactionStatus, TransactionType
from dispute_ledger.transaction_log import TransactionLog


def apply_transaction(
    account: Account,
    record: TransactionRecord,
    deposit: Optional[TransactionRecord] = None,
) -> Tuple[Account, Optional[TransactionStatus]]:
    """
    Compute the effect of one record on an account.

    Args:
        account: Snapshot of the record's client before the record.
        record: The record being applied.
        deposit: For dispute/resolve/chargeback, the indexed deposit the record
            targets, or None when there is none.

    Returns:
        The new account snapshot and, for dispute/resolve/chargeback, the status
        the targeted deposit moves to (None otherwise).

    Raises:
        ProcessError subclass when the record cannot be applied. Nothing is
        mutated in that case.
    """
    match record.transaction_type:
        case TransactionType.DEPOSIT:
            return account.credit(record.amount_or_zero), None

        case TransactionType.WITHDRAWAL:
            amount = record.amount_or_zero
            if account.available < amount:
                raise InsufficientFunds()
            return account.debit(amount), None

        case TransactionType.DISPUTE:
            if deposit is None:
                raise TransactionNotFound()
            if deposit.status != TransactionStatus.NOMINAL:
                raise InvalidDispute()
            amount = deposit.amount_or_zero
            if account.available < amount:
                raise DisputeAfterWithdrawal()
            return account.hold(amount), TransactionStatus.DISPUTED

        case TransactionType.RESOLVE:
            if deposit is None:
                raise TransactionNotFound()
            if deposit.status != TransactionStatus.DISPUTED:
                raise InvalidResolve()
            return account.release_hold(deposit.amount_or_zero), TransactionStatus.NOMINAL

        case TransactionType.CHARGEBACK:
            if deposit is None:
                raise TransactionNotFound()
            if deposit.status != TransactionStatus.DISPUTED:
                raise InvalidChargeback()
            return account.charge_back(deposit.amount_or_zero), TransactionStatus.CHARGED_BACK

    raise ValueError(f"Unknown transaction type: {record.transaction_type!r}")


class TransactionProcessor:
    """
    Applies records from a TransactionLog to an AccountLedger.
    Commits the new account snapshot and the deposit status only when the
    record succeeds. Ordering is the caller's job.
    """

    def __init__(self, log: TransactionLog, ledger: AccountLedger):
        self._log = log
        self._ledger = ledger

    def process_record(self, position: int) -> Account:
        """
        Apply the record at `position` and return the committed account.
        Raises ProcessError if the record is rejected.
        """
        record = self._log[position]
        account = self._ledger.get_or_create(record.client_id)

        deposit = None
        if record.transaction_type in (
            TransactionType.DISPUTE,
            TransactionType.RESOLVE,
            TransactionType.CHARGEBACK,
        ):
            # Looked up by tx id alone; the funds move on this record's client.
            deposit = self._log.find_deposit(record.transaction_id)

        account, deposit_status = apply_transaction(account, record, deposit)

        self._ledger.apply(account)
        if record.transaction_type == TransactionType.DEPOSIT:
            self._log.index_deposit(record.transaction_id, position)
        if deposit is not None and deposit_status is not None:
            deposit.status = deposit_status
        return account
