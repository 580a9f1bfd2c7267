import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

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
from dispute_ledger.transaction_processor import TransactionProcessor, apply_transaction


def deposit(client_id, tx_id, amount):
    return TransactionRecord(TransactionType.DEPOSIT, client_id, tx_id, Decimal(amount))


def withdrawal(client_id, tx_id, amount):
    return TransactionRecord(TransactionType.WITHDRAWAL, client_id, tx_id, Decimal(amount))


def dispute(client_id, tx_id):
    return TransactionRecord(TransactionType.DISPUTE, client_id, tx_id)


def resolve(client_id, tx_id):
    return TransactionRecord(TransactionType.RESOLVE, client_id, tx_id)


def chargeback(client_id, tx_id):
    return TransactionRecord(TransactionType.CHARGEBACK, client_id, tx_id)


class TestApplyTransaction:
    """The transition function on its own, without log or ledger."""

    def test_deposit(self):
        account, status = apply_transaction(Account(client_id=1), deposit(1, 1, "2.5"))
        assert account.available == Decimal("2.5")
        assert account.total == Decimal("2.5")
        assert status is None

    def test_withdrawal_insufficient_funds(self):
        with pytest.raises(InsufficientFunds):
            apply_transaction(Account(client_id=1), withdrawal(1, 1, "0.0001"))

    def test_withdrawal_of_entire_balance(self):
        start = Account(client_id=1, available=Decimal("5"), total=Decimal("5"))
        account, _ = apply_transaction(start, withdrawal(1, 2, "5"))
        assert account.available == Decimal("0")
        assert account.total == Decimal("0")

    def test_dispute_moves_funds_to_held(self):
        start = Account(client_id=1, available=Decimal("5"), total=Decimal("5"))
        account, status = apply_transaction(start, dispute(1, 1), deposit(1, 1, "5"))
        assert account.available == Decimal("0")
        assert account.held == Decimal("5")
        assert account.total == Decimal("5")
        assert status == TransactionStatus.DISPUTED

    def test_dispute_without_deposit(self):
        with pytest.raises(TransactionNotFound):
            apply_transaction(Account(client_id=1), dispute(1, 1), None)

    def test_resolve_requires_disputed_status(self):
        start = Account(client_id=1, available=Decimal("5"), total=Decimal("5"))
        with pytest.raises(InvalidResolve):
            apply_transaction(start, resolve(1, 1), deposit(1, 1, "5"))

    def test_chargeback_requires_disputed_status(self):
        start = Account(client_id=1, available=Decimal("5"), total=Decimal("5"))
        with pytest.raises(InvalidChargeback):
            apply_transaction(start, chargeback(1, 1), deposit(1, 1, "5"))

    def test_input_account_untouched(self):
        start = Account(client_id=1, available=Decimal("5"), total=Decimal("5"))
        apply_transaction(start, withdrawal(1, 2, "3"))
        assert start.available == Decimal("5")


class TestTransactionProcessor:
    def setup_method(self):
        self.log = TransactionLog()
        self.ledger = AccountLedger()
        self.processor = TransactionProcessor(self.log, self.ledger)

    def process(self, record):
        """Append a record and process it at its position."""
        self.log.append_in_order([record])
        return self.processor.process_record(len(self.log) - 1)

    def test_deposit(self):
        account = self.process(deposit(1, 1, "100"))

        assert account.available == Decimal("100")
        assert account.total == Decimal("100")
        assert self.ledger.get(1) == account
        assert self.log.find_deposit(1) is self.log[0]

    def test_withdrawal_success(self):
        self.process(deposit(1, 1, "100"))
        account = self.process(withdrawal(1, 2, "60"))

        assert account.available == Decimal("40")
        assert account.total == Decimal("40")

    def test_withdrawal_insufficient_funds(self):
        self.process(deposit(1, 1, "50"))

        with pytest.raises(InsufficientFunds):
            self.process(withdrawal(1, 2, "100"))

        account = self.ledger.get(1)
        assert account.available == Decimal("50")
        assert account.total == Decimal("50")

    def test_withdrawal_is_never_indexed(self):
        self.process(deposit(1, 1, "100"))
        self.process(withdrawal(1, 2, "10"))

        assert not self.log.is_indexed(2)
        with pytest.raises(TransactionNotFound):
            self.process(dispute(1, 2))

    def test_dispute(self):
        self.process(deposit(1, 1, "100"))
        account = self.process(dispute(1, 1))

        assert account.available == Decimal("0")
        assert account.held == Decimal("100")
        assert account.total == Decimal("100")
        assert self.log[0].status == TransactionStatus.DISPUTED

    def test_dispute_tx_not_found(self):
        with pytest.raises(TransactionNotFound):
            self.process(dispute(1, 99))

        assert self.ledger.get(1) == Account(client_id=1)

    def test_dispute_from_other_client_holds_on_disputing_account(self):
        self.process(deposit(1, 1, "100"))
        self.process(deposit(2, 2, "100"))

        account = self.process(dispute(2, 1))

        assert account.client_id == 2
        assert account.available == Decimal("0")
        assert account.held == Decimal("100")
        assert account.total == Decimal("100")
        assert self.ledger.get(1).available == Decimal("100")
        assert self.log[0].status == TransactionStatus.DISPUTED

    def test_dispute_from_other_client_without_funds(self):
        self.process(deposit(1, 1, "100"))

        with pytest.raises(DisputeAfterWithdrawal):
            self.process(dispute(2, 1))

        assert self.ledger.get(2) == Account(client_id=2)
        assert self.log[0].status == TransactionStatus.NOMINAL

    def test_dispute_twice(self):
        self.process(deposit(1, 1, "100"))
        self.process(dispute(1, 1))

        with pytest.raises(InvalidDispute):
            self.process(dispute(1, 1))

        assert self.ledger.get(1).held == Decimal("100")

    def test_dispute_after_withdrawal(self):
        self.process(deposit(1, 1, "1.0"))
        self.process(withdrawal(1, 2, "0.5"))

        with pytest.raises(DisputeAfterWithdrawal):
            self.process(dispute(1, 1))

        account = self.ledger.get(1)
        assert account.available == Decimal("0.5")
        assert account.held == Decimal("0")
        assert self.log[0].status == TransactionStatus.NOMINAL

    def test_resolve(self):
        self.process(deposit(1, 1, "100"))
        self.process(dispute(1, 1))
        account = self.process(resolve(1, 1))

        assert account.available == Decimal("100")
        assert account.held == Decimal("0")
        assert self.log[0].status == TransactionStatus.NOMINAL

    def test_resolve_not_disputed(self):
        self.process(deposit(1, 1, "100"))

        with pytest.raises(InvalidResolve):
            self.process(resolve(1, 1))

    def test_resolve_not_found(self):
        with pytest.raises(TransactionNotFound):
            self.process(resolve(1, 1))

    def test_chargeback(self):
        self.process(deposit(1, 1, "100"))
        self.process(dispute(1, 1))
        account = self.process(chargeback(1, 1))

        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is True
        assert self.log[0].status == TransactionStatus.CHARGED_BACK

    def test_chargeback_not_found(self):
        with pytest.raises(TransactionNotFound):
            self.process(chargeback(1, 1))

    def test_charged_back_deposit_cannot_be_disputed_again(self):
        self.process(deposit(1, 1, "100"))
        self.process(dispute(1, 1))
        self.process(chargeback(1, 1))

        with pytest.raises(InvalidDispute):
            self.process(dispute(1, 1))
        with pytest.raises(InvalidChargeback):
            self.process(chargeback(1, 1))

    def test_locked_account_still_accepts_transactions(self):
        # Locking only changes the reported flag; see DESIGN.md open questions.
        self.process(deposit(1, 1, "100"))
        self.process(dispute(1, 1))
        self.process(chargeback(1, 1))

        account = self.process(deposit(1, 2, "50"))
        assert account.available == Decimal("50")
        assert account.locked is True

    def test_missing_amount_counts_as_zero_by_design(self):
        # Deliberate permissive default: a deposit or withdrawal without an
        # amount succeeds and moves nothing. Not a parse error.
        account = self.process(TransactionRecord(TransactionType.DEPOSIT, 1, 1))
        assert account == Account(client_id=1)
        assert self.log.is_indexed(1)

        account = self.process(TransactionRecord(TransactionType.WITHDRAWAL, 1, 2))
        assert account == Account(client_id=1)
