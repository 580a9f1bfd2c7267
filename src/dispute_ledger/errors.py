from typing import Optional


class PaymentsEngineError(Exception):
    """Base class for everything the engine raises."""


class ParseError(PaymentsEngineError):
    """Input could not be read. Fatal: nothing gets processed."""


class HeaderError(ParseError):
    def __init__(self, found: Optional[list] = None):
        self.found = found
        message = "Header must be [type, client, tx, amount]."
        if found is not None:
            message = f"{message} Found {found}."
        super().__init__(message)


class RowError(ParseError):
    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed record on line {line_number}: {reason}")


class ProcessError(PaymentsEngineError):
    """
    A single record could not be applied.
    The record has no effect; the batch moves on to the next one.
    """

    description = "Transaction could not be processed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.description)


class InsufficientFunds(ProcessError):
    description = "Insufficient funds for withdrawal."


class TransactionNotFound(ProcessError):
    description = "Transaction not found for dispute/resolve/chargeback."


class InvalidDispute(ProcessError):
    description = "Dispute must target a deposit transaction that is not already disputed or charged back."


class InvalidResolve(ProcessError):
    description = "Resolve must target a deposit transaction that has been disputed."


class InvalidChargeback(ProcessError):
    description = "Chargeback must target a deposit transaction that has been disputed."


class DisputeAfterWithdrawal(ProcessError):
    description = "Funds already withdrawn cannot be disputed."
