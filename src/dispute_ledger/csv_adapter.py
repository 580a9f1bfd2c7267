import csv
import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, TextIO

from dispute_ledger.errors import HeaderError, ParseError, RowError
from dispute_ledger.models import Account, TransactionRecord, TransactionType

logger = logging.getLogger(__name__)

INPUT_HEADER = ["type", "client", "tx", "amount"]
OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

FOUR_PLACES = Decimal("0.0001")

AMOUNT_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)", re.ASCII)


def read_transactions(filepath: str) -> List[TransactionRecord]:
    """Read a transactions CSV file. Raises ParseError on any malformed input."""
    try:
        with open(filepath, "r", newline="") as f:
            return parse_transactions(f)
    except OSError as e:
        raise ParseError(f"Could not read {filepath}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Could not decode {filepath}: {e}") from e


def parse_transactions(stream: TextIO) -> List[TransactionRecord]:
    """
    Parse CSV text into records, preserving input order.
    The whole input is rejected if the header or any row is malformed.
    """
    reader = csv.reader(stream)
    try:
        header = next(reader, None)
        if header is None:
            raise HeaderError([])
        normalized_header = [field.strip().lower() for field in header]
        if normalized_header != INPUT_HEADER:
            raise HeaderError(normalized_header)

        records = []
        for row in reader:
            if not any(field.strip() for field in row):
                continue
            records.append(_parse_csv_row(row, reader.line_num))
    except csv.Error as e:
        raise RowError(reader.line_num, str(e)) from e

    logger.debug(f"Parsed {len(records)} transaction records")
    return records


def _parse_csv_row(row: List[str], line_number: int) -> TransactionRecord:
    """Parse CSV row into TransactionRecord."""
    if len(row) not in (3, 4):
        raise RowError(line_number, f"expected 3 or 4 fields, got {len(row)}")

    normalized = [field.strip() for field in row]
    transaction_type_str = normalized[0].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise RowError(line_number, f"unknown transaction type {normalized[0]!r}") from None

    client_id = _parse_unsigned(normalized[1], MAX_CLIENT_ID, "client", line_number)
    transaction_id = _parse_unsigned(normalized[2], MAX_TRANSACTION_ID, "tx", line_number)

    amount = None
    amount_str = normalized[3] if len(normalized) == 4 else ""
    if amount_str:
        amount = _parse_amount(amount_str, line_number)

    return TransactionRecord(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_unsigned(value: str, maximum: int, field: str, line_number: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise RowError(line_number, f"{field} must be an unsigned integer, got {value!r}")
    number = int(value)
    if number > maximum:
        raise RowError(line_number, f"{field} {number} out of range (max {maximum})")
    return number


def _parse_amount(value: str, line_number: int) -> Decimal:
    # Plain decimal notation only, which Decimal alone does not enforce.
    if not AMOUNT_PATTERN.fullmatch(value):
        raise RowError(line_number, f"amount must be a decimal number, got {value!r}")
    return Decimal(value)


def format_amount(value: Decimal) -> str:
    """Format with exactly 4 decimal places, rounding half away from zero."""
    rounded = value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:f}"


def write_accounts(accounts: Iterable[Account], stream: TextIO) -> None:
    """Write accounts as CSV, sorted by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow(_account_row(account))


def _account_row(account: Account) -> List[str]:
    return [
        str(account.client_id),
        format_amount(account.available),
        format_amount(account.held),
        format_amount(account.total),
        str(account.locked).lower(),
    ]
