import sys
import logging
from typing import List, Optional

from pydantic import ValidationError

from dispute_ledger.config import get_config
from dispute_ledger.errors import ParseError
from dispute_ledger.payments_engine import PaymentsEngine


def configure_logging() -> None:
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format=config.log_format,
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print("Usage: dispute-ledger <input.csv>", file=sys.stderr)
        return 1

    try:
        configure_logging()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    filepath = argv[1]
    try:
        engine = PaymentsEngine.from_csv(filepath)
    except ParseError as e:
        print(e, file=sys.stderr)
        return 1

    engine.run_batch()
    engine.write_accounts(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
