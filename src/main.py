import os
import sys
import logging
from typing import List, Optional, TextIO

from csv_io import read_transactions, write_accounts
from engine import LedgerEngine
from errors import LedgerError, StorageError, UsageError, InputNotFoundError, InputReadError, OutputWriteError
from models import ProcessingStats

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _release(engine: LedgerEngine) -> None:
    """Finish an engine whose run already failed, keeping the original error in charge."""
    try:
        engine.finish()
    except StorageError as e:
        logger.warning(f"Could not release outcome log after failed run: {e}")


def run(filepath: str, out: TextIO) -> ProcessingStats:
    """Process a CSV file of transactions and write the final account snapshot to `out`."""
    if not os.path.exists(filepath):
        raise InputNotFoundError(filepath)

    try:
        f = open(filepath, "r", newline="")
    except OSError as e:
        raise InputReadError(filepath) from e

    stats = ProcessingStats()
    engine = LedgerEngine()
    try:
        with f:
            try:
                for transaction in read_transactions(f):
                    stats.record(engine.submit(transaction))
            except (OSError, UnicodeDecodeError) as e:
                raise InputReadError(filepath) from e
    except LedgerError:
        _release(engine)
        raise

    accounts = engine.finish()

    logger.info(f"Processed {stats.submitted} transactions for {len(accounts)} accounts: {stats}")

    try:
        write_accounts(sorted(accounts, key=lambda account: account.client_id), out)
        out.flush()
    except OSError as e:
        raise OutputWriteError() from e

    return stats


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = sys.argv[1:] if argv is None else argv

    try:
        if len(args) != 1:
            raise UsageError()
        run(args[0], sys.stdout)
    except LedgerError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
