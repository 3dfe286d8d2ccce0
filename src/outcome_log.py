import json
import logging
import sqlite3
from decimal import Decimal, InvalidOperation
from typing import Optional

from errors import StorageError, SerializationError
from models import OutcomeKind, OutcomeRecord

logger = logging.getLogger(__name__)


def encode_record(record: OutcomeRecord) -> str:
    try:
        return json.dumps({
            "kind": record.kind.value,
            "client": record.client_id,
            "amount": str(record.amount),
            "succeeded": record.succeeded,
            "disputed": record.disputed,
        })
    except (TypeError, ValueError, AttributeError) as e:
        raise SerializationError(f"Could not encode outcome record {record!r}: {e}") from e


def decode_record(document: str) -> OutcomeRecord:
    try:
        data = json.loads(document)
        return OutcomeRecord(
            kind=OutcomeKind(data["kind"]),
            client_id=int(data["client"]),
            amount=Decimal(data["amount"]),
            succeeded=bool(data["succeeded"]),
            disputed=bool(data["disputed"]),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise SerializationError(f"Could not decode outcome record {document!r}: {e}") from e


class OutcomeLog:
    """
    Keyed store of the last known outcome of every deposit and withdrawal.
    Backed by sqlite; the default in-memory database lives only as long
    as the log is open.
    """

    def __init__(self, path: str = ":memory:"):
        self._path = path
        try:
            self._conn = sqlite3.connect(path)
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS outcomes (tx_id INTEGER PRIMARY KEY, record TEXT NOT NULL)"
            )
        except sqlite3.Error as e:
            raise StorageError(f"Could not open outcome log at {path!r}: {e}") from e
        logger.debug(f"Opened outcome log at {path!r}")

    def get(self, transaction_id: int) -> Optional[OutcomeRecord]:
        """Retrieve the stored outcome for a transaction id, if any."""
        try:
            row = self._conn.execute(
                "SELECT record FROM outcomes WHERE tx_id = ?", (transaction_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Could not read tx {transaction_id} from outcome log: {e}") from e

        if row is None:
            return None
        return decode_record(row[0])

    def put(self, transaction_id: int, record: OutcomeRecord) -> None:
        """Store an outcome, replacing any earlier record with the same id."""
        document = encode_record(record)
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO outcomes (tx_id, record) VALUES (?, ?)",
                    (transaction_id, document),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Could not write tx {transaction_id} to outcome log: {e}") from e

    def __len__(self) -> int:
        try:
            return self._conn.execute("SELECT COUNT(*) FROM outcomes").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Could not count outcome log entries: {e}") from e

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Could not close outcome log at {self._path!r}: {e}") from e

    def __enter__(self) -> "OutcomeLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
