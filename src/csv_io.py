import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from errors import RecordFormatError
from models import Transaction, TransactionType, ClientAccount

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Decode a `type, client, tx, amount` CSV stream, one Transaction per row."""
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        return

    for row in reader:
        yield parse_row(row, reader.line_num)


def parse_row(row: Dict[Optional[str], Optional[str]], line: int) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise RecordFormatError(line, "too many fields")

    normalized = {k.strip(): (v.strip() if v is not None else "") for k, v in row.items()}

    try:
        type_str = normalized["type"].lower()
        client_str = normalized["client"]
        tx_str = normalized["tx"]
    except KeyError as e:
        raise RecordFormatError(line, f"missing column {e}") from e

    try:
        transaction_type = TransactionType(type_str)
    except ValueError as e:
        raise RecordFormatError(line, f"unknown transaction type {type_str!r}") from e

    client_id = _parse_id(client_str, MAX_CLIENT_ID, "client", line)
    transaction_id = _parse_id(tx_str, MAX_TRANSACTION_ID, "tx", line)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation as e:
            raise RecordFormatError(line, f"invalid amount {amount_str!r}") from e
        if not amount.is_finite():
            raise RecordFormatError(line, f"invalid amount {amount_str!r}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, maximum: int, column: str, line: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise RecordFormatError(line, f"invalid {column} {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise RecordFormatError(line, f"{column} {parsed} out of range (max {maximum})")
    return parsed


def format_decimal(value: Decimal) -> str:
    """Plain notation, keeping whatever precision the value has accumulated."""
    return f"{value:f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
