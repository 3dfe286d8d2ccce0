class LedgerError(Exception):
    """Base class for every error that aborts a run."""


class ValidationError(LedgerError):
    pass


class MissingAmountError(ValidationError):
    def __init__(self, transaction_id: int):
        super().__init__(f"Invalid row: tx {transaction_id} is a deposit or withdrawal without an amount")
        self.transaction_id = transaction_id


class UnexpectedAmountError(ValidationError):
    def __init__(self, transaction_id: int):
        super().__init__(f"Invalid row: tx {transaction_id} carries an amount on a dispute, resolve or chargeback")
        self.transaction_id = transaction_id


class NegativeAmountError(ValidationError):
    def __init__(self, transaction_id: int):
        super().__init__(f"Invalid row: tx {transaction_id} has a negative amount")
        self.transaction_id = transaction_id


class PrecisionError(ValidationError):
    def __init__(self, transaction_id: int):
        super().__init__(f"Invalid row: tx {transaction_id} has more than four decimal places")
        self.transaction_id = transaction_id


class StorageError(LedgerError):
    pass


class SerializationError(LedgerError):
    pass


class UsageError(LedgerError):
    def __init__(self):
        super().__init__("Usage: ledger-sim <input.csv>")


class InputNotFoundError(LedgerError):
    def __init__(self, path: str):
        super().__init__(f"File '{path}' does not exist")
        self.path = path


class InputReadError(LedgerError):
    def __init__(self, path: str):
        super().__init__(f"Could not read '{path}'")
        self.path = path


class RecordFormatError(LedgerError):
    def __init__(self, line: int, reason: str):
        super().__init__(f"CSV processing error on line {line}: {reason}")
        self.line = line
        self.reason = reason


class OutputWriteError(LedgerError):
    def __init__(self):
        super().__init__("Could not write csv")
