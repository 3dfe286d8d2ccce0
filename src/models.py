from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_transfer(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    DECLINED = "declined"
    IGNORED = "ignored"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    """
    Balance state for one client.

    `total` is stored rather than derived: every mutation recomputes it
    from `available` and `held`.
    """

    client_id: int
    available: Decimal = Decimal("0.0")
    held: Decimal = Decimal("0.0")
    total: Decimal = Decimal("0.0")
    locked: bool = False

    def deposit(self, amount: Decimal) -> bool:
        if self.locked:
            return False
        self.available += amount
        self.total = self.available + self.held
        return True

    def withdraw(self, amount: Decimal) -> bool:
        if self.locked or self.available < amount:
            return False
        self.available -= amount
        self.total = self.available + self.held
        return True

    def dispute(self, signed_amount: Decimal) -> None:
        # available is deliberately left untouched
        self.held += signed_amount
        self.total = self.held + self.available

    def resolve(self, signed_amount: Decimal) -> None:
        self.held -= signed_amount
        self.total = self.held + self.available

    def chargeback(self, amount: Decimal) -> None:
        self.held -= amount
        self.total = self.held + self.available
        self.locked = True


class OutcomeKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass
class OutcomeRecord:
    """What the engine remembers about a deposit or withdrawal."""

    kind: OutcomeKind
    client_id: int
    amount: Decimal
    succeeded: bool
    disputed: bool = False

    @classmethod
    def deposit(cls, client_id: int, amount: Decimal, succeeded: bool) -> "OutcomeRecord":
        return cls(OutcomeKind.DEPOSIT, client_id, amount, succeeded)

    @classmethod
    def withdrawal(cls, client_id: int, amount: Decimal, succeeded: bool) -> "OutcomeRecord":
        return cls(OutcomeKind.WITHDRAWAL, client_id, amount, succeeded)

    def client(self) -> int:
        return self.client_id

    def is_disputed(self) -> bool:
        return self.disputed

    def successful_amount(self) -> Optional[Decimal]:
        """Amount of the original transfer, or None if it never applied."""
        match self.kind, self.succeeded:
            case (OutcomeKind.DEPOSIT | OutcomeKind.WITHDRAWAL), True:
                return self.amount
        return None

    def direction(self) -> Decimal:
        match self.kind:
            case OutcomeKind.DEPOSIT:
                return Decimal("1.0")
            case OutcomeKind.WITHDRAWAL:
                return Decimal("-1.0")
        raise ValueError(f"Unknown outcome kind: {self.kind!r}")

    def dispute(self) -> None:
        self.disputed = True

    def resolve_dispute(self) -> None:
        self.disputed = False


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.declined = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        match result:
            case ProcessingResult.APPLIED:
                self.applied += 1
            case ProcessingResult.DECLINED:
                self.declined += 1
            case ProcessingResult.IGNORED:
                self.ignored += 1

    @property
    def submitted(self) -> int:
        return self.applied + self.declined + self.ignored

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, declined={self.declined}, ignored={self.ignored})"
