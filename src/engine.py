import logging
from typing import List

from models import Transaction, TransactionType, ClientAccount, OutcomeRecord, ProcessingResult
from outcome_log import OutcomeLog
from state import AccountLedger
from validator import validate

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies transactions, in input order, to the account ledger.

    Deposits and withdrawals are remembered in the outcome log so that later
    disputes, resolves and chargebacks can find them. References that don't
    make sense (unknown tx, other client, wrong dispute state, failed
    original) are ignored without raising.
    """

    def __init__(self, db_path: str = ":memory:"):
        self._outcomes = OutcomeLog(db_path)
        self._accounts = AccountLedger()

    def submit(self, transaction: Transaction) -> ProcessingResult:
        """
        Validate and apply a single transaction.

        Returns:
            APPLIED: Balances changed
            DECLINED: Deposit or withdrawal recorded, but the account refused it
            IGNORED: Dispute, resolve or chargeback with nothing valid to act on

        Raises ValidationError for malformed transactions and
        StorageError / SerializationError if the outcome log fails.
        """
        validate(transaction)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)

        raise ValueError(f"Unknown transaction type: {transaction.transaction_type!r}")

    def finish(self) -> List[ClientAccount]:
        """Return every account and release the outcome log. The engine is unusable afterwards."""
        accounts = self._accounts.drain()
        self._outcomes.close()
        return accounts

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        account = self._accounts.get_or_create_account(transaction.client_id)
        succeeded = account.deposit(transaction.amount)

        record = OutcomeRecord.deposit(transaction.client_id, transaction.amount, succeeded)
        self._outcomes.put(transaction.transaction_id, record)
        return ProcessingResult.APPLIED if succeeded else ProcessingResult.DECLINED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._accounts.get_or_create_account(transaction.client_id)
        succeeded = account.withdraw(transaction.amount)

        record = OutcomeRecord.withdrawal(transaction.client_id, transaction.amount, succeeded)
        self._outcomes.put(transaction.transaction_id, record)
        return ProcessingResult.APPLIED if succeeded else ProcessingResult.DECLINED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        record = self._outcomes.get(transaction.transaction_id)

        if record is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: unknown transaction, ignoring")
            return ProcessingResult.IGNORED

        if record.client() != transaction.client_id:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: client mismatch (expected {record.client()}, got {transaction.client_id}), ignoring")
            return ProcessingResult.IGNORED

        if record.is_disputed():
            logger.debug(f"Dispute for tx {transaction.transaction_id}: already disputed, ignoring")
            return ProcessingResult.IGNORED

        amount = record.successful_amount()
        if amount is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: original transaction failed, ignoring")
            return ProcessingResult.IGNORED

        account = self._accounts.get_or_create_account(transaction.client_id)
        account.dispute(amount * record.direction())

        record.dispute()
        self._outcomes.put(transaction.transaction_id, record)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        record = self._outcomes.get(transaction.transaction_id)

        if record is None:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: unknown transaction, ignoring")
            return ProcessingResult.IGNORED

        if record.client() != transaction.client_id:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: client mismatch (expected {record.client()}, got {transaction.client_id}), ignoring")
            return ProcessingResult.IGNORED

        if not record.is_disputed():
            logger.debug(f"Resolve for tx {transaction.transaction_id}: not disputed, ignoring")
            return ProcessingResult.IGNORED

        amount = record.successful_amount()
        if amount is None:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: original transaction failed, ignoring")
            return ProcessingResult.IGNORED

        account = self._accounts.get_or_create_account(transaction.client_id)
        account.resolve(amount * record.direction())

        record.resolve_dispute()
        self._outcomes.put(transaction.transaction_id, record)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        record = self._outcomes.get(transaction.transaction_id)

        if record is None:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: unknown transaction, ignoring")
            return ProcessingResult.IGNORED

        if record.client() != transaction.client_id:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: client mismatch (expected {record.client()}, got {transaction.client_id}), ignoring")
            return ProcessingResult.IGNORED

        amount = record.successful_amount()
        if amount is None:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: original transaction failed, ignoring")
            return ProcessingResult.IGNORED

        # An open dispute is not required, and the record is left as is.
        account = self._accounts.get_or_create_account(transaction.client_id)
        account.chargeback(amount)
        return ProcessingResult.APPLIED
