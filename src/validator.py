from errors import MissingAmountError, UnexpectedAmountError, NegativeAmountError, PrecisionError
from models import Transaction

MAX_DECIMAL_PLACES = 4


def validate(transaction: Transaction) -> None:
    """
    Check a decoded transaction against the structural rules.
    Rules are applied in order and the first one that fails is raised.
    """
    amount = transaction.amount
    is_transfer = transaction.transaction_type.is_transfer

    if is_transfer and amount is None:
        raise MissingAmountError(transaction.transaction_id)

    if not is_transfer and amount is not None:
        raise UnexpectedAmountError(transaction.transaction_id)

    if amount is None:
        return

    if amount.is_signed():
        raise NegativeAmountError(transaction.transaction_id)

    if decimal_places(amount) > MAX_DECIMAL_PLACES:
        raise PrecisionError(transaction.transaction_id)


def decimal_places(amount) -> int:
    exponent = amount.as_tuple().exponent
    if not isinstance(exponent, int):
        # NaN and Infinity
        return 0
    return max(-exponent, 0)
