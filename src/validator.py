"""
Turns one raw CSV row into a Transaction.

The row is a sequence of already-trimmed string fields laid out as
``type, client, tx, amount``. Every kind shares that layout; dispute,
resolve and chargeback rows leave the amount column empty.

Malformed rows are rejected by returning None. Reporting the rejection
is up to the caller, which knows the row's position in the source.
"""
import logging
import re
from decimal import Decimal, DecimalException
from typing import Optional, Sequence

from models import CLIENT_ID_MAX, TRANSACTION_ID_MAX, Transaction, TransactionType

logger = logging.getLogger(__name__)

FIELD_COUNT = 4

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_transaction_type(value: str) -> Optional[TransactionType]:
    try:
        return TransactionType(value.lower())
    except ValueError:
        return None


def parse_unsigned(value: str, maximum: int) -> Optional[int]:
    """Parse a plain unsigned integer no larger than ``maximum``."""
    if not _UNSIGNED_PATTERN.fullmatch(value):
        return None
    # Leading zeros are allowed; bound the significant digits before int() sees them.
    digits = value.lstrip("+").lstrip("0") or "0"
    if len(digits) > len(str(maximum)):
        return None
    number = int(digits)
    if number > maximum:
        return None
    return number


def parse_amount(value: str) -> Optional[Decimal]:
    """Parse a finite decimal amount, or return None when there isn't one."""
    if not _DECIMAL_PATTERN.fullmatch(value):
        return None
    try:
        return Decimal(value)
    except DecimalException:
        return None


def parse_record(fields: Sequence[str]) -> Optional[Transaction]:
    """
    Validate one row and build its Transaction.

    Returns None when:
        - the type is missing or not one of the five known kinds
        - the row does not have exactly four fields
        - client or tx is missing, not an unsigned integer, or out of range
        - a deposit or withdrawal has no parsable amount
    """
    if not fields:
        return None

    transaction_type = parse_transaction_type(fields[0])
    if transaction_type is None:
        return None

    if len(fields) != FIELD_COUNT:
        return None

    client_id = parse_unsigned(fields[1], CLIENT_ID_MAX)
    if client_id is None:
        return None

    transaction_id = parse_unsigned(fields[2], TRANSACTION_ID_MAX)
    if transaction_id is None:
        return None

    amount = parse_amount(fields[3])
    if transaction_type.carries_amount:
        if amount is None:
            return None
    elif amount is not None:
        logger.debug(f"Ignoring amount {amount} on {transaction_type.value} for tx {transaction_id}")
        amount = None

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )
