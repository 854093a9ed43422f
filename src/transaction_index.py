from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence, Set, Tuple

from models import Transaction, TransactionType

TransactionKey = Tuple[int, int]


def lookup_amount(records: Sequence[Transaction], client_id: int, transaction_id: int) -> Optional[Decimal]:
    """Amount of the first record anywhere in ``records`` for (client, tx) that has one."""
    for record in records:
        if record.client_id == client_id and record.transaction_id == transaction_id and record.amount is not None:
            return record.amount
    return None


def is_disputed(records: Sequence[Transaction], client_id: int, transaction_id: int) -> bool:
    """True if a dispute for (client, tx) exists anywhere in ``records``."""
    return any(
        record.transaction_type == TransactionType.DISPUTE
        and record.client_id == client_id
        and record.transaction_id == transaction_id
        for record in records
    )


class TransactionIndex:
    """
    Lookup tables over a complete record sequence.
    Answers the same questions as lookup_amount/is_disputed without rescanning.

    The index reflects the whole sequence, not a prefix of it: a dispute that
    appears later in the input is already visible to earlier records. It is
    read-only once built, so worker threads can share it.
    """

    def __init__(self):
        self._amounts: Dict[TransactionKey, Decimal] = {}
        self._disputed: Set[TransactionKey] = set()

    @classmethod
    def build(cls, records: Iterable[Transaction]) -> "TransactionIndex":
        index = cls()
        for record in records:
            index._add(record)
        return index

    def _add(self, record: Transaction) -> None:
        # First amount-bearing record wins; later duplicates of (client, tx) are ignored.
        if record.amount is not None:
            self._amounts.setdefault(record.key, record.amount)
        if record.transaction_type == TransactionType.DISPUTE:
            self._disputed.add(record.key)

    def lookup_amount(self, client_id: int, transaction_id: int) -> Optional[Decimal]:
        return self._amounts.get((client_id, transaction_id))

    def is_disputed(self, client_id: int, transaction_id: int) -> bool:
        return (client_id, transaction_id) in self._disputed

    def __len__(self) -> int:
        return len(self._amounts)
