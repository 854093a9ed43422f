import threading
from dataclasses import dataclass
from decimal import Context, Decimal
from enum import Enum
from typing import Optional, Tuple

CLIENT_ID_MAX = 2**16 - 1
TRANSACTION_ID_MAX = 2**32 - 1

# Balance arithmetic never traps: overflow saturates to Infinity and
# Infinity - Infinity gives NaN. Passed explicitly since threads do not
# inherit the caller's decimal context.
BALANCE_CONTEXT = Context(traps=[])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    NO_ACCOUNT = "no_account"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_DISPUTED = "not_disputed"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if not 0 <= self.client_id <= CLIENT_ID_MAX:
            raise ValueError(f"client id out of range: {self.client_id}")
        if not 0 <= self.transaction_id <= TRANSACTION_ID_MAX:
            raise ValueError(f"transaction id out of range: {self.transaction_id}")
        if self.transaction_type.carries_amount != (self.amount is not None):
            raise ValueError(
                f"{self.transaction_type.value} must "
                f"{'carry' if self.transaction_type.carries_amount else 'not carry'} an amount"
            )

    @property
    def key(self) -> Tuple[int, int]:
        return self.client_id, self.transaction_id

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return BALANCE_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)
        self.held = BALANCE_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)
        self.available = BALANCE_CONTEXT.add(self.available, amount)

    def charge_back(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)
        self.locked = True


class ProcessingStats:
    """Thread-safe counters for tracking replay statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self.ignored = 0
        self.rejected = 0

    def record_result(self, result: ProcessingResult):
        with self._lock:
            if result == ProcessingResult.APPLIED:
                self.applied += 1
            else:
                self.ignored += 1

    def record_rejection(self):
        with self._lock:
            self.rejected += 1

    def __repr__(self) -> str:
        return f"Applied: {self.applied}, Ignored: {self.ignored}, Rejected: {self.rejected}"
