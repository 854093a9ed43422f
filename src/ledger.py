import logging
from decimal import Decimal
from typing import Dict, Optional

from models import ClientAccount, ProcessingResult, Transaction, TransactionType
from transaction_index import TransactionIndex

logger = logging.getLogger(__name__)


class LedgerProcessor:
    """
    Applies transactions to the accounts it owns.
    Returns ProcessingResult to say whether the transaction changed anything.
    Any result other than APPLIED left every account untouched.
    """

    def __init__(self, index: TransactionIndex, accounts: Optional[Dict[int, ClientAccount]] = None):
        self._index = index
        self._accounts: Dict[int, ClientAccount] = {} if accounts is None else accounts

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._accounts

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: Account state changed
            NO_ACCOUNT: Client has never deposited
            INSUFFICIENT_FUNDS: Withdrawal larger than available funds
            UNKNOWN_TRANSACTION: No deposit/withdrawal with this (client, tx) anywhere in the input
            NOT_DISPUTED: Resolve for a transaction that was never disputed
        """
        # Locked accounts still accept every kind of transaction.
        if transaction.transaction_type == TransactionType.DEPOSIT:
            return self._handle_deposit(transaction)

        account = self._accounts.get(transaction.client_id)
        if account is None:
            logger.debug(f"{transaction}: no account for client {transaction.client_id}")
            return ProcessingResult.NO_ACCOUNT

        match transaction.transaction_type:
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def _referenced_amount(self, transaction: Transaction) -> Optional[Decimal]:
        amount = self._index.lookup_amount(transaction.client_id, transaction.transaction_id)
        if amount is None:
            logger.debug(f"{transaction}: referenced transaction not found")
        return amount

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        account = self._accounts.get(transaction.client_id)
        if account is None:
            account = ClientAccount(client_id=transaction.client_id)
            self._accounts[transaction.client_id] = account
        account.credit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount <= account.available:
            account.debit(transaction.amount)
            return ProcessingResult.APPLIED
        logger.debug(f"{transaction}: insufficient funds (available {account.available})")
        return ProcessingResult.INSUFFICIENT_FUNDS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._referenced_amount(transaction)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        account.hold(amount)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._referenced_amount(transaction)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        # Existence check over the whole input; an earlier resolve does not clear it.
        if not self._index.is_disputed(transaction.client_id, transaction.transaction_id):
            logger.debug(f"{transaction}: transaction was never disputed")
            return ProcessingResult.NOT_DISPUTED

        account.release_hold(amount)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        amount = self._referenced_amount(transaction)
        if amount is None:
            return ProcessingResult.UNKNOWN_TRANSACTION

        # No dispute required, unlike resolve.
        account.charge_back(amount)
        return ProcessingResult.APPLIED
