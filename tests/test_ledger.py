import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import LedgerProcessor
from models import ProcessingResult, Transaction, TransactionType
from transaction_index import TransactionIndex


def deposit(client_id, transaction_id, amount):
    return Transaction(TransactionType.DEPOSIT, client_id, transaction_id, Decimal(amount))


def withdrawal(client_id, transaction_id, amount):
    return Transaction(TransactionType.WITHDRAWAL, client_id, transaction_id, Decimal(amount))


def dispute(client_id, transaction_id):
    return Transaction(TransactionType.DISPUTE, client_id, transaction_id)


def resolve(client_id, transaction_id):
    return Transaction(TransactionType.RESOLVE, client_id, transaction_id)


def chargeback(client_id, transaction_id):
    return Transaction(TransactionType.CHARGEBACK, client_id, transaction_id)


def replay(transactions):
    processor = LedgerProcessor(TransactionIndex.build(transactions))
    results = [processor.process_transaction(transaction) for transaction in transactions]
    return processor.accounts, results


class TestLedgerProcessor:
    def test_deposit_creates_account(self):
        accounts, results = replay([deposit(1, 1, "100")])

        assert results == [ProcessingResult.APPLIED]
        account = accounts[1]
        assert account.available == Decimal("100")
        assert account.held == Decimal("0")
        assert account.total == Decimal("100")
        assert account.locked is False

    def test_deposit_adds_to_existing(self):
        accounts, _ = replay([deposit(1, 1, "100"), deposit(1, 2, "0.5")])
        assert accounts[1].available == Decimal("100.5")
        assert len(accounts) == 1

    def test_withdrawal_success(self):
        accounts, results = replay([deposit(1, 1, "100"), withdrawal(1, 2, "60")])

        assert results[1] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("40")
        assert accounts[1].total == Decimal("40")

    def test_withdrawal_of_entire_balance(self):
        accounts, results = replay([deposit(1, 1, "100"), withdrawal(1, 2, "100")])
        assert results[1] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("0")

    def test_withdrawal_insufficient_funds(self):
        accounts, results = replay([deposit(1, 1, "50"), withdrawal(1, 2, "100")])

        assert results[1] == ProcessingResult.INSUFFICIENT_FUNDS
        assert accounts[1].available == Decimal("50")
        assert accounts[1].total == Decimal("50")

    def test_only_deposits_create_accounts(self):
        accounts, results = replay([
            withdrawal(9, 1, "5"),
            dispute(9, 1),
            resolve(9, 1),
            chargeback(9, 1),
        ])

        assert accounts == {}
        assert results == [ProcessingResult.NO_ACCOUNT] * 4

    def test_dispute(self):
        accounts, results = replay([deposit(1, 1, "100"), dispute(1, 1)])

        assert results[1] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("0")
        assert accounts[1].held == Decimal("100")
        assert accounts[1].total == Decimal("100")

    def test_dispute_tx_not_found(self):
        accounts, results = replay([deposit(1, 1, "100"), dispute(1, 99)])
        assert results[1] == ProcessingResult.UNKNOWN_TRANSACTION
        assert accounts[1].held == Decimal("0")

    def test_dispute_other_clients_transaction(self):
        accounts, results = replay([deposit(1, 1, "100"), deposit(2, 2, "10"), dispute(2, 1)])
        assert results[2] == ProcessingResult.UNKNOWN_TRANSACTION
        assert accounts[1].held == Decimal("0")
        assert accounts[2].held == Decimal("0")

    def test_dispute_withdrawal_holds_its_amount(self):
        accounts, _ = replay([deposit(1, 1, "100"), withdrawal(1, 2, "30"), dispute(1, 2)])
        assert accounts[1].available == Decimal("40")
        assert accounts[1].held == Decimal("30")
        assert accounts[1].total == Decimal("70")

    def test_resolve(self):
        accounts, results = replay([deposit(1, 1, "100"), dispute(1, 1), resolve(1, 1)])

        assert results[2] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("100")
        assert accounts[1].held == Decimal("0")

    def test_resolve_not_disputed(self):
        accounts, results = replay([deposit(1, 1, "100"), resolve(1, 1)])
        assert results[1] == ProcessingResult.NOT_DISPUTED
        assert accounts[1].available == Decimal("100")

    def test_resolve_unknown_transaction(self):
        _, results = replay([deposit(1, 1, "100"), resolve(1, 2)])
        assert results[1] == ProcessingResult.UNKNOWN_TRANSACTION

    def test_resolve_twice_applies_twice(self):
        accounts, results = replay([deposit(1, 1, "100"), dispute(1, 1), resolve(1, 1), resolve(1, 1)])

        assert results[3] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("200")
        assert accounts[1].held == Decimal("-100")
        assert accounts[1].total == Decimal("100")

    def test_resolve_before_its_dispute(self):
        # The dispute exists later in the input, so the resolve is honoured.
        accounts, results = replay([deposit(1, 1, "100"), resolve(1, 1), dispute(1, 1)])

        assert results[1] == ProcessingResult.APPLIED
        assert accounts[1].available == Decimal("100")
        assert accounts[1].held == Decimal("0")

    def test_chargeback(self):
        accounts, results = replay([deposit(1, 1, "100"), dispute(1, 1), chargeback(1, 1)])

        assert results[2] == ProcessingResult.APPLIED
        account = accounts[1]
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is True

    def test_chargeback_without_dispute(self):
        accounts, results = replay([deposit(1, 1, "100"), chargeback(1, 1)])

        assert results[1] == ProcessingResult.APPLIED
        account = accounts[1]
        assert account.available == Decimal("100")
        assert account.held == Decimal("-100")
        assert account.total == Decimal("0")
        assert account.locked is True

    def test_chargeback_unknown_transaction(self):
        accounts, results = replay([deposit(1, 1, "100"), chargeback(1, 5)])
        assert results[1] == ProcessingResult.UNKNOWN_TRANSACTION
        assert accounts[1].locked is False

    def test_locked_account_still_accepts_transactions(self):
        accounts, results = replay([
            deposit(1, 1, "100"),
            dispute(1, 1),
            chargeback(1, 1),
            deposit(1, 2, "50"),
            withdrawal(1, 3, "10"),
        ])

        assert results[3:] == [ProcessingResult.APPLIED, ProcessingResult.APPLIED]
        assert accounts[1].available == Decimal("40")
        assert accounts[1].total == Decimal("40")
        assert accounts[1].locked is True

    def test_uses_supplied_account_map(self):
        accounts = {}
        processor = LedgerProcessor(TransactionIndex(), accounts)
        processor.process_transaction(deposit(3, 1, "1"))
        assert processor.accounts is accounts
        assert 3 in accounts
