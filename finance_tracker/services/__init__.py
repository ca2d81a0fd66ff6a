"""Business logic services."""

from finance_tracker.services.ledger_service import LedgerService
from finance_tracker.services.account_service import AccountService
from finance_tracker.services.transaction_service import TransactionService

__all__ = ["LedgerService", "AccountService", "TransactionService"]
