"""
Import pipeline — uploaded table to inserted transactions.

Each import:
1. Sniffs the schema mode from the header row
2. Normalizes every row into a draft (blank and bad rows are counted)
3. Resolves account names to ids, creating missing accounts
4. Inserts the finalized batch through the store in one call

Per-row problems never raise. The only exceptions are
TabularDataError (the input is not a table at all) and
PersistenceError (the store failed).
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from finance_tracker.errors import TabularDataError
from finance_tracker.importing.normalizer import normalize_rows
from finance_tracker.importing.resolver import AccountResolver
from finance_tracker.importing.schema import FieldAccessor
from finance_tracker.importing.tabular import read_table
from finance_tracker.schemas.account import AccountRecord
from finance_tracker.schemas.importing import ImportResult, ImportStatus
from finance_tracker.schemas.transaction import TransactionCreate
from finance_tracker.store.interface import LedgerStore

logger = structlog.get_logger(__name__)


def _headers(rows: Sequence[Mapping[str, Any] | None]) -> list[str]:
    for row in rows:
        if row:
            return list(row.keys())
    return []


class ImportPipeline:
    """
    Orchestrates one import for one user scope.

    The store is injected; the pipeline holds no other state
    between runs, so separate imports never share anything.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def prepare(
        self,
        rows: Iterable[Mapping[str, Any] | None],
        selected_account_ids: Iterable[str] = (),
        accounts: Sequence[AccountRecord] | None = None,
    ) -> tuple[ImportResult, list[TransactionCreate]]:
        """
        Normalize and resolve, without inserting transactions.

        Accounts named in the data but unknown to the store are
        created here. Returns the report (with an empty
        `transactions` list) and the batch ready for insertion.
        """
        if rows is None or isinstance(rows, (str, bytes)):
            raise TabularDataError("Import data must be a list of rows")
        rows = list(rows)
        for row in rows:
            if row is not None and not isinstance(row, Mapping):
                raise TabularDataError(
                    f"Each row must be a mapping of column to value, got {type(row).__name__}"
                )

        accessor = FieldAccessor.for_headers(_headers(rows))
        normalized = normalize_rows(rows, accessor)

        if accounts is None:
            accounts = self.store.fetch_accounts()
        resolver = AccountResolver(self.store, accounts, selected_account_ids)
        resolved = resolver.resolve(normalized.drafts)

        status = (
            ImportStatus.IMPORTED if resolved.transactions
            else ImportStatus.NO_VALID_ROWS
        )
        report = ImportResult(
            status=status,
            mode=accessor.mode.value,
            total_rows=len(rows),
            created_accounts=resolved.created_accounts,
            blank_rows=normalized.blank_rows,
            rejected_rows=normalized.rejected,
            missing_account=len(resolved.unresolved),
        )
        return report, resolved.transactions

    def run(
        self,
        rows: Iterable[Mapping[str, Any] | None],
        selected_account_ids: Iterable[str] = (),
    ) -> ImportResult:
        """Prepare the batch and insert it in a single store call."""
        report, batch = self.prepare(rows, selected_account_ids)
        if batch:
            report.transactions = self.store.insert_transactions(batch)

        logger.info(
            "import_finished",
            status=report.status.value,
            mode=report.mode,
            total_rows=report.total_rows,
            accepted=report.accepted,
            blank_rows=report.blank_rows,
            rejected_rows=len(report.rejected_rows),
            missing_account=report.missing_account,
            created_accounts=len(report.created_accounts),
        )
        return report

    def import_file(
        self,
        content: bytes,
        filename: str,
        selected_account_ids: Iterable[str] = (),
    ) -> ImportResult:
        """Decode an uploaded CSV/XLSX file, then run the import."""
        rows = read_table(content, filename)
        return self.run(rows, selected_account_ids)
