"""
Tabular file decoding and export.

Uploaded CSV and XLSX files become a list of row dicts keyed by
the header row. The rest of the import pipeline never sees which
format the rows came from.

Expected layout (both formats):
    first row     column headers
    other rows    one transaction each; fully blank rows are skipped
"""

import csv
import io
from collections.abc import Iterable, Mapping, Sequence
from pathlib import PurePath
from typing import Any
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from finance_tracker.errors import TabularDataError

EXPORT_COLUMNS = [
    "id",
    "account_id",
    "description",
    "amount",
    "type",
    "date",
    "to_account_id",
    "transfer_group_id",
]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def rows_from_matrix(
    header: Sequence[Any], rows: Iterable[Sequence[Any]]
) -> list[dict[str, Any]]:
    """
    Zip an array-of-arrays table with its header row.

    Short rows are padded with None, extra cells are dropped,
    and fully blank rows are skipped.
    """
    columns = [str(h).strip() if h is not None else "" for h in header]
    if not any(columns):
        raise TabularDataError("Header row is empty")

    records = []
    for values in rows:
        values = list(values or [])
        if all(_is_blank(v) for v in values):
            continue
        padded = values[: len(columns)] + [None] * (len(columns) - len(values))
        records.append({
            column: value
            for column, value in zip(columns, padded)
            if column
        })
    return records


def read_csv(content: bytes) -> list[dict[str, Any]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise TabularDataError("File is not valid UTF-8 text") from e

    if "\x00" in text:
        raise TabularDataError("File looks like binary data, not CSV")

    try:
        table = list(csv.reader(io.StringIO(text)))
    except csv.Error as e:
        raise TabularDataError(f"Failed to parse CSV file: {e}") from e

    table = [r for r in table if r and not all(_is_blank(v) for v in r)]
    if not table:
        raise TabularDataError("File is empty")
    return rows_from_matrix(table[0], table[1:])


def read_xlsx(content: bytes) -> list[dict[str, Any]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
        raise TabularDataError(f"Failed to read Excel file: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        table = [
            list(r) for r in sheet.iter_rows(values_only=True)
            if not all(_is_blank(v) for v in r)
        ]
    finally:
        workbook.close()

    if not table:
        raise TabularDataError("File is empty")
    return rows_from_matrix(table[0], table[1:])


def read_table(content: bytes, filename: str) -> list[dict[str, Any]]:
    """
    Decode an uploaded file by extension.

    Raises:
        TabularDataError: empty file, unreadable content, or an
            unsupported extension
    """
    if not content:
        raise TabularDataError("File is empty")

    suffix = PurePath(filename or "").suffix.lower()
    if suffix == ".csv":
        return read_csv(content)
    if suffix == ".xlsx":
        return read_xlsx(content)
    raise TabularDataError(
        f"Unsupported file type {suffix or filename!r}. "
        "Please upload a CSV or Excel (.xlsx) file."
    )


def _export_row(txn) -> list[Any]:
    values = txn if isinstance(txn, Mapping) else txn.model_dump()
    row = []
    for column in EXPORT_COLUMNS:
        value = values.get(column)
        if hasattr(value, "value"):
            value = value.value
        row.append(value)
    return row


def export_csv(transactions: Iterable) -> str:
    """Transactions as CSV text, one row per stored record."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for txn in transactions:
        row = _export_row(txn)
        writer.writerow(["" if v is None else v for v in row])
    return buffer.getvalue()


def export_xlsx(transactions: Iterable) -> bytes:
    """Transactions as an .xlsx workbook with one "Transactions" sheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Transactions"
    sheet.append(EXPORT_COLUMNS)
    for txn in transactions:
        row = _export_row(txn)
        # openpyxl stores Decimal as a number cell
        sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
