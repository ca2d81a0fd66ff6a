"""
Schema sniffing for imported tables.

The header row decides the mode once per import. After that,
every row is read through a FieldAccessor, which maps the
semantic fields (description, amount, type, date, account) to
the table's real header spelling for that mode.
"""

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


class SchemaMode(str, enum.Enum):
    """Shape of an imported table."""
    REPORT = "report"
    GENERIC = "generic"


# Columns that must all be present for the report export shape.
# Extra columns (ref_currency_amount, payment_type, ...) are ignored.
REPORT_COLUMNS = frozenset(
    {"account", "category", "currency", "amount", "type", "note", "date"}
)
GENERIC_COLUMNS = frozenset({"description", "amount"})

# Semantic field -> lower-case column name, per mode.
FIELD_MAPS: dict[SchemaMode, dict[str, str]] = {
    SchemaMode.REPORT: {
        "description": "note",
        "amount": "amount",
        "type": "type",
        "date": "date",
        "account": "account",
    },
    SchemaMode.GENERIC: {
        "description": "description",
        "amount": "amount",
        "type": "type",
        "date": "date",
        "account": "account",
    },
}


def _lower_headers(headers: Iterable[Any]) -> set[str]:
    return {str(h).strip().lower() for h in headers if h is not None}


def looks_like_report_schema(headers: Iterable[Any]) -> bool:
    return REPORT_COLUMNS <= _lower_headers(headers)


def looks_like_generic_schema(headers: Iterable[Any]) -> bool:
    return GENERIC_COLUMNS <= _lower_headers(headers)


def sniff_schema(headers: Iterable[Any]) -> SchemaMode:
    """
    Classify a header row.

    Report wins over generic. When neither matches, generic is
    still returned and the row normalizer rejects rows one by one.
    Matching ignores case, surrounding whitespace and column order.
    """
    headers = list(headers)
    if looks_like_report_schema(headers):
        return SchemaMode.REPORT
    return SchemaMode.GENERIC


@dataclass(frozen=True)
class FieldAccessor:
    """
    Reads semantic fields from raw rows for one schema mode.

    columns maps each semantic field to the header as it is
    actually spelled in the table, or None when the table has
    no such column.
    """
    mode: SchemaMode
    columns: Mapping[str, str | None]

    @classmethod
    def for_headers(
        cls, headers: Iterable[Any], mode: SchemaMode | None = None
    ) -> "FieldAccessor":
        headers = [h for h in headers if h is not None]
        mode = mode or sniff_schema(headers)

        # First spelling wins when two headers differ only by case.
        actual: dict[str, str] = {}
        for header in headers:
            actual.setdefault(str(header).strip().lower(), header)

        columns = {
            field_name: actual.get(column)
            for field_name, column in FIELD_MAPS[mode].items()
        }
        return cls(mode=mode, columns=columns)

    def get(self, row: Mapping[str, Any], field_name: str) -> Any:
        column = self.columns.get(field_name)
        if column is None:
            return None
        return row.get(column)

    def has(self, field_name: str) -> bool:
        return self.columns.get(field_name) is not None
