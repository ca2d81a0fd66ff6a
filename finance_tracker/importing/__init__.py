"""Import of heterogeneous CSV/spreadsheet tables into ledger rows."""

from finance_tracker.importing.pipeline import ImportPipeline
from finance_tracker.importing.resolver import AccountResolver
from finance_tracker.importing.schema import FieldAccessor, SchemaMode, sniff_schema

__all__ = [
    "ImportPipeline",
    "AccountResolver",
    "FieldAccessor",
    "SchemaMode",
    "sniff_schema",
]
