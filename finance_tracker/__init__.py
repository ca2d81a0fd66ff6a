"""Personal finance ledger and import-normalization engine."""

__version__ = "0.1.0"
