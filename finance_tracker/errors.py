"""
Exception taxonomy.

Row-level import problems never raise; they are counted in the
ImportResult. Everything below is raised to the immediate caller.
"""


class FinanceTrackerError(Exception):
    """Base exception for the package."""


class InvalidInputError(FinanceTrackerError, ValueError):
    """User-entered data failed form-level validation."""


class TabularDataError(FinanceTrackerError):
    """Input cannot be interpreted as tabular data at all."""


class PersistenceError(FinanceTrackerError):
    """The persistence collaborator failed."""


class NotFoundError(PersistenceError):
    """Record does not exist in the current user scope."""


class ConfigurationError(FinanceTrackerError):
    """The composition root was configured or used incorrectly."""


class ContractViolation(AssertionError):
    """A ledger precondition was broken by the calling code."""
