"""
Custom exceptions for EV Journal.

The derivation engine handles data anomalies as data (null fields, zero
costs) and does not raise. These exceptions cover the import boundary and
configuration problems.
"""

from typing import List


class EVJournalError(Exception):
    """Base exception for all EV Journal errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class SpreadsheetImportError(EVJournalError):
    """Spreadsheet import operation failed."""

    def __init__(self, message: str, row_number: int = None, filename: str = None):
        details = {}
        if row_number:
            details['row_number'] = row_number
        if filename:
            details['filename'] = filename
        super().__init__(message, details)
        self.row_number = row_number
        self.filename = filename


class UnsupportedFileError(SpreadsheetImportError):
    """File extension or content is not a readable spreadsheet."""

    pass


class ImportValidationError(SpreadsheetImportError):
    """One or more rows failed validation; the whole batch is rejected."""

    def __init__(self, errors: List[str], filename: str = None):
        super().__init__(
            f"{len(errors)} invalid row(s) in import",
            filename=filename
        )
        self.errors = list(errors)
        self.details['errors'] = self.errors


class ConfigurationError(EVJournalError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, config_key: str = None):
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)
        self.config_key = config_key
