"""
Hisaab exception hierarchy.

All hisaab exceptions inherit from HisaabError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class HisaabError(Exception):
    """Base exception class for all hisaab errors."""


class ConfigurationError(HisaabError):
    """Raised for configuration errors (missing keys, invalid values)."""


class NotFoundError(HisaabError, LookupError):
    """Raised when a referenced asset, liability, or rule is absent."""

    def __init__(self, kind: str, record_id: int | str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} {record_id} not found")


class InvalidFormulaError(HisaabError, ValueError):
    """Raised when a payment formula is disallowed or does not evaluate to a finite number."""


class LedgerError(HisaabError):
    """Raised for malformed ledger files or records."""


class APIError(HisaabError):
    """Raised for price-quote provider communication errors."""
