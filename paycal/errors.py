class PaycalError(Exception):
    """Base error for the calendar / payroll code."""


class SpecialDayTableError(PaycalError):
    pass


class InvalidDateKey(PaycalError, ValueError):
    pass


class SnapshotImportError(PaycalError):
    """Import file could not be used. Existing marks are untouched."""


class ConfirmationRequired(PaycalError):
    pass


class SettlementRejected(PaycalError):
    """Month is below the target days threshold."""


class RemoteStoreError(PaycalError):
    """Supabase read/write failed. Message carries the underlying error text."""


class RemoteUnavailable(PaycalError):
    """SUPABASE_URL / SUPABASE_KEY missing or malformed."""
