"""Engine error hierarchy.

Input validation errors subclass ValueError and belong to the caller.
Internal consistency errors mean the bracket or state data is broken and
should be surfaced as fatal by the host.
"""

from decimal import Decimal


class TaxEngineError(Exception):
    """Base class for every error raised by the engine."""


# ---- Caller errors ----

class InputValidationError(TaxEngineError, ValueError):
    pass


class InvalidAmount(InputValidationError):
    """Monetary input that is negative, non-finite, or outside its band."""

    def __init__(
        self,
        field: str,
        value: object,
        minimum: Decimal | None = None,
        maximum: Decimal | None = None,
        message: str | None = None,
    ):
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        if message is None:
            if minimum is not None and maximum is not None:
                message = f"{field} must be between {minimum} and {maximum} (got {value})"
            elif minimum is not None:
                message = f"{field} must be at least {minimum} (got {value})"
            else:
                message = f"{field} must be a finite, non-negative amount (got {value})"
        super().__init__(message)


class InvalidParameter(InputValidationError):
    """Non-monetary parameter (horizon, rate, risk tolerance, weight) out of range."""

    def __init__(self, name: str, value: object, message: str):
        self.name = name
        self.value = value
        super().__init__(message)


class UnknownJurisdiction(InputValidationError):
    def __init__(self, state_code: object):
        self.state_code = state_code
        super().__init__(f"Tax information not found for state: {state_code}")


class UnknownFilingStatus(InputValidationError):
    def __init__(self, filing_status: object):
        self.filing_status = filing_status
        super().__init__(f"Invalid filing status: {filing_status}")


class UnknownGainsType(InputValidationError):
    def __init__(self, gains_type: object):
        self.gains_type = gains_type
        super().__init__(f"Invalid capital gains type: {gains_type}")


# ---- Configuration defects ----

class InternalConsistencyError(TaxEngineError):
    pass


class BracketTableMissing(InternalConsistencyError):
    pass


class BracketCoverageGap(InternalConsistencyError):
    pass


class BracketTableInvalid(InternalConsistencyError):
    pass


class RateOutOfRange(InternalConsistencyError):
    pass


# ---- Search ----

class SearchExhausted(TaxEngineError):
    """Raised only when not a single candidate could be evaluated."""
