"""Input validation shared by the calculators.

Every validator returns the normalized value or raises an
InputValidationError subclass naming the violated bound.
"""

from decimal import Decimal, InvalidOperation

from taxopt.engine.money import to_decimal
from taxopt.errors import (
    InvalidAmount,
    InvalidParameter,
    UnknownFilingStatus,
    UnknownGainsType,
)
from taxopt.models.tax import CapitalGainsType, FilingStatus

MIN_TIME_HORIZON = 1
MAX_TIME_HORIZON = 40
MIN_DISCOUNT_RATE = Decimal("0.01")
MAX_DISCOUNT_RATE = Decimal("0.15")
MIN_RISK_TOLERANCE = 1
MAX_RISK_TOLERANCE = 5


def require_amount(
    value: object,
    field: str,
    minimum: Decimal = Decimal("0"),
    maximum: Decimal | None = None,
) -> Decimal:
    """Finite monetary amount within [minimum, maximum]."""
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(field, value, message=f"{field} must be a number (got {value!r})")

    if not amount.is_finite():
        raise InvalidAmount(field, value)
    if amount < minimum or (maximum is not None and amount > maximum):
        if minimum == 0 and maximum is None:
            raise InvalidAmount(field, value)
        raise InvalidAmount(field, value, minimum=minimum, maximum=maximum)
    return amount


def coerce_filing_status(value: object) -> FilingStatus:
    if isinstance(value, FilingStatus):
        return value
    if isinstance(value, str):
        try:
            return FilingStatus[value.strip().upper()]
        except KeyError:
            pass
    raise UnknownFilingStatus(value)


def coerce_gains_type(value: object) -> CapitalGainsType:
    if isinstance(value, CapitalGainsType):
        return value
    if isinstance(value, str):
        try:
            return CapitalGainsType[value.strip().upper()]
        except KeyError:
            pass
    raise UnknownGainsType(value)


def require_time_horizon(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter("time_horizon_years", value, "Time horizon must be a whole number of years")
    if not MIN_TIME_HORIZON <= value <= MAX_TIME_HORIZON:
        raise InvalidParameter(
            "time_horizon_years",
            value,
            f"Time horizon must be between {MIN_TIME_HORIZON} and {MAX_TIME_HORIZON} years (got {value})",
        )
    return value


def require_discount_rate(value: object) -> Decimal:
    try:
        rate = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidParameter("discount_rate", value, f"Discount rate must be a number (got {value!r})")
    if not rate.is_finite() or not MIN_DISCOUNT_RATE <= rate <= MAX_DISCOUNT_RATE:
        raise InvalidParameter(
            "discount_rate",
            value,
            f"Discount rate must be between {MIN_DISCOUNT_RATE} and {MAX_DISCOUNT_RATE} (got {value})",
        )
    return rate


def require_risk_tolerance(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter("risk_tolerance", value, "Risk tolerance must be a whole number")
    if not MIN_RISK_TOLERANCE <= value <= MAX_RISK_TOLERANCE:
        raise InvalidParameter(
            "risk_tolerance",
            value,
            f"Risk tolerance must be between {MIN_RISK_TOLERANCE} and {MAX_RISK_TOLERANCE} (got {value})",
        )
    return value


def require_state_tax_weight(value: object) -> Decimal:
    try:
        weight = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidParameter("state_tax_weight", value, f"State tax weight must be a number (got {value!r})")
    if not weight.is_finite() or not Decimal("0") <= weight <= Decimal("1"):
        raise InvalidParameter(
            "state_tax_weight", value, f"State tax weight must be between 0 and 1 (got {value})"
        )
    return weight
