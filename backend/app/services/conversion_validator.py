"""Financial checks run before a conversion payload is accepted.

Form values arrive loosely typed (strings from inputs, numbers from JSON,
``None`` or ``""`` when left blank). The first failing check wins and raises
``ValidationError`` with one of the kinds defined on that class.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from backend.app.core.errors import ValidationError
from backend.app.schemas.conversion_details import ConversionDetailsPayload

CENTS = Decimal("0.01")
ZERO = Decimal("0")
NAN = Decimal("NaN")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any) -> Decimal | None:
    """None for blank input, NaN for anything that does not parse as a finite number."""
    if _is_blank(value):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return NAN
    if not number.is_finite():
        return NAN
    return number


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def default_due_amount(course_fee: Decimal, amount_paid: Decimal) -> Decimal:
    return max(ZERO, course_fee - amount_paid)


def validate_conversion_details(
    course_name: Any = None,
    course_fee: Any = None,
    amount_paid: Any = None,
    due_amount: Any = None,
    known_course_count: int = 0,
) -> ConversionDetailsPayload:
    """Validate and normalize conversion details.

    An explicit ``due_amount`` is kept as an independent ledger value once it
    passes validation; when omitted it defaults to ``max(0, fee - paid)``.
    """
    name = course_name.strip() if isinstance(course_name, str) else course_name
    name_empty = not name
    fee = _to_decimal(course_fee)
    paid_raw = _to_decimal(amount_paid)
    paid = ZERO if paid_raw is None or paid_raw.is_nan() else paid_raw
    due_raw = _to_decimal(due_amount)
    fee_missing = fee is None or fee.is_nan()

    if known_course_count > 0 and name_empty:
        raise ValidationError(ValidationError.COURSE_REQUIRED, "Please select a course")
    # An unparseable paid value still counts as entered here
    if name_empty and fee_missing and (paid_raw is None or paid_raw == ZERO):
        raise ValidationError(
            ValidationError.AT_LEAST_ONE_FIELD_REQUIRED,
            "At least one field is required (e.g. course name and course fee)",
        )
    if fee_missing:
        raise ValidationError(ValidationError.FEE_REQUIRED, "Course fee is required")
    if fee < ZERO:
        raise ValidationError(ValidationError.FEE_NEGATIVE, "Course fee must be >= 0")
    if paid < ZERO:
        raise ValidationError(ValidationError.PAID_NEGATIVE, "Amount paid must be >= 0")
    if paid > fee:
        raise ValidationError(ValidationError.PAID_EXCEEDS_FEE, "Amount paid cannot exceed course fee")

    due = default_due_amount(fee, paid) if due_raw is None or due_raw.is_nan() else due_raw
    if due < ZERO:
        raise ValidationError(ValidationError.DUE_NEGATIVE, "Due amount cannot be negative")

    return ConversionDetailsPayload(
        course_name=name or None,
        course_fee=_money(fee),
        amount_paid=_money(paid),
        due_amount=_money(due),
    )
