# src/cart_promotions/money.py
from decimal import Decimal, ROUND_HALF_UP

from cart_promotions.config import settings
from cart_promotions.errors import ValidationError


def to_decimal(value, field):
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationError(field, f"must be a number, got {value!r}")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not value.is_finite():
        raise ValidationError(field, f"must be a finite number, got {value!r}")
    return value


def positive(value, field):
    value = to_decimal(value, field)
    if value <= 0:
        raise ValidationError(field, "must be > 0")
    return value


def percent(value, field, upper=Decimal("100")):
    # Percentages live in (0, upper]
    value = to_decimal(value, field)
    if value <= 0 or value > upper:
        raise ValidationError(field, f"must be between 0 and {upper}")
    return value


def positive_int(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, f"must be a positive integer, got {value!r}")
    if value <= 0:
        raise ValidationError(field, "must be a positive integer")
    return value


def q2(x):
    # Quantize to the configured decimal places with HALF_UP
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal(1).scaleb(-settings.decimals), rounding=ROUND_HALF_UP)


def money(x):
    return f"{settings.currency_symbol}{q2(x)}"
