"""Utility functions for the mortgage calculator.

This module provides helpers for converting user input into ``Decimal``
values and for checking that the numbers handed to the engine lie in its
valid domain (finite, non-negative, whole positive terms).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext
from numbers import Number
from typing import Optional, Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Numeric = Union[Decimal, int, float, str]


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace and handles both
    integer and float-like strings. It raises ``ValueError`` if conversion
    fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_decimal(value: Numeric, name: str = "value") -> Decimal:
    """Coerce ``value`` to a finite ``Decimal``.

    Floats go through ``str`` so that ``0.06`` becomes ``Decimal("0.06")``
    rather than its binary expansion. NaN and infinities are rejected.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, str):
        result = decimal_from_str(value)
    elif isinstance(value, Number) and not isinstance(value, bool):
        result = Decimal(str(value))
    else:
        raise ValueError(f"{name} must be a number; got {value!r}")
    if not result.is_finite():
        raise ValueError(f"{name} must be a finite number; got {value}")
    return result


def non_negative(value: Numeric, name: str) -> Decimal:
    """Return ``value`` as a ``Decimal``, raising if it is below zero."""
    result = to_decimal(value, name)
    if result < 0:
        raise ValueError(f"{name} must not be negative; got {value}")
    return result


def positive_term(value: object, name: str = "term_years", maximum: Optional[int] = None) -> int:
    """Validate a loan term given in whole years, optionally capped at ``maximum``."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a positive whole number; got {value!r}")
    if isinstance(value, int):
        term = value
    else:
        try:
            as_decimal = to_decimal(value, name)  # type: ignore[arg-type]
        except ValueError as exc:
            raise ValueError(f"{name} must be a positive whole number; got {value!r}") from exc
        if as_decimal != as_decimal.to_integral_value():
            raise ValueError(f"{name} must be a positive whole number; got {value!r}")
        term = int(as_decimal)
    if term <= 0:
        raise ValueError(f"{name} must be positive; got {value!r}")
    if maximum is not None and term > maximum:
        raise ValueError(f"{name} must be at most {maximum}; got {value!r}")
    return term
