# retireplan/core/tvm.py
"""
Time-value-of-money primitives.

All rates are decimals per period (0.06 = 6%), periods are counts of the
same period. A zero rate falls back to the linear (simple) form so nothing
here ever divides by zero.
"""


def future_value(present_value: float, rate: float, periods: float) -> float:
    return present_value * (1.0 + rate) ** periods


def future_value_of_series(payment: float, rate: float, periods: float) -> float:
    """Future value of a level payment made at the end of each period."""
    if periods <= 0:
        return 0.0
    if rate == 0:
        return payment * periods
    return payment * (((1.0 + rate) ** periods - 1.0) / rate)


def present_value_of_annuity(payment: float, rate: float, periods: float) -> float:
    """Value today of `periods` level payments; sizes the retirement corpus."""
    if periods <= 0:
        return 0.0
    if rate == 0:
        return payment * periods
    return payment * (1.0 - (1.0 + rate) ** (-periods)) / rate


def required_level_contribution(target_future_value: float, current_principal: float,
                                rate: float, periods: float) -> float:
    """
    Level per-period contribution that grows `current_principal` into
    `target_future_value` after `periods`.

    Never negative. `periods` must be > 0 whenever the target is not already
    covered by the principal.
    """
    gap = max(target_future_value - future_value(current_principal, rate, periods), 0.0)
    if gap == 0:
        return 0.0
    if rate == 0:
        return gap / periods
    return gap * rate / ((1.0 + rate) ** periods - 1.0)
