"""
Reusable polars expressions for the metric engine.

Relational aggregates and calendar arithmetic do not map one-to-one onto
polars defaults (sums over all-null groups, rounding of ties, month
differences), so the reports build on these helpers instead.
"""

from datetime import date

import polars as pl


def sql_sum(column: str) -> pl.Expr:
    """Sum that stays null when every value in the group is null"""
    return (
        pl.when(pl.col(column).count() > 0)
        .then(pl.col(column).sum())
        .otherwise(None)
    )


def count_distinct(column: str) -> pl.Expr:
    """Distinct count ignoring nulls"""
    return pl.col(column).drop_nulls().n_unique()


def round_half_away(expr: pl.Expr, decimals: int = 0) -> pl.Expr:
    """
    Round a float half away from zero.
    
    The scaled value is snapped to 9 decimals first so that binary
    representation noise (0.145 stored as 0.14499...) cannot decide a tie.
    Ratios of integers should go through ``round_ratio`` instead.
    """
    factor = 10 ** decimals
    scaled = (expr.cast(pl.Float64) * factor).round(9)
    return (scaled.abs() + 0.5).floor() * scaled.sign() / factor


def scaled_round_ratio(numerator: pl.Expr, denominator: pl.Expr, decimals: int = 0) -> pl.Expr:
    """
    ``numerator / denominator * 10**decimals`` rounded half away from zero,
    computed exactly on integers. Null when the denominator is zero or null.
    """
    factor = 10 ** decimals
    num = numerator.cast(pl.Int64)
    den = denominator.cast(pl.Int64)
    magnitude = (2 * num.abs() * factor + den.abs()) // (2 * den.abs())
    return (
        pl.when(den == 0)
        .then(None)
        .when((num < 0) ^ (den < 0))
        .then(-magnitude)
        .otherwise(magnitude)
    )


def round_ratio(numerator: pl.Expr, denominator: pl.Expr, decimals: int = 0) -> pl.Expr:
    """Exact ``ROUND(numerator / NULLIF(denominator, 0), decimals)`` of two integer columns"""
    return scaled_round_ratio(numerator, denominator, decimals).cast(pl.Float64) / (10 ** decimals)


def null_safe_divide(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """Division yielding null when the denominator is zero or null"""
    return (
        pl.when(denominator != 0)
        .then(numerator.cast(pl.Float64) / denominator)
        .otherwise(None)
    )


def zero_safe_quotient(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """Whole-number quotient truncated toward zero, 0 when the denominator is 0"""
    return (
        pl.when(denominator == 0)
        .then(pl.lit(0, dtype=pl.Int64))
        .otherwise((numerator.cast(pl.Float64) / denominator).cast(pl.Int64))
    )


def _forward_months(later: pl.Expr, earlier: pl.Expr) -> pl.Expr:
    years = later.dt.year().cast(pl.Int64) - earlier.dt.year().cast(pl.Int64)
    months = later.dt.month().cast(pl.Int64) - earlier.dt.month().cast(pl.Int64)
    # a month only counts once its day-of-month has been reached
    borrow = (later.dt.day() < earlier.dt.day()).cast(pl.Int64)
    return years * 12 + months - borrow


def months_between(end: pl.Expr, start: pl.Expr) -> pl.Expr:
    """
    Whole calendar months from ``start`` to ``end``.
    
    Counts like an age() interval expressed as ``years * 12 + months``:
    2023-01-31 to 2023-02-28 is 0 months, 2023-01-15 to 2024-03-15 is 14.
    Negative when ``end`` precedes ``start``; null if either side is null.
    """
    return (
        pl.when(end >= start)
        .then(_forward_months(end, start))
        .otherwise(-_forward_months(start, end))
    )


def whole_years_between(end: pl.Expr, start: pl.Expr) -> pl.Expr:
    """Whole calendar years from ``start`` to ``end``, truncated toward zero"""
    months = months_between(end, start)
    return (
        pl.when(months >= 0)
        .then(months // 12)
        .otherwise(-((-months) // 12))
    )


def date_literal(value: date) -> pl.Expr:
    """Date literal typed as pl.Date"""
    return pl.lit(value, dtype=pl.Date)
