"""Financial calculation functions.

Level-payment loan math on a monthly-compounding basis. Payment, balance
and interest all derive from the same formula family so that the balance
implied by the payments never drifts from the closed-form balance.
"""

from __future__ import annotations

from typing import Any

import numpy_financial as npf

from src.core.constants import MONTHS_PER_YEAR


def _monthly_rate(annual_rate_pct: float) -> float:
    # Negative rates are treated as interest-free
    return max(0.0, annual_rate_pct) / 100.0 / MONTHS_PER_YEAR


def calculate_monthly_payment(
    principal: float,
    annual_rate_pct: float,
    duration_months: int,
) -> float:
    """Calculate monthly loan payment (principal + interest).

    Args:
        principal: Loan amount
        annual_rate_pct: Annual interest rate as percentage (e.g., 7.0 for 7%)
        duration_months: Loan term in months

    Returns:
        Monthly payment amount
    """
    if principal <= 0 or duration_months <= 0:
        return 0.0

    monthly_rate = _monthly_rate(annual_rate_pct)

    if monthly_rate == 0:
        return principal / duration_months

    return float(-npf.pmt(monthly_rate, duration_months, principal))


def level_payment(principal: float, annual_rate_pct: float, term_years: int) -> float:
    """Monthly level payment for a loan quoted in years."""
    return calculate_monthly_payment(principal, annual_rate_pct, term_years * MONTHS_PER_YEAR)


def annual_debt_service(principal: float, annual_rate_pct: float, term_years: int) -> float:
    """Level payment annualized (x12)."""
    return level_payment(principal, annual_rate_pct, term_years) * MONTHS_PER_YEAR


def calculate_remaining_balance(
    principal: float,
    annual_rate_pct: float,
    duration_months: int,
    months_paid: int,
) -> float:
    """Calculate remaining loan balance after N monthly payments.

    Args:
        principal: Initial loan amount
        annual_rate_pct: Annual interest rate %
        duration_months: Original loan term in months
        months_paid: Number of months already paid

    Returns:
        Remaining balance (0 once the loan is fully amortized)
    """
    if principal <= 0 or months_paid >= duration_months:
        return 0.0

    if months_paid <= 0:
        return principal

    monthly_rate = _monthly_rate(annual_rate_pct)

    if monthly_rate == 0:
        return principal * (1 - months_paid / duration_months)

    # Balance = P * [(1+r)^n - (1+r)^p] / [(1+r)^n - 1]
    factor_n = (1 + monthly_rate) ** duration_months
    factor_p = (1 + monthly_rate) ** months_paid

    remaining = principal * (factor_n - factor_p) / (factor_n - 1)

    return max(0.0, remaining)


def remaining_balance(
    principal: float,
    annual_rate_pct: float,
    term_years: int,
    months_elapsed: int,
) -> float:
    """Remaining balance for a loan quoted in years."""
    return calculate_remaining_balance(
        principal, annual_rate_pct, term_years * MONTHS_PER_YEAR, months_elapsed
    )


def interest_for_year(
    principal: float,
    annual_rate_pct: float,
    term_years: int,
    months_elapsed_at_year_start: int,
) -> float:
    """Interest paid over the 12 months starting at ``months_elapsed_at_year_start``.

    Accumulated month by month on the balance outstanding at the start of
    each month, stopping when the loan matures mid-year. Not equivalent to
    ``opening_balance * annual_rate``.
    """
    monthly_rate = _monthly_rate(annual_rate_pct)
    n = term_years * MONTHS_PER_YEAR

    if principal <= 0 or monthly_rate == 0 or months_elapsed_at_year_start < 0:
        return 0.0

    interest = 0.0
    for month in range(months_elapsed_at_year_start, months_elapsed_at_year_start + MONTHS_PER_YEAR):
        if month >= n:
            break
        balance = calculate_remaining_balance(principal, annual_rate_pct, n, month)
        interest += balance * monthly_rate

    return interest


def generate_amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    duration_months: int,
) -> dict[str, Any]:
    """Generate a full month-by-month amortization schedule.

    Args:
        principal: Loan amount
        annual_rate_pct: Annual interest rate %
        duration_months: Loan term in months

    Returns:
        Dict with keys:
        - month: List of month numbers (1-based)
        - opening_balance: Balance at the start of each month
        - interest: Interest component of each payment
        - principal: Principal component of each payment
        - closing_balance: Balance after each payment
        - payment: Level monthly payment
        - n_months: Number of months
    """
    if principal <= 0 or duration_months <= 0:
        return {
            "month": [],
            "opening_balance": [],
            "interest": [],
            "principal": [],
            "closing_balance": [],
            "payment": 0.0,
            "n_months": 0,
        }

    pmt = calculate_monthly_payment(principal, annual_rate_pct, duration_months)

    months: list[int] = []
    opening: list[float] = []
    interests: list[float] = []
    principals: list[float] = []
    closing: list[float] = []

    for m in range(duration_months):
        start = calculate_remaining_balance(principal, annual_rate_pct, duration_months, m)
        end = calculate_remaining_balance(principal, annual_rate_pct, duration_months, m + 1)
        months.append(m + 1)
        opening.append(start)
        principals.append(start - end)
        interests.append(pmt - (start - end))
        closing.append(end)

    return {
        "month": months,
        "opening_balance": opening,
        "interest": interests,
        "principal": principals,
        "closing_balance": closing,
        "payment": pmt,
        "n_months": duration_months,
    }
