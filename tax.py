"""
UK tax calculation functions for the take-home pay calculator.

Every function accepts numpy arrays so it can be evaluated across a
whole income range at once (charts, sweeps). Scalar inputs work too
(promoted internally). Amounts are only rounded to the penny at the
end of each public calculation, never between bands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from rates import Band, PersonalAllowanceRule, RateTable, Region, default_rate_table


# ─── Result types ────────────────────────────────────────────────────

@dataclass(frozen=True)
class BandResult:
    total: np.ndarray
    marginal_rate: np.ndarray


@dataclass(frozen=True)
class IncomeTaxResult:
    tax: np.ndarray
    marginal_rate: np.ndarray
    personal_allowance: np.ndarray
    taxable_income: np.ndarray
    adjusted_net_income: np.ndarray


def _table(table: Optional[RateTable]) -> RateTable:
    return table if table is not None else default_rate_table()


def _finish(amount: np.ndarray, round_result: bool) -> np.ndarray:
    return np.round(amount, 2) if round_result else amount


# ─── Banded rates ────────────────────────────────────────────────────

def apply_bands(
    bands: Sequence[Band],
    amount: np.ndarray,
    round_result: bool = True,
) -> BandResult:
    """Progressive marginal-rate total for *amount* over *bands*.

    Parameters
    ----------
    bands : sequence of Band
        Ordered, gapless bands starting at 0 (checked when the rate
        table is built, not here).
    amount : array_like
        Amount the bands apply to (taxable income, gross pay, ...).
    round_result : bool
        Round the total to the penny. Switch off when the caller needs
        the exact piecewise-linear value.

    Returns
    -------
    BandResult
        ``total`` owed and the ``marginal_rate`` of the last band
        touched. An amount sitting exactly on a boundary belongs to the
        lower band; amounts ``<= 0`` have a marginal rate of 0.
    """
    amount = np.asarray(amount, dtype=float)
    total = np.zeros_like(amount)
    marginal = np.zeros_like(amount)
    for band in bands:
        in_band = np.clip(amount - band.lower, 0.0, band.width)
        total = total + in_band * band.rate
        marginal = np.where(amount > band.lower, band.rate, marginal)
    return BandResult(total=_finish(total, round_result), marginal_rate=marginal)


# ─── Personal Allowance ─────────────────────────────────────────────

def personal_allowance(
    adjusted_net_income: np.ndarray,
    rule: Optional[PersonalAllowanceRule] = None,
) -> np.ndarray:
    """Compute personal allowance after the high-income taper.

    For every £2 of adjusted net income above the taper threshold the
    allowance drops by £1, reaching the floor (zero) at £125,140.
    """
    if rule is None:
        rule = default_rate_table().personal_allowance
    income = np.asarray(adjusted_net_income, dtype=float)
    excess = np.maximum(income - rule.taper_start, 0.0)
    return np.maximum(rule.base - rule.taper_rate * excess, rule.floor)


# ─── Income Tax ──────────────────────────────────────────────────────

def pension_contribution(gross_income: np.ndarray, pension_pct: float = 0.0) -> np.ndarray:
    """Employee pension contribution. Percentages are clamped to 0-100."""
    gross_income = np.asarray(gross_income, dtype=float)
    share = min(max(float(pension_pct), 0.0), 100.0) / 100
    return np.maximum(gross_income, 0.0) * share


def income_tax_breakdown(
    gross_income: np.ndarray,
    region: Region | str = Region.ENGLAND,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
    round_result: bool = True,
) -> IncomeTaxResult:
    """Income tax with the intermediate figures behind it.

    The pension contribution comes off gross income before tax, giving
    the adjusted net income that both the personal allowance taper and
    the taxable income are measured against.

    Parameters
    ----------
    gross_income : array_like
        Annual gross income.
    region : Region or str
        Scotland has its own bands; Wales and Northern Ireland use England's.
    pension_pct : float
        Pension contribution as a percentage of gross income.
    table : RateTable, optional
        Defaults to the process-wide table.
    round_result : bool
        Round tax to the penny.
    """
    table = _table(table)
    gross_income = np.asarray(gross_income, dtype=float)

    adjusted = np.maximum(gross_income - pension_contribution(gross_income, pension_pct), 0.0)
    pa = personal_allowance(adjusted, table.personal_allowance)
    taxable = np.maximum(adjusted - pa, 0.0)
    banded = apply_bands(table.tax_bands(region), taxable, round_result)

    return IncomeTaxResult(
        tax=banded.total,
        marginal_rate=banded.marginal_rate,
        personal_allowance=pa,
        taxable_income=taxable,
        adjusted_net_income=adjusted,
    )


def income_tax(
    gross_income: np.ndarray,
    region: Region | str = Region.ENGLAND,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
    round_result: bool = True,
) -> np.ndarray:
    """Calculate annual income tax."""
    return income_tax_breakdown(gross_income, region, pension_pct, table, round_result).tax


def pension_tax_saving(
    gross_income: np.ndarray,
    region: Region | str = Region.ENGLAND,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
) -> np.ndarray:
    """Income tax saved by making the pension contribution."""
    without = income_tax(gross_income, region, 0.0, table, round_result=False)
    with_pension = income_tax(gross_income, region, pension_pct, table, round_result=False)
    return np.round(without - with_pension, 2)


# ─── National Insurance ─────────────────────────────────────────────

def national_insurance(
    gross_income: np.ndarray,
    table: Optional[RateTable] = None,
    round_result: bool = True,
) -> np.ndarray:
    """Calculate employee Class 1 National Insurance contributions.

    Always charged on unadjusted gross pay: pension contributions do not
    reduce NI-able earnings, and the bands are the same in every region.
    """
    return apply_bands(_table(table).ni_bands, gross_income, round_result).total


# ─── Student Loan ───────────────────────────────────────────────────

def student_loan_repayment(
    gross_income: np.ndarray,
    plan: Optional[str] = None,
    table: Optional[RateTable] = None,
    round_result: bool = True,
) -> np.ndarray:
    """Mandatory annual student loan repayment.

    Parameters
    ----------
    gross_income : array_like
        Annual gross income.
    plan : str, optional
        Plan code (``'plan1'``, ``'plan2'``, ``'plan4'``, ``'plan5'``,
        ``'postgrad'``). ``None`` or ``'none'`` means no repayments.

    Returns
    -------
    np.ndarray
        Repayment amount for each income value.
    """
    gross_income = np.asarray(gross_income, dtype=float)
    loan = _table(table).student_loan_plan(plan)
    if loan is None:
        return np.zeros_like(gross_income)
    repayment = np.maximum(gross_income - loan.threshold, 0.0) * loan.rate
    return _finish(repayment, round_result)


# ─── Take-Home Pay ──────────────────────────────────────────────────

def net_income(
    gross_income: np.ndarray,
    region: Region | str = Region.ENGLAND,
    plan: Optional[str] = None,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
    round_result: bool = True,
) -> np.ndarray:
    """Gross income less income tax, NI and student loan.

    The pension election only changes the income tax here; the
    contribution itself is not deducted (see ``take_home_pay``).
    """
    table = _table(table)
    gross_income = np.asarray(gross_income, dtype=float)
    it = income_tax(gross_income, region, pension_pct, table, round_result=False)
    ni = national_insurance(gross_income, table, round_result=False)
    sl = student_loan_repayment(gross_income, plan, table, round_result=False)
    return _finish(gross_income - it - ni - sl, round_result)


def take_home_pay(
    gross_income: np.ndarray,
    region: Region | str = Region.ENGLAND,
    plan: Optional[str] = None,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
) -> np.ndarray:
    """Net annual pay after tax, NI, student loan and pension."""
    net = net_income(gross_income, region, plan, pension_pct, table, round_result=False)
    return np.round(net - pension_contribution(gross_income, pension_pct), 2)


# ─── Marginal Rate Breakdown ────────────────────────────────────────

def marginal_rate_breakdown(
    salary: float,
    region: Region | str = Region.ENGLAND,
    plan: Optional[str] = None,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
) -> Dict[str, float]:
    """Marginal and effective rate breakdown for a single salary.

    Uses a £1 delta to compute the marginal rate of each component, so
    the personal allowance taper shows up (60% inside the taper in
    England) even though no band carries that rate.

    Returns
    -------
    dict
        Keys: ``'income_tax_pct'``, ``'ni_pct'``, ``'sl_pct'``,
        ``'total_marginal_pct'``, ``'effective_pct'``.
    """
    table = _table(table)
    s = np.array([salary, salary + 1.0])

    it = income_tax(s, region, pension_pct, table, round_result=False)
    ni = national_insurance(s, table, round_result=False)
    sl = student_loan_repayment(s, plan, table, round_result=False)

    it_marginal = float(it[1] - it[0])
    ni_marginal = float(ni[1] - ni[0])
    sl_marginal = float(sl[1] - sl[0])
    total_marginal = it_marginal + ni_marginal + sl_marginal

    total_deductions = float(it[0] + ni[0] + sl[0])
    effective = total_deductions / salary if salary > 0 else 0.0

    return {
        "income_tax_pct": round(it_marginal * 100, 2),
        "ni_pct": round(ni_marginal * 100, 2),
        "sl_pct": round(sl_marginal * 100, 2),
        "total_marginal_pct": round(total_marginal * 100, 2),
        "effective_pct": round(effective * 100, 2),
    }


# ─── Sanity checks ───────────────────────────────────────────────────

if __name__ == "__main__":
    def check(name: str, actual: float, expected: float, tol: float = 0.5) -> None:
        status = "PASS" if abs(actual - expected) <= tol else "FAIL"
        print(f"  [{status}] {name}: expected {expected}, got {actual:.2f}")

    print("=== Income Tax ===")
    check("IT on £30k", float(income_tax(30_000.0)), 3_486.0)
    check("IT on £60k", float(income_tax(60_000.0)), 11_432.0)
    check("IT on £60k Scotland", float(income_tax(60_000.0, "scotland")), 13_228.0)
    check("IT on £110k (taper)", float(income_tax(110_000.0)), 33_432.0)

    print("\n=== National Insurance ===")
    check("NI on £30k", float(national_insurance(30_000.0)), 1_394.40)

    print("\n=== Marginal Rates ===")
    check("Marginal at £110k", marginal_rate_breakdown(110_000.0)["total_marginal_pct"], 62.0)
