"""
Gross-up: how much pre-tax income has to be earned to net a given amount.

Net income is piecewise linear and strictly increasing in gross income,
changing slope only where an income tax, NI or student loan band starts
(or the personal allowance starts or stops tapering). Instead of
searching, we list those kinks, find the segment that contains the
target and solve the straight line inside it, so the answer is exact
and identical on every run.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from rates import PersonalAllowanceRule, RateTable, Region, default_rate_table
import tax

logger = logging.getLogger(__name__)


class UnreachableTargetError(ValueError):
    """Raised when asked to gross up a negative net amount."""


@dataclass(frozen=True)
class GrossUpResult:
    target_net: float
    base_gross: float
    gross_needed: float   # extra gross on top of base_gross

    @property
    def hidden_tax_cost(self) -> float:
        """Deductions paid on the way to the target: gross needed minus face value."""
        return round(self.gross_needed - self.target_net, 2)


# ─── Breakpoints ─────────────────────────────────────────────────────

def _taxable(adjusted: float, rule: PersonalAllowanceRule) -> float:
    return max(0.0, adjusted - float(tax.personal_allowance(adjusted, rule)))


def _allowance_knots(rule: PersonalAllowanceRule) -> List[float]:
    """Adjusted incomes where taxable income changes slope."""
    if rule.base <= rule.taper_start:
        covered_until = rule.base
    else:
        # income catches up with an allowance that is already tapering
        covered_until = (rule.base + rule.taper_rate * rule.taper_start) / (1 + rule.taper_rate)
    knots = {covered_until, rule.taper_start, rule.taper_end}
    return sorted(k for k in knots if k > 0)


def _adjusted_for_taxable(target: float, rule: PersonalAllowanceRule) -> float:
    """Smallest adjusted net income whose taxable income reaches *target*."""
    lo, taxable_lo = 0.0, 0.0
    for hi in _allowance_knots(rule):
        taxable_hi = _taxable(hi, rule)
        if taxable_hi >= target and taxable_hi > taxable_lo:
            return lo + (target - taxable_lo) * (hi - lo) / (taxable_hi - taxable_lo)
        lo, taxable_lo = hi, taxable_hi
    # above the taper the allowance sits at its floor: slope 1
    return lo + (target - taxable_lo)


def net_breakpoints(
    region: Region | str = Region.ENGLAND,
    plan: Optional[str] = None,
    pension_pct: float = 0.0,
    table: Optional[RateTable] = None,
) -> List[float]:
    """Sorted gross incomes at which the combined deduction rate changes."""
    table = table if table is not None else default_rate_table()
    rule = table.personal_allowance
    points = set()

    retained = 1.0 - min(max(float(pension_pct), 0.0), 100.0) / 100
    if retained > 0:
        adjusted_points = list(_allowance_knots(rule))
        adjusted_points += [
            _adjusted_for_taxable(band.lower, rule)
            for band in table.tax_bands(region)[1:]
        ]
        points.update(a / retained for a in adjusted_points)

    points.update(band.lower for band in table.ni_bands[1:])

    loan = table.student_loan_plan(plan)
    if loan is not None:
        points.add(loan.threshold)

    return sorted(p for p in points if p > 0 and math.isfinite(p))


# ─── Solver ──────────────────────────────────────────────────────────

def gross_needed_for_net(
    target_net: float,
    region: Region | str = Region.ENGLAND,
    plan: Optional[str] = None,
    pension_pct: float = 0.0,
    base_gross: float = 0.0,
    table: Optional[RateTable] = None,
) -> GrossUpResult:
    """Gross income needed to take home *target_net* after tax, NI and student loan.

    Parameters
    ----------
    target_net : float
        Amount that has to be left after deductions.
    region, plan, pension_pct
        As for ``tax.net_income``.
    base_gross : float
        Income already earned. The answer is the extra gross earned on
        top of it, taxed at the rates that apply from that point up.
        With the default of 0 it is the plain inverse of ``net_income``.
    table : RateTable, optional
        Defaults to the process-wide table.

    Notes
    -----
    The pension election lowers the income tax on the extra pay, but the
    contribution itself is not deducted from *target_net*. With a
    pension, take-home pay therefore rises by less than *target_net*:
    the pension also takes its share of the extra gross.

    Raises
    ------
    UnreachableTargetError
        If *target_net* is negative.
    ValueError
        If *region* or *plan* is unknown, whatever the target.
    """
    target_net = float(target_net)
    if target_net < 0:
        raise UnreachableTargetError(f"Cannot gross up a negative net amount ({target_net:.2f})")

    table = table if table is not None else default_rate_table()
    region = Region.parse(region)
    table.student_loan_plan(plan)
    base = max(0.0, float(base_gross))
    if target_net == 0:
        return GrossUpResult(target_net=0.0, base_gross=base, gross_needed=0.0)

    def net(gross: float) -> float:
        return float(tax.net_income(gross, region, plan, pension_pct, table, round_result=False))

    lo, net_lo = base, net(base)
    goal = net_lo + target_net
    for hi in net_breakpoints(region, plan, pension_pct, table):
        if hi <= lo:
            continue
        net_hi = net(hi)
        if net_hi >= goal:
            gross = lo + (goal - net_lo) * (hi - lo) / (net_hi - net_lo)
            break
        lo, net_lo = hi, net_hi
    else:
        slope = net(lo + 1.0) - net_lo
        gross = lo + (goal - net_lo) / slope

    result = GrossUpResult(
        target_net=target_net,
        base_gross=base,
        gross_needed=round(gross - base, 2),
    )
    logger.debug(
        "Gross-up %s: net %.2f on top of %.2f needs %.2f gross",
        region.value, target_net, base, result.gross_needed,
    )
    return result
