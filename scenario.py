"""
Scenario aggregation: one set of user inputs in, every figure the
front ends display out.

Nothing is cached between calls; each ``compute_scenario`` recomputes
the full result from the input record and the rate table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import config as cfg
import tax
from benefits import LadderResult, LadderRung, classify
from grossup import gross_needed_for_net
from rates import RateTable, Region, default_rate_table

logger = logging.getLogger(__name__)

TIERS = ("critical", "extra")


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class BillItem:
    """One named monthly bill (advanced mode)."""

    name: str
    monthly: float
    tier: str = "critical"        # 'critical' or 'extra'

    def __post_init__(self) -> None:
        if self.tier not in TIERS:
            raise ValueError(f"Bill tier must be one of {', '.join(TIERS)}")


@dataclass
class InputRecord:
    """User inputs for one calculation. Validated by the caller."""

    gross_income: float                      # annual gross income
    region: Region | str = Region.ENGLAND
    pension_pct: float = 0.0                 # % of gross paid into pension
    monthly_bills: float = 0.0
    housing_cost: float = 0.0                # monthly rent / mortgage
    other_bills: float = 0.0                 # monthly
    hours_per_week: Optional[float] = None
    student_loan_plan: Optional[str] = None  # 'plan1', 'plan2', ... or None
    bill_items: Sequence[BillItem] = ()

    def __post_init__(self) -> None:
        self.region = Region.parse(self.region)

    @property
    def monthly_outgoings(self) -> float:
        itemised = sum(item.monthly for item in self.bill_items)
        return self.monthly_bills + self.housing_cost + self.other_bills + itemised


@dataclass(frozen=True)
class BillLine:
    name: str
    tier: str
    monthly: float
    annual: float
    gross_needed: float


@dataclass(frozen=True)
class ResultRecord:
    """Everything derived from one InputRecord."""

    tax_year: str
    region: Region
    gross_income: float
    income_tax: float
    ni: float
    student_loan: float
    pension_contribution: float
    pension_tax_saving: float
    personal_allowance: float
    take_home_pay: float
    effective_rate: float                  # fraction of gross
    marginal: Dict[str, float]             # see tax.marginal_rate_breakdown
    annual_bills: float
    left_after_bills: float                # negative when bills exceed take-home
    gross_needed_for_bills: float
    hidden_tax_cost: float
    disposable_monthly: float
    gross_hourly: Optional[float]
    net_hourly: Optional[float]
    ladder: LadderResult
    bill_lines: Tuple[BillLine, ...] = ()
    allocation: Dict[str, float] = field(default_factory=dict)

    @property
    def total_deductions(self) -> float:
        return round(self.income_tax + self.ni + self.student_loan, 2)

    @property
    def monthly_take_home(self) -> float:
        return round(self.take_home_pay / 12, 2)

    @property
    def ladder_classification(self) -> Tuple[LadderRung, ...]:
        return self.ladder.rungs

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready dict."""
        return {
            "tax_year": self.tax_year,
            "region": self.region.value,
            "region_label": self.region.label,
            "gross_income": self.gross_income,
            "income_tax": self.income_tax,
            "ni": self.ni,
            "student_loan": self.student_loan,
            "pension_contribution": self.pension_contribution,
            "pension_tax_saving": self.pension_tax_saving,
            "personal_allowance": self.personal_allowance,
            "total_deductions": self.total_deductions,
            "take_home_pay": self.take_home_pay,
            "monthly_take_home": self.monthly_take_home,
            "effective_rate": self.effective_rate,
            "marginal": dict(self.marginal),
            "annual_bills": self.annual_bills,
            "left_after_bills": self.left_after_bills,
            "gross_needed_for_bills": self.gross_needed_for_bills,
            "hidden_tax_cost": self.hidden_tax_cost,
            "disposable_monthly": self.disposable_monthly,
            "gross_hourly": self.gross_hourly,
            "net_hourly": self.net_hourly,
            "bill_lines": [
                {
                    "name": line.name,
                    "tier": line.tier,
                    "monthly": line.monthly,
                    "annual": line.annual,
                    "gross_needed": line.gross_needed,
                }
                for line in self.bill_lines
            ],
            "allocation": dict(self.allocation),
            "ladder": {
                "banner": self.ladder.banner,
                "reaches": self.ladder.reaches,
                "matched": None if self.ladder.matched is None else self.ladder.matched.name,
                "rungs": [
                    {
                        "name": rung.profile.name,
                        "monthly_threshold": rung.profile.monthly_threshold,
                        "classification": rung.classification,
                        "gap": rung.gap,
                    }
                    for rung in self.ladder.rungs
                ],
            },
        }


# ─── Helpers ─────────────────────────────────────────────────────────

def income_allocation(
    gross_income: float,
    income_tax: float,
    ni: float,
    student_loan: float,
    pension: float,
    annual_bills: float,
) -> Dict[str, float]:
    """Percentage of gross income going to each destination.

    Allocated as a waterfall: each destination takes what it is owed
    from whatever gross is still unallocated, so the shares always add
    up to 100 for a positive income. Returns an empty dict otherwise.
    """
    if gross_income <= 0:
        return {}
    remaining = float(gross_income)
    parts = {}
    for name, amount in (
        ("income_tax", income_tax),
        ("ni", ni),
        ("student_loan", student_loan),
        ("pension", pension),
        ("bills", annual_bills),
    ):
        taken = min(max(float(amount), 0.0), remaining)
        parts[name] = taken
        remaining -= taken
    parts["left"] = remaining
    return {name: round(amount / gross_income * 100, 2) for name, amount in parts.items()}


def _hourly(annual: float, hours_per_week: Optional[float]) -> Optional[float]:
    if not hours_per_week or hours_per_week <= 0:
        return None
    return round(annual / (hours_per_week * cfg.WEEKS_PER_YEAR), 2)


# ─── Aggregation ─────────────────────────────────────────────────────

def compute_scenario(inputs: InputRecord, table: Optional[RateTable] = None) -> ResultRecord:
    """Compute every result figure for *inputs*."""
    table = table if table is not None else default_rate_table()
    region = Region.parse(inputs.region)
    gross = float(inputs.gross_income)
    plan = inputs.student_loan_plan
    pension_pct = inputs.pension_pct

    it = tax.income_tax_breakdown(gross, region, pension_pct, table)
    income_tax = float(it.tax)
    ni = float(tax.national_insurance(gross, table))
    sl = float(tax.student_loan_repayment(gross, plan, table))
    pension = round(float(tax.pension_contribution(gross, pension_pct)), 2)
    saving = float(tax.pension_tax_saving(gross, region, pension_pct, table))

    take_home = round(gross - income_tax - ni - sl - pension, 2)
    effective_rate = (income_tax + ni + sl) / gross if gross > 0 else 0.0

    annual_bills = round(inputs.monthly_outgoings * 12, 2)
    left_after_bills = round(take_home - annual_bills, 2)
    bills_grossed = gross_needed_for_net(
        annual_bills, region, plan, pension_pct, base_gross=gross, table=table,
    )

    bill_lines = tuple(
        BillLine(
            name=item.name,
            tier=item.tier,
            monthly=item.monthly,
            annual=round(item.monthly * 12, 2),
            gross_needed=gross_needed_for_net(
                item.monthly * 12, region, plan, pension_pct, base_gross=gross, table=table,
            ).gross_needed,
        )
        for item in inputs.bill_items
    )

    disposable_monthly = round(left_after_bills / 12, 2)
    ladder = classify(disposable_monthly, region, table)

    result = ResultRecord(
        tax_year=table.tax_year,
        region=region,
        gross_income=gross,
        income_tax=income_tax,
        ni=ni,
        student_loan=sl,
        pension_contribution=pension,
        pension_tax_saving=saving,
        personal_allowance=round(float(it.personal_allowance), 2),
        take_home_pay=take_home,
        effective_rate=effective_rate,
        marginal=tax.marginal_rate_breakdown(gross, region, plan, pension_pct, table),
        annual_bills=annual_bills,
        left_after_bills=left_after_bills,
        gross_needed_for_bills=bills_grossed.gross_needed,
        hidden_tax_cost=bills_grossed.hidden_tax_cost,
        disposable_monthly=disposable_monthly,
        gross_hourly=_hourly(gross, inputs.hours_per_week),
        net_hourly=_hourly(take_home, inputs.hours_per_week),
        ladder=ladder,
        bill_lines=bill_lines,
        allocation=income_allocation(gross, income_tax, ni, sl, pension, annual_bills),
    )
    logger.debug(
        "Scenario %s £%.2f: take-home %.2f, bills %.2f, left %.2f",
        region.value, gross, take_home, annual_bills, left_after_bills,
    )
    return result
