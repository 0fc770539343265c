"""
Benefits ladder: where a worker's disposable income sits against what
households on benefits receive.

The ladder is a fixed, ordered list of benefit profiles. Each rung is
classified against the user's monthly disposable income, and the
closest rung at or above it is reported as the match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from rates import BenefitProfile, RateTable, Region, default_rate_table

BELOW = "below"    # user's disposable income is below this rung
MATCH = "match"
ABOVE = "above"    # user's disposable income is above this rung


@dataclass(frozen=True)
class LadderRung:
    profile: BenefitProfile
    classification: str
    gap: float          # rung threshold minus disposable income


@dataclass(frozen=True)
class LadderResult:
    disposable_monthly: float
    region: Region
    rungs: Tuple[LadderRung, ...]
    matched: Optional[BenefitProfile]

    @property
    def reaches(self) -> bool:
        """True when at least one rung is at or above the user's income."""
        return self.matched is not None

    @property
    def banner(self) -> str:
        income = f"£{self.disposable_monthly:,.0f}/mo"
        if self.matched is not None:
            return (
                f"{self.matched.name} gets £{self.matched.monthly_threshold:,.0f}/mo, "
                f"the nearest rung matching your {income} disposable income."
            )
        if not self.rungs:
            return f"The benefits ladder doesn't reach your {income} disposable income."
        top = self.rungs[-1].profile
        return (
            f"The benefits ladder doesn't reach your {income} disposable income: "
            f"the highest rung, {top.name}, gets £{top.monthly_threshold:,.0f}/mo."
        )


def ladder_for_region(
    region: Region | str,
    table: Optional[RateTable] = None,
) -> List[BenefitProfile]:
    """Profiles available in *region*, lowest threshold first."""
    table = table if table is not None else default_rate_table()
    region = Region.parse(region)
    profiles = [p for p in table.benefit_profiles if p.applies_to(region)]
    return sorted(profiles, key=lambda p: (p.monthly_threshold, p.order))


def classify(
    disposable_monthly: float,
    region: Region | str = Region.ENGLAND,
    table: Optional[RateTable] = None,
) -> LadderResult:
    """Classify every rung of the region's ladder against *disposable_monthly*."""
    region = Region.parse(region)
    income = float(disposable_monthly)

    rungs = []
    matched = None
    for profile in ladder_for_region(region, table):
        gap = round(profile.monthly_threshold - income, 2)
        if income < profile.monthly_threshold:
            classification = BELOW
        elif income > profile.monthly_threshold:
            classification = ABOVE
        else:
            classification = MATCH
        if matched is None and classification != ABOVE:
            matched = profile
        rungs.append(LadderRung(profile=profile, classification=classification, gap=gap))

    return LadderResult(
        disposable_monthly=round(income, 2),
        region=region,
        rungs=tuple(rungs),
        matched=matched,
    )
