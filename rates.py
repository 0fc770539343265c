"""
Rate tables for the take-home pay calculator.

Turns the plain constants in ``config.py`` into one immutable
``RateTable`` that every calculator receives. Band tables are checked
once, when the table is built; a broken table never reaches a
calculation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import config as cfg

logger = logging.getLogger(__name__)


# ─── Errors ──────────────────────────────────────────────────────────

class ConfigurationError(Exception):
    """The static rate configuration is unusable."""


class InvalidBandsError(ConfigurationError):
    """A band table is empty, unordered, overlapping or has gaps."""


# ─── Regions ─────────────────────────────────────────────────────────

class Region(str, Enum):
    ENGLAND = "england"
    WALES = "wales"
    SCOTLAND = "scotland"
    NORTHERN_IRELAND = "ni"

    @property
    def label(self) -> str:
        return _REGION_LABELS[self]

    @classmethod
    def parse(cls, value: "Region | str") -> "Region":
        """Accept a Region or a region code such as ``'scotland'``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        key = _REGION_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown region {value!r}; expected one of "
                f"{', '.join(r.value for r in cls)}"
            ) from None


_REGION_LABELS = {
    Region.ENGLAND: "England",
    Region.WALES: "Wales",
    Region.SCOTLAND: "Scotland",
    Region.NORTHERN_IRELAND: "Northern Ireland",
}

_REGION_ALIASES = {
    "northern_ireland": "ni",
    "n_ireland": "ni",
}


# ─── Data Classes ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Band:
    """A contiguous slice of income taxed at one marginal rate."""

    lower: float
    upper: float   # math.inf for the top band
    rate: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class PersonalAllowanceRule:
    base: float
    taper_start: float
    taper_rate: float
    floor: float = 0.0

    @property
    def taper_end(self) -> float:
        """Adjusted net income at which the allowance reaches the floor."""
        return self.taper_start + (self.base - self.floor) / self.taper_rate


@dataclass(frozen=True)
class StudentLoanPlan:
    code: str
    label: str
    threshold: float
    rate: float


@dataclass(frozen=True)
class BenefitProfile:
    name: str
    monthly_threshold: float
    region: Optional[Region] = None   # None = available UK-wide
    order: int = 0                    # tie-break for equal thresholds

    def applies_to(self, region: Region) -> bool:
        return self.region is None or self.region is region


@dataclass(frozen=True)
class RateTable:
    """Every rate the engine needs for one tax year. Never mutated."""

    tax_year: str
    income_tax_bands: Mapping[Region, Tuple[Band, ...]]
    ni_bands: Tuple[Band, ...]
    personal_allowance: PersonalAllowanceRule
    student_loan_plans: Mapping[str, StudentLoanPlan]
    benefit_profiles: Tuple[BenefitProfile, ...] = field(default=())

    def __post_init__(self) -> None:
        missing = [r.value for r in Region if r not in self.income_tax_bands]
        if missing:
            raise ConfigurationError(f"No income tax bands for: {', '.join(missing)}")
        for region, bands in self.income_tax_bands.items():
            validate_bands(bands, f"income tax ({region.value})")
        validate_bands(self.ni_bands, "national insurance")
        rule = self.personal_allowance
        if rule.taper_rate <= 0 or rule.floor > rule.base:
            raise ConfigurationError(f"Invalid personal allowance rule: {rule}")

    def tax_bands(self, region: Region | str) -> Tuple[Band, ...]:
        return self.income_tax_bands[Region.parse(region)]

    def student_loan_plan(self, code: Optional[str]) -> Optional[StudentLoanPlan]:
        """Look up a plan by code. ``None``, ``''`` and ``'none'`` mean no plan."""
        if code is None:
            return None
        key = str(code).strip().lower()
        if key in ("", "none"):
            return None
        try:
            return self.student_loan_plans[key]
        except KeyError:
            raise ValueError(
                f"Unknown student loan plan {code!r}; expected one of "
                f"{', '.join(sorted(self.student_loan_plans))}"
            ) from None


# ─── Construction ────────────────────────────────────────────────────

def bands_from_limits(limits: Iterable[Tuple[float, float]]) -> Tuple[Band, ...]:
    """Build bands from ``(upper limit, rate)`` pairs, starting at 0."""
    bands: List[Band] = []
    lower = 0.0
    for upper, rate in limits:
        bands.append(Band(lower=lower, upper=float(upper), rate=float(rate)))
        lower = float(upper)
    return tuple(bands)


def validate_bands(bands: Sequence[Band], name: str = "bands") -> None:
    """Raise InvalidBandsError unless *bands* is gapless, ordered and starts at 0."""
    if not bands:
        raise InvalidBandsError(f"{name}: band table is empty")
    if bands[0].lower != 0:
        raise InvalidBandsError(f"{name}: first band starts at {bands[0].lower}, not 0")
    for i, band in enumerate(bands):
        if not 0.0 <= band.rate < 1.0:
            raise InvalidBandsError(f"{name}: band {i} rate {band.rate} outside [0, 1)")
        if band.upper <= band.lower:
            raise InvalidBandsError(
                f"{name}: band {i} is empty or reversed ({band.lower} - {band.upper})"
            )
        if math.isinf(band.upper) and i != len(bands) - 1:
            raise InvalidBandsError(f"{name}: only the last band may be unbounded")
        if i > 0 and bands[i - 1].upper != band.lower:
            raise InvalidBandsError(
                f"{name}: band {i} starts at {band.lower} but band {i - 1} "
                f"ends at {bands[i - 1].upper}"
            )


def build_rate_table() -> RateTable:
    """Build the validated rate table from ``config.py``."""
    try:
        ruk = bands_from_limits(cfg.INCOME_TAX_BANDS_RUK)
        scotland = bands_from_limits(cfg.INCOME_TAX_BANDS_SCOTLAND)

        plans = {
            code: StudentLoanPlan(code=code, label=label, threshold=float(threshold), rate=rate)
            for code, (label, threshold, rate) in cfg.STUDENT_LOAN_PLANS.items()
        }
        profiles = tuple(
            BenefitProfile(
                name=name,
                monthly_threshold=float(amount),
                region=None if region is None else Region.parse(region),
                order=i,
            )
            for i, (name, amount, region) in enumerate(cfg.BENEFIT_PROFILES)
        )

        table = RateTable(
            tax_year=cfg.TAX_YEAR,
            # Wales and Northern Ireland share England's table.
            income_tax_bands=MappingProxyType({
                Region.ENGLAND: ruk,
                Region.WALES: ruk,
                Region.NORTHERN_IRELAND: ruk,
                Region.SCOTLAND: scotland,
            }),
            ni_bands=bands_from_limits(cfg.NI_BANDS),
            personal_allowance=PersonalAllowanceRule(
                base=float(cfg.PERSONAL_ALLOWANCE),
                taper_start=float(cfg.PA_TAPER_THRESHOLD),
                taper_rate=float(cfg.PA_TAPER_RATE),
                floor=float(cfg.PA_FLOOR),
            ),
            student_loan_plans=MappingProxyType(plans),
            benefit_profiles=profiles,
        )
    except (ConfigurationError, ValueError) as exc:
        logger.error("Rate table for %s failed to load: %s", cfg.TAX_YEAR, exc)
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(str(exc)) from exc

    logger.info(
        "Loaded %s rate table: %d regions, %d student loan plans, %d benefit profiles",
        table.tax_year, len(table.income_tax_bands), len(plans), len(profiles),
    )
    return table


@lru_cache(maxsize=None)
def default_rate_table() -> RateTable:
    """The process-wide rate table, built on first use."""
    return build_rate_table()
