"""
UK tax constants for the take-home pay and bills calculator.

All monetary values in GBP for the 2026/27 tax year. Income tax bands
are measured on *taxable* income (after the personal allowance); NI and
student loan thresholds are measured on gross pay.
"""

# ── General ──────────────────────────────────────────────────────────
TAX_YEAR = "2026/27"
WEEKS_PER_YEAR = 52
DEFAULT_HOURS_PER_WEEK = 37.5

# ── Personal Allowance ──────────────────────────────────────────────
PERSONAL_ALLOWANCE = 12_570
PA_TAPER_THRESHOLD = 100_000       # PA reduces £1 per £2 above this
PA_TAPER_RATE = 0.5
PA_FLOOR = 0                       # fully withdrawn at £125,140

# ── Income Tax (England, Wales & Northern Ireland) ──────────────────
# Bands: (upper limit of taxable income, rate). Last band has no upper
# limit (use inf).
INCOME_TAX_BANDS_RUK = [
    (37_700, 0.20),        # basic rate      (gross £12,571 - £50,270)
    (125_140, 0.40),       # higher rate     (gross £50,271 - £125,140)
    (float("inf"), 0.45),  # additional rate
]

# ── Income Tax (Scotland) ───────────────────────────────────────────
INCOME_TAX_BANDS_SCOTLAND = [
    (2_306, 0.19),         # starter rate      (gross to £14,876)
    (13_991, 0.20),        # basic rate        (gross to £26,561)
    (31_092, 0.21),        # intermediate rate (gross to £43,662)
    (62_430, 0.42),        # higher rate       (gross to £75,000)
    (125_140, 0.45),       # advanced rate
    (float("inf"), 0.48),  # top rate
]

# ── National Insurance (Employee Class 1) ───────────────────────────
NI_BANDS = [
    (12_570, 0.00),        # below primary threshold
    (50_270, 0.08),        # main rate
    (float("inf"), 0.02),  # upper rate
]

# ── Student Loans ───────────────────────────────────────────────────
# code: (label, annual threshold, rate above threshold)
STUDENT_LOAN_PLANS = {
    "plan1": ("Plan 1", 26_900, 0.09),
    "plan2": ("Plan 2", 29_385, 0.09),
    "plan4": ("Plan 4 (Scotland)", 33_795, 0.09),
    "plan5": ("Plan 5", 25_000, 0.09),
    "postgrad": ("Postgraduate Loan", 21_000, 0.06),
}

# ── Benefits ladder ─────────────────────────────────────────────────
# Approximate monthly income a household receives on benefits once
# housing costs are met. (name, monthly amount, region or None for
# UK-wide). Child Benefit is £27.05/wk for the eldest child and £17.90
# for each other child; Scottish Child Payment is £28.20/wk per child.
BENEFIT_PROFILES = [
    ("Single under 25, Universal Credit", 338.58, None),
    ("Single 25+, Universal Credit", 424.90, None),
    ("Single 25+, Universal Credit + carer element", 626.58, None),
    ("Couple 25+, Universal Credit", 666.97, None),
    ("Single 25+, Universal Credit + LCWRA", 854.70, None),
    ("Lone parent, 1 child, Universal Credit + Child Benefit", 894.00, None),
    ("Lone parent, 1 child + Scottish Child Payment", 1_016.20, "scotland"),
    ("Single pensioner, Pension Credit", 1_031.33, None),
    ("Couple, 1 child, Universal Credit + Child Benefit", 1_136.07, None),
    ("Lone parent, 2 children, Universal Credit + Child Benefit", 1_275.51, None),
    ("Couple, 2 children, Universal Credit + Child Benefit", 1_517.58, None),
    ("Lone parent, 2 children + Scottish Child Payment", 1_519.91, "scotland"),
    ("Pensioner couple, Pension Credit", 1_574.08, None),
    ("Couple, 2 children + Scottish Child Payment", 1_761.98, "scotland"),
    ("Couple, 3 children, Universal Credit + Child Benefit", 1_899.09, None),
    ("Couple, 3 children + Scottish Child Payment", 2_265.69, "scotland"),
    ("Couple, 4 children, Universal Credit + Child Benefit", 2_280.60, None),
]
