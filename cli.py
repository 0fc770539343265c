"""
CLI interface and shared display-data computation for the
UK take-home pay and bills calculator.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
import report
from benefits import ABOVE, BELOW, MATCH
from rates import Region, default_rate_table
from scenario import InputRecord, ResultRecord, compute_scenario


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 0) -> str:
    """Format number as £X,XXX (negative as -£X,XXX)."""
    sign = "-" if val < 0 else ""
    return f"{sign}£{abs(val):,.{decimals}f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _strip_currency(s: str) -> str:
    """Remove currency symbols, commas, spaces."""
    return s.replace("£", "").replace(",", "").replace(" ", "")


def _prompt_float(
    label: str,
    default: Any,
    min_val: float | None = None,
    max_val: float | None = None,
    currency: bool = False,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(_strip_currency(str(default))) if currency else float(default)
        try:
            val = float(_strip_currency(raw) if currency else raw.replace("%", ""))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def collect_inputs() -> InputRecord:
    """Prompt the user for every calculator input."""
    print("\n  Enter your details (press Enter for defaults):\n")

    plans = ["none"] + sorted(default_rate_table().student_loan_plans)

    income = _prompt_float("Annual gross income", "£30,000", 0, currency=True)
    region = _prompt_choice("Region", [r.value for r in Region], Region.ENGLAND.value)
    pension = _prompt_float("Pension contribution %", 0, 0, 100)
    loan = _prompt_choice("Student loan plan", plans, "none")
    housing = _prompt_float("Monthly rent / mortgage", "£0", 0, currency=True)
    other = _prompt_float("Other monthly bills", "£0", 0, currency=True)
    hours = _prompt_float("Hours worked per week", cfg.DEFAULT_HOURS_PER_WEEK, 0, 100)

    return InputRecord(
        gross_income=income,
        region=region,
        pension_pct=pension,
        housing_cost=housing,
        other_bills=other,
        hours_per_week=hours,
        student_loan_plan=None if loan == "none" else loan,
    )


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(inputs: InputRecord, result: ResultRecord) -> Dict[str, Any]:
    """Flatten a result into the figures the output sections print."""
    ladder = result.ladder
    below = [r for r in ladder.rungs if r.classification == BELOW]
    above = [r for r in ladder.rungs if r.classification in (ABOVE, MATCH)]

    return {
        # Inputs echo
        "region": result.region,
        "region_label": result.region.label,
        "tax_year": result.tax_year,
        "gross": result.gross_income,
        "pension_pct": inputs.pension_pct,
        "loan_plan": inputs.student_loan_plan,
        "hours": inputs.hours_per_week,
        # Pay
        "income_tax": result.income_tax,
        "ni": result.ni,
        "student_loan": result.student_loan,
        "pension": result.pension_contribution,
        "pension_saving": result.pension_tax_saving,
        "total_deductions": result.total_deductions,
        "effective_pct": result.effective_rate * 100,
        "marginal": result.marginal,
        "take_home": result.take_home_pay,
        "monthly_take_home": result.monthly_take_home,
        "gross_hourly": result.gross_hourly,
        "net_hourly": result.net_hourly,
        # Bills
        "monthly_outgoings": inputs.monthly_outgoings,
        "housing": inputs.housing_cost,
        "other_bills": inputs.other_bills + inputs.monthly_bills,
        "annual_bills": result.annual_bills,
        "left_after_bills": result.left_after_bills,
        "gross_for_bills": result.gross_needed_for_bills,
        "hidden_cost": result.hidden_tax_cost,
        "bill_lines": result.bill_lines,
        # Ladder
        "disposable_monthly": result.disposable_monthly,
        "ladder": ladder,
        "ladder_below": len(below),
        "ladder_above": len(above),
        "banner": ladder.banner,
    }


def generate_insight_text(d: Dict[str, Any]) -> str:
    """Build a 2-3 sentence plain-English summary."""
    hmrc = d["income_tax"] + d["ni"]
    parts = []
    if d["hours"]:
        parts.append(
            f"You work {d['hours']:g} hours a week and take home "
            f"{fmt(d['monthly_take_home'])} a month"
        )
        if d["net_hourly"] is not None:
            parts[-1] += f", {fmt(d['net_hourly'], 2)} for every hour you work."
        else:
            parts[-1] += "."
    else:
        parts.append(f"You take home {fmt(d['monthly_take_home'])} a month.")

    parts.append(
        f"HMRC keeps {fmt(hmrc)} a year in income tax and National Insurance; "
        f"with everything deducted your effective rate is {pct(d['effective_pct'])} "
        f"and your next pound is taxed at {pct(d['marginal']['total_marginal_pct'])}."
    )

    if d["annual_bills"] > 0:
        parts.append(
            f"Your bills of {fmt(d['annual_bills'])} a year really cost "
            f"{fmt(d['gross_for_bills'])} of gross pay, a hidden "
            f"{fmt(d['hidden_cost'])} in tax."
        )
    return " ".join(parts)


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _wrap(text: str) -> List[str]:
    line_len = W - 6
    rows, line = [], ""
    for word in text.split():
        if len(line) + len(word) + 1 <= line_len:
            line = f"{line} {word}" if line else word
        else:
            rows.append(_box_line(line))
            line = word
    if line:
        rows.append(_box_line(line))
    return rows


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_pay(d: Dict[str, Any]) -> None:
    m = d["marginal"]
    marginal_breakdown = (
        f"{pct(m['income_tax_pct'])} IT + "
        f"{pct(m['ni_pct'])} NI + "
        f"{pct(m['sl_pct'])} SL"
    )
    rows = [
        _box_row("Gross income", fmt(d["gross"])),
        _box_line(),
        _box_row("Income tax", fmt(d["income_tax"])),
        _box_row("National Insurance", fmt(d["ni"])),
    ]
    if d["loan_plan"]:
        rows.append(_box_row("Student loan", fmt(d["student_loan"])))
    if d["pension"] > 0:
        rows.append(_box_row("Pension contribution", fmt(d["pension"])))
        rows.append(_box_row("  Income tax saving", fmt(d["pension_saving"])))
    rows += [
        _box_row("Total deductions", f"{fmt(d['total_deductions'])} ({pct(d['effective_pct'])})"),
        _box_line(),
        _box_row("Take-home pay (annual)", fmt(d["take_home"])),
        _box_row("Take-home pay (monthly)", fmt(d["monthly_take_home"])),
        _box_row("Marginal rate", pct(m["total_marginal_pct"])),
        _box_row("  Breakdown", marginal_breakdown),
    ]
    if d["net_hourly"] is not None:
        rows.append(_box_row("Hourly rate (gross / net)",
                             f"{fmt(d['gross_hourly'], 2)} / {fmt(d['net_hourly'], 2)}"))
    _print_section(f"YOUR PAY — {d['region_label'].upper()} {d['tax_year']}", rows)


def _print_bills(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Housing (monthly)", fmt(d["housing"])),
        _box_row("Other bills (monthly)", fmt(d["other_bills"])),
        _box_row("Annual bills", fmt(d["annual_bills"])),
        _box_row("Left after bills", fmt(d["left_after_bills"])),
        _box_line(),
        _box_row("Gross earned to cover bills", fmt(d["gross_for_bills"])),
        _box_row("Hidden tax cost of your bills", fmt(d["hidden_cost"])),
    ]
    for tier in ("critical", "extra"):
        lines = [line for line in d["bill_lines"] if line.tier == tier]
        if not lines:
            continue
        rows.append(_box_line())
        rows.append(_box_line(f"{tier.title()}"))
        for line in lines:
            rows.append(_box_row(f"  {line.name}", f"{fmt(line.annual)} → {fmt(line.gross_needed)}"))
    _print_section("YOUR BILLS", rows)


def _print_ladder(d: Dict[str, Any]) -> None:
    ladder = d["ladder"]
    h1 = f"{'Household':<52}{'Per month':>10}  {'You':>6}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for rung in ladder.rungs:
        marker = " <<" if ladder.matched is rung.profile else ""
        name = rung.profile.name[:50]
        rows.append(_box_line(
            f"{name:<52}{fmt(rung.profile.monthly_threshold):>10}  "
            f"{rung.classification:>6}{marker}"
        ))
    rows.append(_box_line())
    rows.append(_box_row("Your disposable income", f"{fmt(d['disposable_monthly'])}/mo"))
    rows.append(_box_line())
    rows += _wrap(d["banner"])
    _print_section("THE BENEFITS LADDER", rows)


def _print_insight(d: Dict[str, Any]) -> None:
    _print_section("IN PLAIN ENGLISH", _wrap(generate_insight_text(d)))


def _print_charts(pdf_path: str | None) -> None:
    rows = []
    if pdf_path:
        rows.append(_box_line(f"PDF report saved to: {pdf_path}"))
    else:
        rows.append(_box_line("Charts available in the web app:"))
        rows.append(_box_line("  python main.py  (serves localhost:5000)"))
    _print_section("CHARTS", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(pdf_path: Optional[str] = "take_home_report.pdf") -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print(f"  UK Tax Calculator {cfg.TAX_YEAR}: take-home pay and the real cost of bills")
    print("=" * W)

    inputs = collect_inputs()
    result = compute_scenario(inputs)
    d = compute_display_data(inputs, result)

    print()
    _print_pay(d)
    _print_bills(d)
    _print_ladder(d)
    _print_insight(d)

    if pdf_path:
        print("  Generating PDF report...")
        pdf_path = report.generate_pdf(inputs, result, pdf_path)
        print(f"  Saved to {pdf_path}\n")
    _print_charts(pdf_path)


if __name__ == "__main__":
    run_cli()
