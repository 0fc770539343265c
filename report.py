"""
PDF report generation and reusable chart rendering for the
UK take-home pay and bills calculator.

Provides:
  - Four-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
  - Individual chart renderers reusable by both CLI and web
"""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, List, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import tax
from scenario import InputRecord, ResultRecord

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"
VIOLET = "#a78bfa"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6

ALLOCATION_COLOURS = {
    "income_tax": INDIGO,
    "ni": SLATE,
    "student_loan": AMBER,
    "pension": VIOLET,
    "bills": RED,
    "left": EMERALD,
}
ALLOCATION_LABELS = {
    "income_tax": "Income tax",
    "ni": "National Insurance",
    "student_loan": "Student loan",
    "pension": "Pension",
    "bills": "Bills",
    "left": "Left over",
}


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _gbp_fmt(x, _):
    if abs(x) >= 1e6:
        return f"£{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"£{x / 1e3:.0f}k"
    return f"£{x:.0f}"


def _pct_fmt(x, _):
    return f"{x:.0f}%"


GBP_FMT = FuncFormatter(_gbp_fmt)
PCT_FMT = FuncFormatter(_pct_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT2, labelsize=8)
        ax.xaxis.label.set_color(TEXT2)
        ax.yaxis.label.set_color(TEXT2)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, color=BORDER, linewidth=0.5, alpha=0.6)


def _legend(ax, loc="upper left"):
    leg = ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER)
    for t in leg.get_texts():
        t.set_color(TEXT2)


def _income_axis(result: ResultRecord, points: int = 601) -> np.ndarray:
    top = max(150_000.0, result.gross_income * 1.5)
    return np.linspace(0.0, top, points)


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def _chart_take_home(inputs: InputRecord, result: ResultRecord,
                     figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Take-home pay against gross income, with the user's position."""
    g = _income_axis(result)
    take_home = tax.take_home_pay(g, result.region, inputs.student_loan_plan,
                                  inputs.pension_pct)

    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.plot(g, g, color=SLATE, linewidth=1, linestyle="--", label="Gross")
    ax.plot(g, take_home, color=EMERALD, linewidth=2, label="Take-home")
    ax.fill_between(g, take_home, g, color=INDIGO, alpha=0.12, label="Deductions")

    if result.annual_bills > 0:
        ax.axhline(result.annual_bills, color=RED, linewidth=1, linestyle=":",
                   alpha=0.8, label="Annual bills")

    ax.scatter([result.gross_income], [result.take_home_pay], color=AMBER, zorder=5)
    ax.annotate(f"You: £{result.take_home_pay:,.0f}",
                xy=(result.gross_income, result.take_home_pay),
                xytext=(8, -14), textcoords="offset points",
                fontsize=8, color=AMBER)

    ax.xaxis.set_major_formatter(GBP_FMT)
    ax.yaxis.set_major_formatter(GBP_FMT)
    ax.set_xlabel("Gross income")
    ax.set_ylabel("Per year")
    ax.set_title(f"Take-Home Pay ({result.region.label}, {result.tax_year})",
                 fontsize=11, pad=10)
    _legend(ax)
    return fig


def _chart_marginal(inputs: InputRecord, result: ResultRecord,
                    figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Stacked marginal rate of each deduction across incomes."""
    g = _income_axis(result)
    region, plan, pension = result.region, inputs.student_loan_plan, inputs.pension_pct

    def marginal(fn):
        return (fn(g + 1.0) - fn(g)) * 100

    it = marginal(lambda x: tax.income_tax(x, region, pension, round_result=False))
    ni = marginal(lambda x: tax.national_insurance(x, round_result=False))
    sl = marginal(lambda x: tax.student_loan_repayment(x, plan, round_result=False))

    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.stackplot(g, it, ni, sl, colors=[INDIGO, SLATE, AMBER], alpha=0.85,
                 labels=["Income Tax", "National Insurance", "Student Loan"])
    ax.axvline(result.gross_income, color=EMERALD, linewidth=1, linestyle=":")
    ax.annotate(f"You: {result.marginal['total_marginal_pct']:.0f}%",
                xy=(result.gross_income, result.marginal["total_marginal_pct"]),
                xytext=(6, 6), textcoords="offset points",
                fontsize=8, color=EMERALD)

    ax.set_ylim(0, 80)
    ax.xaxis.set_major_formatter(GBP_FMT)
    ax.yaxis.set_major_formatter(PCT_FMT)
    ax.set_xlabel("Gross income")
    ax.set_ylabel("Marginal Rate")
    ax.set_title("Marginal Rate Breakdown", fontsize=11, pad=10)
    _legend(ax, loc="upper left")
    return fig


def _chart_allocation(result: ResultRecord, figsize=(WEB_W, 2.6)) -> plt.Figure:
    """Where each pound of gross income goes."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    left = 0.0
    for key, share in result.allocation.items():
        if share <= 0:
            continue
        ax.barh([0], [share], left=left, color=ALLOCATION_COLOURS[key],
                label=f"{ALLOCATION_LABELS[key]} {share:.1f}%")
        left += share

    ax.set_xlim(0, 100)
    ax.set_yticks([])
    ax.xaxis.set_major_formatter(PCT_FMT)
    ax.set_title("Where Your Income Goes", fontsize=11, pad=10)
    if result.allocation:
        leg = ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.25), ncol=3,
                        fontsize=8, facecolor=CARD, edgecolor=BORDER)
        for t in leg.get_texts():
            t.set_color(TEXT2)
    return fig


def _page_summary(inputs: InputRecord, result: ResultRecord,
                  figsize=(A4W, A4H)) -> plt.Figure:
    fig = plt.figure(figsize=figsize)
    fig.patch.set_facecolor(BG)

    lines = [
        ("Region", result.region.label),
        ("Gross income", f"£{result.gross_income:,.0f}"),
        ("Income tax", f"£{result.income_tax:,.0f}"),
        ("National Insurance", f"£{result.ni:,.0f}"),
        ("Student loan", f"£{result.student_loan:,.0f}"),
        ("Pension contribution", f"£{result.pension_contribution:,.0f}"),
        ("Take-home pay", f"£{result.take_home_pay:,.0f}"),
        ("Effective rate", f"{result.effective_rate * 100:.1f}%"),
        ("Annual bills", f"£{result.annual_bills:,.0f}"),
        ("Left after bills", f"£{result.left_after_bills:,.0f}"),
        ("Gross earned to cover bills", f"£{result.gross_needed_for_bills:,.0f}"),
        ("Hidden tax cost of your bills", f"£{result.hidden_tax_cost:,.0f}"),
    ]

    fig.text(0.08, 0.93, f"UK Tax Calculator {result.tax_year}", fontsize=18,
             fontweight="bold", color=TEXT)
    y = 0.86
    for label, value in lines:
        fig.text(0.08, y, label, fontsize=11, color=TEXT2)
        fig.text(0.62, y, value, fontsize=11, color=TEXT, fontweight="bold")
        y -= 0.04

    fig.text(0.08, y - 0.03, result.ladder.banner, fontsize=9, color=AMBER, wrap=True)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=150, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    inputs: InputRecord,
    result: ResultRecord,
    path: Union[str, BinaryIO] = "take_home_report.pdf",
) -> Union[str, BinaryIO]:
    """Generate the PDF report into a path or binary file object. Returns *path*."""
    pages = [
        _page_summary(inputs, result),
        _chart_take_home(inputs, result, figsize=(A4W, A4H * 0.55)),
        _chart_marginal(inputs, result, figsize=(A4W, A4H * 0.55)),
        _chart_allocation(result, figsize=(A4W, 3.0)),
    ]

    with PdfPages(path) as pdf:
        for fig in pages:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    for fig in pages:
        plt.close(fig)
    return path


def get_web_charts(inputs: InputRecord, result: ResultRecord) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 3 charts:
      [0] Take-home pay against gross income
      [1] Marginal rate breakdown across incomes
      [2] Income allocation bar
    """
    chart_figs = [
        _chart_take_home(inputs, result),
        _chart_marginal(inputs, result),
        _chart_allocation(result),
    ]

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
