"""
Flask web API for the UK take-home pay and bills calculator.

Serves JSON over the calculation engine; the page itself lives with the
front end. Run via ``python main.py`` which starts the dev server on
localhost:5000.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, Mapping, Optional

from flask import Flask, jsonify, request, send_file

import report
from cli import compute_display_data, generate_insight_text
from grossup import gross_needed_for_net
from rates import default_rate_table
from scenario import InputRecord, compute_scenario

logger = logging.getLogger(__name__)

app = Flask(__name__)


# ═══════════════════════════════════════════════════════════════════
# Parameter parsing
# ═══════════════════════════════════════════════════════════════════

def _parse_currency(s: str) -> float:
    return float(s.replace("£", "").replace(",", "").replace(" ", ""))


def _number(params: Mapping[str, str], key: str, default: float = 0.0) -> float:
    raw = params.get(key, "")
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = _parse_currency(str(raw))
    except ValueError:
        raise ValueError(f"'{key}' must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"'{key}' must not be negative")
    return value


def parse_params(params: Mapping[str, str]) -> InputRecord:
    """Parse flat key/value parameters (query string or form) into an InputRecord.

    Keys match the calculator's saved URL parameters: ``income``,
    ``region``, ``pension``, ``bills``, ``housing``, ``other``,
    ``hours`` and ``loan``.
    """
    hours = _number(params, "hours")
    return InputRecord(
        gross_income=_number(params, "income"),
        region=params.get("region") or "england",
        pension_pct=_number(params, "pension"),
        monthly_bills=_number(params, "bills"),
        housing_cost=_number(params, "housing"),
        other_bills=_number(params, "other"),
        hours_per_week=hours or None,
        student_loan_plan=params.get("loan") or None,
    )


def _bad_request(exc: Exception):
    logger.info("Rejected request %s: %s", request.full_path, exc)
    return jsonify({"error": str(exc)}), 400


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/api/scenario", methods=["GET", "POST"])
def scenario():
    params = request.values.to_dict()
    try:
        inputs = parse_params(params)
        result = compute_scenario(inputs)
    except ValueError as exc:
        return _bad_request(exc)

    body: Dict[str, Any] = result.to_dict()
    body["insight"] = generate_insight_text(compute_display_data(inputs, result))
    return jsonify(body)


@app.route("/api/grossup")
def grossup():
    params = request.args.to_dict()
    try:
        result = gross_needed_for_net(
            _number(params, "target"),
            region=params.get("region") or "england",
            plan=params.get("loan") or None,
            pension_pct=_number(params, "pension"),
            base_gross=_number(params, "base"),
        )
    except ValueError as exc:
        return _bad_request(exc)
    return jsonify({
        "target_net": result.target_net,
        "base_gross": result.base_gross,
        "gross_needed": result.gross_needed,
        "hidden_tax_cost": result.hidden_tax_cost,
    })


@app.route("/api/rates")
def rate_table():
    table = default_rate_table()
    return jsonify({
        "tax_year": table.tax_year,
        "income_tax_bands": {
            region.value: [[b.lower, None if b.upper == float("inf") else b.upper, b.rate]
                           for b in bands]
            for region, bands in table.income_tax_bands.items()
        },
        "student_loan_plans": {
            code: {"label": plan.label, "threshold": plan.threshold, "rate": plan.rate}
            for code, plan in table.student_loan_plans.items()
        },
    })


@app.route("/api/charts")
def charts():
    try:
        inputs = parse_params(request.args.to_dict())
        result = compute_scenario(inputs)
    except ValueError as exc:
        return _bad_request(exc)
    return jsonify({"charts": report.get_web_charts(inputs, result)})


@app.route("/download-pdf")
def download_pdf():
    try:
        inputs = parse_params(request.args.to_dict())
        result = compute_scenario(inputs)
    except ValueError as exc:
        return _bad_request(exc)

    buf = io.BytesIO()
    report.generate_pdf(inputs, result, buf)
    buf.seek(0)
    return send_file(buf, mimetype="application/pdf", as_attachment=True,
                     download_name="take_home_report.pdf")


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(host: str = "127.0.0.1", port: int = 5000, debug: Optional[bool] = True) -> None:
    """Start the Flask development server."""
    print(f"Starting web API at http://{host}:{port}/api/scenario")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_web()
