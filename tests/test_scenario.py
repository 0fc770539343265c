"""Tests for scenario aggregation."""

import pytest

from rates import Region
from scenario import BillItem, InputRecord, compute_scenario, income_allocation


@pytest.fixture
def basic():
    return compute_scenario(InputRecord(gross_income=30_000, monthly_bills=1_000))


class TestInputRecord:
    def test_region_is_parsed(self):
        assert InputRecord(gross_income=1, region="Northern Ireland").region is Region.NORTHERN_IRELAND

    def test_unknown_region(self):
        with pytest.raises(ValueError):
            InputRecord(gross_income=1, region="atlantis")

    def test_monthly_outgoings_sum_every_source(self):
        inputs = InputRecord(
            gross_income=40_000,
            monthly_bills=100,
            housing_cost=900,
            other_bills=50,
            bill_items=(BillItem("Phone", 20), BillItem("Gym", 30, "extra")),
        )
        assert inputs.monthly_outgoings == 1_100

    def test_bill_tier_validated(self):
        with pytest.raises(ValueError, match="tier"):
            BillItem("Holiday", 100, "luxury")


class TestComputeScenario:
    def test_pay(self, basic):
        assert basic.income_tax == 3_486.00
        assert basic.ni == pytest.approx(1_394.40)
        assert basic.student_loan == 0.0
        assert basic.take_home_pay == pytest.approx(25_119.60)
        assert basic.monthly_take_home == pytest.approx(2_093.30)
        assert basic.total_deductions == pytest.approx(4_880.40)
        assert basic.effective_rate == pytest.approx(4_880.40 / 30_000)
        assert basic.tax_year == "2026/27"

    def test_bills(self, basic):
        assert basic.annual_bills == 12_000
        assert basic.left_after_bills == pytest.approx(13_119.60)
        assert basic.disposable_monthly == pytest.approx(1_093.30)

    def test_bills_cost_more_gross_than_face_value(self, basic):
        assert basic.gross_needed_for_bills == pytest.approx(16_666.67, abs=0.01)
        assert basic.gross_needed_for_bills > basic.annual_bills
        assert basic.hidden_tax_cost == pytest.approx(4_666.67, abs=0.01)

    def test_ladder_uses_disposable_income(self, basic):
        assert basic.ladder.disposable_monthly == pytest.approx(1_093.30)
        assert basic.ladder.matched.name == "Couple, 1 child, Universal Credit + Child Benefit"
        assert basic.ladder_classification == basic.ladder.rungs

    def test_bills_exceeding_take_home(self):
        result = compute_scenario(InputRecord(gross_income=20_000, housing_cost=2_000))
        assert result.left_after_bills < 0
        assert result.disposable_monthly < 0
        assert result.ladder.matched is not None

    def test_zero_income(self):
        result = compute_scenario(InputRecord(gross_income=0))
        assert result.take_home_pay == 0.0
        assert result.effective_rate == 0.0
        assert result.allocation == {}

    def test_pension_over_100_is_clamped(self):
        result = compute_scenario(InputRecord(gross_income=50_000, pension_pct=150))
        assert result.pension_contribution == 50_000
        assert result.income_tax == 0.0
        # NI is still due on gross pay
        assert result.take_home_pay == pytest.approx(-result.ni)

    def test_pension(self):
        result = compute_scenario(InputRecord(gross_income=40_000, pension_pct=5))
        assert result.pension_contribution == 2_000
        assert result.pension_tax_saving == pytest.approx(400)
        expected = 40_000 - result.income_tax - result.ni - 2_000
        assert result.take_home_pay == pytest.approx(expected, abs=0.01)

    def test_student_loan(self):
        result = compute_scenario(InputRecord(gross_income=40_000, student_loan_plan="plan2"))
        assert result.student_loan == pytest.approx(955.35)

    def test_unknown_student_loan(self):
        with pytest.raises(ValueError):
            compute_scenario(InputRecord(gross_income=40_000, student_loan_plan="plan9"))

    def test_scotland_takes_home_less_at_60k(self):
        eng = compute_scenario(InputRecord(gross_income=60_000))
        sco = compute_scenario(InputRecord(gross_income=60_000, region="scotland"))
        assert sco.take_home_pay < eng.take_home_pay
        assert sco.ni == eng.ni

    def test_hourly_rates(self):
        result = compute_scenario(InputRecord(gross_income=30_000, hours_per_week=37.5))
        assert result.gross_hourly == pytest.approx(15.38)
        assert result.net_hourly == pytest.approx(12.88)

    def test_no_hours_no_hourly_rates(self, basic):
        assert basic.gross_hourly is None
        assert basic.net_hourly is None

    def test_bill_lines(self):
        inputs = InputRecord(
            gross_income=30_000,
            bill_items=(BillItem("Rent", 800), BillItem("Streaming", 15, "extra")),
        )
        result = compute_scenario(inputs)
        rent, streaming = result.bill_lines
        assert rent.annual == 9_600
        assert rent.gross_needed == pytest.approx(9_600 / 0.72, abs=0.01)
        assert streaming.tier == "extra"
        assert result.annual_bills == 9_780

    def test_marginal(self, basic):
        assert basic.marginal["total_marginal_pct"] == pytest.approx(28.0, abs=0.01)

    def test_is_recomputed_each_call(self):
        inputs = InputRecord(gross_income=45_000, monthly_bills=500)
        first = compute_scenario(inputs)
        inputs.monthly_bills = 800
        second = compute_scenario(inputs)
        assert second.annual_bills == 9_600
        assert first.annual_bills == 6_000

    def test_to_dict(self, basic):
        body = basic.to_dict()
        assert body["region"] == "england"
        assert body["region_label"] == "England"
        assert body["take_home_pay"] == pytest.approx(25_119.60)
        assert body["ladder"]["reaches"] is True
        assert len(body["ladder"]["rungs"]) == len(basic.ladder.rungs)
        assert set(body["allocation"]) == {"income_tax", "ni", "student_loan", "pension", "bills", "left"}


class TestIncomeAllocation:
    def test_sums_to_100(self, basic):
        assert sum(basic.allocation.values()) == pytest.approx(100, abs=0.05)
        assert basic.allocation["bills"] == 40.0

    def test_bills_capped_at_take_home(self):
        shares = income_allocation(20_000, 1_486, 594.4, 0, 0, 50_000)
        assert shares["left"] == 0.0
        assert sum(shares.values()) == pytest.approx(100, abs=0.05)

    @pytest.mark.parametrize("pension_pct", [99, 100, 150])
    def test_sums_to_100_with_large_pension(self, pension_pct):
        result = compute_scenario(InputRecord(gross_income=50_000, pension_pct=pension_pct,
                                              monthly_bills=500))
        shares = result.allocation
        assert sum(shares.values()) == pytest.approx(100, abs=0.05)
        assert all(share >= 0 for share in shares.values())
        assert shares["bills"] == 0.0
        assert shares["left"] == 0.0

    def test_non_positive_income(self):
        assert income_allocation(0, 0, 0, 0, 0, 1_000) == {}
