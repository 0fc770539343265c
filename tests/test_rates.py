"""Tests for rate-table construction and validation."""

import math
from dataclasses import FrozenInstanceError, replace

import pytest

from rates import (
    Band,
    ConfigurationError,
    InvalidBandsError,
    Region,
    bands_from_limits,
    default_rate_table,
    validate_bands,
)


class TestRegion:
    @pytest.mark.parametrize("raw, expected", [
        ("england", Region.ENGLAND),
        ("Scotland", Region.SCOTLAND),
        ("wales", Region.WALES),
        ("ni", Region.NORTHERN_IRELAND),
        ("northern-ireland", Region.NORTHERN_IRELAND),
        ("Northern Ireland", Region.NORTHERN_IRELAND),
        (Region.SCOTLAND, Region.SCOTLAND),
    ])
    def test_parse(self, raw, expected):
        assert Region.parse(raw) is expected

    def test_unknown_region(self):
        with pytest.raises(ValueError, match="Unknown region"):
            Region.parse("france")

    def test_labels(self):
        assert Region.ENGLAND.label == "England"
        assert Region.NORTHERN_IRELAND.label == "Northern Ireland"


class TestBandValidation:
    def test_limits_become_contiguous_bands(self):
        bands = bands_from_limits([(100, 0.1), (float("inf"), 0.2)])
        assert bands == (Band(0.0, 100.0, 0.1), Band(100.0, math.inf, 0.2))
        validate_bands(bands)

    def test_empty_table(self):
        with pytest.raises(InvalidBandsError, match="empty"):
            validate_bands(())

    def test_must_start_at_zero(self):
        with pytest.raises(InvalidBandsError, match="not 0"):
            validate_bands((Band(10, 100, 0.1),))

    def test_gap(self):
        with pytest.raises(InvalidBandsError, match="starts at"):
            validate_bands((Band(0, 100, 0.1), Band(150, math.inf, 0.2)))

    def test_overlap(self):
        with pytest.raises(InvalidBandsError):
            validate_bands((Band(0, 100, 0.1), Band(50, math.inf, 0.2)))

    def test_unordered(self):
        with pytest.raises(InvalidBandsError):
            validate_bands((Band(0, 100, 0.1), Band(100, 50, 0.2)))

    def test_unbounded_band_must_be_last(self):
        with pytest.raises(InvalidBandsError, match="unbounded"):
            validate_bands((Band(0, math.inf, 0.1), Band(math.inf, math.inf, 0.2)))

    def test_rate_out_of_range(self):
        with pytest.raises(InvalidBandsError, match="rate"):
            validate_bands((Band(0, math.inf, 1.0),))

    def test_invalid_bands_is_a_configuration_error(self):
        assert issubclass(InvalidBandsError, ConfigurationError)

    def test_table_rejects_broken_bands_at_construction(self, table):
        broken = dict(table.income_tax_bands)
        broken[Region.SCOTLAND] = (Band(0, 100, 0.19), Band(200, math.inf, 0.2))
        with pytest.raises(InvalidBandsError, match="scotland"):
            replace(table, income_tax_bands=broken)


class TestRateTable:
    def test_default_table_is_built_once(self):
        assert default_rate_table() is default_rate_table()

    def test_wales_and_ni_alias_england(self, table):
        england = table.tax_bands(Region.ENGLAND)
        assert table.tax_bands(Region.WALES) is england
        assert table.tax_bands("ni") is england
        assert table.tax_bands(Region.SCOTLAND) is not england

    def test_scotland_has_six_bands_topping_at_48(self, table):
        bands = table.tax_bands("scotland")
        assert len(bands) == 6
        assert bands[-1].rate == 0.48
        assert math.isinf(bands[-1].upper)

    def test_table_is_immutable(self, table):
        with pytest.raises(FrozenInstanceError):
            table.tax_year = "1999/00"
        with pytest.raises(TypeError):
            table.income_tax_bands[Region.ENGLAND] = ()

    def test_taper_end(self, table):
        assert table.personal_allowance.taper_end == 125_140

    @pytest.mark.parametrize("code", [None, "", "none", "NONE"])
    def test_no_student_loan(self, table, code):
        assert table.student_loan_plan(code) is None

    def test_student_loan_lookup(self, table):
        plan = table.student_loan_plan("Plan2")
        assert plan.threshold == 29_385
        assert plan.rate == 0.09
        assert table.student_loan_plan("postgrad").rate == 0.06

    def test_unknown_student_loan(self, table):
        with pytest.raises(ValueError, match="Unknown student loan plan"):
            table.student_loan_plan("plan9")

    def test_scottish_profiles_are_tagged(self, table):
        tagged = [p for p in table.benefit_profiles if p.region is not None]
        assert tagged
        assert all(p.region is Region.SCOTLAND for p in tagged)
        assert all("Scottish Child Payment" in p.name for p in tagged)
