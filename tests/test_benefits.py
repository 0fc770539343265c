"""Tests for the benefits ladder."""

import pytest

from benefits import ABOVE, BELOW, MATCH, classify, ladder_for_region
from rates import BenefitProfile, Region


class TestLadderForRegion:
    def test_england_has_more_than_ten_rungs(self):
        assert len(ladder_for_region("england")) > 10

    def test_sorted_by_threshold(self):
        for region in Region:
            thresholds = [p.monthly_threshold for p in ladder_for_region(region)]
            assert thresholds == sorted(thresholds)

    def test_scottish_child_payment_only_in_scotland(self):
        def names(region):
            return " ".join(p.name for p in ladder_for_region(region))

        assert "Scottish Child Payment" in names("scotland")
        for region in (Region.ENGLAND, Region.WALES, Region.NORTHERN_IRELAND):
            assert "Scottish Child Payment" not in names(region)

    def test_scotland_keeps_uk_wide_profiles(self):
        uk_wide = {p.name for p in ladder_for_region("england")}
        scottish = {p.name for p in ladder_for_region("scotland")}
        assert uk_wide < scottish

    def test_ties_keep_declared_order(self, table):
        from dataclasses import replace

        profiles = (
            BenefitProfile("Second", 500.0, order=2),
            BenefitProfile("First", 500.0, order=1),
        )
        swapped = replace(table, benefit_profiles=profiles)
        assert [p.name for p in ladder_for_region("england", swapped)] == ["First", "Second"]


class TestClassify:
    @pytest.mark.parametrize("region", list(Region))
    @pytest.mark.parametrize("income", [0, 300, 1_000, 1_193.30, 2_000, 2_280.60, 10_000])
    def test_one_rung_per_profile_and_one_banner(self, region, income):
        result = classify(income, region)
        ladder = ladder_for_region(region)
        assert [r.profile for r in result.rungs] == ladder
        # exactly one of: a matched rung, or the "doesn't reach" banner
        assert (result.matched is not None) != ("doesn't reach" in result.banner)

    def test_classifications(self):
        result = classify(1_193.30, "england")
        by_class = {c: [r for r in result.rungs if r.classification == c] for c in (BELOW, MATCH, ABOVE)}
        assert by_class[BELOW] and by_class[ABOVE]
        assert not by_class[MATCH]
        assert all(r.profile.monthly_threshold > 1_193.30 for r in by_class[BELOW])
        assert all(r.profile.monthly_threshold < 1_193.30 for r in by_class[ABOVE])

    def test_match_is_closest_rung_at_or_above(self):
        result = classify(1_193.30, "england")
        assert result.matched.name == "Lone parent, 2 children, Universal Credit + Child Benefit"
        assert result.reaches
        assert "matching your" in result.banner

    def test_scotland_match_can_be_scottish_profile(self):
        result = classify(1_518.00, "scotland")
        assert result.matched.name == "Lone parent, 2 children + Scottish Child Payment"

    def test_exact_threshold_is_a_match(self):
        result = classify(424.90, "england")
        matching = [r for r in result.rungs if r.classification == MATCH]
        assert [r.profile.name for r in matching] == ["Single 25+, Universal Credit"]
        assert result.matched is matching[0].profile

    def test_high_earner_is_out_of_reach(self):
        result = classify(8_500, "england")
        assert result.matched is None
        assert not result.reaches
        assert all(r.classification == ABOVE for r in result.rungs)
        assert "doesn't reach" in result.banner

    def test_negative_disposable_matches_lowest_rung(self):
        result = classify(-250, "england")
        assert result.matched is ladder_for_region("england")[0]
        assert all(r.classification == BELOW for r in result.rungs)

    def test_gap(self):
        result = classify(1_000, "england")
        rung = next(r for r in result.rungs if r.profile.name.startswith("Single pensioner"))
        assert rung.gap == pytest.approx(31.33)

    def test_empty_ladder(self, table):
        from dataclasses import replace

        result = classify(100, "england", replace(table, benefit_profiles=()))
        assert result.rungs == ()
        assert "doesn't reach" in result.banner
