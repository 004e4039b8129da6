"""
Tests for impact levels and score aggregation.
"""

import itertools

import pytest

from instrumentation_score.errors import AggregationError
from instrumentation_score.impact import IMPACT_WEIGHTS, Impact
from instrumentation_score.score import ImpactTally, new_tallies, score


def _tallies(critical=(0, 0), important=(0, 0), normal=(0, 0), low=(0, 0)):
    return {
        Impact.CRITICAL: ImpactTally(*critical),
        Impact.IMPORTANT: ImpactTally(*important),
        Impact.NORMAL: ImpactTally(*normal),
        Impact.LOW: ImpactTally(*low),
    }


class TestImpact:
    def test_exactly_four_levels_in_severity_order(self):
        assert list(Impact) == [Impact.CRITICAL, Impact.IMPORTANT, Impact.NORMAL, Impact.LOW]

    def test_weights(self):
        assert [i.weight for i in Impact] == [40, 30, 20, 10]

    def test_weights_are_read_only(self):
        with pytest.raises(TypeError):
            IMPACT_WEIGHTS[Impact.LOW] = 100

    def test_string_values(self):
        assert Impact("critical") is Impact.CRITICAL


class TestImpactTally:
    def test_record(self):
        tally = ImpactTally()
        tally.record(True)
        tally.record(False)
        assert (tally.passed, tally.total) == (1, 2)

    def test_passed_cannot_exceed_total(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            ImpactTally(passed=3, total=2)

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            ImpactTally(passed=0, total=-1)

    def test_new_tallies_has_every_level(self):
        tallies = new_tallies()
        assert set(tallies) == set(Impact)
        assert all(t == ImpactTally(0, 0) for t in tallies.values())


class TestScore:
    def test_reference_vector(self):
        result = score(_tallies(critical=(4, 8), important=(8, 10), normal=(6, 8), low=(1, 5)))
        assert result == pytest.approx(63.85542168674698, abs=1e-9)

    def test_all_passed_is_100(self):
        assert score(_tallies(critical=(2, 2), low=(5, 5))) == 100.0

    def test_nothing_passed_is_0(self):
        assert score(_tallies(critical=(0, 3), normal=(0, 1))) == 0.0

    def test_empty_levels_do_not_contribute(self):
        assert score(_tallies(important=(3, 3))) == 100.0

    def test_failed_critical_costs_more_than_failed_low(self):
        critical_fail = score(_tallies(critical=(0, 1), low=(1, 1)))
        low_fail = score(_tallies(critical=(1, 1), low=(0, 1)))
        assert critical_fail == pytest.approx(20.0)
        assert low_fail == pytest.approx(80.0)

    def test_all_zero_totals_raises(self):
        with pytest.raises(AggregationError):
            score(_tallies())

    def test_missing_level_raises(self):
        tallies = _tallies(important=(1, 1))
        del tallies[Impact.LOW]
        with pytest.raises(AggregationError, match="low"):
            score(tallies)

    @pytest.mark.parametrize("factor", [2, 3, 7])
    def test_invariant_under_uniform_scaling(self, factor):
        base = dict(critical=(4, 8), important=(8, 10), normal=(6, 8), low=(1, 5))
        scaled = {k: (p * factor, t * factor) for k, (p, t) in base.items()}
        assert score(_tallies(**scaled)) == pytest.approx(score(_tallies(**base)))

    @pytest.mark.parametrize("impact", list(Impact))
    def test_monotonic_in_passed(self, impact):
        others = {i: ImpactTally(1, 2) for i in Impact}
        previous = -1.0
        for passed in range(0, 5):
            tallies = dict(others)
            tallies[impact] = ImpactTally(passed, 4)
            current = score(tallies)
            assert current >= previous
            previous = current

    def test_bounded_0_to_100(self):
        pairs = [(0, 0), (0, 1), (1, 1), (1, 3), (3, 3)]
        for combo in itertools.product(pairs, repeat=4):
            if all(t == 0 for _, t in combo):
                continue
            result = score(_tallies(*combo))
            assert 0.0 <= result <= 100.0
