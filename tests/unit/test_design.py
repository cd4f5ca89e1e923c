import pytest

from ampliscan import config
from ampliscan.design import (
    calc_clamp_penalty,
    cancellation_check,
    DesignCancelledError,
    DesignConstraints,
    enumerate_forward,
    enumerate_reverse,
    pair_candidates,
    PrimerPair,
    rank_candidates,
    score_pair,
)
from ampliscan.primer import CandidatePrimer, Strand


def candidate_factory(tm, gc=50.0, seq="ACGTG", start=0, end=4, strand=Strand.SENSE):
    """Build a CandidatePrimer with chosen properties"""
    return CandidatePrimer(
        clean_seq=seq,
        length=len(seq),
        gc_percent=gc,
        molecular_weight=0.0,
        tm_basic=0.0,
        tm_nn=tm,
        is_valid=True,
        error=None,
        start=start,
        end=end,
        strand=strand,
    )


def test_constraints_from_config():
    constraints = DesignConstraints.from_config()
    assert tuple(constraints) == tuple(config.DESIGN_CONSTRAINTS)
    assert constraints.is_valid


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_product_size", 50),
        ("max_primer_length", 10),
        ("min_primer_length", 0),
        ("max_tm", 50),
        ("min_product_size", 99.5),
        ("max_primer_length", 24.1),
        ("optimal_tm", float("nan")),
    ],
)
def test_constraints_invalid(field, value):
    constraints = DesignConstraints.from_config()._replace(**{field: value})
    assert not constraints.is_valid


def test_calc_clamp_penalty():
    assert calc_clamp_penalty(candidate_factory(60, seq="AAAAG")) == 0
    assert calc_clamp_penalty(candidate_factory(60, seq="AAAAC")) == 0
    assert calc_clamp_penalty(candidate_factory(60, seq="GGGGA")) == 2
    assert calc_clamp_penalty(candidate_factory(60, seq="GGGGT")) == 2


def test_score_pair_perfect():
    f = candidate_factory(60, gc=50, seq="AAAAG")
    r = candidate_factory(60, gc=50, seq="AAAAC")
    assert score_pair(f, r, 60) == 0


def test_score_pair():
    f = candidate_factory(60, gc=50, seq="AAAAG")
    r = candidate_factory(62, gc=60, seq="AAAAT")
    # tm 0 + 2, diff 2 * 2, gc 0.1 * 10, clamp 0 + 2
    assert score_pair(f, r, 60) == pytest.approx(9.0)


def test_rank_candidates():
    candidates = [candidate_factory(tm) for tm in (50, 61, 58, 60, 70)]
    ranked = rank_candidates(candidates, 60, max_candidates=3)
    assert [c.tm_nn for c in ranked] == [60, 61, 58]


def test_rank_candidates_is_stable():
    candidates = [candidate_factory(59, start=i) for i in range(5)]
    ranked = rank_candidates(candidates, 60)
    assert [c.start for c in ranked] == list(range(5))


def test_rank_candidates_uncapped():
    candidates = [candidate_factory(tm) for tm in range(40, 80)]
    assert len(rank_candidates(candidates, 60, max_candidates=None)) == 40


def test_enumerate_forward(scenario_template, scenario_constraints):
    candidates = enumerate_forward(scenario_template, scenario_constraints)
    assert candidates
    for c in candidates:
        assert c.strand == Strand.SENSE
        assert 0 <= c.start < len(scenario_template) - 40
        assert c.end == c.start + c.size - 1
        assert 18 <= c.size <= 22
        assert scenario_template[c.start : c.end + 1] == c.clean_seq
        assert 50 <= c.tm_nn <= 70


def test_enumerate_reverse(scenario_template, scenario_constraints):
    candidates = enumerate_reverse(scenario_template, scenario_constraints)
    assert candidates
    for c in candidates:
        assert c.strand == Strand.ANTISENSE
        assert 40 <= c.end < len(scenario_template)
        assert c.end == c.start + c.size - 1
        assert 50 <= c.tm_nn <= 70
    assert "GGCTCCAGCGTGACCTAGCG" in [c.clean_seq for c in candidates]


def test_enumerate_prefilter_margin(scenario_template, scenario_constraints):
    wide = enumerate_forward(scenario_template, scenario_constraints)
    strict = enumerate_forward(scenario_template, scenario_constraints, margin=0)
    assert len(strict) <= len(wide)
    assert all(55 <= c.tm_nn <= 65 for c in strict)


def test_pair_candidates_filters(scenario_constraints):
    f = candidate_factory(60, start=0, end=19)
    pairs = pair_candidates(
        [f],
        [
            # product 50, kept
            candidate_factory(61, start=30, end=49, strand=Strand.ANTISENSE),
            # upstream of forward start
            candidate_factory(61, start=0, end=0, strand=Strand.ANTISENSE),
            # product 30, too small
            candidate_factory(61, start=10, end=29, strand=Strand.ANTISENSE),
            # product 70, too large
            candidate_factory(61, start=50, end=69, strand=Strand.ANTISENSE),
            # Tm outside strict window
            candidate_factory(66, start=30, end=50, strand=Strand.ANTISENSE),
        ],
        scenario_constraints,
    )
    assert len(pairs) == 1
    pair = pairs[0]
    assert isinstance(pair, PrimerPair)
    assert pair.product_size == 50
    assert pair.tm_difference == pytest.approx(1)
    assert pair.id == "0-49"


def test_pair_candidates_forward_tm_window(scenario_constraints):
    f = candidate_factory(54, start=0, end=19)
    r = candidate_factory(56, start=30, end=49, strand=Strand.ANTISENSE)
    assert pair_candidates([f], [r], scenario_constraints) == []


def test_pair_candidates_tm_difference_cap(scenario_constraints):
    f = candidate_factory(56, start=0, end=19)
    r = candidate_factory(62, start=30, end=49, strand=Strand.ANTISENSE)
    assert pair_candidates([f], [r], scenario_constraints) == []
    assert len(pair_candidates([f], [r], scenario_constraints, 6.5)) == 1


def test_cancellation_check_cancel():
    check = cancellation_check(cancel=lambda: True)
    with pytest.raises(DesignCancelledError, match="cancelled"):
        check()


def test_cancellation_check_not_cancelled():
    check = cancellation_check(cancel=lambda: False, timeout=60)
    check()


def test_cancellation_check_timeout():
    check = cancellation_check(timeout=0)
    with pytest.raises(DesignCancelledError, match="timed out"):
        check()


def test_constraints_as_integral():
    constraints = DesignConstraints(100.0, 1000.0, 18.0, 24, 55.5, 65.0, 60.0)
    assert constraints.is_valid
    integral = constraints.as_integral()
    assert integral == (100, 1000, 18, 24, 55.5, 65.0, 60.0)
    assert all(
        type(v) is int
        for v in (
            integral.min_product_size,
            integral.max_product_size,
            integral.min_primer_length,
            integral.max_primer_length,
        )
    )
