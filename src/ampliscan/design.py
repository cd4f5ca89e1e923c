"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains classes and functions related to primer pair design.

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>
"""

import logging
import math
import time

from collections import namedtuple
from operator import attrgetter

from ampliscan import config
from ampliscan.primer import (
    clean_sequence,
    make_candidate,
    reverse_complement,
    Strand,
)

logger = logging.getLogger("ampliscan")

SIZE_FIELDS = (
    "min_product_size",
    "max_product_size",
    "min_primer_length",
    "max_primer_length",
)


class DesignCancelledError(Exception):
    """The caller cancelled the design run, or its timeout expired."""

    pass


class DesignConstraints(
    namedtuple("DesignConstraints", " ".join(config.DesignDefaults._fields))
):
    """Caller-supplied constraints for a design run."""

    __slots__ = ()

    @classmethod
    def from_config(cls):
        """Default constraints."""
        return cls(*config.DESIGN_CONSTRAINTS)

    @property
    def is_valid(self):
        """
        Every min <= max, primer lengths are positive, sizes and lengths are
        whole numbers and no Tm is NaN.
        """
        if not all(_is_whole(getattr(self, f)) for f in SIZE_FIELDS):
            return False
        if math.isnan(self.optimal_tm):
            return False
        return (
            self.min_product_size <= self.max_product_size
            and 1 <= self.min_primer_length <= self.max_primer_length
            and self.min_tm <= self.max_tm
        )

    def in_tm_range(self, tm):
        """True if tm lies within the strict [min_tm, max_tm] window."""
        return self.min_tm <= tm <= self.max_tm

    def as_integral(self):
        """Copy with size and length fields as ints, for use as range bounds."""
        return self._replace(**{f: int(getattr(self, f)) for f in SIZE_FIELDS})


def _is_whole(value):
    return isinstance(value, (int, float)) and float(value).is_integer()


class PrimerPair(
    namedtuple("PrimerPair", "forward reverse product_size tm_difference score")
):
    """A scored forward/reverse primer pair. Lower score is better."""

    __slots__ = ()

    def __str__(self):
        """Pair string representation."""
        return f"{self.id}:{self.forward.clean_seq}:{self.reverse.clean_seq}"

    @property
    def id(self):
        """Pair identifier, from amplicon coordinates."""
        return f"{self.forward.start}-{self.reverse.end}"


def cancellation_check(cancel=None, timeout=None):
    """
    Build a callable that raises DesignCancelledError when the caller's
    cancel() returns True or when timeout seconds have elapsed.
    """
    deadline = None if timeout is None else time.monotonic() + timeout

    def check():
        if cancel is not None and cancel():
            raise DesignCancelledError("Design cancelled.")
        if deadline is not None and time.monotonic() >= deadline:
            raise DesignCancelledError(f"Design timed out after {timeout}s.")

    return check


def _in_prefilter_window(candidate, constraints, margin):
    low = constraints.min_tm - margin
    high = constraints.max_tm + margin
    return candidate.is_valid and low <= candidate.tm_nn <= high


def enumerate_forward(
    template,
    constraints,
    primer_conc=config.SCORING_PRIMER_CONC,
    margin=config.TM_PREFILTER_MARGIN,
    check=None,
    progress_tracker=None,
    progress_offset=0,
):
    """Forward (sense) candidates for every start position and length."""
    length = len(template)
    candidates = []

    for i in range(length - constraints.min_product_size):
        if check:
            check()
        for size in range(
            constraints.min_primer_length, constraints.max_primer_length + 1
        ):
            if i + size > length:
                break
            candidate = make_candidate(
                template[i : i + size], i, i + size - 1, Strand.SENSE, primer_conc
            )
            if _in_prefilter_window(candidate, constraints, margin):
                candidates.append(candidate)
        if progress_tracker:
            progress_tracker.goto(progress_offset + i + 1)

    return candidates


def enumerate_reverse(
    template,
    constraints,
    primer_conc=config.SCORING_PRIMER_CONC,
    margin=config.TM_PREFILTER_MARGIN,
    check=None,
    progress_tracker=None,
    progress_offset=0,
):
    """Reverse (antisense) candidates for every end position and length."""
    length = len(template)
    candidates = []

    for n, end in enumerate(range(constraints.min_product_size, length)):
        if check:
            check()
        for size in range(
            constraints.min_primer_length, constraints.max_primer_length + 1
        ):
            start = end - size + 1
            if start < 0:
                continue
            candidate = make_candidate(
                reverse_complement(template[start : end + 1]),
                start,
                end,
                Strand.ANTISENSE,
                primer_conc,
            )
            if _in_prefilter_window(candidate, constraints, margin):
                candidates.append(candidate)
        if progress_tracker:
            progress_tracker.goto(progress_offset + n + 1)

    return candidates


def rank_candidates(candidates, optimal_tm, max_candidates=config.MAX_CANDIDATES):
    """
    Sort candidates by distance of Tm from optimal_tm and keep the best
    max_candidates (all of them if None).
    """
    ranked = sorted(candidates, key=lambda c: abs(c.tm_nn - optimal_tm))
    if max_candidates is None:
        return ranked
    return ranked[:max_candidates]


def calc_clamp_penalty(primer):
    """Penalty for a primer lacking a 3' G/C clamp."""
    return 0.0 if primer.has_gc_clamp else config.GC_CLAMP_PENALTY


def score_pair(forward, reverse, optimal_tm):
    """Composite pair score, lower is better."""
    tm_penalty = abs(forward.tm_nn - optimal_tm) + abs(reverse.tm_nn - optimal_tm)
    diff_penalty = config.WT_TM_DIFFERENCE * abs(forward.tm_nn - reverse.tm_nn)
    gc_penalty = config.WT_GC_PERCENT * (
        abs(forward.gc_percent - config.OPT_GC_PERCENT)
        + abs(reverse.gc_percent - config.OPT_GC_PERCENT)
    )
    return (
        tm_penalty
        + diff_penalty
        + gc_penalty
        + calc_clamp_penalty(forward)
        + calc_clamp_penalty(reverse)
    )


def pair_candidates(
    forward_candidates,
    reverse_candidates,
    constraints,
    max_tm_difference=config.MAX_TM_DIFFERENCE,
    check=None,
):
    """Pair compatible candidates, returning unsorted PrimerPairs."""
    pairs = []

    for f in forward_candidates:
        if check:
            check()
        if not constraints.in_tm_range(f.tm_nn):
            continue
        for r in reverse_candidates:
            # Reverse primer must lie downstream of the forward start
            if r.end <= f.start:
                continue
            product_size = r.end - f.start + 1
            if not (
                constraints.min_product_size
                <= product_size
                <= constraints.max_product_size
            ):
                continue
            if not constraints.in_tm_range(r.tm_nn):
                continue
            tm_difference = abs(f.tm_nn - r.tm_nn)
            if tm_difference > max_tm_difference:
                continue
            pairs.append(
                PrimerPair(
                    forward=f,
                    reverse=r,
                    product_size=product_size,
                    tm_difference=tm_difference,
                    score=score_pair(f, r, constraints.optimal_tm),
                )
            )

    return pairs


def design_primers(
    template,
    constraints,
    max_candidates=config.MAX_CANDIDATES,
    max_results=config.MAX_RESULTS,
    max_tm_difference=config.MAX_TM_DIFFERENCE,
    tm_prefilter_margin=config.TM_PREFILTER_MARGIN,
    primer_conc=config.SCORING_PRIMER_CONC,
    cancel=None,
    timeout=None,
    progress_tracker=None,
):
    """
    Search a template for primer pairs satisfying constraints.

    Returns at most max_results PrimerPairs sorted by ascending score, or an
    empty list when the template is shorter than min_product_size, the
    constraints are invalid or no pair passes every filter. Raises
    DesignCancelledError only if cancel() returns True or timeout expires.
    """
    seq = clean_sequence(template)

    if not constraints.is_valid:
        logger.debug(f"Invalid design constraints: {constraints}")
        return []
    constraints = constraints.as_integral()

    if len(seq) < constraints.min_product_size:
        logger.debug(
            f"Template length {len(seq)} is shorter than the minimum product "
            f"size {constraints.min_product_size}"
        )
        return []

    check = None
    if cancel is not None or timeout is not None:
        check = cancellation_check(cancel, timeout)

    positions = max(0, len(seq) - constraints.min_product_size)
    if progress_tracker:
        progress_tracker.end = 2 * positions

    forward = enumerate_forward(
        seq,
        constraints,
        primer_conc,
        tm_prefilter_margin,
        check=check,
        progress_tracker=progress_tracker,
    )
    reverse = enumerate_reverse(
        seq,
        constraints,
        primer_conc,
        tm_prefilter_margin,
        check=check,
        progress_tracker=progress_tracker,
        progress_offset=positions,
    )
    logger.debug(
        f"Found {len(forward)} forward and {len(reverse)} reverse candidates"
    )

    if progress_tracker:
        progress_tracker.considered = len(forward) + len(reverse)

    forward = rank_candidates(forward, constraints.optimal_tm, max_candidates)
    reverse = rank_candidates(reverse, constraints.optimal_tm, max_candidates)

    pairs = pair_candidates(forward, reverse, constraints, max_tm_difference, check)
    pairs.sort(key=attrgetter("score"))
    logger.debug(f"Built {len(pairs)} primer pairs")

    if progress_tracker:
        progress_tracker.goto(progress_tracker.end)

    if max_results is None:
        return pairs
    return pairs[:max_results]
