"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains functions for analysing a user-supplied primer pair.

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

from collections import namedtuple
from enum import Enum
from math import floor

from ampliscan import config
from ampliscan.primer import compute_properties

PairAnalysis = namedtuple(
    "PairAnalysis", "forward reverse tm_difference annealing_temp warnings"
)


class Polymerase(Enum):
    """Polymerase model, sets the annealing temperature rule."""

    Q5 = "q5"
    PHUSION = "phusion"
    TAQ = "taq"

    @property
    def ta_offset(self):
        """Offset added to the lower primer Tm."""
        return config.POLYMERASE_TA_OFFSETS[self.value]


def calc_annealing_temp(tm_forward, tm_reverse, polymerase=Polymerase.Q5):
    """Recommended annealing temperature (whole degrees C) for a pair."""
    return floor(min(tm_forward, tm_reverse) + Polymerase(polymerase).ta_offset)


def primer_warnings(props, label):
    """Warnings for a single primer."""
    if not props.is_valid:
        return [f"{label} primer is invalid: {props.error}"]

    warnings = []
    gc_range = config.PRIMER_GC_WARN_RANGE
    if not gc_range.min <= props.gc_percent <= gc_range.max:
        warnings.append(
            f"{label} primer GC {props.gc_percent:.1f}% is outside "
            f"{gc_range.min:.0f}-{gc_range.max:.0f}%"
        )
    if not props.has_gc_clamp:
        warnings.append(f"{label} primer has no 3' GC clamp")
    return warnings


def analyse_pair(
    forward_seq,
    reverse_seq,
    primer_conc=config.PRIMER_CONC,
    polymerase=Polymerase.Q5,
):
    """
    Analyse a forward/reverse primer pair.

    tm_difference is 0 and annealing_temp None unless both primers are valid.
    """
    forward = compute_properties(forward_seq, primer_conc)
    reverse = compute_properties(reverse_seq, primer_conc)

    warnings = primer_warnings(forward, "Forward") + primer_warnings(
        reverse, "Reverse"
    )

    if not (forward.is_valid and reverse.is_valid):
        return PairAnalysis(forward, reverse, 0.0, None, warnings)

    tm_difference = abs(forward.tm_nn - reverse.tm_nn)
    if tm_difference > config.MAX_TM_DIFFERENCE:
        warnings.append(
            f"High Tm difference ({tm_difference:.1f}C > "
            f"{config.MAX_TM_DIFFERENCE:.0f}C)"
        )

    return PairAnalysis(
        forward,
        reverse,
        tm_difference,
        calc_annealing_temp(forward.tm_nn, reverse.tm_nn, polymerase),
        warnings,
    )
