"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains classes and functions related to primer properties.

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

import re

from collections import namedtuple
from enum import Enum
from Bio.Seq import Seq
from Bio.SeqUtils import MeltingTemp as mt

from ampliscan import config

VALID_BASES = frozenset("ATGC")
NON_LETTERS = re.compile(r"[^A-Za-z]")

ERROR_EMPTY = "empty sequence"
ERROR_NON_ATGC = "contains non-ATGC characters"
ERROR_CONC = "concentration must be positive"

PROPERTY_FIELDS = (
    "clean_seq length gc_percent molecular_weight tm_basic tm_nn is_valid error"
)


class Strand(Enum):
    """Primer strand."""

    SENSE = "+"
    ANTISENSE = "-"


class PrimerProperties(namedtuple("PrimerProperties", PROPERTY_FIELDS)):
    """
    Derived, read-only properties of an oligonucleotide.

    Numeric fields are zero when is_valid is False and must not be read
    as measurements; error then holds the reason.
    """

    __slots__ = ()

    @property
    def has_gc_clamp(self):
        """True if the 3' base is G or C."""
        return self.is_valid and self.clean_seq[-1] in "GC"


class CandidatePrimer(
    namedtuple("CandidatePrimer", PROPERTY_FIELDS + " start end strand")
):
    """A primer candidate located on a template (0-based, inclusive)."""

    __slots__ = ()

    def __str__(self):
        """Candidate string representation."""
        return f"{self.strand.name}:{self.clean_seq}:{self.start}-{self.end}"

    @property
    def size(self):
        """Primer size (length)."""
        return self.length

    @property
    def has_gc_clamp(self):
        """True if the 3' base is G or C."""
        return self.is_valid and self.clean_seq[-1] in "GC"

    @classmethod
    def from_properties(cls, props, start, end, strand):
        """Locate a PrimerProperties record on the template."""
        return cls(*props, start, end, strand)


def clean_sequence(seq):
    """Strip every non-letter and uppercase the remainder."""
    return NON_LETTERS.sub("", seq).upper()


def reverse_complement(seq):
    """Reverse complement a DNA sequence."""
    return str(Seq(seq).reverse_complement())


def calc_gc(seq):
    """Calculate percent GC for a sequence."""
    return 100.0 * (seq.count("G") + seq.count("C")) / len(seq)


def calc_molecular_weight(seq):
    """Calculate molecular weight (Da) of a single stranded oligo."""
    weight = sum(config.BASE_WEIGHTS[base] * seq.count(base) for base in "ACGT")
    return weight - config.WATER_LOSS_CORRECTION


def calc_tm_basic(seq):
    """
    Calculate the empirical Tm for a sequence.

    Wallace rule below TM_BASIC_SHORT_LENGTH, GC-content formula otherwise.
    """
    if len(seq) < config.TM_BASIC_SHORT_LENGTH:
        return mt.Tm_Wallace(seq)
    gc_count = seq.count("G") + seq.count("C")
    return 64.9 + 41 * (gc_count - 16.4) / len(seq)


def calc_tm_nn(seq, primer_conc=config.PRIMER_CONC, na_conc=config.NA_CONC):
    """
    Calculate the nearest-neighbor Tm for a sequence.

    primer_conc is the total strand concentration in nM, na_conc the
    monovalent cation concentration in mM. Both strands are assumed to be
    present at equal concentration (Ct/4), so self-complementary
    oligos are not treated exactly.
    """
    return mt.Tm_NN(
        seq,
        nn_table=config.NN_TABLE,
        dnac1=primer_conc / 2,
        dnac2=primer_conc / 2,
        selfcomp=False,
        Na=na_conc,
        saltcorr=config.SALT_CORRECTION_METHOD,
    )


def _invalid_properties(clean_seq, error):
    return PrimerProperties(
        clean_seq=clean_seq,
        length=0,
        gc_percent=0.0,
        molecular_weight=0.0,
        tm_basic=0.0,
        tm_nn=0.0,
        is_valid=False,
        error=error,
    )


def compute_properties(seq, primer_conc=config.PRIMER_CONC, na_conc=config.NA_CONC):
    """
    Compute the properties of a raw oligonucleotide sequence.

    Never raises: malformed input yields a record with is_valid False.
    """
    clean_seq = clean_sequence(seq)

    if not clean_seq:
        return _invalid_properties(clean_seq, ERROR_EMPTY)

    if not VALID_BASES.issuperset(clean_seq):
        return _invalid_properties(clean_seq, ERROR_NON_ATGC)

    if not (primer_conc > 0 and na_conc > 0):
        return _invalid_properties(clean_seq, ERROR_CONC)

    return PrimerProperties(
        clean_seq=clean_seq,
        length=len(clean_seq),
        gc_percent=calc_gc(clean_seq),
        molecular_weight=calc_molecular_weight(clean_seq),
        tm_basic=calc_tm_basic(clean_seq),
        tm_nn=calc_tm_nn(clean_seq, primer_conc, na_conc),
        is_valid=True,
        error=None,
    )


def make_candidate(
    seq,
    start,
    end,
    strand,
    primer_conc=config.SCORING_PRIMER_CONC,
    na_conc=config.NA_CONC,
):
    """Compute properties for a candidate primer at a template position."""
    props = compute_properties(seq, primer_conc, na_conc)
    return CandidatePrimer.from_properties(props, start, end, strand)
