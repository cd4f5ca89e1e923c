"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains config values.

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

from Bio.SeqUtils import MeltingTemp as mt

# SantaLucia (1998) unified parameters
NN_TABLE = mt.DNA_NN3
NA_CONC = 50.0  # mM
SALT_CORRECTION_METHOD = 1  # 16.6 x log10([Na+])

BASE_WEIGHTS = {"A": 313.2, "C": 289.2, "G": 329.2, "T": 304.2}
WATER_LOSS_CORRECTION = 61.96
TM_BASIC_SHORT_LENGTH = 14

PRIMER_CONC = 500.0  # nM, analysis
SCORING_PRIMER_CONC = 500.0  # nM, candidate enumeration

TM_PREFILTER_MARGIN = 5.0
MAX_CANDIDATES = 300
MAX_RESULTS = 20
MAX_TM_DIFFERENCE = 5.0

OPT_GC_PERCENT = 50.0
WT_GC_PERCENT = 0.1
WT_TM_DIFFERENCE = 2.0
GC_CLAMP_PENALTY = 2.0

DesignDefaults = namedtuple(
    "DesignDefaults",
    "min_product_size max_product_size min_primer_length max_primer_length "
    "min_tm max_tm optimal_tm",
)
DESIGN_CONSTRAINTS = DesignDefaults(100, 1000, 18, 24, 55.0, 65.0, 60.0)

PrimerGCRange = namedtuple("GCRange", "min max")
PRIMER_GC_WARN_RANGE = PrimerGCRange(40.0, 60.0)

POLYMERASE_TA_OFFSETS = {
    "q5": 0.0,
    "phusion": 3.0,
    "taq": -5.0,
}

PREFIX = "ampliscan"
OUTPUT_PATH = "./output"
