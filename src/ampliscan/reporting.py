"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains classes and functions for design runs and their outputs.

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

import json
import logging

from abc import ABC, abstractmethod

from ampliscan import config, __version__ as version
from ampliscan.design import design_primers

logger = logging.getLogger("ampliscan")


class DesignReporter:
    """Design primer pairs for a set of template records, and report them."""

    def __init__(
        self,
        outpath,
        references,
        constraints,
        prefix=config.PREFIX,
        max_candidates=config.MAX_CANDIDATES,
        max_results=config.MAX_RESULTS,
        timeout=None,
        progress_tracker=None,
    ):
        """Init DesignReporter."""
        self.outpath = outpath
        self.references = references
        self.constraints = constraints
        self.prefix = prefix
        self.max_candidates = max_candidates
        self.max_results = max_results
        self.timeout = timeout
        self.progress_tracker = progress_tracker
        self.results = {}

        logger.debug(str(self))

    def __str__(self):
        lines = [
            "DesignReporter",
            f"Prefix: {self.prefix}",
            f"Product size range: {self.constraints.min_product_size} - "
            f"{self.constraints.max_product_size}",
            f"Primer length range: {self.constraints.min_primer_length} - "
            f"{self.constraints.max_primer_length}",
            f"Tm range: {self.constraints.min_tm} - {self.constraints.max_tm} "
            f"(opt {self.constraints.optimal_tm})",
        ]
        return "\n".join(lines)

    @property
    def pair_count(self):
        """Total number of pairs across all references."""
        return sum(len(pairs) for pairs in self.results.values())

    def design(self):
        """Design primer pairs for every reference."""
        for record_num, ref in enumerate(self.references, start=1):
            if self.progress_tracker:
                self.progress_tracker.record_num = record_num

            pairs = design_primers(
                str(ref.seq),
                self.constraints,
                max_candidates=self.max_candidates,
                max_results=self.max_results,
                timeout=self.timeout,
                progress_tracker=self.progress_tracker,
            )
            self.results[ref.id] = pairs

            if self.progress_tracker:
                self.progress_tracker.interrupt()
            logger.info(f"{ref.id}: {len(pairs)} primer pairs")

        if self.progress_tracker:
            self.progress_tracker.finish()

    def write_default_outputs(self):
        """Write all default output files."""
        self.write_run_report_json()

    def write_run_report_json(self):
        """Write run report JSON file."""
        filepath = self.outpath / f"{self.prefix}.report.json"
        logger.info(f"Writing {filepath}")

        data = {
            "references": [ref.id for ref in self.references],
            "constraints": self.constraints._asdict(),
            "settings": {
                "max_candidates": self.max_candidates,
                "max_results": self.max_results,
                "max_tm_difference": config.MAX_TM_DIFFERENCE,
                "tm_prefilter_margin": config.TM_PREFILTER_MARGIN,
                "scoring_primer_conc": config.SCORING_PRIMER_CONC,
                "na_conc": config.NA_CONC,
            },
            "results": {
                ref_id: [pair_to_dict(p) for p in pairs]
                for ref_id, pairs in self.results.items()
            },
            "ampliscan_version": version,
        }
        filepath.write_text(json.dumps(data, indent=2))


def primer_to_dict(primer):
    """Serialisable summary of a CandidatePrimer."""
    return {
        "seq": primer.clean_seq,
        "start": primer.start,
        "end": primer.end,
        "strand": primer.strand.value,
        "length": primer.length,
        "gc_percent": round(primer.gc_percent, 2),
        "tm_nn": round(primer.tm_nn, 2),
        "tm_basic": round(primer.tm_basic, 2),
        "molecular_weight": round(primer.molecular_weight, 2),
    }


def pair_to_dict(pair):
    """Serialisable summary of a PrimerPair."""
    return {
        "id": pair.id,
        "product_size": pair.product_size,
        "tm_difference": round(pair.tm_difference, 2),
        "score": round(pair.score, 2),
        "forward": primer_to_dict(pair.forward),
        "reverse": primer_to_dict(pair.reverse),
    }


def format_pairs(pairs):
    """Plain text ranking table for a list of PrimerPairs."""
    header = (
        f"{'#':>3}  {'product':>7}  {'forward':<26} {'tm':>5}  "
        f"{'reverse':<26} {'tm':>5}  {'dTm':>4}  {'score':>6}"
    )
    lines = [header]
    for rank, p in enumerate(pairs, start=1):
        lines.append(
            f"{rank:>3}  {p.product_size:>7}  {p.forward.clean_seq:<26} "
            f"{p.forward.tm_nn:>5.1f}  {p.reverse.clean_seq:<26} "
            f"{p.reverse.tm_nn:>5.1f}  {p.tm_difference:>4.1f}  {p.score:>6.2f}"
        )
    return "\n".join(lines)


def format_properties(props, label="Primer"):
    """Plain text summary of PrimerProperties."""
    if not props.is_valid:
        return f"{label}: invalid ({props.error})"
    return "\n".join(
        [
            f"{label}: {props.clean_seq}",
            f"  Length: {props.length} nt",
            f"  GC: {props.gc_percent:.1f}%",
            f"  Tm (NN): {props.tm_nn:.1f} C",
            f"  Tm (basic): {props.tm_basic:.1f} C",
            f"  MW: {props.molecular_weight:.2f} Da",
        ]
    )


class ProgressTracker(ABC):
    """Abstract base class for ProgressTracker."""

    @abstractmethod
    def goto(self, val):
        """Update progress to val."""
        ...

    @property
    def end(self):
        """Progress end value."""
        ...

    @end.setter
    @abstractmethod
    def end(self, val):
        """Set progress end value."""
        ...

    @property
    def considered(self):
        """Count of considered candidates."""
        ...

    @considered.setter
    @abstractmethod
    def considered(self, considered):
        """Set count of considered candidates."""
        ...

    @property
    def record_num(self):
        """The current template record num."""
        ...

    @record_num.setter
    @abstractmethod
    def record_num(self, record_num):
        """Set current template record num."""
        ...

    @abstractmethod
    def interrupt(self):
        """Prepare to be interrupted by a log message."""
        ...

    @abstractmethod
    def finish(self):
        """Finish tracking progress."""
        ...
