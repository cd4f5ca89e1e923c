"""
ampliscan: PCR primer analysis and design

Copyright (C) 2026 ampliscan contributors

This module contains the CLI for ampliscan.
It is executed when the user runs 'ampliscan' after installation,
or 'python -m ampliscan'.

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

import click
import logging
import sys

from pathlib import Path

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from progress.bar import ShadyBar

from ampliscan import __version__ as version, config
from ampliscan.analysis import analyse_pair, primer_warnings, Polymerase
from ampliscan.design import DesignCancelledError, DesignConstraints
from ampliscan.primer import clean_sequence, compute_properties, VALID_BASES
from ampliscan.reporting import (
    DesignReporter,
    ProgressTracker,
    format_pairs,
    format_properties,
)

logger = logging.getLogger("ampliscan")


CLI_CONTEXT = dict(auto_envvar_prefix="AMPLISCAN", help_option_names=["-h", "--help"])

defaults = config.DESIGN_CONSTRAINTS


@click.group(context_settings=CLI_CONTEXT)
@click.version_option(version, "--version", "-V")
def cli():
    """a tool for analysing and designing PCR primers."""
    pass


@cli.command()
@click.argument("forward")
@click.argument("reverse", required=False)
@click.option(
    "--primer-conc",
    "-c",
    type=click.FloatRange(0),
    help="Primer concentration (nM).",
    metavar="<float>",
    default=config.PRIMER_CONC,
    show_default=True,
)
@click.option(
    "--polymerase",
    "-P",
    type=click.Choice([p.value for p in Polymerase]),
    help="Polymerase model for the annealing temperature.",
    default=Polymerase.Q5.value,
    show_default=True,
)
def analyse(forward, reverse, primer_conc, polymerase):
    """Analyse a primer, or a forward/reverse primer pair."""
    if reverse is None:
        props = compute_properties(forward, primer_conc)
        click.echo(format_properties(props))
        if not props.is_valid:
            sys.exit(2)
        for warning in primer_warnings(props, "Primer"):
            click.echo(click.style(f"WARNING: {warning}", fg="yellow"))
        sys.exit(0)

    analysis = analyse_pair(forward, reverse, primer_conc, Polymerase(polymerase))
    click.echo(format_properties(analysis.forward, "Forward"))
    click.echo(format_properties(analysis.reverse, "Reverse"))

    if analysis.annealing_temp is not None:
        click.echo(f"Tm difference: {analysis.tm_difference:.1f} C")
        click.echo(
            f"Recommended annealing temp ({polymerase}): {analysis.annealing_temp} C"
        )

    for warning in analysis.warnings:
        click.echo(click.style(f"WARNING: {warning}", fg="yellow"))

    sys.exit(0 if analysis.annealing_temp is not None else 2)


@cli.command()
@click.argument("fasta", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--min-product",
    type=click.IntRange(1),
    help="Minimum product (amplicon) size.",
    metavar="<int>",
    default=defaults.min_product_size,
    show_default=True,
)
@click.option(
    "--max-product",
    type=click.IntRange(1),
    help="Maximum product (amplicon) size.",
    metavar="<int>",
    default=defaults.max_product_size,
    show_default=True,
)
@click.option(
    "--min-length",
    type=click.IntRange(1),
    help="Minimum primer length.",
    metavar="<int>",
    default=defaults.min_primer_length,
    show_default=True,
)
@click.option(
    "--max-length",
    type=click.IntRange(1),
    help="Maximum primer length.",
    metavar="<int>",
    default=defaults.max_primer_length,
    show_default=True,
)
@click.option(
    "--min-tm",
    type=click.FLOAT,
    help="Minimum primer Tm.",
    metavar="<float>",
    default=defaults.min_tm,
    show_default=True,
)
@click.option(
    "--max-tm",
    type=click.FLOAT,
    help="Maximum primer Tm.",
    metavar="<float>",
    default=defaults.max_tm,
    show_default=True,
)
@click.option(
    "--opt-tm",
    type=click.FLOAT,
    help="Optimal primer Tm.",
    metavar="<float>",
    default=defaults.optimal_tm,
    show_default=True,
)
@click.option(
    "--max-candidates",
    type=click.IntRange(1),
    help="Candidates kept per strand before pairing.",
    metavar="<int>",
    default=config.MAX_CANDIDATES,
    show_default=True,
)
@click.option(
    "--max-results",
    type=click.IntRange(1),
    help="Maximum primer pairs reported per template.",
    metavar="<int>",
    default=config.MAX_RESULTS,
    show_default=True,
)
@click.option(
    "--timeout",
    type=click.FloatRange(0),
    help="Give up on a template after this many seconds.",
    metavar="<float>",
    default=None,
)
@click.option(
    "--outpath",
    "-o",
    type=click.Path(file_okay=False, writable=True),
    help="Path to output directory.",
    metavar="<dir>",
    default=config.OUTPUT_PATH,
    show_default=True,
)
@click.option(
    "--name",
    "-n",
    type=click.STRING,
    help="Prefix name for your outputs.",
    metavar="<str>",
    default=config.PREFIX,
    show_default=True,
)
@click.option("--debug/--no-debug", "-d", help="Set log level DEBUG.", default=False)
@click.option(
    "--force/--no-force",
    "-f",
    help="Force output to an existing directory, overwrite files.",
    default=False,
)
def design(
    fasta,
    min_product,
    max_product,
    min_length,
    max_length,
    min_tm,
    max_tm,
    opt_tm,
    max_candidates,
    max_results,
    timeout,
    outpath,
    name,
    debug,
    force,
):
    """Design PCR primer pairs for each template in a FASTA file."""
    constraints = DesignConstraints(
        min_product, max_product, min_length, max_length, min_tm, max_tm, opt_tm
    )
    if not constraints.is_valid:
        click.echo(
            click.style(
                "Error: Invalid constraints, every minimum must not exceed "
                "its maximum.",
                fg="red",
            )
        )
        sys.exit(2)

    # Validate output path
    try:
        outpath = get_output_path(outpath, force=force)
    except IOError as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        sys.exit(1)

    # Setup logging
    setup_logging(outpath, debug=debug, prefix=name)

    # Process FASTA input
    try:
        references = process_fasta(fasta, min_ref_size=min_product)
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(2)

    ref_ids = [f" - {ref.id} ({len(ref)} nt)" for ref in references]
    logger.info("\n".join(["Templates:"] + ref_ids))

    reporter = DesignReporter(
        outpath,
        references,
        constraints,
        prefix=name,
        max_candidates=max_candidates,
        max_results=max_results,
        timeout=timeout,
        progress_tracker=ProgressBar(),
    )
    try:
        reporter.design()
    except DesignCancelledError as e:
        logger.error(f"Error: {e}")
        sys.exit(11)

    for ref_id, pairs in reporter.results.items():
        if pairs:
            logger.info(f"\n{ref_id}\n{format_pairs(pairs)}")

    reporter.write_default_outputs()

    if not reporter.pair_count:
        logger.error("Error: Unable to find suitable primer pairs")
        sys.exit(10)

    logger.info(
        f"All done! {reporter.pair_count} primer "
        f"pair{'' if reporter.pair_count == 1 else 's'} "
        f"for {len(references)} template{'' if len(references) == 1 else 's'}"
    )
    sys.exit(0)


def process_fasta(file_path, min_ref_size=None):
    """Parse and validate the fasta file."""

    references = []
    records = SeqIO.parse(file_path, "fasta")  # may raise

    # Strip gaps, digits and whitespace
    for record in records:
        ref = SeqRecord(
            Seq(clean_sequence(str(record.seq))),
            id=record.id,
            description=record.id,
        )
        references.append(ref)

    # Check for no references
    if not references:
        raise ValueError("The input FASTA file does not contain any valid templates.")

    # Check for too short references
    if min_ref_size and any(len(ref) < min_ref_size for ref in references):
        raise ValueError(
            "One or more of your templates is too short. Based on your minimum "
            f"product size, the minimum template size is {min_ref_size} nt."
        )

    # Check for a valid alphabet
    for r in references:
        if not VALID_BASES.issuperset(str(r.seq)):
            raise ValueError(
                "One or more of your fasta sequences contain invalid "
                "nucleotide codes. The supported alphabet is 'ACGT'. "
                "Ambiguity codes are not supported."
            )

    return references


def setup_logging(output_path, debug=False, prefix=config.PREFIX):
    """Setup logging output and verbosity."""

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # File handler
    log_filepath = output_path / f"{prefix}.log"
    fh = logging.FileHandler(log_filepath)
    fh.setLevel(logging.DEBUG)
    fh_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    fh.setFormatter(fh_formatter)
    logger.addHandler(fh)

    # Stream handler STDOUT
    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(logging.INFO)
    sh_formatter = logging.Formatter("%(message)s")
    sh.setFormatter(sh_formatter)
    logger.addHandler(sh)

    logger.info(f"Writing log to {log_filepath}")
    logger.debug(f"ampliscan version {version}")


def get_output_path(output_path, force=False):
    """
    Check for an existing output dir, require --force to overwrite.
    Create dir, return path object.
    """
    path = Path(output_path)

    if path.exists() and not force:
        raise IOError("Directory exists add --force to overwrite")

    path.mkdir(exist_ok=True)
    return path


class ProgressBar(ShadyBar, ProgressTracker):
    """Progress bar for terminal stdout."""

    suffix = "%(percent)d%% [%(index)d / %(max)d]"

    def __init__(self, *args, **kwargs):
        """Init ProgressBar."""
        self.__considered = 0
        self.__record_num = 1
        super().__init__(*args, **kwargs)

    def goto(self, val):
        """Update progress to val."""
        super().goto(val)

    @property
    def end(self):
        """End (max) progress value."""
        return self.max

    @end.setter
    def end(self, val):
        """Set end progress value."""
        self.max = val

    @property
    def considered(self):
        """Count of considered candidates."""
        return self.__considered

    @considered.setter
    def considered(self, considered):
        """Set count of considered candidates."""
        self.__considered = considered
        self.update_message()

    @property
    def record_num(self):
        """Current template record num."""
        return self.__record_num

    @record_num.setter
    def record_num(self, record_num):
        """Set current template record num."""
        self.__record_num = record_num
        self.__considered = 0
        self.update_message()

    def update_message(self):
        """Update progress bar prefix message."""
        self.message = (
            f"Considered {self.considered} candidates, template {self.record_num}"
        )

    def interrupt(self):
        """Prepare to be interrupted by a log message."""
        if self.index:
            self.finish()


if __name__ == "__main__":
    cli()
