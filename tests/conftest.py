import pytest
import random
import uuid

from pathlib import Path

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from click.testing import CliRunner

from ampliscan.design import DesignConstraints

# 20 nt GC-clamped forward site, 20 nt spacer, 20 nt reverse site.
# Reverse primer GGCTCCAGCGTGACCTAGCG anneals to the last 20 nt.
SCENARIO_TEMPLATE = (
    "CGCAGGTCGACTGCCATGGC" "ATTGCATTACGTTAGCATTA" "CGCTAGGTCACGCTGGAGCC"
)


def seq_record_factory(seq_len=5000, alphabet="acgt", id=""):
    """Generate a random SeqRecord for testing purposes"""
    id = id or f"random_seq_{uuid.uuid4()}"
    seq = "".join([random.choice(alphabet) for i in range(seq_len)])
    return SeqRecord(Seq(seq), id=id)


def multi_seq_generator(n, **kwargs):
    """Generate multiple random SeqRecords for testing purposes"""
    return [seq_record_factory(**kwargs) for i in range(n)]


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(scope="session")
def scenario_template():
    return SCENARIO_TEMPLATE


@pytest.fixture(scope="session")
def scenario_constraints():
    return DesignConstraints(
        min_product_size=40,
        max_product_size=60,
        min_primer_length=18,
        max_primer_length=22,
        min_tm=55,
        max_tm=65,
        optimal_tm=60,
    )


@pytest.fixture(scope="session")
def temp_inputs_path(tmp_path_factory):
    """Return a temp_path for generating input files"""
    return tmp_path_factory.mktemp("inputs")


@pytest.fixture(scope="session")
def input_fasta_empty(temp_inputs_path):
    """Generate an empty fasta input file"""
    fh = temp_inputs_path / "empty_input.fa"
    fh.write_text("")
    return fh


@pytest.fixture(scope="session")
def input_fasta_invalid_alphabet(temp_inputs_path):
    """Generate a fasta file with one valid record and one with an invalid alphabet"""
    fh = temp_inputs_path / "invalid_alphabet.fa"
    records = [seq_record_factory(), seq_record_factory(alphabet="acgtRN")]
    SeqIO.write(records, fh, "fasta")
    return fh


@pytest.fixture(scope="session")
def input_fasta_5_random_valid(temp_inputs_path):
    """Generate a random multi-FASTA with 5 valid records"""
    fh = temp_inputs_path / "valid_random_5_fasta.fa"
    SeqIO.write(multi_seq_generator(5), fh, "fasta")
    return fh


@pytest.fixture(scope="session")
def input_fasta_valid_with_gaps(temp_inputs_path):
    """Generate a FASTA that includes gaps"""
    fh = temp_inputs_path / "valid_fasta_with_gaps.fa"
    SeqIO.write(seq_record_factory(alphabet="acgt-"), fh, "fasta")
    return fh


@pytest.fixture(scope="session")
def input_fasta_short_500(temp_inputs_path):
    """Generate a FASTA where the record is short"""
    fh = temp_inputs_path / "invalid_short.fa"
    SeqIO.write(seq_record_factory(seq_len=500), fh, "fasta")
    return fh


@pytest.fixture(scope="session")
def scenario_input(temp_inputs_path):
    """FASTA holding the engineered 60 nt scenario template"""
    fh = temp_inputs_path / "scenario.fa"
    fh.write_text(f">scenario\n{SCENARIO_TEMPLATE}\n")
    return fh


@pytest.fixture(scope="session")
def poly_a_input(temp_inputs_path):
    """FASTA holding a template no primer can satisfy"""
    fh = temp_inputs_path / "poly_a.fa"
    fh.write_text(">poly_a\n" + "A" * 200 + "\n")
    return fh
