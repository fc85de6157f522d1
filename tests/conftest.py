import pytest

from LinupLib.DNAPairwiseAlignment import DNAPairwiseAlignment
from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection


# Two RepeatMasker style hits of genomic copies (query) against the AluY
# consensus (target).  The chr2 copy is on the reverse strand.
CROSSMATCH_HITS = """
   SW   perc perc perc  query      position in query    matching  repeat    position in repeat
score   div. del. ins.  sequence    begin end  (left)   repeat    class/family begin  end (left)

  40 0.00 0.00 0.00  chr1  3 12 (3)  AluY  1 10 (0)  1

  chr1                  3 ACGTTGCAAC 12

  AluY                  1 ACGTTGCAAC 10

Matrix = 25p41g.matrix
Transitions / transversions = 0.00 (0/0)

  30 0.00 0.00 0.00  chr2  5 10 (1) C  AluY  (2) 8 3  2

  chr2                  5 TGCAAC 10

C AluY                  8 TGCAAC 3

Matrix = 25p41g.matrix
"""

# Genomic sequence around the two hits above
FLANK_FASTA = """>chr1
TTACGTTGCAACGGG
>chr2
CCCCTGCAACA
"""


def make_hit(**kwargs):
    return DNAPairwiseAlignment(**kwargs)


@pytest.fixture
def overlapping_hits():
    """
    Three copies aligned to positions 1-12 of a shared AluY reference
    (ACGTACGTACGT) with a one base insertion, a deletion and a two base
    insertion between them.
    """
    collection = DNAPairwiseAlignmentCollection()
    collection.append(
        make_hit(
            score=100,
            query_id="AluY",
            query_start=1,
            query_end=8,
            aligned_query_seq="ACGT-ACGT",
            orientation="+",
            target_id="chr1",
            target_start=100,
            target_end=108,
            aligned_target_seq="ACGTTACGT",
        )
    )
    collection.append(
        make_hit(
            score=90,
            query_id="AluY",
            query_start=3,
            query_end=10,
            aligned_query_seq="GTACGT--AC",
            orientation="+",
            target_id="chr2",
            target_start=200,
            target_end=208,
            aligned_target_seq="GT-CGTGGAC",
        )
    )
    collection.append(
        make_hit(
            score=80,
            query_id="AluY",
            query_start=6,
            query_end=12,
            aligned_query_seq="CGTACGT",
            orientation="-",
            target_id="chr3",
            target_start=300,
            target_end=306,
            aligned_target_seq="CGTACGT",
        )
    )
    return collection


@pytest.fixture
def crossmatch_file(tmp_path):
    path = tmp_path / "AluY.align"
    path.write_text(CROSSMATCH_HITS)
    return path


@pytest.fixture
def flank_fasta(tmp_path):
    path = tmp_path / "genome.fa"
    path.write_text(FLANK_FASTA)
    return path
