import math
import warnings

import pytest

from LinupLib.MultAlign import MultAlign, StockholmParseError, kimura_distance
from LinupLib.LinupErrors import InvalidTrimRangeError


def assert_uniform_width(malign):
    for row in range(malign.length):
        assert len(malign[row]) == malign.colLength
    if malign.reference is not None:
        assert len(malign["ref"]) == malign.colLength


# ---------------------------------------------------------------------------
# Construction from pairwise hits


def test_hits_are_merged_column_consistently(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    assert malign["ref"] == "ACGT-ACGT--ACGT"
    assert malign[0] == "ACGTTACGT      "
    assert malign[1] == "  GT--CGTGGAC  "
    assert malign[2] == "      CGT--ACGT"
    assert_uniform_width(malign)


def test_reference_bases_share_columns_across_rows(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    reference = malign["ref"]
    for row in range(malign.length):
        seq = malign[row]
        for col, refBase in enumerate(reference):
            if refBase != "-" and seq[col] not in " -":
                assert seq[col] == refBase


def test_hit_metadata_is_kept(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    assert malign.reference_name == "AluY"
    assert malign.refMetaData["src_start"] == 1
    assert malign.refMetaData["src_end"] == 12
    first, _, last = malign.seqMetaData
    assert (first["name"], first["src_start"], first["src_end"]) == ("chr1", 100, 108)
    assert first["src_orientation"] == "+"
    assert first["score"] == 100
    assert (last["name"], last["src_start"], last["src_end"]) == ("chr3", 300, 306)
    assert last["src_orientation"] == "-"


def test_reverse_strand_hits_on_target_anchor_are_reverse_complemented(crossmatch_file):
    from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection

    collection = DNAPairwiseAlignmentCollection.fromCrossmatch(
        crossmatch_file.read_text().splitlines()
    )
    malign = MultAlign(DNAPAC=collection)
    assert malign["ref"] == "ACGTTGCAAC"
    assert malign[0] == "ACGTTGCAAC"
    assert malign[1] == "  GTTGCA  "
    assert malign.seqMetaData[1]["src_start"] == 5
    assert malign.seqMetaData[1]["src_end"] == 10
    assert malign.seqMetaData[1]["src_orientation"] == "-"


def test_flanks_are_strand_aware_and_padded(crossmatch_file, flank_fasta):
    from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
    from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase

    collection = DNAPairwiseAlignmentCollection.fromCrossmatch(
        crossmatch_file.read_text().splitlines()
    )
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        malign = MultAlign(
            DNAPAC=collection, flankingSequenceDatabase=db, maxFlankingSequenceLen=3
        )
    forward, reverse = malign.seqMetaData
    assert forward["left_flanking"] == " TT"
    assert forward["right_flanking"] == "GGG"
    assert reverse["left_flanking"] == "  T"
    assert reverse["right_flanking"] == "GGG"
    assert malign.refMetaData["left_flanking"] == "   "


def test_missing_flank_sequence_degrades_to_pad(overlapping_hits, flank_fasta, caplog):
    from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase

    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        malign = MultAlign(
            DNAPAC=overlapping_hits,
            flankingSequenceDatabase=db,
            maxFlankingSequenceLen=4,
        )
    for metaDict in malign.seqMetaData:
        assert metaDict["left_flanking"] == "    "
        assert metaDict["right_flanking"] == "    "
    assert "chr3" in caplog.text


class UnreadableChr2Database:
    """Flank lookups that fail with an I/O error for chr2 only"""

    def __init__(self, db):
        self.db = db

    def getSubsequence(self, seqId, start, end):
        if seqId == "chr2":
            raise OSError("read error on chr2")
        return self.db.getSubsequence(seqId, start, end)


def test_failed_flank_lookup_pads_only_that_row(crossmatch_file, flank_fasta, caplog):
    from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
    from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase

    collection = DNAPairwiseAlignmentCollection.fromCrossmatch(
        crossmatch_file.read_text().splitlines()
    )
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        malign = MultAlign(
            DNAPAC=collection,
            flankingSequenceDatabase=UnreadableChr2Database(db),
            maxFlankingSequenceLen=3,
        )
    forward, reverse = malign.seqMetaData
    assert forward["left_flanking"] == " TT"
    assert forward["right_flanking"] == "GGG"
    assert reverse["left_flanking"] == "   "
    assert reverse["right_flanking"] == "   "
    assert "read error on chr2" in caplog.text


def test_uncovered_reference_positions_are_filled_with_n():
    from LinupLib.DNAPairwiseAlignment import DNAPairwiseAlignment
    from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection

    collection = DNAPairwiseAlignmentCollection()
    for (start, seq, target) in ((1, "ACG", "a"), (6, "TTA", "b")):
        collection.append(
            DNAPairwiseAlignment(
                score=5,
                query_id="ref",
                query_start=start,
                query_end=start + 2,
                aligned_query_seq=seq,
                orientation="+",
                target_id=target,
                target_start=1,
                target_end=3,
                aligned_target_seq=seq,
            )
        )
    with pytest.warns(UserWarning, match="not covered"):
        malign = MultAlign(DNAPAC=collection)
    assert malign["ref"] == "ACGNNTTA"
    assert malign[1] == "     TTA"


# ---------------------------------------------------------------------------
# Construction from aligned text


def test_duplicate_fasta_identifiers_are_suffixed():
    with pytest.warns(UserWarning, match="AluY_1"):
        malign = MultAlign(FASTA=">AluY\nAC-GT\n>AluY\nACGGT\n")
    assert [m["name"] for m in malign.seqMetaData] == ["AluY", "AluY_1"]


def test_fasta_edge_gaps_become_pad():
    malign = MultAlign(FASTA=">s1\n--ac-gt--\n>s2\nAACCGGTTA\n")
    assert malign[0] == "  AC-GT  "
    assert malign.reference is None
    assert malign.seqMetaData[0]["src_start"] == 1
    assert malign.seqMetaData[0]["src_end"] == 4
    assert malign.seqMetaData[0]["src_orientation"] == "+"


def test_fasta_records_must_share_one_length():
    with pytest.raises(ValueError):
        MultAlign(FASTA=">s1\nACGT\n>s2\nACG\n")


STOCKHOLM = """# STOCKHOLM 1.0
#=GF ID    AluY
seq1:101-108   ACGT..ACGT
seq2:217-211   ..GTAAACG.
#=GC RF        xxxx..xxxx
//
"""


def test_stockholm_rows_reference_and_coordinates():
    malign = MultAlign(Stockholm=STOCKHOLM)
    assert malign[0] == "ACGT--ACGT"
    assert malign[1] == "  GTAAACG "
    assert malign["ref"] == "XXXX--XXXX"
    assert malign.reference_name == "AluY"
    assert malign.refMetaData["src_end"] == 8
    second = malign.seqMetaData[1]
    assert (second["name"], second["src_start"], second["src_end"]) == ("seq2", 211, 217)
    assert second["src_orientation"] == "-"


def test_duplicate_stockholm_identifiers_keep_coordinates():
    text = (
        "# STOCKHOLM 1.0\n"
        "chr1:101-108  ACGTACGT\n"
        "chr1:101-108  ACGTTCGT\n"
        "chr1:20-13    ACGTACGA\n"
        "//\n"
    )
    with pytest.warns(UserWarning, match="chr1:101-108_1"):
        malign = MultAlign(Stockholm=text)
    rows = [
        (m["name"], m["src_start"], m["src_end"], m["src_orientation"])
        for m in malign.seqMetaData
    ]
    assert rows == [
        ("chr1", 101, 108, "+"),
        ("chr1_1", 101, 108, "+"),
        ("chr1", 13, 20, "-"),
    ]
    assert malign.toFASTA(mode="raw").startswith(
        ">chr1:101-108\nACGTACGT\n>chr1_1:101-108\nACGTTCGT\n>chr1:20-13\n"
    )


def test_stockholm_blocks_are_concatenated():
    text = (
        "# STOCKHOLM 1.0\n"
        "s1  ACGT\n"
        "s2  AC-T\n"
        "\n"
        "s1  TTGA\n"
        "s2  TT--\n"
        "//\n"
    )
    malign = MultAlign(Stockholm=text)
    assert malign[0] == "ACGTTTGA"
    assert malign[1] == "AC-TTT  "
    assert malign.seqMetaData[1]["src_start"] == 1
    assert malign.seqMetaData[1]["src_end"] == 5


def test_stockholm_without_header_is_rejected():
    with pytest.raises(StockholmParseError):
        MultAlign(Stockholm="s1  ACGT\n//\n")


def test_illegal_characters_are_rejected():
    with pytest.raises(ValueError):
        MultAlign(sequences=["AC!T", "ACGT"])
    malign = MultAlign(sequences=["AC!T", "ACGT"], checkForIllegalChars=False)
    assert malign.colLength == 4


def test_construction_requires_a_source():
    with pytest.raises(ValueError):
        MultAlign()


# ---------------------------------------------------------------------------
# Trimming and renumbering


def test_trim_advances_start_by_bases_not_columns():
    malign = MultAlign(
        sequences=["AC-GTAAAA", "AC-GTCCCC"],
        seqMetaData=[
            {"name": "fwd", "src_start": 10, "src_end": 17, "src_orientation": "+"},
            {"name": "rev", "src_start": 100, "src_end": 107, "src_orientation": "-"},
        ],
    )
    malign.trim_off(5, 0)
    assert malign.seqMetaData[0]["src_start"] == 14
    assert malign.seqMetaData[0]["src_end"] == 17
    assert malign.seqMetaData[1]["src_start"] == 100
    assert malign.seqMetaData[1]["src_end"] == 103
    assert malign[0] == "AAAA"


def test_trim_right_on_reverse_strand_advances_start():
    malign = MultAlign(
        sequences=["ACGTA"],
        seqMetaData=[{"name": "rev", "src_start": 1, "src_end": 5, "src_orientation": "-"}],
    )
    malign.trim_off(0, 2)
    assert malign.seqMetaData[0]["src_start"] == 3
    assert malign.seqMetaData[0]["src_end"] == 5


def test_trim_must_leave_columns(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    with pytest.raises(InvalidTrimRangeError):
        malign.trim_off(10, 5)
    with pytest.raises(InvalidTrimRangeError):
        malign.trim_off(-1, 0)


def test_trim_composition(overlapping_hits):
    stepwise = MultAlign(DNAPAC=overlapping_hits)
    stepwise.trim_off(1, 1)
    stepwise.trim_off(1, 2)
    direct = MultAlign(DNAPAC=overlapping_hits)
    direct.trim_off(2, 3)
    assert stepwise.serializeOutput() == direct.serializeOutput()
    assert direct.refMetaData["src_start"] == 3
    assert direct.refMetaData["src_end"] == 9
    assert_uniform_width(direct)


def test_rows_trimmed_to_nothing_are_removed():
    malign = MultAlign(sequences=["AC   ", "   GT"])
    with pytest.warns(UserWarning, match="seq1"):
        malign.trim_off(3, 0)
    assert malign.length == 1
    assert malign.seqMetaData[0]["name"] == "seq2"
    assert malign[0] == "GT"


def test_normalize_numbers_rows_from_the_reference(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    malign.normalizeCoordinates()
    assert (malign.refMetaData["src_start"], malign.refMetaData["src_end"]) == (1, 12)
    coords = [(m["src_start"], m["src_end"]) for m in malign.seqMetaData]
    assert coords == [(1, 9), (3, 11), (6, 12)]
    assert malign.seqMetaData[2]["src_orientation"] == "+"
    assert malign.seqMetaData[2]["normalized_from"] == "-"
    view = malign.toAlignmentText().splitlines()
    chr3 = [line for line in view if line.startswith("chr3")][0]
    assert chr3.split()[1:] == ["6", "CGT--ACGT", "12"]
    assert malign.toFASTA(mode="raw").splitlines()[4] == ">chr3:6-12"


def test_trim_after_normalize_counts_in_reference_direction(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    malign.normalizeCoordinates()
    malign.trim_off(7, 0)
    chr3 = malign.seqMetaData[2]
    assert (chr3["src_start"], chr3["src_end"], chr3["src_orientation"]) == (7, 12, "+")


def test_normalize_is_idempotent(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    malign.trim_off(1, 0)
    malign.normalizeCoordinates()
    once = malign.serializeOutput()
    malign.normalizeCoordinates()
    assert malign.serializeOutput() == once


def test_normalize_without_reference_uses_columns():
    malign = MultAlign(FASTA=">s1\n--ACGT\n>s2\nAACCGG\n")
    malign.normalizeCoordinates()
    assert (malign.seqMetaData[0]["src_start"], malign.seqMetaData[0]["src_end"]) == (3, 6)


# ---------------------------------------------------------------------------
# Consensus and divergence


def test_reference_does_not_vote_by_default():
    malign = MultAlign(sequences=["A", "C", "C"], reference="A")
    assert malign.consensus() == "C"


def test_reference_votes_when_included():
    malign = MultAlign(sequences=["A", "C", "C"], reference="A")
    # A and C tie at two votes each, A comes first
    assert malign.consensus(includeReference=True) == "A"


def test_consensus_is_deterministic(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    first = malign.consensus()
    assert malign.consensus() == first
    assert MultAlign(DNAPAC=overlapping_hits).consensus() == first
    assert len(first) == malign.colLength
    assert malign.consensus(withGaps=False) == first.replace("-", "")


def test_consensus_cache_is_dropped_by_trim(overlapping_hits):
    malign = MultAlign(DNAPAC=overlapping_hits)
    malign.consensus()
    malign.trim_off(2, 0)
    assert len(malign.consensus()) == malign.colLength


def test_kimura_distance_saturates():
    assert kimura_distance(4, 4, 10) is None
    assert kimura_distance(0, 5, 10) is None
    assert kimura_distance(0, 0, 0) is None
    assert kimura_distance(1, 0, 10) == pytest.approx(-0.5 * math.log(0.8))


def test_saturated_rows_are_excluded_from_average():
    malign = MultAlign(
        sequences=["GGGGCCCCAA", "AAAAAAAAAA"],
        seqMetaData=[{"name": "diverged"}, {"name": "identical"}],
    )
    divergence = malign.kimura_divergence(consensus="AAAAAAAAAA")
    assert divergence.per_row == [("diverged", None), ("identical", 0.0)]
    assert divergence.saturated == ["diverged"]
    assert divergence.saturated_count == 1
    assert divergence.average == 0.0


def test_ambiguous_and_gap_columns_are_not_compared():
    malign = MultAlign(sequences=["ANG-C ", "ACGTCA"])
    divergence = malign.kimura_divergence(consensus="ACGTCT")
    # Row one compares A, G and C only
    assert divergence.per_row[0][1] == 0.0
    # Row two has one transversion over six sites
    q = 1 / 6
    expected = -0.5 * math.log(1 - q) - 0.25 * math.log(1 - 2 * q)
    assert divergence.per_row[1][1] == pytest.approx(expected)


def test_divergence_average_is_none_when_all_rows_saturate():
    malign = MultAlign(sequences=["TTTT"])
    divergence = malign.kimura_divergence(consensus="AAAA")
    assert divergence.average is None


# ---------------------------------------------------------------------------
# Persistence


def test_serialized_round_trip(crossmatch_file, flank_fasta):
    from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
    from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase

    collection = DNAPairwiseAlignmentCollection.fromCrossmatch(
        crossmatch_file.read_text().splitlines()
    )
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        original = MultAlign(
            DNAPAC=collection, flankingSequenceDatabase=db, maxFlankingSequenceLen=3
        )
    original.consensus()
    text = original.serializeOutput()

    restored = MultAlign(serialized=text)
    assert restored.colLength == original.colLength
    assert [restored[i] for i in range(restored.length)] == [
        original[i] for i in range(original.length)
    ]
    assert restored["ref"] == original["ref"]
    assert restored.seqMetaData == original.seqMetaData
    assert restored.serializeOutput() == text
    assert MultAlign(serialized=restored.serializeOutput()).serializeOutput() == text


def test_serialized_text_requires_marker():
    with pytest.raises(ValueError):
        MultAlign(serialized='{"aligned_sequences": ["ACGT"]}')
