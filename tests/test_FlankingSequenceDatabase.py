import pytest

from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase
from LinupLib.LinupErrors import InputUnreadableError


def test_subsequence_is_one_based_and_closed(flank_fasta):
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        assert db.getSubsequence("chr1", 3, 6) == "ACGT"
        assert db.getSequenceLength("chr2") == 11


def test_subsequence_is_clipped_to_sequence_ends(flank_fasta):
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        assert db.getSubsequence("chr1", -5, 2) == "TT"
        assert db.getSubsequence("chr2", 10, 20) == "CA"
        assert db.getSubsequence("chr2", 12, 20) == ""


def test_repeat_class_suffix_is_ignored(flank_fasta):
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        assert db.getSubsequence("chr1#SINE/Alu", 1, 2) == "TT"


def test_missing_sequence_is_none(flank_fasta):
    with FlankingSequenceDatabase(str(flank_fasta)) as db:
        assert db.getSubsequence("chrUn", 1, 2) is None
        assert db.getSequenceLength("chrUn") is None


def test_closed_database_cannot_be_queried(flank_fasta):
    db = FlankingSequenceDatabase(str(flank_fasta))
    with db:
        pass
    with pytest.raises(ValueError):
        db.getSubsequence("chr1", 1, 2)


def test_unreadable_database(tmp_path):
    with pytest.raises(InputUnreadableError):
        FlankingSequenceDatabase(str(tmp_path / "missing.fa")).open()
