import io

import pytest

import linup
from LinupLib.Linup import LinupConfig, run, formatDivergence
from LinupLib.LinupErrors import (
    InputUnreadableError,
    InvalidOptionCombinationError,
    InvalidTrimRangeError,
)
from LinupLib.MultAlign import KimuraDivergence


def run_to_string(**settings):
    out = io.StringIO()
    malign = run(LinupConfig(**settings), out=out)
    return out.getvalue(), malign


def test_default_output_is_alignment_and_divergence(crossmatch_file):
    text, malign = run_to_string(input=str(crossmatch_file))
    assert text.startswith("consensus")
    assert "ref: AluY" in text
    assert "Kimura divergence from consensus:" in text
    assert "Average Kimura divergence: 0.00%" in text


def test_consensus_output(crossmatch_file):
    text, _ = run_to_string(
        input=str(crossmatch_file), output_format="consensus", name="AluYa5"
    )
    assert text == ">AluYa5\nACGTTGCAAC\n\n"


def test_flanking_fasta_output(crossmatch_file, flank_fasta):
    text, _ = run_to_string(
        input=str(crossmatch_file),
        output_format="fasta",
        max_flank_len=3,
        flank_db=str(flank_fasta),
    )
    assert text == ">chr1:3-12\n-TTACGTTGCAACGGG\n>chr2:10-5\n--T--GTTGCA--GGG\n"


def test_flanks_need_pairwise_hits(tmp_path, flank_fasta):
    fasta = tmp_path / "aligned.fa"
    fasta.write_text(">s1\nACGT\n>s2\nAC-T\n")
    with pytest.raises(InvalidOptionCombinationError):
        run_to_string(
            input=str(fasta),
            output_format="fasta",
            max_flank_len=3,
            flank_db=str(flank_fasta),
        )


def test_flanks_need_fasta_output(crossmatch_file, flank_fasta):
    with pytest.raises(InvalidOptionCombinationError):
        run_to_string(
            input=str(crossmatch_file),
            output_format="msf",
            max_flank_len=3,
            flank_db=str(flank_fasta),
        )


def test_trim_and_normalize(crossmatch_file):
    text, malign = run_to_string(
        input=str(crossmatch_file),
        output_format="raw_fasta",
        trim_left=2,
        normalize=True,
    )
    assert text == ">chr1:1-8\nGTTGCAAC\n>chr2:1-6\nGTTGCA\n"
    assert malign.refMetaData["src_end"] == 8


def test_trim_range_is_checked(crossmatch_file):
    with pytest.raises(InvalidTrimRangeError):
        run_to_string(input=str(crossmatch_file), trim_left=5, trim_right=5)


def test_unreadable_input(tmp_path):
    with pytest.raises(InputUnreadableError):
        run_to_string(input=str(tmp_path / "missing.align"))


def test_serialized_output_can_be_reloaded(crossmatch_file, tmp_path):
    saved = tmp_path / "AluY.json"
    first, _ = run_to_string(
        input=str(crossmatch_file), output_format="msf", serialize_file=str(saved)
    )
    second, _ = run_to_string(input=str(saved), output_format="msf")
    assert first == second


def test_config_file_defaults_and_overrides(tmp_path):
    ini = tmp_path / "config.ini"
    ini.write_text("[linup]\nblock_size = 60\nconsensus_method = linup\nline_width = 70\n")
    config = LinupConfig.fromConfigFile(str(ini), input="x.align", block_size=80)
    assert config.block_size == 80
    assert config.consensus_method == "linup"
    assert config.line_width == 70
    assert config.max_flank_len == 0


def test_config_rejects_unknown_settings():
    with pytest.raises(ValueError):
        LinupConfig(colour="blue")


def test_divergence_summary_marks_saturated_rows():
    summary = formatDivergence(KimuraDivergence([("a", None), ("bb", 0.1)]))
    assert "  a   too diverged to estimate\n" in summary
    assert "  bb  10.00%\n" in summary
    assert summary.endswith(
        "Average Kimura divergence: 10.00% (1 sequence(s) too diverged to estimate)\n"
    )


def test_cli_writes_output(crossmatch_file, capsys):
    assert linup.main(["--raw-fasta", str(crossmatch_file)]) == 0
    assert capsys.readouterr().out == ">chr1:3-12\nACGTTGCAAC\n>chr2:10-5\nGTTGCA\n"


def test_cli_reports_fatal_errors(crossmatch_file, capsys):
    assert linup.main(["--msf", "--flank", "10", str(crossmatch_file)]) == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_cli_output_formats_are_exclusive(crossmatch_file):
    with pytest.raises(SystemExit):
        linup.main(["--msf", "--fasta", str(crossmatch_file)])
