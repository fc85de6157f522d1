# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.Linup import LinupConfig, run

    config = LinupConfig(input="hits.align", output_format="msf")
    run(config, out=sys.stdout)

    The Linup pipeline.  The input is read and its format detected, the
    multiple alignment is built, optionally trimmed and renumbered, its
    consensus and divergence are calculated and it is written in the
    requested output format:

        detectFormat -> MultAlign -> trim_off/normalizeCoordinates
                     -> consensus -> kimura_divergence -> exporter

    Every setting reaches the pipeline through a LinupConfig object.
    Defaults may be read from an INI file:

        [linup]
        block_size = 100
        max_flank_len = 0
        consensus_method = majority
        line_width = 50

SEE ALSO: MultAlign.py, linup.py
          Dfam: http://www.dfam.org

LICENSE:
    This code may be used in accordance with the Creative Commons
    Zero ("CC0") public domain dedication:
    https://creativecommons.org/publicdomain/zero/1.0/

DISCLAIMER:
  This software is provided ``AS IS'' and any express or implied
  warranties, including, but not limited to, the implied warranties of
  merchantability and fitness for a particular purpose, are disclaimed.
  In no event shall the authors or the Dfam consortium members be
  liable for any direct, indirect, incidental, special, exemplary, or
  consequential damages (including, but not limited to, procurement of
  substitute goods or services; loss of use, data, or profits; or
  business interruption) however caused and on any theory of liability,
  whether in contract, strict liability, or tort (including negligence
  or otherwise) arising in any way out of the use of this software, even
  if advised of the possibility of such damage.

"""
import sys
import json
import logging
import configparser

from .AlignmentFormat import detectFormat, CROSSMATCH, STOCKHOLM, FASTA, SERIALIZED
from .ConsensusCaller import CONSENSUS_METHODS
from .DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
from .FlankingSequenceDatabase import FlankingSequenceDatabase
from .MultAlign import MultAlign, StockholmParseError
from .LinupErrors import (
    LinupError,
    InputUnreadableError,
    InvalidOptionCombinationError,
)

LOGGER = logging.getLogger(__name__)

OUTPUT_FORMATS = ("alignment", "msf", "stockholm", "fasta", "raw_fasta", "consensus")

CONFIG_SECTION = "linup"


class LinupConfig:
    """
    Settings for one Linup run.

    Keys:
        input                          : path of the alignment file
        output_format                  : one of OUTPUT_FORMATS
        name                           : name for the alignment/consensus
        include_reference_in_consensus : let the reference vote in the
                                         consensus call
        show_score                     : score column in the alignment view
        trim_left, trim_right          : columns to trim off each edge
        normalize                      : renumber against the reference
        max_flank_len                  : flanking bases for FASTA output
        flank_db                       : FASTA file holding the flanks
        consensus_method               : "majority" or "linup"
        block_size                     : columns per alignment view block
        line_width                     : FASTA line width
        serialize_file                 : also save the MultAlign here
        debug                          : verbose logging
    """

    defaults = {
        "input": None,
        "output_format": "alignment",
        "name": None,
        "include_reference_in_consensus": False,
        "show_score": False,
        "trim_left": 0,
        "trim_right": 0,
        "normalize": False,
        "max_flank_len": 0,
        "flank_db": None,
        "consensus_method": "majority",
        "block_size": 100,
        "line_width": 50,
        "serialize_file": None,
        "debug": False,
    }

    def __init__(self, *args, **kwargs):
        allowed_keys = set(self.defaults.keys())
        unknown = set(kwargs.keys()) - allowed_keys
        if unknown:
            raise ValueError(
                "LinupConfig: unknown setting(s): " + ", ".join(sorted(unknown))
            )
        self.__dict__.update(self.defaults)
        self.__dict__.update((k, v) for k, v in kwargs.items() if k in allowed_keys)

    @classmethod
    def fromConfigFile(cls, path, **overrides):
        """
        Read defaults from the [linup] section of an INI file.  Keyword
        arguments override the values found in the file.
        """
        config = configparser.ConfigParser()
        try:
            found = config.read(path)
        except configparser.Error as error:
            raise InputUnreadableError(
                "Could not parse config file " + str(path) + ": " + str(error)
            )
        if not found:
            raise InputUnreadableError("Could not read config file " + str(path))

        values = {}
        if config.has_section(CONFIG_SECTION):
            section = config[CONFIG_SECTION]
            try:
                for key in ("block_size", "max_flank_len", "line_width"):
                    if key in section:
                        values[key] = section.getint(key)
            except ValueError as error:
                raise InvalidOptionCombinationError(
                    "Invalid value in config file " + str(path) + ": " + str(error)
                )
            if "consensus_method" in section:
                values["consensus_method"] = section.get("consensus_method")
        else:
            LOGGER.warning(
                "Config file %s has no [%s] section - using defaults",
                path,
                CONFIG_SECTION,
            )

        values.update(overrides)
        return cls(**values)

    def __repr__(self):
        return json.dumps(self.__dict__, indent=4)


def _checkOptions(config):
    """
    Option combinations that can be rejected before reading the input
    """
    if config.output_format not in OUTPUT_FORMATS:
        raise InvalidOptionCombinationError(
            "Unknown output format '"
            + str(config.output_format)
            + "', expected one of: "
            + ", ".join(OUTPUT_FORMATS)
        )
    if config.consensus_method not in CONSENSUS_METHODS:
        raise InvalidOptionCombinationError(
            "Unknown consensus method '"
            + str(config.consensus_method)
            + "', expected one of: "
            + ", ".join(CONSENSUS_METHODS)
        )
    if config.block_size is None or config.block_size < 1:
        raise InvalidOptionCombinationError("The block size must be at least 1")
    if config.max_flank_len:
        if config.max_flank_len < 0:
            raise InvalidOptionCombinationError(
                "The flanking sequence length must not be negative"
            )
        if config.output_format != "fasta":
            raise InvalidOptionCombinationError(
                "Flanking sequence can only be written with FASTA output (--fasta)"
            )
        if not config.flank_db:
            raise InvalidOptionCombinationError(
                "Flanking sequence output requires a sequence database (--flank-db)"
            )


def _readInput(path):
    try:
        with open(path) as inFile:
            return inFile.readlines()
    except (OSError, UnicodeDecodeError) as error:
        raise InputUnreadableError(
            "Could not read input file " + str(path) + ": " + str(error)
        )


def buildMultAlign(config, lines, inputFormat):
    """
    Construct the MultAlign for the detected input format
    """
    try:
        if inputFormat == CROSSMATCH:
            collection = DNAPairwiseAlignmentCollection.fromCrossmatch(lines)
            if config.max_flank_len:
                with FlankingSequenceDatabase(config.flank_db) as db:
                    return MultAlign(
                        DNAPAC=collection,
                        flankingSequenceDatabase=db,
                        maxFlankingSequenceLen=config.max_flank_len,
                    )
            return MultAlign(DNAPAC=collection)
        elif inputFormat == STOCKHOLM:
            return MultAlign(Stockholm="".join(lines))
        elif inputFormat == FASTA:
            return MultAlign(FASTA="".join(lines))
        elif inputFormat == SERIALIZED:
            return MultAlign(serialized="".join(lines))
    except (ValueError, StockholmParseError) as error:
        raise LinupError(
            "Could not build the multiple alignment from "
            + inputFormat
            + " input "
            + str(config.input)
            + ": "
            + str(error)
        )
    raise LinupError("No builder for input format " + str(inputFormat))


def formatDivergence(divergence):
    """
    Kimura divergence summary lines for the alignment view
    """
    if not divergence.per_row:
        return ""
    maxNameLen = max(len(name) for (name, div) in divergence.per_row)
    summary = "Kimura divergence from consensus:\n"
    for (name, div) in divergence.per_row:
        if div is None:
            value = "too diverged to estimate"
        else:
            value = "{:.2f}%".format(div * 100)
        summary += "  " + name.ljust(maxNameLen) + "  " + value + "\n"
    if divergence.average is None:
        summary += "Average Kimura divergence: n/a"
    else:
        summary += "Average Kimura divergence: {:.2f}%".format(divergence.average * 100)
    if divergence.saturated_count:
        summary += (
            " ("
            + str(divergence.saturated_count)
            + " sequence(s) too diverged to estimate)"
        )
    return summary + "\n"


def run(config, out=None):
    """
    Run the whole pipeline for one LinupConfig, writing the requested
    output to out ( default sys.stdout ).

    Returns:
        The final MultAlign

    Raises:
        LinupError ( or one of its subclasses ) on any fatal condition
    """
    if out is None:
        out = sys.stdout

    _checkOptions(config)
    lines = _readInput(config.input)

    inputFormat = detectFormat(lines)
    LOGGER.info("Input %s detected as %s", config.input, inputFormat)
    if config.max_flank_len and inputFormat != CROSSMATCH:
        raise InvalidOptionCombinationError(
            "Flanking sequence can only be added to alignments built from"
            + " pairwise hits, but "
            + str(config.input)
            + " holds "
            + inputFormat
            + " data"
        )

    malign = buildMultAlign(config, lines, inputFormat)
    LOGGER.info(
        "Built a %d sequence x %d column alignment", malign.length, malign.colLength
    )

    if config.trim_left or config.trim_right:
        malign.trim_off(left=config.trim_left, right=config.trim_right)
    if config.normalize:
        malign.normalizeCoordinates()

    consensus = malign.consensus(
        method=config.consensus_method,
        includeReference=config.include_reference_in_consensus,
    )

    if config.output_format == "alignment":
        out.write(
            malign.toAlignmentText(
                blockSize=config.block_size,
                showConsensus=True,
                showScore=config.show_score,
                consensus=consensus,
            )
        )
        out.write(formatDivergence(malign.kimura_divergence(consensus=consensus)))
    elif config.output_format == "msf":
        out.write(malign.toMSF(name=config.name))
    elif config.output_format == "stockholm":
        out.write(malign.toStockholm(name=config.name, consensus=consensus))
    elif config.output_format == "fasta":
        mode = "flanking" if config.max_flank_len else "aligned"
        out.write(malign.toFASTA(mode=mode, lineWidth=config.line_width))
    elif config.output_format == "raw_fasta":
        out.write(malign.toFASTA(mode="raw", lineWidth=config.line_width))
    elif config.output_format == "consensus":
        out.write(malign.toConsensusFASTA(name=config.name, consensus=consensus))

    if config.serialize_file:
        try:
            with open(config.serialize_file, "w") as outFile:
                outFile.write(malign.serializeOutput())
        except OSError as error:
            raise LinupError(
                "Could not write "
                + str(config.serialize_file)
                + ": "
                + str(error)
            )

    return malign
