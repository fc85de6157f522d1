# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.AlignmentFormat import detectFormat

    Recognize which kind of alignment a Linup input holds:

        CROSSMATCH - pairwise hits in crossmatch/RepeatMasker .align form
        STOCKHOLM  - a Stockholm markup multiple alignment
        FASTA      - aligned (gapped) FASTA sequences
        SERIALIZED - a MultAlign previously saved with serializeOutput()

SEE ALSO: MultAlign.py
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
import re
import logging

from .DNAPairwiseAlignment import DNAPairwiseAlignment
from .LinupErrors import UnknownFormatError

LOGGER = logging.getLogger(__name__)

CROSSMATCH = "crossmatch"
STOCKHOLM = "stockholm"
FASTA = "fasta"
SERIALIZED = "serialized"

# Key written first by MultAlign.serializeOutput()
SERIALIZED_MARKER = "multalign_version"

MAX_SCAN_LINES = 10000

stkHeaderRE = re.compile(r"^#\s+STOCKHOLM\s+[\d\.]+")
# RepeatMasker .out/.align column headers, e.g. "   SW   perc perc perc  query ..."
scoreHeaderRE = re.compile(r"^\s*(SW|score)\s+(perc|div)", re.IGNORECASE)
fastaIdRE = re.compile(r"^>\S+")
fastaSeqRE = re.compile(r"^[ACGTRYKMSWBDHVNXacgtrykmswbdhvnx\-\.]+$")
serializedRE = re.compile(r'^\s*\{?\s*"' + SERIALIZED_MARKER + r'"\s*:')


def detectFormat(lines, maxLines=MAX_SCAN_LINES):
    """
    Classify an alignment input by scanning at most maxLines of it.

    Blank lines and score header lines are skipped and do not count against
    the budget.  The first line that is characteristic of a format decides.

    Args:
        lines:    any iterable of text lines
        maxLines: scan budget

    Returns:
        One of CROSSMATCH, STOCKHOLM, FASTA or SERIALIZED

    Raises:
        UnknownFormatError
    """
    scanned = 0
    lastWasFastaId = False
    for line in lines:
        line = line.rstrip("\r\n")
        if line.strip() == "" or scoreHeaderRE.match(line):
            continue
        if scanned >= maxLines:
            break
        scanned += 1

        if stkHeaderRE.match(line):
            LOGGER.debug("detectFormat: Stockholm header at line %d", scanned)
            return STOCKHOLM
        if DNAPairwiseAlignment.crossmatchSummaryRE.match(line):
            LOGGER.debug("detectFormat: crossmatch hit at line %d", scanned)
            return CROSSMATCH
        if lastWasFastaId and fastaSeqRE.match(line.strip()):
            LOGGER.debug("detectFormat: FASTA record at line %d", scanned)
            return FASTA
        if serializedRE.match(line):
            LOGGER.debug("detectFormat: serialized MultAlign at line %d", scanned)
            return SERIALIZED
        lastWasFastaId = fastaIdRE.match(line) is not None

    raise UnknownFormatError(
        "Could not determine the input format after scanning "
        + str(scanned)
        + " lines - expected crossmatch/RepeatMasker alignments, Stockholm,"
        + " aligned FASTA or a serialized MultAlign"
    )
