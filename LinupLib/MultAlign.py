#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.MultAlign import MultAlign

    A multiple sequence alignment object based on MultAln.pm and the
    Linup utility.  A MultAlign may be built from a collection of pairwise
    alignments against one shared reference, from a Stockholm or aligned
    FASTA file, or from a previously serialized MultAlign.  Once built it
    may be trimmed and renumbered, its consensus and Kimura divergence
    calculated, and it may be written out in several alignment formats.

SEE ALSO: Dfam-js Project - MultAlign
             ( https://github.com/Dfam-consortium/Dfam-js )
          Dfam: http://www.dfam.org

    Original perl implementation and concepts by Arnie Kas and Arian Smit

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

#
# Module imports
#
import io
import math
import json
import re
import logging
import warnings
import numpy as np
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqUtils.CheckSum import gcg

from .ConsensusCaller import call_consensus
from .DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
from .AlignmentFormat import SERIALIZED_MARKER
from .LinupErrors import InvalidTrimRangeError

LOGGER = logging.getLogger(__name__)

MULTALIGN_VERSION = "1.0"


class StockholmParseError(Exception):
    """Exception class for errors in parsing stockholm files."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def _newMetaData(name=None, start=None, end=None, orientation=None, score=None):
    """
    Build a sequence metadata dict.  Every row of a MultAlign ( and the
    reference ) carries one of these:

        name            : str
        src_start       : int  1-based, fully closed, src_start <= src_end
        src_end         : int
        src_orientation : "+" or "-"
        score           : int  score of the pairwise hit the row came from
        left_flanking   : str  sequence preceding the row ( in alignment
                               orientation ), ' ' where none was available
        right_flanking  : str
    """
    return {
        "name": name,
        "src_start": start,
        "src_end": end,
        "src_orientation": orientation,
        "score": score,
        "left_flanking": None,
        "right_flanking": None,
    }


def kimura_distance(transitions, transversions, well_characterized):
    """
    Kimura two-parameter distance.

        d = -1/2 ln( 1 - 2p - q ) - 1/4 ln( 1 - 2q )

    where p and q are the fractions of transitions and transversions over
    the well characterized ( compared ) sites.

    Returns:
        The distance, or None when it cannot be estimated: no compared
        sites, or p and q large enough that a log operand is <= 0.
    """
    if well_characterized < 1:
        return None
    p = transitions / well_characterized
    q = transversions / well_characterized
    transition_term = 1 - (2 * p) - q
    transversion_term = 1 - (2 * q)
    if transition_term <= 0 or transversion_term <= 0:
        return None
    return 0.5 * math.log(1 / transition_term) + 0.25 * math.log(1 / transversion_term)


class KimuraDivergence:
    """
    Per sequence and average Kimura divergence of a MultAlign from its
    consensus.

    Attributes:
        per_row   : list of (name, distance) in alignment row order.  The
                    distance is None for rows too diverged to estimate.
        saturated : names of the rows with a None distance
        average   : mean of the finite distances ( None if there are none )
    """

    def __init__(self, per_row):
        self.per_row = per_row
        self.saturated = [name for (name, div) in per_row if div is None]
        finite = [div for (name, div) in per_row if div is not None]
        self.average = None
        if finite:
            self.average = sum(finite) / len(finite)

    @property
    def saturated_count(self):
        return len(self.saturated)

    def __repr__(self):
        return json.dumps(self.__dict__, indent=4)


class MultAlign:
    """
    A generic Multiple Sequence Alignment (MSA) class

    Holds the minimal set of information needed to store, interrogate, and
    call the consensus on a MSA:

        reference         : 1d numpy char array, or None
        refMetaData       : metadata dict for the reference ( see
                            _newMetaData() )
        aligned_sequences : 2d numpy char array, one row per sequence
        seqMetaData       : list of metadata dicts parallel to the rows

    Every row and the reference have the same length ( the number of
    alignment columns ).  Rows use upper case DNA IUB codes, '-' for gaps
    within the aligned region and ' ' (space) padding at the start/end
    unaligned regions:

            ________________________________________________
            |    ACGTCGTA--TCTCTC-CTCTC--CTCTCT----C       |
            |^external gaps             ^internal gaps     |
            |______________________________________________|

    Construction, one of:

        MultAlign( DNAPAC = collection,
                   flankingSequenceDatabase = db,
                   maxFlankingSequenceLen = 50 )

        MultAlign( Stockholm = stockholm_text )

        MultAlign( FASTA = fasta_text )

        MultAlign( serialized = text_from_serializeOutput )

        MultAlign( sequences = [ '  AACT-TTGACC---CC',
                                 'GAAAGT-TTCTCCAGTCC' ],
                   seqMetaData = [ {'name': 'seq1', ...}, ... ],
                   reference = 'GAAACT-TTG-CC-AGCC',
                   refMetaData = {'name': 'ref', ...} )

    The alignment is checked for non-IUB characters unless
    checkForIllegalChars=False is given.
    """

    internalGapChar = "-"
    externalGapChar = " "
    gapChars = ["-", ".", " "]
    allowedCharacters = "ACGTRYKMSWBDHVNXacgtrykmswbdhvnx-. "

    # Static Regular Expressions
    alignDataRE = re.compile(r"^(\S+)\s+([\.\-ACGTRYKMSWBDHVNXacgtrykmswbdhvnx]+)\s*$")
    stkHeaderRE = re.compile(r"^#\s+STOCKHOLM\s+[\d\.]+")
    fieldCodeDataRE = re.compile(r"^#=GF\s+(\S+)\s+(.*)$")
    # Smitten V1  e.g. seq1:1-100 or seq1:203-20 (reverse strand)
    smittenV1 = re.compile(r"^(\d+)-(\d+)$")
    # Smitten V2  e.g. seq1:1-100_+ or seq1:1-100_- (reverse strand)
    smittenV2 = re.compile(r"^(\d+)-(\d+)_([+-])$")

    def __init__(self, *args, **kwargs):
        allowed_keys = set(["checkForIllegalChars"])
        self.__dict__.update((k, None) for k in allowed_keys)
        self.__dict__.update((k, v) for k, v in kwargs.items() if k in allowed_keys)

        self.reference = None
        self.refMetaData = None
        self.aligned_sequences = None
        self.seqMetaData = None
        self.alignmentName = None
        self._consensus_cache = {}

        if "DNAPAC" in kwargs:
            self._alignFromDNAPAC(
                kwargs.get("DNAPAC"),
                flankingSequenceDatabase=kwargs.get("flankingSequenceDatabase"),
                maxFlankingSequenceLen=kwargs.get("maxFlankingSequenceLen", 0),
            )
        elif "Stockholm" in kwargs:
            self._alignFromStockholm(kwargs.get("Stockholm"))
        elif "FASTA" in kwargs:
            self._alignFromFASTA(kwargs.get("FASTA"))
        elif "serialized" in kwargs:
            self._alignFromSerialized(kwargs.get("serialized"))
        elif "sequences" in kwargs:
            self._alignFromSequences(
                kwargs.get("sequences"),
                seqMetaData=kwargs.get("seqMetaData"),
                reference=kwargs.get("reference"),
                refMetaData=kwargs.get("refMetaData"),
            )
        else:
            raise ValueError(
                "MultAlign Error: one of DNAPAC, Stockholm, FASTA, serialized"
                + " or sequences must be given to construct a MultAlign"
            )

        if self.reference is not None and len(self.reference) != self.colLength:
            raise ValueError(
                "MultAlign Construction Error: the reference is "
                + str(len(self.reference))
                + " columns long but the aligned sequences are "
                + str(self.colLength)
                + " columns long"
            )

        # We do not allow any non-IUB characters (unless user explicitly specifies to)
        if self.checkForIllegalChars != False:
            self.illegalCharacterChecker()

    # ===========================================================================

    @staticmethod
    def reverseComplement(seq):
        """
        Reverse complement a (possibly gapped) IUB sequence string
        """
        return str(Seq(seq).reverse_complement())

    # ===========================================================================

    def _toCharArray(self, sequences):
        """
        Convert a list of equal length strings into a 2d numpy char array
        """
        if len(sequences) == 0:
            raise ValueError("MultAlign Error: no sequences to align")
        width = len(sequences[0])
        for i, seq in enumerate(sequences):
            if len(seq) != width:
                raise ValueError(
                    "MultAlign Construction Error: the length of aligned sequence "
                    + str(i)
                    + " ("
                    + str(len(seq))
                    + ") does not match the length of sequence 0 ("
                    + str(width)
                    + ")"
                )
        if width == 0:
            raise ValueError("MultAlign Error: aligned sequences are empty")
        return np.array([list(seq) for seq in sequences], dtype="<U1")

    def _padEdges(self, seq):
        """
        Reinterpret the leading and trailing gap runs of an aligned sequence
        as pad ( data outside of the alignment ).  Gaps found between the
        first and last base are normalized to internalGapChar.
        """
        length = len(seq)
        core = seq.strip("".join(self.gapChars))
        if core == "":
            return self.externalGapChar * length
        leftPad = len(seq) - len(seq.lstrip("".join(self.gapChars)))
        core = core.replace(".", self.internalGapChar).replace(
            " ", self.internalGapChar
        )
        return (
            self.externalGapChar * leftPad
            + core
            + self.externalGapChar * (length - leftPad - len(core))
        )

    def _disambiguateNames(self, names):
        """
        Return names with duplicates renamed by appending _1, _2, ...
        A warning is raised for every renamed identifier.
        """
        original = set(names)
        seen = set()
        counters = {}
        uniqueNames = []
        for name in names:
            newName = name
            if name in seen:
                count = counters.get(name, 0)
                while newName in seen or newName in original:
                    count += 1
                    newName = name + "_" + str(count)
                counters[name] = count
                warnings.warn(
                    "MultAlign Warning: duplicate sequence identifier '"
                    + name
                    + "' renamed to '"
                    + newName
                    + "'"
                )
            seen.add(newName)
            uniqueNames.append(newName)
        return uniqueNames

    def _rowIdentifier(self, metaDict):
        """
        name:start-end for forward rows, name:end-start for reverse rows,
        or just the name when coordinates are unknown.
        """
        name = metaDict["name"]
        if metaDict["src_start"] is None or metaDict["src_end"] is None:
            return name
        if metaDict["src_orientation"] == "-":
            return (
                name + ":" + str(metaDict["src_end"]) + "-" + str(metaDict["src_start"])
            )
        return name + ":" + str(metaDict["src_start"]) + "-" + str(metaDict["src_end"])

    # ===========================================================================

    def _alignFromSequences(
        self, sequences, seqMetaData=None, reference=None, refMetaData=None
    ):
        """
        Populate the MultAlign directly from pre-aligned strings.  Each string
        must already be padded to the same length.
        """
        self.aligned_sequences = self._toCharArray([s.upper() for s in sequences])

        if seqMetaData is None:
            seqMetaData = [{} for seq in sequences]
        if len(seqMetaData) != len(sequences):
            raise ValueError(
                "MultAlign Error: seqMetaData must have one entry per sequence"
            )
        self.seqMetaData = []
        for i, metaDict in enumerate(seqMetaData):
            fullMeta = _newMetaData(name="seq" + str(i + 1))
            fullMeta.update(metaDict)
            self.seqMetaData.append(fullMeta)

        if reference is not None:
            self.reference = np.array(list(reference.upper()), dtype="<U1")
            self.refMetaData = _newMetaData(name="reference")
            if refMetaData is not None:
                self.refMetaData.update(refMetaData)

    # ===========================================================================

    def _alignFromDNAPAC(
        self, DNAPAC, flankingSequenceDatabase=None, maxFlankingSequenceLen=0
    ):
        """
        DNAPAC = DNAPairwiseAlignmentCollection

        Build the multiple alignment from a collection of pairwise alignments
        of many sequences against one shared reference ( anchor ).  The
        anchor side ( query or target ) is the one whose identifier is
        common to all alignments, see
        DNAPairwiseAlignmentCollection.getAlignmentReference().

        Args:
            flankingSequenceDatabase: optional FlankingSequenceDatabase ( or
                                      any object with a compatible
                                      getSubsequence() ) used to attach
                                      flanking sequence to each row.

            maxFlankingSequenceLen:   number of flanking bases to store on
                                      each side of every row.
        """
        if not isinstance(DNAPAC, DNAPairwiseAlignmentCollection):
            raise ValueError(
                "Error: DNAPAC must be of type DNAPairwiseAlignmentCollection: "
                + str(type(DNAPAC))
                + " was given instead!"
            )

        alignment_reference = DNAPAC.getAlignmentReference()

        for align in DNAPAC:
            if align.aligned_query_seq is None or align.aligned_target_seq is None:
                raise ValueError(
                    "Error: the alignment of "
                    + align.target_id
                    + " vs "
                    + align.query_id
                    + " has no aligned sequence data"
                )

        # Accessors for the anchor ( "ref" ) and the aligned sequence sides.
        # Anchor sequence strings are always returned on the anchor's forward
        # strand, reverse complementing both sides of '-' hits if needed.
        if alignment_reference == "query":

            def getRefStart(align):
                return align.query_start

            def getRefEnd(align):
                return align.query_end

            def getRefSeq(align):
                return align.aligned_query_seq.upper()

            def getRefName(align):
                return align.query_id

            def getAlignedSeqStart(align):
                return align.target_start

            def getAlignedSeqEnd(align):
                return align.target_end

            def getAlignedSeqSeq(align):
                return align.aligned_target_seq.upper()

            def getAlignedSeqName(align):
                return align.target_id

        else:

            def getRefStart(align):
                return align.target_start

            def getRefEnd(align):
                return align.target_end

            def getRefSeq(align):
                if align.orientation != "+":
                    return self.reverseComplement(align.aligned_target_seq.upper())
                return align.aligned_target_seq.upper()

            def getRefName(align):
                return align.target_id

            def getAlignedSeqStart(align):
                return align.query_start

            def getAlignedSeqEnd(align):
                return align.query_end

            def getAlignedSeqSeq(align):
                if align.orientation != "+":
                    return self.reverseComplement(align.aligned_query_seq.upper())
                return align.aligned_query_seq.upper()

            def getAlignedSeqName(align):
                return align.query_id

        """
        Reconstruct the reference sequence without any gaps from the pieces
        each alignment covers.  Positions no alignment covers are unknown and
        are filled with 'N'.
        """
        tMin = min(getRefStart(align) for align in DNAPAC)
        tMax = max(getRefEnd(align) for align in DNAPAC)
        combRefSeq = [None] * (tMax - tMin + 1)
        for align in DNAPAC:
            startIndex = getRefStart(align) - tMin
            basesToInsert = getRefSeq(align).replace("-", "")
            if len(basesToInsert) != getRefEnd(align) - getRefStart(align) + 1:
                raise ValueError(
                    "Error: the alignment of "
                    + getAlignedSeqName(align)
                    + " covers "
                    + str(len(basesToInsert))
                    + " reference bases but its coordinates "
                    + str(getRefStart(align))
                    + "-"
                    + str(getRefEnd(align))
                    + " disagree"
                )
            combRefSeq[startIndex : startIndex + len(basesToInsert)] = list(
                basesToInsert
            )
        uncovered = combRefSeq.count(None)
        if uncovered:
            warnings.warn(
                "MultAlign Warning: "
                + str(uncovered)
                + " reference positions are not covered by any alignment"
                + " and will be represented by 'N'"
            )
            combRefSeq = ["N" if base is None else base for base in combRefSeq]

        """
        Create 'gap patterns' for each alignment: the number of gaps each
        alignment places in the reference before every reference position
        (and after the last one).  The widest gap found at each position
        across all alignments becomes the master gap pattern, e.g.:

        ref1    ABCDEFGHI-JKL   ref2    HI---J-KLMNOP   ref3    MNOPQRSTUVWXYZ
        seq1    ABCDEFGHIxJKL   seq2    HIxxxJxKLMNOP   seq3    MNOPQRSTUVWXYZ

        come together to form:
        ______________________________________
        Refe    ABCDEFGHI---J-KLMNOPQRSTUVWXYZ
        seq1    ABCDEFGHIx--J-KL
        seq2           HIxxxJxKLMNOP
        seq3                    MNOPQRSTUVWXYZ
        ______________________________________

        Alignments are merged in collection order and rows keep that order.
        """
        maxPattern = [0] * (len(combRefSeq) + 1)
        gapPatterns = []
        for align in DNAPAC:
            startDif = getRefStart(align) - tMin
            pattern = [0] * startDif + [
                len(gapRun) for gapRun in re.split(r"[^-]", getRefSeq(align))
            ]
            gapPatterns.append(pattern)
            for index, count in enumerate(pattern):
                if count > maxPattern[index]:
                    maxPattern[index] = count

        LOGGER.debug("_alignFromDNAPAC: master gap pattern: %s", maxPattern)

        finalRef = ""
        for i in range(len(combRefSeq)):
            finalRef += self.internalGapChar * maxPattern[i] + combRefSeq[i]
        finalRef += self.internalGapChar * maxPattern[-1]

        # totalGaps[i] = number of master gap columns before reference base i
        totalGaps = [0]
        for i in range(len(maxPattern) - 1):
            totalGaps.append(totalGaps[i] + maxPattern[i])

        """
        Add the gaps each row lacks relative to the master pattern.  A row's
        own insertion characters stay left justified in the insertion
        columns and any extra master gap columns follow them.
        """
        alignedSeqs = []
        seqMetaDictList = []
        for l, align in enumerate(DNAPAC):
            pattern = gapPatterns[l]
            k = getRefStart(align) - tMin
            seq = [self.externalGapChar] * (k + totalGaps[k])
            for (refChar, seqChar) in zip(getRefSeq(align), getAlignedSeqSeq(align)):
                if refChar != "-":
                    seq.extend(self.internalGapChar * (maxPattern[k] - pattern[k]))
                    k += 1
                seq.append(seqChar)
            seq.extend(self.internalGapChar * (maxPattern[k] - pattern[k]))
            seq = "".join(seq).ljust(len(finalRef), self.externalGapChar)
            alignedSeqs.append(self._padEdges(seq))

            seqMetaDictList.append(
                _newMetaData(
                    name=getAlignedSeqName(align),
                    start=getAlignedSeqStart(align),
                    end=getAlignedSeqEnd(align),
                    orientation=align.orientation,
                    score=align.score,
                )
            )

        self.reference = np.array(list(finalRef), dtype="<U1")
        self.refMetaData = _newMetaData(
            name=getRefName(DNAPAC[0]), start=tMin, end=tMax, orientation="+"
        )
        self.alignmentName = self.refMetaData["name"]
        self.aligned_sequences = self._toCharArray(alignedSeqs)
        self.seqMetaData = seqMetaDictList

        if flankingSequenceDatabase is not None and maxFlankingSequenceLen:
            self._attachFlankingSequences(
                flankingSequenceDatabase, maxFlankingSequenceLen
            )

    # ===========================================================================

    def _attachFlankingSequences(self, flankingSequenceDatabase, maxFlankLen):
        """
        Store exactly maxFlankLen characters of flanking sequence on each
        side of every row.  Flanks are given in alignment orientation, so for
        reverse strand rows the left flank is the reverse complement of the
        sequence following src_end.  When less sequence is available the
        flank is padded with ' ' on its outer side; when the sequence can't
        be found at all the whole flank is pad.
        """
        for metaDict in self.seqMetaData:
            name = metaDict["name"]
            start = metaDict["src_start"]
            end = metaDict["src_end"]
            try:
                upstream = flankingSequenceDatabase.getSubsequence(
                    name, start - maxFlankLen, start - 1
                )
                downstream = flankingSequenceDatabase.getSubsequence(
                    name, end + 1, end + maxFlankLen
                )
            except (OSError, ValueError) as error:
                LOGGER.warning(
                    "Could not retrieve flanking sequence for %s:%s-%s (%s)",
                    name,
                    start,
                    end,
                    error,
                )
                upstream = downstream = None

            if upstream is None or downstream is None:
                LOGGER.warning(
                    "Sequence %s was not found in the flanking sequence database"
                    + " - its flanks will be padded",
                    name,
                )
                upstream = downstream = ""

            if metaDict["src_orientation"] == "-":
                leftFlank = self.reverseComplement(downstream)
                rightFlank = self.reverseComplement(upstream)
            else:
                leftFlank = upstream
                rightFlank = downstream

            metaDict["left_flanking"] = leftFlank.upper().rjust(
                maxFlankLen, self.externalGapChar
            )
            metaDict["right_flanking"] = rightFlank.upper().ljust(
                maxFlankLen, self.externalGapChar
            )

        if self.refMetaData is not None:
            self.refMetaData["left_flanking"] = self.externalGapChar * maxFlankLen
            self.refMetaData["right_flanking"] = self.externalGapChar * maxFlankLen

    # ===========================================================================

    def _alignFromFASTA(self, FASTA):
        """
        Populate the MultAlign from aligned FASTA text.  There is no
        reference.  Every sequence is given coordinates 1..ungapped length on
        the forward strand.  Leading and trailing gap runs are treated as
        pad, and duplicate identifiers are renamed ( see _disambiguateNames ).
        """
        records = list(SeqIO.parse(io.StringIO(FASTA), "fasta"))
        if len(records) == 0:
            raise ValueError("MultAlign Error: no FASTA records found")

        names = self._disambiguateNames([record.id for record in records])
        seqList = []
        seqMetaData = []
        for name, record in zip(names, records):
            seq = str(record.seq).upper()
            if len(seq) != len(records[0].seq):
                raise ValueError(
                    "MultAlign _alignFromFASTA() Error: sequence "
                    + name
                    + " ("
                    + str(len(seq))
                    + ") is not the same length as "
                    + names[0]
                    + " ("
                    + str(len(records[0].seq))
                    + ")"
                )
            seqList.append(self._padEdges(seq))
            seqLen = len(re.sub(r"[\-\. ]", "", seq))
            seqMetaData.append(
                _newMetaData(name=name, start=1, end=seqLen, orientation="+")
            )

        self.aligned_sequences = self._toCharArray(seqList)
        self.seqMetaData = seqMetaData

    # ===========================================================================

    def _parseIdentifier(self, full_id):
        """
        Handle Smitten V1/V2 sequence identifiers, otherwise treat the
        entire string as the sequence id.

        Returns:
            (seq_id, seq_start, seq_end, strand), with None for unknowns
        """
        idflds = full_id.split(":")
        #  Must have at least one colon otherwise we cannot interpret it
        if len(idflds) > 1:
            match = self.smittenV2.match(idflds[-1])
            if match:
                start = int(match.group(1))
                end = int(match.group(2))
                return (
                    ":".join(idflds[:-1]),
                    min(start, end),
                    max(start, end),
                    match.group(3),
                )
            match = self.smittenV1.match(idflds[-1])
            if match:
                start = int(match.group(1))
                end = int(match.group(2))
                if start <= end:
                    return (":".join(idflds[:-1]), start, end, "+")
                return (":".join(idflds[:-1]), end, start, "-")
        return (full_id, None, None, None)

    def _alignFromStockholm(self, stockholm):
        """
        Populate the MultAlign from the first alignment in a Stockholm text.

        The '#=GC RF' line, when present, becomes the reference, and the
        '#=GF ID' line names the alignment.  Sequence lines may be split
        over several blocks ( separated by blank lines ) in which case
        the sequences must appear in the same order in each block.
        Identifiers of the form name:start-end ( see _parseIdentifier )
        provide coordinates; otherwise sequences are numbered from 1.
        """
        foundHeader = False
        rawIds = []
        alignedSeqs = []
        reference = None
        name = None
        blockIndex = 0
        lineInBlock = 0

        for strLine in stockholm.splitlines():
            if not foundHeader:
                if self.stkHeaderRE.match(strLine):
                    foundHeader = True
                continue

            if strLine.startswith("//"):
                break

            if strLine.strip() == "":
                if lineInBlock > 0:
                    blockIndex += 1
                    lineInBlock = 0
                continue

            if strLine.startswith("#=GF"):
                fields = self.fieldCodeDataRE.match(strLine)
                if fields and fields.group(1) == "ID":
                    name = fields.group(2).strip()
                continue

            if strLine.startswith("#=GC"):
                tokens = strLine.split()
                if len(tokens) >= 3 and tokens[1] == "RF":
                    reference = (reference or "") + tokens[2]
                continue

            if strLine.startswith("#"):
                continue

            mats = self.alignDataRE.match(strLine)
            if mats is None:
                raise StockholmParseError(
                    "Unrecognized line in Stockholm alignment: " + strLine
                )
            full_id = mats.group(1)
            align_seq = mats.group(2).upper()
            if blockIndex == 0:
                rawIds.append(full_id)
                alignedSeqs.append(align_seq)
            else:
                if lineInBlock >= len(rawIds) or rawIds[lineInBlock] != full_id:
                    raise StockholmParseError(
                        "Sequence "
                        + full_id
                        + " in alignment block "
                        + str(blockIndex + 1)
                        + " is out of order with the first block"
                    )
                alignedSeqs[lineInBlock] += align_seq
            lineInBlock += 1

        if not foundHeader:
            raise StockholmParseError("Missing '# STOCKHOLM' header line")
        if len(alignedSeqs) == 0:
            raise StockholmParseError("No sequences found in Stockholm alignment")

        names = self._disambiguateNames(rawIds)
        seqList = []
        seqMetaData = []
        for full_id, uniqueId, align_seq in zip(rawIds, names, alignedSeqs):
            if len(align_seq) != len(alignedSeqs[0]):
                raise StockholmParseError(
                    "Sequence "
                    + full_id
                    + " is "
                    + str(len(align_seq))
                    + " columns long, expected "
                    + str(len(alignedSeqs[0]))
                )
            seq_id, seq_start, seq_end, strand = self._parseIdentifier(full_id)
            # Duplicates keep their coordinates, the suffix goes on the name
            if uniqueId != full_id:
                seq_id += uniqueId[len(full_id):]
            if seq_start is None:
                seq_start = 1
                seq_end = len(re.sub(r"[\-\.]", "", align_seq))
                strand = "+"
            seqList.append(self._padEdges(align_seq))
            seqMetaData.append(
                _newMetaData(name=seq_id, start=seq_start, end=seq_end, orientation=strand)
            )

        self.aligned_sequences = self._toCharArray(seqList)
        self.seqMetaData = seqMetaData
        self.alignmentName = name

        if reference is not None:
            if len(reference) != len(alignedSeqs[0]):
                raise StockholmParseError(
                    "Reference and sequence lengths differ! "
                    + str(name)
                    + " ["
                    + str(len(alignedSeqs[0]))
                    + "] and reference ["
                    + str(len(reference))
                    + "]"
                )
            toBeRef = self._padEdges(reference.upper())
            self.reference = np.array(list(toBeRef), dtype="<U1")
            self.refMetaData = _newMetaData(
                name=name if name is not None else "reference",
                start=1,
                end=len(toBeRef.replace(" ", "").replace("-", "")),
                orientation="+",
            )

    # ===========================================================================

    def _alignFromSerialized(self, serialized):
        """
        Restore a MultAlign written by serializeOutput()
        """
        data = json.loads(serialized)
        if SERIALIZED_MARKER not in data:
            raise ValueError(
                "MultAlign Error: serialized data is missing the '"
                + SERIALIZED_MARKER
                + "' key"
            )
        if data[SERIALIZED_MARKER] != MULTALIGN_VERSION:
            warnings.warn(
                "MultAlign Warning: serialized data is version "
                + str(data[SERIALIZED_MARKER])
                + ", this library writes version "
                + MULTALIGN_VERSION
            )

        if (
            data.get("internalGapChar", self.internalGapChar) != self.internalGapChar
            or data.get("externalGapChar", self.externalGapChar)
            != self.externalGapChar
        ):
            raise ValueError(
                "MultAlign Error: serialized data uses unsupported gap characters"
            )

        self.aligned_sequences = self._toCharArray(data["aligned_sequences"])
        self.seqMetaData = data["seqMetaData"]
        if len(self.seqMetaData) != len(self.aligned_sequences):
            raise ValueError(
                "MultAlign Error: serialized data has "
                + str(len(self.aligned_sequences))
                + " sequences but "
                + str(len(self.seqMetaData))
                + " metadata entries"
            )
        if data.get("reference") is not None:
            self.reference = np.array(list(data["reference"]), dtype="<U1")
            self.refMetaData = data.get("refMetaData")
        self.alignmentName = data.get("alignmentName")
        self._consensus_cache = dict(data.get("consensus") or {})

    # ===========================================================================

    def illegalCharacterChecker(self):
        """
        Function to ensure that no 'illegal' characters are included in sequences or
        references - called on object construction unless checkForIllegalChars is
        set to False by the user

        Only accepted gaps ('.', ' ', '-') and IUB codes are allowed.
        """
        if self.aligned_sequences is not None:
            bad = ~np.isin(self.aligned_sequences, list(self.allowedCharacters))
            if np.any(bad):
                seqNum, bpLocation = np.argwhere(bad)[0]
                raise ValueError(
                    "Error: illegal character in Sequence "
                    + str(seqNum)
                    + " at bp #"
                    + str(bpLocation)
                    + ". Char is: "
                    + str(self.aligned_sequences[seqNum][bpLocation])
                )

        if self.reference is not None:
            for counter, x in enumerate(self.reference):
                if x not in self.allowedCharacters:
                    raise ValueError(
                        "Error: illegal character in Reference at index " + str(counter)
                    )

    # ===========================================================================

    def _countBases(self, chars):
        return int(np.count_nonzero(~np.isin(chars, self.gapChars)))

    def _shiftCoordinates(self, metaDict, seq, left, rightCoord):
        """
        Move a row's coordinates past the bases removed from the left
        ( seq[:left] ) and right ( seq[rightCoord:] ) of the alignment.
        """
        if metaDict["src_start"] is None or metaDict["src_end"] is None:
            return
        leftBases = self._countBases(seq[:left])
        rightBases = self._countBases(seq[rightCoord:])
        if metaDict["src_orientation"] == "-":
            metaDict["src_end"] -= leftBases
            metaDict["src_start"] += rightBases
        else:
            metaDict["src_start"] += leftBases
            metaDict["src_end"] -= rightBases

    def trim_off(self, left=0, right=0):
        """
        Trim columns off the left and/or right of the alignment.  The
        coordinates of every sequence ( and the reference ) are moved past the
        bases that were removed: for a forward strand sequence each base
        trimmed from the left advances src_start, for a reverse strand
        sequence it retreats src_end.  Sequences trimmed down to nothing but
        gaps are removed from the alignment.

        Arguments:
            left: number of columns to trim off left side of alignment
            right: number of columns to trim off right side of alignment

        Raises:
            InvalidTrimRangeError if left + right >= number of columns
        """
        width = self.colLength
        if left < 0 or right < 0:
            raise InvalidTrimRangeError(
                "Trim column counts must not be negative (left="
                + str(left)
                + ", right="
                + str(right)
                + ")"
            )
        if left + right >= width:
            raise InvalidTrimRangeError(
                "Cannot trim "
                + str(left)
                + " left and "
                + str(right)
                + " right columns from an alignment "
                + str(width)
                + " columns wide"
            )
        if left == 0 and right == 0:
            return

        rightCoord = width - right
        for i, metaDict in enumerate(self.seqMetaData):
            self._shiftCoordinates(
                metaDict, self.aligned_sequences[i], left, rightCoord
            )
        if self.reference is not None:
            self._shiftCoordinates(self.refMetaData, self.reference, left, rightCoord)
            self.reference = self.reference[left:rightCoord]
        self.aligned_sequences = self.aligned_sequences[:, left:rightCoord]

        # Remove sequences trimmed to just gaps...
        toKeep = []
        for i, metaDict in enumerate(self.seqMetaData):
            if self._countBases(self.aligned_sequences[i]) > 0:
                toKeep.append(i)
            else:
                warnings.warn(
                    "MultAlign Warning: sequence "
                    + str(metaDict["name"])
                    + " was removed from the alignment after being trimmed"
                    + " down to nothing but gap characters"
                )
        if len(toKeep) == 0:
            raise InvalidTrimRangeError(
                "All sequences were trimmed down to nothing but gap characters"
            )
        if len(toKeep) != len(self.seqMetaData):
            self.aligned_sequences = self.aligned_sequences[toKeep, :]
            self.seqMetaData = [self.seqMetaData[i] for i in toKeep]

        self._consensus_cache = {}

    # ===========================================================================

    def normalizeCoordinates(self):
        """
        Renumber the alignment relative to the reference.  The reference is
        numbered from 1 and every sequence starts at the position of the
        first reference base at ( or after ) the sequence's first aligned
        column.  Without a reference the column number is used instead.
        Absolute source coordinates are discarded.  Normalizing twice is the
        same as normalizing once.

        Normalized rows read in the reference's direction, so every row
        becomes '+'.  A row that was on the '-' strand records that in
        metaDict["normalized_from"].
        """
        basesBefore = None
        if self.reference is not None:
            isRefBase = ~np.isin(self.reference, self.gapChars)
            basesBefore = np.concatenate(([0], np.cumsum(isRefBase)))
            self.refMetaData["src_start"] = 1
            self.refMetaData["src_end"] = int(basesBefore[-1])
            self.refMetaData["src_orientation"] = "+"

        for i, metaDict in enumerate(self.seqMetaData):
            isBase = ~np.isin(self.aligned_sequences[i], self.gapChars)
            numBases = int(np.count_nonzero(isBase))
            if numBases == 0:
                continue
            firstCol = int(np.argmax(isBase))
            if basesBefore is not None:
                start = int(basesBefore[firstCol]) + 1
            else:
                start = firstCol + 1
            metaDict["src_start"] = start
            metaDict["src_end"] = start + numBases - 1
            if metaDict["src_orientation"] == "-":
                metaDict["normalized_from"] = "-"
            metaDict["src_orientation"] = "+"

        self._consensus_cache = {}

    # ===========================================================================

    def getUngappedRef(self):
        """
        Return the reference without gap or pad characters
        """
        return re.sub(r"[ \-\.]", "", "".join(self.reference))

    def getUngappedSeq(self, index):
        """
        Return sequence number 'index' without gap or pad characters
        """
        return re.sub(r"[ \-\.]", "", "".join(self.aligned_sequences[index]))

    # ===========================================================================

    def consensus(
        self,
        method="majority",
        includeReference=False,
        withGaps=True,
        cpg_adjustment=True,
    ):
        """
        Call the consensus of this multiple alignment. See ConsensusCaller.py for
        implementation details of each method.

        Parameters:
            method           : "majority" ( default ) or "linup".

            includeReference : When True the reference takes part in the
                               call as one more sequence.  By default it
                               does not, so that a reference does not vote
                               for itself.

            withGaps         : When True ( default ) the consensus has one
                               symbol per alignment column, '-' where a gap
                               was called.  Otherwise gaps are removed.

            cpg_adjustment   : CpG site restoration for the "linup" method.

        Returns:
            The consensus sequence, as a string.  The call is cached until
            the alignment is trimmed or renumbered.
        """
        key = (
            method
            + ":"
            + ("ref" if includeReference else "noref")
            + ":"
            + ("cpg" if cpg_adjustment else "nocpg")
        )
        if key not in self._consensus_cache:
            array = self.aligned_sequences
            if includeReference and self.reference is not None:
                array = np.vstack([self.reference, array])
            self._consensus_cache[key] = "".join(
                call_consensus(array, method, cpg_adjustment=cpg_adjustment)
            )
            LOGGER.debug("consensus: called %s consensus", key)

        consensus = self._consensus_cache[key]
        if not withGaps:
            return consensus.replace("-", "")
        return consensus

    # ===========================================================================

    def kimura_divergence(self, consensus=None):
        """
        Kimura divergence of every sequence from the consensus.

        Only columns where both the sequence and the consensus hold one of
        A, C, G or T ( either case ) are compared; gaps, pad and ambiguity
        codes are skipped.  Sequences with too many substitutions to
        estimate a distance get None, are reported with a warning and do
        not contribute to the average.

        Args:
            consensus: gapped consensus string, one symbol per column.  When
                       omitted the default consensus() is used.

        Returns:
            KimuraDivergence
        """
        # Mutation Types:
        #      Purines
        #      A--i--G
        #      | \ / |
        #      v  v  v
        #      | / \ |
        #      C--i--T
        #    Pyrimidines
        #  i = Transitions ( more frequent )
        #  v = Transversions ( rarer )
        #
        #  This lookup structure encodes
        #  transitions as "1" and transversions
        #  as "2".
        mut_types = {
            "CT": 1,
            "TC": 1,
            "AG": 1,
            "GA": 1,
            "GT": 2,
            "TG": 2,
            "GC": 2,
            "CG": 2,
            "CA": 2,
            "AC": 2,
            "AT": 2,
            "TA": 2,
        }
        unambiguous_bases = {"A": 1, "C": 1, "G": 1, "T": 1}

        if consensus is None:
            consensus = self.consensus()
        if len(consensus) != self.colLength:
            raise ValueError(
                "MultAlign Error: consensus length "
                + str(len(consensus))
                + " does not match the alignment length "
                + str(self.colLength)
            )
        consensus = consensus.upper()

        per_row = []
        for i, seq in enumerate(self.aligned_sequences):
            total_pairs = 0
            transitions = 0
            transversions = 0
            for (cons_base, seq_base) in zip(consensus, seq):
                seq_base = seq_base.upper()
                if cons_base in unambiguous_bases and seq_base in unambiguous_bases:
                    total_pairs += 1
                    mut_type = mut_types.get(cons_base + seq_base)
                    if mut_type == 1:
                        transitions += 1
                    elif mut_type == 2:
                        transversions += 1

            kimura_div = kimura_distance(transitions, transversions, total_pairs)
            if kimura_div is None:
                LOGGER.warning(
                    "kimura_divergence: divergence of %s is too high to estimate"
                    + " (%d transitions, %d transversions over %d sites)",
                    self.seqMetaData[i]["name"],
                    transitions,
                    transversions,
                    total_pairs,
                )
            per_row.append((self.seqMetaData[i]["name"], kimura_div))

        return KimuraDivergence(per_row)

    # ===========================================================================

    def toAlignmentText(
        self,
        blockSize=100,
        includeReference=True,
        showConsensus=False,
        showScore=False,
        showRuler=False,
        consensus=None,
    ):
        """
        Return the alignment as blocks of text, blockSize columns wide.

        Each line holds the sequence name, (optionally) the score of the
        alignment the sequence came from, the coordinate of the first base
        on the line, the aligned sequence and the coordinate of the last
        base on the line.  Reverse strand sequences count down.  Sequences
        are only listed in blocks where they have aligned data.

        Args:
            blockSize        : columns per block ( default 100 )
            includeReference : list the reference ( "ref: name" ) above
                               the sequences
            showConsensus    : list the consensus above the sequences
            showScore        : add a score column
            showRuler        : add a column ruler above each block
            consensus        : gapped consensus to show, by default
                               consensus()
        """
        if blockSize < 1:
            raise ValueError("MultAlign Error: blockSize must be at least 1")

        width = self.colLength
        if showConsensus and consensus is None:
            consensus = self.consensus()

        # Each entry: [label, score, chars, next coordinate, step]
        lines = []
        if showConsensus:
            lines.append(["consensus", "", np.array(list(consensus)), 1, 1])
        if includeReference and self.reference is not None:
            refStart = self.refMetaData["src_start"] or 1
            lines.append(
                ["ref: " + str(self.refMetaData["name"]), "", self.reference, refStart, 1]
            )
        for i, metaDict in enumerate(self.seqMetaData):
            score = "" if metaDict["score"] is None else str(metaDict["score"])
            if metaDict["src_start"] is None:
                lines.append([metaDict["name"], score, self.aligned_sequences[i], 1, 1])
            elif metaDict["src_orientation"] == "-":
                lines.append(
                    [
                        metaDict["name"],
                        score,
                        self.aligned_sequences[i],
                        metaDict["src_end"],
                        -1,
                    ]
                )
            else:
                lines.append(
                    [
                        metaDict["name"],
                        score,
                        self.aligned_sequences[i],
                        metaDict["src_start"],
                        1,
                    ]
                )

        maxIDLen = max(len(line[0]) for line in lines)
        maxScoreLen = max(len(line[1]) for line in lines)
        maxCoordLen = len(str(width))
        for line in lines:
            maxCoordLen = max(
                maxCoordLen,
                len(str(line[3])),
                len(str(line[3] + line[4] * self._countBases(line[2]))),
            )

        outStr = ""
        for lineStart in range(0, width, blockSize):
            lineEnd = min(lineStart + blockSize, width)
            if showRuler:
                ruler = ""
                for col in range(lineStart + 1, lineEnd + 1):
                    if col % 10 == 0:
                        ruler += "|"
                    elif col % 5 == 0:
                        ruler += ":"
                    else:
                        ruler += "."
                outStr += "".ljust(maxIDLen) + " "
                if showScore:
                    outStr += "".ljust(maxScoreLen) + " "
                outStr += (
                    str(lineStart + 1).rjust(maxCoordLen)
                    + " "
                    + ruler
                    + " "
                    + str(lineEnd)
                    + "\n"
                )

            for line in lines:
                chars = line[2][lineStart:lineEnd]
                if np.all(chars == self.externalGapChar):
                    continue
                numLetters = self._countBases(chars)
                start = line[3]
                end = start + line[4] * (numLetters - 1)
                if numLetters == 0:
                    end = start - line[4]
                line[3] = start + line[4] * numLetters

                outStr += line[0].ljust(maxIDLen) + " "
                if showScore:
                    outStr += line[1].rjust(maxScoreLen) + " "
                outStr += (
                    str(start).rjust(maxCoordLen)
                    + " "
                    + "".join(chars)
                    + " "
                    + str(end)
                    + "\n"
                )
            outStr += "\n"
        return outStr

    # ===========================================================================

    def toMSF(self, includeReference=False, name=None, lineWidth=50):
        """
        Return the alignment in GCG MSF format.

        Each 'Name:' line carries the alignment length and the GCG checksum
        of the ungapped sequence; the header 'Check:' is the sum of those
        modulo 10000.  Gaps and pad are written as '.'.

        Args:
            includeReference: add the reference as the first sequence
            name:             alignment name for the header line
        """
        entries = []
        if includeReference and self.reference is not None:
            entries.append((self.refMetaData["name"] or "reference", self.reference))
        for i, metaDict in enumerate(self.seqMetaData):
            entries.append((self._rowIdentifier(metaDict), self.aligned_sequences[i]))

        if name is None:
            name = self.alignmentName or "MultAlign"

        length = self.colLength
        checks = []
        for (entryName, seq) in entries:
            checks.append(gcg(re.sub(r"[ \-\.]", "", "".join(seq))))
        maxNameLen = max(len(entryName) for (entryName, seq) in entries)

        msfOutput = "!!NA_MULTIPLE_ALIGNMENT 1.0\n\n"
        msfOutput += (
            " "
            + name
            + "  MSF: "
            + str(length)
            + "  Type: N  Check: "
            + str(sum(checks) % 10000)
            + " ..\n\n"
        )
        for (entryName, seq), check in zip(entries, checks):
            msfOutput += (
                " Name: "
                + entryName.ljust(maxNameLen)
                + "  Len: "
                + str(length)
                + "  Check: "
                + str(check).rjust(4)
                + "  Weight: 1.00\n"
            )
        msfOutput += "\n//\n"

        for lineStart in range(0, length, lineWidth):
            msfOutput += "\n"
            for (entryName, seq) in entries:
                block = "".join(seq[lineStart : lineStart + lineWidth])
                msfOutput += (
                    entryName.ljust(maxNameLen)
                    + "  "
                    + re.sub(r"[ \-]", ".", block)
                    + "\n"
                )
        return msfOutput

    # ===========================================================================

    def toStockholm(
        self, includeTemplate=True, name=None, consensus=None, refX=True
    ):
        """
        Return the alignment in Stockholm format.

        Args:
            includeTemplate: write a '#=GC RF' line.  The reference is used
                             as the template when there is one, otherwise
                             the consensus.
            name:            '#=GF ID' value, by default the reference name
            consensus:       gapped consensus to use as the template
            refX:            replace template bases with 'x'
        """
        if name is None:
            if self.refMetaData is not None and self.refMetaData["name"]:
                name = self.refMetaData["name"]
            else:
                name = self.alignmentName or "MultAlign"

        template = None
        if includeTemplate:
            if self.reference is not None:
                template = "".join(self.reference)
            else:
                template = consensus if consensus is not None else self.consensus()
            template = re.sub(r"[ \-\.]", ".", template)
            if refX:
                template = re.sub(r"[a-zA-Z]", "x", template)

        labels = [self._rowIdentifier(metaDict) for metaDict in self.seqMetaData]
        maxLabelLen = max(len(label) for label in labels + ["#=GC RF"])

        stkOutput = "# STOCKHOLM 1.0\n"
        stkOutput += "#=GF ID    " + name + "\n"
        stkOutput += "#=GF SQ    " + str(len(self.seqMetaData)) + "\n"
        for label, seq in zip(labels, self.aligned_sequences):
            stkOutput += (
                label.ljust(maxLabelLen)
                + "  "
                + "".join(seq).replace(self.externalGapChar, ".")
                + "\n"
            )
        if template is not None:
            stkOutput += "#=GC RF".ljust(maxLabelLen) + "  " + template + "\n"
        stkOutput += "//\n"
        return stkOutput

    # ===========================================================================

    def toFASTA(
        self,
        mode="aligned",
        includeReference=False,
        includeConsensus=False,
        consensus=None,
        lineWidth=50,
    ):
        """
        Return the alignment as FASTA text.

        Modes:
            "aligned"  : gapped sequences, pad written as '-'
            "raw"      : sequences with all gaps and pad removed
            "flanking" : gapped sequences with their stored flanking
                         sequence on each side ( see the
                         maxFlankingSequenceLen construction argument ).
                         Every record carries the same number of flanking
                         characters, unavailable flank is written as '-'.

        Args:
            includeReference: add the reference record first
            includeConsensus: add a consensus record first
            consensus:        gapped consensus to write
            lineWidth:        sequence characters per line, 0 for no wrapping
        """
        if mode not in ("aligned", "raw", "flanking"):
            raise ValueError(
                "MultAlign Error: toFASTA() mode must be 'aligned', 'raw' or"
                + " 'flanking' - got '"
                + str(mode)
                + "'"
            )

        flankLen = 0
        if mode == "flanking":
            for metaDict in self.seqMetaData:
                if metaDict.get("left_flanking") is None:
                    raise ValueError(
                        "MultAlign Error: toFASTA(): flanking output requested but"
                        + " sequence "
                        + str(metaDict["name"])
                        + " has no flanking sequence data"
                    )
            flankLen = len(self.seqMetaData[0]["left_flanking"])

        records = []
        if includeConsensus:
            if consensus is None:
                consensus = self.consensus()
            records.append(("consensus", consensus, None))
        if includeReference and self.reference is not None:
            records.append(
                (self.refMetaData["name"] or "reference", "".join(self.reference), None)
            )
        for i, metaDict in enumerate(self.seqMetaData):
            records.append(
                (
                    self._rowIdentifier(metaDict),
                    "".join(self.aligned_sequences[i]),
                    metaDict,
                )
            )

        FAOutput = ""
        for (recordName, seqToOutput, metaDict) in records:
            if mode == "raw":
                seqToOutput = re.sub(r"[ \-\.]", "", seqToOutput)
            else:
                if mode == "flanking":
                    if metaDict is not None:
                        seqToOutput = (
                            metaDict["left_flanking"]
                            + seqToOutput
                            + metaDict["right_flanking"]
                        )
                    else:
                        seqToOutput = (
                            self.externalGapChar * flankLen
                            + seqToOutput
                            + self.externalGapChar * flankLen
                        )
                seqToOutput = seqToOutput.replace(" ", "-").replace(".", "-")

            FAOutput += ">" + recordName + "\n"
            if lineWidth and lineWidth > 0:
                for startIndex in range(0, len(seqToOutput), lineWidth):
                    FAOutput += seqToOutput[startIndex : startIndex + lineWidth] + "\n"
            else:
                FAOutput += seqToOutput + "\n"
        return FAOutput

    # ===========================================================================

    def toConsensusFASTA(self, name=None, consensus=None):
        """
        Return the ungapped consensus as a single FASTA record:

            >name
            SEQUENCE
            <blank line>

        The name defaults to the reference name, then to "consensus".
        """
        if name is None:
            if self.refMetaData is not None and self.refMetaData["name"]:
                name = self.refMetaData["name"]
            else:
                name = "consensus"
        if consensus is None:
            consensus = self.consensus()
        return ">" + name + "\n" + re.sub(r"[ \-\.]", "", consensus) + "\n\n"

    # ===========================================================================

    def serializeOutput(self):
        """
        Serialize the complete MultAlign ( sequences, reference, metadata
        including flanks, and any consensus already called ) as JSON text.
        MultAlign(serialized=text) restores it.
        """
        data = {
            SERIALIZED_MARKER: MULTALIGN_VERSION,
            "internalGapChar": self.internalGapChar,
            "externalGapChar": self.externalGapChar,
            "alignmentName": self.alignmentName,
            "reference": None
            if self.reference is None
            else "".join(self.reference.tolist()),
            "refMetaData": self.refMetaData,
            "aligned_sequences": ["".join(seq) for seq in self.aligned_sequences.tolist()],
            "seqMetaData": self.seqMetaData,
            "consensus": self._consensus_cache,
        }
        return json.dumps(data, indent=4)

    # ===========================================================================
    def __repr__(self):
        """
        __repr__() - Generic representation of an object in JSON format
        """
        return self.serializeOutput()

    # ===========================================================================
    """
    MultAlign object is subscriptable - using multAlign[i] will return a string
    version of the ith aligned sequence, while multAlign['ref'] (or 'reference')
    will return a string version of the reference
    """

    def __getitem__(self, item):
        if item == "ref" or item == "reference":
            return "".join(self.reference)
        elif type(item) == int:
            return "".join(self.aligned_sequences[item])
        else:
            raise ValueError(
                "\nMultAlign Subscript Error: MultAlign object is "
                + "subscriptable, but subscript must either be 'reference'"
                + ", 'ref', or index of desired aligned sequence"
            )

    # ===========================================================================

    @property
    def length(self):
        return len(self.aligned_sequences)

    @property
    def colLength(self):
        return self.aligned_sequences.shape[1]

    @property
    def reference_name(self):
        if self.refMetaData is None:
            return None
        return self.refMetaData["name"]

    @property
    def reference_seq(self):
        if self.reference is None:
            return None
        return str("".join(self.reference))
