# -*- coding: utf-8 -*-
"""
    DNAPairwiseAlignment : A class representing a single DNA pairwise
                           alignment hit as consumed by the Linup
                           multiple alignment builder.

SEE ALSO: MultAlign.py, DNAPairwiseAlignmentCollection.py
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
import json
import logging

LOGGER = logging.getLogger(__name__)


class DNAPairwiseAlignment:
    """
    DNA pairwise sequence alignment hit.

    A hit pairs a "query" and a "target" sequence.  The query is always
    reported on the forward strand; the target strand is given by the
    orientation property.  When the orientation is "-" the aligned target
    string is already reverse complemented so that it lines up column for
    column with the forward query string, which is how crossmatch and
    RepeatMasker present their alignments:

          Score = 150
          chr1               26356 ACTTA---TTTCTGTGCCTCAGTTCTCCCATATGTAAGAT 26392
                                        --- i              ii i   v     i
        C MIR#SINE/MIR         141 ACTTAACCTCTCTGTGCCTCAGTTTCCTCATCTGTAAAAT 102

        score             : 150
        query_id          : 'chr1'
        query_start       : 26356
        query_end         : 26392
        aligned_query_seq : "ACTTA---TTTCTGTGCCTCAGTTCTCCCATATGTAAGAT"
        orientation       : '-'
        target_id         : 'MIR#SINE/MIR'
        target_start      : 102
        target_end        : 141
        aligned_target_seq: "ACTTAACCTCTCTGTGCCTCAGTTTCCTCATCTGTAAAAT"

    Conventions:

      * The sequence alphabet is restricted to a-z, A-Z, "." and "-".

      * The sequence coordinates are 1-based, fully closed coordinates and
        start <= end regardless of orientation.

    Attributes:
        align_id           : string  - Identifier carried on the summary
                                       line (e.g. RepeatMasker "m_b1s001i0")
                                       [optional]
        score              : int     [required]
        perc_sub           : float
        perc_del           : float
        perc_ins           : float
        query_id           : string  [required]
        query_start        : int     [required]
        query_end          : int     [required]
        query_len          : int
        aligned_query_seq  : string
        orientation        : "+" or "-"  [required]
        target_id          : string  [required]
        target_start       : int     [required]
        target_end         : int     [required]
        target_len         : int
        aligned_target_seq : string
    """

    # e.g. "  239 29.42 1.92 0.97  chr1  11678 11780 (249238841) C  MER5B#DNA/hAT  (74) 104 1  m_b1s001i0"
    crossmatchSummaryRE = re.compile(
        r"^\s*(\d+)\s+(\d+\.?\d*)\s+(\d+\.?\d*)\s+(\d+\.?\d*)\s+(\S+)\s+(\d+)\s+(\d+)\s+\((\d+)\)\s+(.*)$"
    )
    # e.g. "C MER5B#DNA/hAT         104 ACTTAACCTCTCTG-GCCTCAG 83"
    crossmatchAlignRE = re.compile(
        r"^\s*(C\s+)?(\S+)\s+(\d+)\s+([A-Za-z\-\.]+)\s+(\d+)\s*$"
    )

    def __init__(self, *args, **kwargs):
        allowed_keys = set(
            [
                "align_id",
                "score",
                "perc_sub",
                "perc_ins",
                "perc_del",
                "query_id",
                "query_start",
                "query_end",
                "query_len",
                "aligned_query_seq",
                "orientation",
                "target_id",
                "target_start",
                "target_end",
                "target_len",
                "aligned_target_seq",
            ]
        )
        self.minimumArgumentEnforcer(kwargs)
        if "check_types" not in kwargs or kwargs["check_types"] == True:
            self.keyArgumentTypeEnforcer(
                {k: v for k, v in kwargs.items() if k != "check_types"}
            )
        self.sequenceFilter(
            kwargs.get("aligned_query_seq"), kwargs.get("aligned_target_seq")
        )
        self.__dict__.update((k, None) for k in allowed_keys)
        self.__dict__.update((k, v) for k, v in kwargs.items() if k in allowed_keys)

    # Method used by initializer to make sure sequences are same length and all legal chars
    def sequenceFilter(self, querySeq, targetSeq):
        if querySeq == targetSeq == None:
            return
        elif querySeq == None:
            raise ValueError(
                "Error: targetSeq was given, but not query - must give both or neither seq"
            )
        elif targetSeq == None:
            raise ValueError(
                "Error: querySeq was given, but not target - must give both or neither seq"
            )
        if len(querySeq) != len(targetSeq):
            raise ValueError(
                "query Seq and Target Seq are different lengths - must be same length"
            )
        allowedChars = r"[^\-a-zA-Z.]"
        if re.search(allowedChars, querySeq):
            raise ValueError(
                "query Seq contains illegal characters (only alphabet and '-' allowed)"
            )
        if re.search(allowedChars, targetSeq):
            raise ValueError(
                "Target Seq contains illegal characters - (only alphabet and '-' allowed)"
            )

    # function to ensure the minimum number of kwargs are submitted
    def minimumArgumentEnforcer(self, keyArgs):
        minArgs = [
            "score",
            "query_id",
            "query_start",
            "query_end",
            "target_id",
            "target_start",
            "target_end",
            "orientation",
        ]
        for val in minArgs:
            if val not in keyArgs:
                raise ValueError("Error: " + val + " is a required argument")

    # Method to enforce type fidelity of constructor keyword args
    def keyArgumentTypeEnforcer(self, keyArgs):
        allowedTypes = {
            "align_id": str,
            "score": int,
            "perc_sub": float,
            "perc_ins": float,
            "perc_del": float,
            "query_id": str,
            "query_start": int,
            "query_end": int,
            "query_len": int,
            "aligned_query_seq": str,
            "target_id": str,
            "target_start": int,
            "target_end": int,
            "target_len": int,
            "aligned_target_seq": str,
            "orientation": str,
        }
        for key in keyArgs:
            if key not in allowedTypes:
                raise ValueError("Error: " + key + " is not a recognized argument")
            if type(keyArgs[key]) != allowedTypes[key]:
                raise ValueError(
                    "Error: " + key + " must be of type " + str(allowedTypes[key])
                )
            elif allowedTypes[key] == float or allowedTypes[key] == int:
                if keyArgs[key] < 0:
                    raise ValueError(
                        "Error: "
                        + str(key)
                        + " was less than zero: "
                        + str(keyArgs[key])
                    )
        if keyArgs["orientation"] != "+" and keyArgs["orientation"] != "-":
            raise ValueError("Error: Orientation must be either '+' or '-'")
        if keyArgs["query_start"] > keyArgs["query_end"]:
            raise ValueError("Error: query_start must be <= query_end")
        if keyArgs["target_start"] > keyArgs["target_end"]:
            raise ValueError("Error: target_start must be <= target_end")

    @classmethod
    def crossmatch_decode(cls, record_lines):
        """
        crossmatch_decode() - Build a hit from one crossmatch style record

        The record is the summary line followed by the (optional) alignment
        blocks, exactly as written by crossmatch, RMBlast and RepeatMasker
        (.align files):

          239 29.42 1.92 0.97  chr1  11678 11780 (249238841) C  MER5B#DNA/hAT  (74) 104 1  m_b1s001i0

            chr1              11678 GGCGAGTAAACTGGGCACAGTGT-GA 11702
                                       v  i   -   --
          C MER5B#DNA/hAT       104 GGCGCGGAAGCTGGGCACAGTGTTGA 80

        Summary line fields: score, %substitutions, %deletions,
        %insertions, query id, query start, query end, (query remaining),
        ["C"], target id and target coordinates.  On the complement strand
        the target coordinates appear as "(remaining) end start".

        Args:
            record_lines: list of lines, the first one being the summary line

        Returns:
            A DNAPairwiseAlignment
        """
        mats = cls.crossmatchSummaryRE.match(record_lines[0])
        if mats is None:
            raise ValueError(
                "Error: not a crossmatch summary line: " + record_lines[0].rstrip()
            )

        rest = mats.group(9).split()
        if rest and rest[0] == "+":
            rest = rest[1:]
        try:
            if rest[0] == "C":
                orientation = "-"
                target_id = rest[1]
                target_left = int(rest[2].strip("()"))
                target_end = int(rest[3])
                target_start = int(rest[4])
                align_id = rest[5] if len(rest) > 5 else None
            else:
                orientation = "+"
                target_id = rest[0]
                target_start = int(rest[1])
                target_end = int(rest[2])
                target_left = int(rest[3].strip("()"))
                align_id = rest[4] if len(rest) > 4 else None
        except (IndexError, ValueError):
            raise ValueError(
                "Error: malformed target fields on crossmatch summary line: "
                + record_lines[0].rstrip()
            )
        # A trailing '*' marks overlapping hits in crossmatch output
        if align_id == "*":
            align_id = None

        query_seq = ""
        target_seq = ""
        isQueryLine = True
        for line in record_lines[1:]:
            amats = cls.crossmatchAlignRE.match(line)
            if amats is None:
                continue
            if isQueryLine:
                query_seq += amats.group(4)
            else:
                target_seq += amats.group(4)
            isQueryLine = not isQueryLine

        hit = {
            "score": int(mats.group(1)),
            "perc_sub": float(mats.group(2)),
            "perc_del": float(mats.group(3)),
            "perc_ins": float(mats.group(4)),
            "query_id": mats.group(5),
            "query_start": int(mats.group(6)),
            "query_end": int(mats.group(7)),
            "query_len": int(mats.group(7)) + int(mats.group(8)),
            "orientation": orientation,
            "target_id": target_id,
            "target_start": target_start,
            "target_end": target_end,
            "target_len": target_end + target_left,
        }
        if align_id is not None:
            hit["align_id"] = align_id
        if query_seq or target_seq:
            hit["aligned_query_seq"] = query_seq.replace(".", "-")
            hit["aligned_target_seq"] = target_seq.replace(".", "-")
        else:
            LOGGER.debug(
                "crossmatch_decode: record for %s has no alignment lines", target_id
            )
        return cls(**hit)

    def __repr__(self):
        """
        __repr__() - Generic representation of an object in JSON format
        """
        return json.dumps(self.__dict__, indent=4)
