# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.FlankingSequenceDatabase import FlankingSequenceDatabase

    with FlankingSequenceDatabase("hg38.fa") as db:
        db.getSubsequence("chr1", 11678, 11702)

    A read-only lookup of raw sequence by identifier and 1-based, fully
    closed coordinates.  Used by MultAlign to attach flanking sequence to
    alignments built from pairwise hits.  The FASTA file is indexed with
    Bio.SeqIO.index so only the requested records are ever read into
    memory.

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
import logging

from Bio import SeqIO

from .LinupErrors import InputUnreadableError

LOGGER = logging.getLogger(__name__)


class FlankingSequenceDatabase:
    """
    FASTA backed sequence lookup.

    Records whose identifier carries a RepeatMasker style "#class" suffix
    are looked up by the part before the '#'.
    """

    def __init__(self, fastaFile):
        self.fastaFile = fastaFile
        self._index = None
        # Last record fetched: rows from the same locus are usually adjacent
        self._cached_id = None
        self._cached_seq = None

    def open(self):
        if self._index is None:
            try:
                self._index = SeqIO.index(self.fastaFile, "fasta")
            except (OSError, ValueError) as error:
                raise InputUnreadableError(
                    "Could not open flanking sequence database "
                    + str(self.fastaFile)
                    + ": "
                    + str(error)
                )
            LOGGER.debug(
                "FlankingSequenceDatabase: indexed %d records from %s",
                len(self._index),
                self.fastaFile,
            )
        return self

    def close(self):
        if self._index is not None:
            self._index.close()
            self._index = None
        self._cached_id = None
        self._cached_seq = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def getSequenceLength(self, seqId):
        seq = self._fetch(seqId)
        if seq is None:
            return None
        return len(seq)

    def getSubsequence(self, seqId, start, end):
        """
        Return the bases from start to end ( 1-based, fully closed ) of
        sequence seqId, clipped to the ends of the sequence.

        Returns:
            A string, possibly shorter than requested (or empty), or None
            when seqId is not present in the database.
        """
        seq = self._fetch(seqId)
        if seq is None:
            return None
        start = max(start, 1)
        end = min(end, len(seq))
        if end < start:
            return ""
        return str(seq[start - 1 : end]).upper()

    def _fetch(self, seqId):
        if self._index is None:
            raise ValueError(
                "FlankingSequenceDatabase Error: database is not open"
            )
        lookupId = seqId.split("#")[0]
        if lookupId == self._cached_id:
            return self._cached_seq
        try:
            record = self._index[lookupId]
        except KeyError:
            return None
        self._cached_id = lookupId
        self._cached_seq = record.seq
        return self._cached_seq
