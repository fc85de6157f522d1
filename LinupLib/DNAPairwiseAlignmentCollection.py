# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection

    A collection of DNAPairwiseAlignment objects and related functions

SEE ALSO: DNAPairwiseAlignment.py
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

#
# Module imports
import json
import logging

from .DNAPairwiseAlignment import DNAPairwiseAlignment
from .LinupErrors import AmbiguousTopologyError

LOGGER = logging.getLogger(__name__)


class DNAPairwiseAlignmentCollection:
    """
    An ordered collection of pairwise alignment hits.

    Insertion order is preserved and is the order in which MultAlign merges
    the hits into a multiple alignment.
    """

    def __init__(self, *args, **kwargs):
        allowed_keys = set(["debug"])
        self.__dict__.update((k, None) for k in allowed_keys)
        self.__dict__.update((k, v) for k, v in kwargs.items() if k in allowed_keys)
        self._results = []

    def __iter__(self):
        return iter(self._results)

    def append(self, result):
        if not isinstance(result, DNAPairwiseAlignment):
            raise TypeError("New result is not a DNAPairwiseAlignment object")
        self._results.append(result)

    def extend(self, results):
        for result in results:
            if not isinstance(result, DNAPairwiseAlignment):
                raise TypeError("New result is not a DNAPairwiseAlignment object")
        self._results.extend(results)

    def __len__(self):
        return len(self._results)

    def len(self):
        return len(self)

    def get(self, index):
        return self._results[index]

    def __getitem__(self, index):
        return self._results[index]

    def getAlignmentReference(self):
        """
        Determine which side of the hits is the shared anchor sequence.

        A collection suitable for building a multiple alignment has one
        side ( query or target ) whose identifier is the same in every hit,
        e.g. many genomic loci all aligned to one AluY consensus.  If both
        sides are constant the collection is a single pairwise alignment,
        and if neither is there is nothing to anchor the rows to.

        Returns:
            "query" or "target"

        Raises:
            AmbiguousTopologyError
        """
        if len(self._results) == 0:
            raise AmbiguousTopologyError(
                "No pairwise alignments were found in the input"
            )

        queryConstant = True
        targetConstant = True
        firstQuery = self._results[0].query_id
        firstTarget = self._results[0].target_id
        for result in self._results[1:]:
            if result.query_id != firstQuery:
                queryConstant = False
            if result.target_id != firstTarget:
                targetConstant = False
            if not queryConstant and not targetConstant:
                break

        if queryConstant and targetConstant:
            raise AmbiguousTopologyError(
                "Both the query ("
                + firstQuery
                + ") and target ("
                + firstTarget
                + ") are identical in all alignments - this is a pairwise"
                + " alignment set, not a multiple alignment"
            )
        if not queryConstant and not targetConstant:
            raise AmbiguousTopologyError(
                "Neither the query nor the target sequence is common to all"
                + " alignments - cannot choose a reference to build the"
                + " multiple alignment around"
            )

        if queryConstant:
            LOGGER.debug("getAlignmentReference: query %s is the anchor", firstQuery)
            return "query"
        LOGGER.debug("getAlignmentReference: target %s is the anchor", firstTarget)
        return "target"

    @classmethod
    def fromCrossmatch(cls, lines):
        """
        Read every crossmatch/RepeatMasker style alignment record found in
        an iterable of lines ( see DNAPairwiseAlignment.crossmatch_decode()
        for the record layout ).  Records are kept in file order.
        """
        collection = cls()
        record = None
        for line in lines:
            if DNAPairwiseAlignment.crossmatchSummaryRE.match(line):
                if record is not None:
                    collection.append(DNAPairwiseAlignment.crossmatch_decode(record))
                record = [line]
            elif record is not None:
                record.append(line)
        if record is not None:
            collection.append(DNAPairwiseAlignment.crossmatch_decode(record))
        LOGGER.debug("fromCrossmatch: read %d alignments", len(collection))
        return collection

    def __repr__(self):
        """
        __repr__() - Generic representation of an object in JSON format
        """
        return json.dumps([r.__dict__ for r in self._results], indent=4)
