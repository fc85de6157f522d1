# -*- coding: utf-8 -*-
"""
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

import numpy as np

# Symbols that take part in a majority tally, in tie-break order.  The four
# unambiguous bases win every tie against an ambiguity code.
MAJORITY_ORDER = [
    "A", "C", "G", "T", "R", "Y", "K", "M", "S", "W", "B", "D", "H", "V", "N",
]

CONSENSUS_METHODS = ("majority", "linup")


# NB: these functions are defined outside of the MultAlign class so that it is
# easier to test and add features (such as scoring matrices) separately from
# changes elsewhere in MultAlign.
def call_consensus(array, method="majority", cpg_adjustment=True):
    """
    Call the consensus of a 2d ndarray of sequence data.

    Parameters:
        array           : Numpy 2D array of single characters, one row per
                          sequence.  ' ' is pad, '-' and '.' are gaps.

        method          : "majority" or "linup", see the two callers below.

        cpg_adjustment  : Only used by the "linup" method.

    Returns:
        A list with one consensus symbol per column.  Columns that are
        called as a gap hold '-'.
    """
    if method == "majority":
        return _call_majority_consensus(array)
    elif method == "linup":
        return _call_linup_consensus(array, cpg_adjustment=cpg_adjustment)
    raise ValueError(
        "Unknown consensus method '{}', expected one of: {}".format(
            method, ", ".join(CONSENSUS_METHODS)
        )
    )


def _call_majority_consensus(array):
    """
    Plurality rule consensus.

    Each column is tallied over the IUB symbols in MAJORITY_ORDER.  Gaps,
    pads and 'X' do not vote.  The most frequent symbol is called, ties going
    to the symbol that appears first in MAJORITY_ORDER.  A column without a
    single vote is called as '-'.

    Example:
        'A'
        'C'
        'C'   -> 'C'
    """
    array = np.char.upper(array)
    consensus = []
    for col in range(array.shape[1]):
        bases, counts = np.unique(array[:, col], return_counts=True)
        tally = dict(zip(bases.tolist(), counts.tolist()))
        max_base = "-"
        max_count = 0
        for base in MAJORITY_ORDER:
            if tally.get(base, 0) > max_count:
                max_base = base
                max_count = tally[base]
        consensus.append(max_base)
    return consensus


def _call_linup_consensus(array, cpg_adjustment=True):
    """
    Matrix scoring consensus from the Linup tool.

    This consensus algorithm was originally developed by Dr. Arian Smit for use
    in the development of Transposable Element families in predominantly
    mammalian genomes. The caller differs from a majority-rule consensus in two
    important ways:

      - The calls are made by scoring each column of the multiple alignment
        against a matrix, choosing the highest scoring base.  The matrix is
        a neutral-evolving DNA matrix developed from mammalian genomes which
        typically have a strong A/T bias.

      - After the consensus is called an attempt is made to restore CpG sites
        where there is evidence of C-deamination and its byproducts.

    Columns made up only of pad (' ') are called as '-', as are columns whose
    best scoring symbol is the gap.
    """
    # For mammals where there is a strong A/T bias
    #      A    R    G    C    Y    T    K    M    S   W   N   X   Z   -
    matrix = [
        [9, 0, -8, -15, -16, -17, -13, -3, -11, -4, -2, -7, -3, -6],
        [2, 1, 1, -15, -15, -16, -7, -6, -6, -7, -2, -7, -3, -6],
        [-4, 3, 10, -14, -14, -15, -2, -9, -2, -9, -2, -7, -3, -6],
        [-15, -14, -14, 10, 3, -4, -9, -2, -2, -9, -2, -7, -3, -6],
        [-16, -15, -15, 1, 1, 2, -6, -7, -6, -7, -2, -7, -3, -6],
        [-17, -16, -15, -8, 0, 9, -3, -13, -11, -4, -2, -7, -3, -6],
        [-11, -6, -2, -11, -7, -3, -2, -11, -6, -7, -2, -7, -3, -6],
        [-3, -7, -11, -2, -6, -11, -11, -2, -6, -7, -2, -7, -3, -6],
        [-9, -5, -2, -2, -5, -9, -5, -5, -2, -9, -2, -7, -3, -6],
        [-4, -8, -11, -11, -8, -4, -8, -8, -11, -4, -2, -7, -3, -6],
        [-2, -2, -2, -2, -2, -2, -2, -2, -2, -2, -1, -7, -3, -6],
        [-7, -7, -7, -7, -7, -7, -7, -7, -7, -7, -7, -7, -3, -6],
        [-3, -3, -3, -3, -3, -3, -3, -3, -3, -3, -3, -3, -3, -6],
        [-6, -6, -6, -6, -6, -6, -6, -6, -6, -6, -6, -6, -6, 3],
    ]
    alph_r = ["A", "R", "G", "C", "Y", "T", "K", "M", "S", "W", "N", "X", "Z", "-"]
    alph_h = {base: idx for idx, base in enumerate(alph_r)}

    treat_as_n = ["B", "D", "H", "V"]

    ##  CpG
    ##  Hypothesis  Obs   Score   Description
    ##  -----------------------------------------------------------
    ##  1           TG      +12    Direct result of current strand
    ##                               CpG deaminating the C.
    ##  2           CA      +12    CpG on opp strand converting to TG
    ##                               and an incorrect repair.
    ##  3           TA      -5     CpG -> TG followed by a transition.
    ##  4           TT/TC   -13    C->T followed by a G transversion.
    ##  5           AA/GA   -13    G->A followed by a C transversion.
    ##  6           other          Plain matrix score against C and G.
    cg_param = 12
    ta_param = -5
    cg_trans_param = 2

    array = np.char.upper(array)
    array = np.where(array == ".", "-", array)
    seq_cnt, width = array.shape

    consensus = []
    for col in range(width):
        max_base = None
        max_score = None
        n_score = None

        bases, counts = np.unique(array[:, col], return_counts=True)

        # An unoccupied column is not called as 'N'
        if bases[0] == " " and counts[0] == seq_cnt:
            consensus.append("-")
            continue

        for (cons_base_idx, cons_base) in enumerate(alph_r):
            score = 0
            for obs_base, obs_cnt in zip(bases, counts):
                # ' ' is data outside of the alignment and does not score
                if obs_base == " ":
                    continue
                if obs_base in treat_as_n:
                    obs_base = "N"
                score += obs_cnt * matrix[cons_base_idx][alph_h[obs_base]]

            if cons_base == "N":
                n_score = score

            # Keep the best non-N score, breaking ties in favor of A/C/G/T
            if (
                max_score is None
                or score > max_score
                or (score == max_score and cons_base in "ACGT")
            ):
                max_base = cons_base
                max_score = score

        # Break ties in favor of N
        if n_score is not None and n_score == max_score:
            max_base = "N"

        consensus.append(max_base)

    if cpg_adjustment:
        consensus = _adjust_cpg_sites(
            array, consensus, matrix, alph_h, treat_as_n,
            cg_param, ta_param, cg_trans_param,
        )
    return consensus


def _adjust_cpg_sites(
    array, consensus, matrix, alph_h, treat_as_n, cg_param, ta_param, cg_trans_param
):
    """
    Consider changing each called dinucleotide to a 'CG'.  Gap columns
    between the two halves are skipped, so C-G and C---G are both candidates.
    """
    called = [i for (i, c) in enumerate(consensus) if c != "-"]
    adjusted = list(consensus)

    for (lft_col, rgt_col) in zip(called, called[1:]):
        cons_lft_idx = alph_h[consensus[lft_col]]
        cons_rgt_idx = alph_h[consensus[rgt_col]]

        dn_score = 0
        cg_score = 0
        for row_idx in range(array.shape[0]):
            seq_lft = array[row_idx, lft_col]
            if seq_lft in treat_as_n:
                seq_lft = "N"
            seq_rgt = array[row_idx, rgt_col]
            if seq_rgt in treat_as_n:
                seq_rgt = "N"

            if seq_lft in "- " or seq_rgt in "- ":
                continue

            seq_lft_idx = alph_h[seq_lft]
            seq_rgt_idx = alph_h[seq_rgt]

            dn_score += matrix[cons_lft_idx][seq_lft_idx]
            dn_score += matrix[cons_rgt_idx][seq_rgt_idx]

            seq_dinucl = seq_lft + seq_rgt
            if seq_dinucl in ["CA", "TG"]:
                cg_score += cg_param
            elif seq_dinucl == "TA":
                cg_score += ta_param
            elif seq_dinucl in ["TC", "TT"]:
                cg_score += cg_trans_param + matrix[alph_h["G"]][seq_rgt_idx]
            elif seq_dinucl in ["AA", "GA"]:
                cg_score += cg_trans_param + matrix[alph_h["C"]][seq_lft_idx]
            else:
                cg_score += matrix[alph_h["C"]][seq_lft_idx]
                cg_score += matrix[alph_h["G"]][seq_rgt_idx]

        if cg_score > dn_score:
            adjusted[lft_col] = "C"
            adjusted[rgt_col] = "G"

    return adjusted
