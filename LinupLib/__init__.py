# -*- coding: utf-8 -*-
"""
    LinupLib - multiple alignment construction, consensus and divergence
    for transposable element families and other repeats.

LICENSE:
    This code may be used in accordance with the Creative Commons
    Zero ("CC0") public domain dedication:
    https://creativecommons.org/publicdomain/zero/1.0/

"""
from .MultAlign import MultAlign, KimuraDivergence
from .DNAPairwiseAlignment import DNAPairwiseAlignment
from .DNAPairwiseAlignmentCollection import DNAPairwiseAlignmentCollection
from .FlankingSequenceDatabase import FlankingSequenceDatabase
from .AlignmentFormat import detectFormat
from .Linup import LinupConfig, run

__version__ = "1.0.0"
