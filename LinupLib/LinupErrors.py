# -*- coding: utf-8 -*-
"""
    Usage: from LinupLib.LinupErrors import UnknownFormatError

    Exceptions raised by the Linup multiple alignment library.  Each one
    is fatal to a Linup run; the command line front end reports the message
    and exits with a non-zero status.

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


class LinupError(Exception):
    """Base class for fatal Linup errors."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InputUnreadableError(LinupError):
    """The input file could not be opened or decoded."""


class UnknownFormatError(LinupError):
    """No known alignment format was recognized in the input."""


class AmbiguousTopologyError(LinupError):
    """A pairwise hit set does not share exactly one anchor sequence."""


class InvalidOptionCombinationError(LinupError):
    """Requested options cannot be honored together."""


class InvalidTrimRangeError(LinupError):
    """Trimming would remove every column of the alignment."""
