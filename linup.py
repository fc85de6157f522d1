#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
Usage: ./linup.py [--help]
                  [--config config.ini]
                  [--name NAME]
                  [-i] [--show-score]
                  [--trim-left N] [--trim-right N]
                  [--normalize]
                  [--flank N --flank-db genome.fa]
                  [--consensus-method majority|linup]
                  [--block-size N]
                  [--serialize saved.json]
                  [--debug]
                  [--msf | --stockholm | --fasta | --raw-fasta | --consensus]
                  alignment_file

  Build a multiple alignment from a set of pairwise alignments against
  one shared reference (crossmatch/RepeatMasker .align output) or read
  an existing multiple alignment (Stockholm, aligned FASTA or a file
  previously saved with --serialize).  The alignment may be trimmed and
  renumbered before its consensus and Kimura divergence are calculated
  and it is written out.

  By default the alignment is printed in blocks of 100 columns together
  with the consensus, followed by the Kimura divergence of each sequence
  from the consensus.

  Examples:

    # RepeatMasker alignments of AluY copies
    ./linup.py AluY.align

    # ...with 30bp of genomic flanking sequence, as FASTA
    ./linup.py --fasta --flank 30 --flank-db hg38.fa AluY.align

    # Majority rule consensus of a seed alignment
    ./linup.py --consensus --name AluY AluY.stk

  Options:
    -h, --help            show this help message and exit
    --config CONFIG       INI file with a [linup] section of defaults
    --name NAME           Name for the alignment/consensus
    -i, --include-reference
                          Include the reference in the consensus call
    --show-score          Show the alignment score of each sequence
    --trim-left N         Trim N columns off the left of the alignment
    --trim-right N        Trim N columns off the right of the alignment
    --normalize           Renumber sequences relative to the reference
    --flank N             Add N bases of flanking sequence (with --fasta)
    --flank-db FASTA      Sequence file holding the flanking sequence
    --consensus-method METHOD
                          Consensus caller: majority (default) or linup
    --block-size N        Columns per block of the alignment view
    --serialize FILE      Save the final alignment to FILE
    --debug               Verbose logging
    --msf                 Write GCG MSF format
    --stockholm           Write Stockholm format
    --fasta               Write aligned FASTA
    --raw-fasta           Write the ungapped sequences as FASTA
    --consensus           Write the consensus as FASTA

SEE ALSO: LinupLib/MultAlign.py
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
#
import argparse
import logging
import os
import sys

from LinupLib.Linup import LinupConfig, run
from LinupLib.LinupErrors import LinupError

LOGGER = logging.getLogger(__name__)


def _usage():
    """Print out docstring as program usage"""
    print(__doc__)
    sys.exit(0)


def main(argv=None):
    #
    # Options processing
    #
    #   Usage is documented in the docstring at the top of the
    #   script, printed for '-h' or '--help' by the argparse
    #   custom action class ( _CustomUsageAction ) defined below.
    #
    class _CustomUsageAction(argparse.Action):
        def __init__(self, option_strings, dest, default=False, required=False, help=None):
            super(_CustomUsageAction, self).__init__(
                      option_strings=option_strings, dest=dest,
                      nargs=0, const=True, default=default,
                      required=required, help=help)
        def __call__(self, parser, args, values, option_string=None):
            _usage()

    parser = argparse.ArgumentParser(prog=os.path.basename(sys.argv[0]), add_help=False)
    parser.add_argument('-h', '--help', action=_CustomUsageAction)
    parser.add_argument("input", help="Alignment file (crossmatch, Stockholm, aligned FASTA or serialized)")
    parser.add_argument("--config", help="INI file with a [linup] section of defaults", default=None)
    parser.add_argument("--name", help="Name for the alignment/consensus", default=None)
    parser.add_argument("-i", "--include-reference", dest="include_reference_in_consensus",
                        action="store_true", default=None,
                        help="Include the reference in the consensus call")
    parser.add_argument("--show-score", action="store_true", default=None,
                        help="Show the alignment score of each sequence")
    parser.add_argument("--trim-left", type=int, default=None, help="Columns to trim off the left")
    parser.add_argument("--trim-right", type=int, default=None, help="Columns to trim off the right")
    parser.add_argument("--normalize", action="store_true", default=None,
                        help="Renumber sequences relative to the reference")
    parser.add_argument("--flank", dest="max_flank_len", type=int, default=None,
                        help="Bases of flanking sequence to add (with --fasta)")
    parser.add_argument("--flank-db", dest="flank_db", default=None,
                        help="Sequence file holding the flanking sequence")
    parser.add_argument("--consensus-method", choices=["majority", "linup"], default=None,
                        help="Consensus caller")
    parser.add_argument("--block-size", type=int, default=None, help="Columns per alignment block")
    parser.add_argument("--serialize", dest="serialize_file", default=None,
                        help="Save the final alignment to this file")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument("--msf", dest="output_format", action="store_const", const="msf")
    output_group.add_argument("--stockholm", dest="output_format", action="store_const", const="stockholm")
    output_group.add_argument("--fasta", dest="output_format", action="store_const", const="fasta")
    output_group.add_argument("--raw-fasta", dest="output_format", action="store_const", const="raw_fasta")
    output_group.add_argument("--consensus", dest="output_format", action="store_const", const="consensus")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Only options given on the command line override the config file
    overrides = {k: v for k, v in vars(args).items() if k != "config" and v is not None}

    try:
        if args.config:
            config = LinupConfig.fromConfigFile(args.config, **overrides)
        else:
            config = LinupConfig(**overrides)
        LOGGER.debug("Configuration: %s", config)
        run(config, out=sys.stdout)
    except LinupError as error:
        print("Error: " + error.message, file=sys.stderr)
        return 1
    return 0


#
# Wrap script functionality in main() to avoid automatic execution
# when imported ( e.g. when help is called on file )
#
if __name__ == '__main__':
    sys.exit(main())
