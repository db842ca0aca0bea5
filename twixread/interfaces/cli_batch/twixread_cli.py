# Python modules
import argparse
import logging
import sys

# 3rd party modules
import configobj

# Our modules
import twixread.common.constants as constants
import twixread.common.multind as multind
import twixread.common.twix_convert as twix_convert
import twixread.common.util.logging_ as util_logging
import twixread.common.util.misc as util_misc

from twixread.common.exceptions import TwixError
from twixread.common.util.config import TwixreadConfig


DESC =  \
"""Read data from Siemens twix (.dat) files and write it to a BART
 .cfl/.hdr pair. Both VB and VD/VE files are read; which one a file is
 gets detected automatically.

 The output dimensions are not read from the file, give them with the
 options below (defaults come from twixread.ini in the twixread data
 directory). The output name may be given with or without the .cfl
 suffix.
"""


def _positive_int(value):
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid int value: '%s'" % value)
    if ivalue < 1:
        raise argparse.ArgumentTypeError("must be 1 or more, got %d" % ivalue)
    return ivalue


def _non_negative_int(value):
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid int value: '%s'" % value)
    if ivalue < 0:
        raise argparse.ArgumentTypeError("must be 0 or more, got %d" % ivalue)
    return ivalue


def create_parser(defaults=None):
    """ defaults is a dict like TwixreadConfig.get_dims_defaults() returns """
    if defaults is None:
        defaults = { 'read': 1, 'phase1': 1, 'phase2': 1, 'slice': 1, 'coil': 1, 'adcs': 0 }

    parser = argparse.ArgumentParser(prog='twixread',
                                     usage='%(prog)s [options] [-a A] datfile output',
                                     description=DESC)

    parser.add_argument("datfile", help='Siemens twix .dat file to read')
    parser.add_argument("output",  nargs='?',
                                   help='base name of the .cfl/.hdr output')

    parser.add_argument('-x', dest='read', type=_positive_int, metavar='X',
                              default=defaults['read'],
                              help='number of samples (read-out)')
    parser.add_argument('-y', dest='phase1', type=_positive_int, metavar='Y',
                              default=defaults['phase1'],
                              help='phase encoding steps')
    parser.add_argument('-z', dest='phase2', type=_positive_int, metavar='Z',
                              default=defaults['phase2'],
                              help='partition encoding steps')
    parser.add_argument('-s', dest='slice', type=_positive_int, metavar='S',
                              default=defaults['slice'],
                              help='number of slices')
    parser.add_argument('-c', dest='coil', type=_positive_int, metavar='C',
                              default=defaults['coil'],
                              help='number of channels')
    parser.add_argument('-a', dest='adcs', type=_non_negative_int, metavar='A',
                              default=defaults['adcs'],
                              help='total number of ADCs (0 = Y * Z * S)')

    parser.add_argument('-i', '--info', dest='info',
                                action="store_true",
                                help='print the file header and first ADC header, write nothing')
    parser.add_argument('-d', '--debug', dest='debug',
                                action="store_true",
                                help='log every ADC position')
    parser.add_argument('-v', '--verbose', dest='verbose',
                                action="store_true",
                                help='increase output verbosity')
    parser.add_argument('--log-file', dest='log_file', metavar='FILE',
                                help='also write the log to FILE')
    parser.add_argument('--version', action='version',
                                version='%(prog)s ' + util_misc.get_twixread_version())
    return parser


def dims_from_args(args):
    """ builds the full rank output dims from parsed options """
    dims = multind.md_singleton_dims()
    dims[constants.READ_DIM]  = args.read
    dims[constants.PHS1_DIM]  = args.phase1
    dims[constants.PHS2_DIM]  = args.phase2
    dims[constants.SLICE_DIM] = args.slice
    dims[constants.COIL_DIM]  = args.coil
    return dims


def check_dims_values(args, config):
    """
    Command line values are checked by argparse, defaults taken from the
    config file are not. Returns an error message for the first bad one,
    None if they're all fine.

    """
    for key in TwixreadConfig.DIMS_KEYS:
        value = getattr(args, key)
        minimum = 0 if key == 'adcs' else 1
        if value < minimum:
            return "%s = %d in %s, must be %d or more" % (key, value, config.filename, minimum)
    return None


def main(argv=None):

    try:
        config = TwixreadConfig()
    except configobj.ConfigObjError as e:
        print("twixread: error: reading config file: %s" % e, file=sys.stderr)
        return 1

    parser = create_parser(config.get_dims_defaults())
    args = parser.parse_args(argv)

    if args.output is None and not args.info:
        parser.error("the following arguments are required: output")

    msg = check_dims_values(args, config)
    if msg:
        print("twixread: error: %s" % msg, file=sys.stderr)
        return 1

    level = config.get_log_level()
    if args.verbose:
        level = min(level, logging.INFO)
    if args.debug:
        level = logging.DEBUG

    util_logging.setup_logging(level,
                               log_to_file=config.get_log_to_file(),
                               filename=args.log_file)

    try:
        if args.info:
            header, mdh = twix_convert.inspect(args.datfile)
            print(header)
            print(mdh)
        else:
            dims = dims_from_args(args)
            result = twix_convert.convert(args.datfile, args.output, dims, args.adcs)
            if args.verbose:
                print(result)
    except TwixError as e:
        print("twixread: error: %s" % e, file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
