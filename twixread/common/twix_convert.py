"""
Converts a Siemens twix .dat file into a BART .cfl/.hdr pair.

The number of ADCs to read and all of the output dimensions come from the
caller. Nothing here scans the file to find out how many ADCs it holds; if
no ADC count is given we assume one ADC per phase1/phase2/slice combination
with all channels inside each ADC.

Typical use --

    dims = multind.md_singleton_dims()
    dims[constants.READ_DIM] = 256
    dims[constants.PHS1_DIM] = 128
    dims[constants.COIL_DIM] = 8
    result = twix_convert.convert("meas.dat", "kspace", dims)

"""

# Python modules
import logging
import os

# 3rd party modules

# Our modules
import twixread.common.constants as constants
import twixread.common.multind as multind
import twixread.common.twix_parser as twix_parser

from twixread.common.cfl import CflFile
from twixread.common.exceptions import TwixIOError


logger = logging.getLogger(__name__)



class ConversionResult(object):
    """ What a conversion did, returned by TwixConverter.run() """

    def __init__(self, header, adcs, output, dims):
        self.header = header        # TwixFileHeader of the input
        self.adcs   = adcs          # number of ADCs placed
        self.output = output        # base name of the .cfl/.hdr pair
        self.dims   = dims


    def __str__(self):
        lines = [ ]
        lines.append("Layout:          %s" % self.header.layout)
        lines.append("ADCs placed:     %d" % self.adcs)
        lines.append("Output:          %s" % self.output)
        lines.append("Dims:            %s" % " ".join(str(dim) for dim in self.dims))
        return '\n'.join(lines)



class TwixConverter(object):
    """
    Reads the ADCs of a twix file one after the other and copies each into
    its place in a CFL output array.

    dims is the full rank (constants.DIMS long) output shape. adcs is the
    number of ADCs to read; 0 or None means default_adc_count(dims).

    """
    def __init__(self, dims, adcs=0):

        if len(dims) != constants.DIMS:
            msg = "dims must have %d entries, got %d" % (constants.DIMS, len(dims))
            raise ValueError(msg)

        if any(dim < 1 for dim in dims):
            raise ValueError("all dims must be positive, got %s" % list(dims))

        self.dims = [int(dim) for dim in dims]
        self.adcs = int(adcs) if adcs else default_adc_count(self.dims)

        if self.adcs < 0:
            raise ValueError("number of ADCs can't be negative, got %d" % self.adcs)

        # shape of one ADC, read samples by channels
        self.adc_dims = multind.md_select_dims(constants.READ_FLAG | constants.COIL_FLAG, self.dims)


    def run(self, datfile, output):
        """
        Converts datfile into the output .cfl/.hdr pair and returns a
        ConversionResult. If anything goes wrong the partial output is
        deleted and the exception propagates.

        """
        multind.debug_print_dims(logging.DEBUG, self.dims)

        with open_input(datfile) as infile:

            header = twix_parser.detect_layout(infile)

            self.check_file_size(infile, header)

            with CflFile.create(output, self.dims) as cfl:

                buf = multind.md_alloc(self.adc_dims)

                for iadc in range(self.adcs):

                    pos = [0] * constants.DIMS

                    twix_parser.read_adc(infile, header.layout, self.dims, pos, buf)

                    logger.debug("ADC %d", iadc)
                    multind.debug_print_dims(logging.DEBUG, pos)

                    place_block(cfl.data, pos, self.dims, buf)

                name = cfl.name

        logger.info("placed %d ADCs into %s", self.adcs, name)

        return ConversionResult(header, self.adcs, name, self.dims)


    def check_file_size(self, infile, header):
        """
        Compares the bytes left in the file with what self.adcs ADCs of the
        configured size need. Too few bytes only gets a warning here, the
        short read will stop the conversion when we get there. Trailing bytes
        are normal since twix files end with an ACQEND scan.

        Returns the number of bytes remaining minus the number needed.

        """
        here = infile.tell()
        try:
            infile.seek(0, os.SEEK_END)
            size = infile.tell()
        finally:
            infile.seek(here, os.SEEK_SET)

        remaining = size - here
        needed = self.adcs * header.layout.adc_size(self.dims[constants.READ_DIM],
                                                     self.dims[constants.COIL_DIM])
        delta = remaining - needed

        if delta < 0:
            logger.warning("file has %d bytes of scan data but %d ADCs need %d, it is %d bytes short",
                           remaining, self.adcs, needed, -delta)
        elif delta > 0:
            logger.info("%d bytes follow the last ADC read", delta)

        return delta



##################   Public functions start here   ##################


def default_adc_count(dims):
    """ one ADC per phase1, phase2 and slice position """
    return dims[constants.PHS1_DIM] * dims[constants.PHS2_DIM] * dims[constants.SLICE_DIM]


def place_block(out, pos, dims, buf):
    """
    Copies one ADC's samples (buf, read by coil) into out at pos. The read
    and coil axes of pos are ignored since the block spans them completely.

    """
    adc_dims = multind.md_select_dims(constants.READ_FLAG | constants.COIL_FLAG, dims)

    pos = list(pos)
    pos[constants.READ_DIM] = 0
    pos[constants.COIL_DIM] = 0

    multind.md_copy_block(pos, dims, out, adc_dims, buf)


def open_input(datfile):
    """ opens datfile for binary reading, raising TwixIOError on failure """
    try:
        return open(datfile, 'rb')
    except OSError as e:
        raise TwixIOError("error opening file '%s': %s" % (datfile, e)) from e


def convert(datfile, output, dims, adcs=0):
    """ Convenience wrapper for TwixConverter(dims, adcs).run(datfile, output) """
    converter = TwixConverter(dims, adcs)
    return converter.run(datfile, output)


def inspect(datfile):
    """
    Returns a (TwixFileHeader, TwixMdh) tuple describing the file and its
    first ADC, without needing any dims.

    """
    with open_input(datfile) as infile:
        header = twix_parser.detect_layout(infile)
        mdh = twix_parser.peek_mdh(infile, header.layout)

    return header, mdh
