"""
This is a Python parser for the parts of Siemens twix files that are needed
to pull the raw k-space samples out into a regular array. It handles both
the legacy single-RAID layout written by VB software and the multi-RAID
layout written by VD11 and later. The two layouts have no explicit version
tag, so we tell them apart with a heuristic on the first eight bytes of the
file (see detect_layout()).

The module contains three classes and a handful of functions. TwixLayout
holds the per-layout constants (header sizes and where the MDH lives),
TwixFileHeader represents the leading bytes of the file and TwixMdh holds the
part of the measurement data header (MDH) that we need to place an ADC in the
output array. read_adc() reads one ADC, all channels, into a buffer.

Twix <= VB19 - Single RAID measurements per twix file
-------------------------------------------------------------------------------------------------

|  *  *  *  *   Header  *  *  *  *  |                 Scan 1, Cha 0                 | Scan 1, Cha 1 | ...
<---------    Header Size   -------> *                                              *
.                                   .  *   chan header (full MDH)                   *
| Header Size |   Header raw data   |   |      sMDH      |     Measurement data     |
<- uint32_t ->  (e.g. seqdata, evp)     <--- 128 byte --->
                                        ^ MDH loop counters etc. start at byte 20


MultiTwix >= VD11 - Multi-RAID measurements per twix file
-------------------------------------------------------------------------------------------------

| ID | # of meas | MeasID | FileID | Measurement offset | ... | Align | Measurement 1 | ... | Measurement N |
<-uint32_t-><-uint32_t-><-uint32_t-><-uint32_t-><-- uint64_t -->

Measurement sub-structure

| Header Size |   Header raw data   |   scanH 0    |  chH 0  | Measurement data |  chH 1  | Measurement data | ...
<- uint32_t ->                      <-- 192 byte --><-32 byte->
                                    ^ MDH loop counters etc. start at byte 40

Only the measurement whose offset is in the first entry is read; for a
single measurement file that is the imaging data.

The byte layout of the MDH section we decode (60 bytes, little endian):

    uint32_t evalinfo[2];
    uint16_t samples;
    uint16_t channels;
    uint16_t sLC[14];           loop counters, lin first
    uint16_t dummy1[2];
    uint16_t clmnctr;           k-space center column
    uint16_t dummy2[5];
    uint16_t linectr;           k-space center line
    uint16_t partctr;           k-space center partition

"""

# Python modules
import logging
import os
import struct

# Third party modules
import numpy as np

# Our modules
import twixread.common.constants as constants
import twixread.common.multind as multind

from twixread.common.constants import TwixFormat
from twixread.common.exceptions import TwixIOError, TwixFormatError


logger = logging.getLogger(__name__)


# Names of the 14 MDH loop counters, in the order they are stored in sLC[]
LOOP_COUNTERS = ['lin', 'ave', 'sli', 'par', 'eco', 'phs', 'rep',
                 'set', 'seg', 'ida', 'idb', 'idc', 'idd', 'ide']

_MDH_FORMAT = '<2I2H%dH2HH5HHH' % TwixFormat.NLOOP_COUNTERS
MDH_SIZE = struct.calcsize(_MDH_FORMAT)

_FILE_HEADER_FORMAT = '<4IQ'
FILE_HEADER_SIZE = struct.calcsize(_FILE_HEADER_FORMAT)


class TwixLayout(object):
    """
    Describes one of the two twix file layouts. There are exactly two
    instances, VB and VD, created just below this class. detect_layout()
    picks one and the rest of the code asks it for sizes and offsets rather
    than testing a flag at every read.

    """
    def __init__(self, name, scan_header_size, channel_header_size,
                 mdh_offset, mdh_in_scan_header):
        self.name                = name
        self.scan_header_size    = scan_header_size
        self.channel_header_size = channel_header_size
        self.mdh_offset          = mdh_offset           # where the MDH section starts
        self.mdh_in_scan_header  = mdh_in_scan_header   # else in each channel header


    def __repr__(self):
        return "TwixLayout(%s)" % self.name


    def __str__(self):
        return self.name


    def mdh_source(self, scan_header, channel_header):
        """ returns the header block that holds the MDH for this layout """
        if self.mdh_in_scan_header:
            return scan_header
        return channel_header


    def adc_size(self, samples, channels):
        """ number of bytes one ADC occupies in the file """
        channel_size = self.channel_header_size + samples * constants.CFL_SIZE
        return self.scan_header_size + channels * channel_size


VB = TwixLayout("VB",
                TwixFormat.VB_SCAN_HEADER_SIZE,
                TwixFormat.VB_CHANNEL_HEADER_SIZE,
                TwixFormat.VB_MDH_OFFSET,
                False)

VD = TwixLayout("VD",
                TwixFormat.VD_SCAN_HEADER_SIZE,
                TwixFormat.VD_CHANNEL_HEADER_SIZE,
                TwixFormat.VD_MDH_OFFSET,
                True)



class TwixFileHeader(object):
    """
    The first 24 bytes of a twix file. For VD files these are the start of
    the MrParcRaidFileHeader and its first MrParcRaidFileEntry; for VB files
    only the first uint32 (the measurement header size) means anything.

    """
    def __init__(self):

        self.offset         = 0         # uint32_t, header size to skip
        self.scan_count     = 0         # uint32_t
        self.measurement_id = 0         # uint32_t
        self.file_id        = 0         # uint32_t
        self.data_offset    = 0         # uint64_t, VD only
        self.layout         = None      # VB or VD, set by detect_layout()

        # absolute file position of the first ADC, set by detect_layout()
        self.scan_start     = 0


    @property
    def is_vd(self):
        return self.layout is VD


    def __str__(self):
        lines = [ ]
        lines.append("Layout:          %s" % self.layout)
        lines.append("Offset:          %d" % self.offset)
        lines.append("Scan count:      %d" % self.scan_count)
        lines.append("Measurement ID:  %d" % self.measurement_id)
        lines.append("File ID:         %d" % self.file_id)
        lines.append("Data offset:     %d" % self.data_offset)
        lines.append("First scan at:   %d" % self.scan_start)
        return '\n'.join(lines)


    def populate_from_file(self, infile):
        """
        Given an open file or file-like object positioned at the first byte
        of the file, reads the leading header fields. The file pointer is
        advanced past them.

        """
        self.offset         = _read_uint(infile)
        self.scan_count     = _read_uint(infile)
        self.measurement_id = _read_uint(infile)
        self.file_id        = _read_uint(infile)
        self.data_offset    = _read_ulonglong(infile)


    def guess_layout(self):
        """ applies the VD/VB heuristic to the values as first read """
        if (self.offset < TwixFormat.VD_OFFSET_LIMIT and
                self.scan_count < TwixFormat.VD_SCAN_COUNT_LIMIT):
            return VD
        return VB



class TwixMdh(object):
    """ The part of a measurement data header that describes where an ADC goes.

    The 14 loop counters are kept as a list in file order; the properties
    below give them their Siemens names.
    """

    def __init__(self):

        self.eval_info       = [0, 0]                   # aulEvalInfoMask
        self.samples_in_scan = 0                        # ushSamplesInScan
        self.used_channels   = 0                        # ushUsedChannels
        self.loop_counters   = [0] * TwixFormat.NLOOP_COUNTERS      # sLC

        self.dummy1                  = [0, 0]
        self.kspace_center_column    = 0                # ushKSpaceCentreColumn
        self.dummy2                  = [0] * 5
        self.kspace_center_line      = 0                # ushKSpaceCentreLineNo
        self.kspace_center_partition = 0                # ushKSpaceCentrePartitionNo


    lin = property(lambda self: self.loop_counters[0])
    ave = property(lambda self: self.loop_counters[1])
    sli = property(lambda self: self.loop_counters[2])
    par = property(lambda self: self.loop_counters[3])
    eco = property(lambda self: self.loop_counters[4])
    phs = property(lambda self: self.loop_counters[5])
    rep = property(lambda self: self.loop_counters[6])
    set = property(lambda self: self.loop_counters[7])
    seg = property(lambda self: self.loop_counters[8])
    ida = property(lambda self: self.loop_counters[9])
    idb = property(lambda self: self.loop_counters[10])
    idc = property(lambda self: self.loop_counters[11])
    idd = property(lambda self: self.loop_counters[12])
    ide = property(lambda self: self.loop_counters[13])


    @property
    def eval_info_mask(self):
        """ the two uint32 eval info words as one 64 bit mask """
        return self.eval_info[0] | (self.eval_info[1] << 32)


    def __str__(self):
        lines = [ ]
        lines.append("-- Eval info mask --")
        lines.append("   mask bit string: %s" % _bit_string(self.eval_info_mask, 64))
        lines.append("Samples:         %d" % self.samples_in_scan)
        lines.append("Channels used:   %d" % self.used_channels)
        for name, value in zip(LOOP_COUNTERS, self.loop_counters):
            lines.append("%-16s %d" % (name + ":", value))
        lines.append("K space center column: %d" % self.kspace_center_column)
        lines.append("K space center line:   %d" % self.kspace_center_line)
        lines.append("K space center part:   %d" % self.kspace_center_partition)
        return '\n'.join(lines)


    def populate_from_buffer(self, buffer, offset=0):
        """
        Decodes the MDH section that starts at offset in buffer (bytes or
        bytearray). Raises TwixFormatError if the buffer is too short.

        """
        if len(buffer) < offset + MDH_SIZE:
            msg = "header block of %d bytes too short for MDH at offset %d" % (len(buffer), offset)
            raise TwixFormatError(msg)

        values = struct.unpack_from(_MDH_FORMAT, buffer, offset)

        nlc = TwixFormat.NLOOP_COUNTERS

        self.eval_info       = list(values[0:2])
        self.samples_in_scan = values[2]
        self.used_channels   = values[3]
        self.loop_counters   = list(values[4:4 + nlc])

        rest = values[4 + nlc:]
        self.dummy1                  = list(rest[0:2])
        self.kspace_center_column    = rest[2]
        self.dummy2                  = list(rest[3:8])
        self.kspace_center_line      = rest[8]
        self.kspace_center_partition = rest[9]


    def set_position(self, pos):
        """
        Copies the loop counters into pos, a full rank index into the output
        array. Only the counters we have an output dimension for are used.

        The k-space center line and partition are not subtracted from the
        phase encoding positions.
        """
        pos[constants.PHS1_DIM]  = self.lin
        pos[constants.SLICE_DIM] = self.sli
        pos[constants.PHS2_DIM]  = self.par
        pos[constants.TE_DIM]    = self.eco
        pos[constants.TIME_DIM]  = self.rep
        pos[constants.TIME2_DIM] = self.set

        return pos



##################   Public functions start here   ##################


def detect_layout(infile):
    """
    Reads the leading header of the twix file open in infile, decides whether
    it's a VB or VD file and leaves the file positioned at the first ADC.

    Returns a TwixFileHeader with its layout attribute set. For VD files the
    offset attribute holds the measurement header size read at data_offset,
    for VB files scan_count is forced to 1.

    """
    start = 0

    _seek(infile, start)

    header = TwixFileHeader()
    header.populate_from_file(infile)

    # decided once, on the values as read
    header.layout = header.guess_layout()

    if header.layout is VD:

        logger.info("VD Header. MeasID: %d FileID: %d Scans: %d",
                    header.measurement_id, header.file_id, header.scan_count)

        start += header.data_offset

        _seek(infile, start)

        # the real scan offset is the measurement header size
        header.offset = _read_uint(infile)

    else:

        logger.info("VB Header.")
        header.scan_count = 1

    start += header.offset

    _seek(infile, start)

    header.scan_start = start

    return header


def read_scan_header(infile, layout):
    """ Reads the scan header of one ADC, an empty block for VB files. """
    return _read_bytes(infile, layout.scan_header_size)


def read_channel_header(infile, layout):
    return _read_bytes(infile, layout.channel_header_size)


def read_adc(infile, layout, dims, pos, buf):
    """
    Reads one ADC (all channels) from infile into buf.

    dims is the full rank output shape; dims[READ_DIM] samples are expected
    per channel and dims[COIL_DIM] channels are read. pos is filled in from
    the loop counters of the first channel. buf must be a contiguous complex64
    array of dims[READ_DIM] * dims[COIL_DIM] elements laid out read first, so
    channel c occupies buf[c * nread:(c + 1) * nread] when viewed flat.

    Returns the TwixMdh of the first channel. On return pos[COIL_DIM] is 0
    and pos[READ_DIM] is untouched.

    Raises TwixIOError on a short read and TwixFormatError if the sample
    count differs from dims[READ_DIM] or pos falls outside dims.

    """
    nread = dims[constants.READ_DIM]
    ncoil = dims[constants.COIL_DIM]

    flat = _flat_view(buf, nread * ncoil)

    scan_header = read_scan_header(infile, layout)

    first = None

    for icoil in range(ncoil):

        pos[constants.COIL_DIM] = icoil

        channel_header = read_channel_header(infile, layout)

        mdh = TwixMdh()
        mdh.populate_from_buffer(layout.mdh_source(scan_header, channel_header),
                                 layout.mdh_offset)

        if icoil == 0:
            mdh.set_position(pos)
            first = mdh

        multind.debug_print_dims(logging.DEBUG, pos)

        if mdh.samples_in_scan != nread:
            msg = "wrong number of samples: ADC has %d, expected %d" % (mdh.samples_in_scan, nread)
            raise TwixFormatError(msg)

        if not multind.md_is_index(pos, dims):
            msg = "ADC position %s outside of dimensions %s" % (pos, list(dims))
            raise TwixFormatError(msg)

        # Data is complex64 stored as (real, imag) float pairs.
        data = _read_bytes(infile, nread * constants.CFL_SIZE)
        flat[icoil * nread:(icoil + 1) * nread] = np.frombuffer(data, dtype=constants.NUMPY_DATA_TYPE)

    pos[constants.COIL_DIM] = 0

    return first


def peek_mdh(infile, layout):
    """
    Decodes the MDH of the ADC at the current file position without needing
    to know the dimensions, then puts the file position back. Used to report
    what a file contains before converting it.

    """
    start = infile.tell()

    scan_header = read_scan_header(infile, layout)
    channel_header = read_channel_header(infile, layout)

    mdh = TwixMdh()
    mdh.populate_from_buffer(layout.mdh_source(scan_header, channel_header),
                             layout.mdh_offset)

    _seek(infile, start)

    return mdh



##################   "Private" functions start here   ##################

def _bit_string(value, min_length=1):
    """
    Given an int value, returns a bitwise string representation that is
    at least min_length long.

    For example, _bit_string(42, 8) returns '0b00101010'.
    """
    value = bin(value)[2:]
    value = value.rjust(min_length, '0')
    return '0b' + value


def _flat_view(buf, size):
    """ returns a flat view of buf, which must not need a copy """
    if buf.size != size:
        msg = "ADC buffer holds %d elements, need %d" % (buf.size, size)
        raise ValueError(msg)

    if buf.flags.f_contiguous:
        return buf.reshape(-1, order='F')

    msg = "ADC buffer must be a Fortran ordered contiguous array"
    raise ValueError(msg)


def _seek(source_file, position):
    try:
        source_file.seek(position, os.SEEK_SET)
    except (OSError, ValueError, OverflowError) as e:
        raise TwixIOError("seeking to %d: %s" % (position, e)) from e


def _read_bytes(source_file, size):
    """ Reads exactly size bytes or raises TwixIOError """
    if size == 0:
        return b''

    try:
        data = source_file.read(size)
    except OSError as e:
        raise TwixIOError("reading file: %s" % e) from e

    if len(data) != size:
        msg = "reading file: wanted %d bytes, got %d" % (size, len(data))
        raise TwixIOError(msg)

    return data


# The _read_xxx() functions are for reading specific types out of a file. All
# call _read_generic().

def _read_generic(source_file, type_, count=1):
    format = '<%d%s' % (count, type_)

    data = _read_bytes(source_file, struct.calcsize(format))

    values = struct.unpack(format, data)
    if count == 1:
        return values[0]
    else:
        return values

def _read_uint(source_file, count=1):
    return _read_generic(source_file, 'I', count)

def _read_ulonglong(source_file, count=1):
    return _read_generic(source_file, 'Q', count)
