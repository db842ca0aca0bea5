# Python modules


# 3rd party modules
import numpy as np

# Our modules


# Dimension layout of the output array. These follow the BART convention for
# CFL files so that the converted k-space can be handed straight to BART
# tools without any reordering.
DIMS = 16

READ_DIM    = 0
PHS1_DIM    = 1
PHS2_DIM    = 2
COIL_DIM    = 3
MAPS_DIM    = 4
TE_DIM      = 5
COEFF_DIM   = 6
COEFF2_DIM  = 7
ITER_DIM    = 8
CSHIFT_DIM  = 9
TIME_DIM    = 10
TIME2_DIM   = 11
LEVEL_DIM   = 12
SLICE_DIM   = 13
AVG_DIM     = 14
BATCH_DIM   = 15


def MD_BIT(n):
    """ bit flag for dimension n, used to build dimension selection masks """
    return 1 << n


READ_FLAG   = MD_BIT(READ_DIM)
COIL_FLAG   = MD_BIT(COIL_DIM)


# data is complex64 per Siemens documentation for Twix, and that is also what
# BART stores in a .cfl file. Byte order is pinned to little endian for both.
NUMPY_DATA_TYPE = np.dtype('<c8')

# CFL_SIZE expresses how many bytes each complex element occupies.
CFL_SIZE = NUMPY_DATA_TYPE.itemsize


class Cfl(object):
    """Constants for the BART CFL container format."""
    HEADER_SUFFIX = ".hdr"
    DATA_SUFFIX   = ".cfl"
    DIMENSIONS_LINE = "# Dimensions"


class TwixFormat(object):
    """Constants for the Siemens twix raw data layouts.

    All sizes are in bytes. VD software writes a 192 byte scan header per ADC
    and a 32 byte header in front of each channel. VB software has no scan
    header at all; each channel carries a full 128 byte MDH instead.
    """
    VB_SCAN_HEADER_SIZE    = 0
    VB_CHANNEL_HEADER_SIZE = 128
    VB_MDH_OFFSET          = 20

    VD_SCAN_HEADER_SIZE    = 192
    VD_CHANNEL_HEADER_SIZE = 32
    VD_MDH_OFFSET          = 40

    # Heuristic limits applied to the first two uint32 values of the file.
    # A VD multi-RAID file starts with a small id and a measurement count of
    # at most 64; a VB file starts with its (large) header size.
    VD_OFFSET_LIMIT     = 10000
    VD_SCAN_COUNT_LIMIT = 64

    NLOOP_COUNTERS = 14
