"""
Reading and writing of BART .cfl/.hdr file pairs.

A CFL "file" is really two files that share a base name. The .hdr file is
text, a comment line followed by the dimensions separated by spaces. The .cfl
file is the data, complex64 values (float32 real, float32 imaginary) in
column-major order with no header at all.
"""

# Python modules
import logging
import os

# 3rd party modules
import numpy as np

# Our modules
import twixread.common.constants as constants
import twixread.common.multind as multind

from twixread.common.constants import Cfl
from twixread.common.exceptions import TwixIOError, TwixFormatError


logger = logging.getLogger(__name__)



class CflFile(object):
    """
    An output .cfl/.hdr pair opened for writing through a numpy memmap.

    Create one with CflFile.create(), write into the data attribute, then
    call finalize() to flush it to disk or discard() to throw both files
    away. Used as a context manager it finalizes on a clean exit and
    discards if an exception escapes the with block.

    """
    def __init__(self, name, dims, data):
        self.name = name            # base name, no suffix
        self.dims = list(dims)
        self.data = data


    @property
    def header_filename(self):
        return self.name + Cfl.HEADER_SUFFIX

    @property
    def data_filename(self):
        return self.name + Cfl.DATA_SUFFIX

    @property
    def is_open(self):
        return self.data is not None


    @classmethod
    def create(cls, name, dims):
        """
        Writes the header and creates a zero filled, memory mapped data file
        big enough for dims. Returns the CflFile. Any existing files of the
        same name are overwritten. If either file can't be created, whatever
        was written is removed again before TwixIOError is raised.

        """
        name = _base_name(name)
        dims = [int(dim) for dim in dims]

        try:
            _write_header(name + Cfl.HEADER_SUFFIX, dims)
            data = np.memmap(name + Cfl.DATA_SUFFIX,
                             dtype=constants.NUMPY_DATA_TYPE,
                             mode='w+',
                             shape=tuple(dims),
                             order='F')
        except OSError as e:
            _remove_files(name)
            raise TwixIOError("creating output '%s': %s" % (name, e)) from e

        logger.debug("created %s with %d elements", name + Cfl.DATA_SUFFIX, multind.md_calc_size(dims))

        return cls(name, dims, data)


    def finalize(self):
        """ flushes the data to disk and drops the mapping """
        if self.data is not None:
            self.data.flush()
            self.data = None


    def discard(self):
        """ drops the mapping and deletes both files """
        self.data = None
        _remove_files(self.name)
        logger.debug("discarded partial output %s", self.name)


    def __enter__(self):
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.finalize()
        else:
            self.discard()
        return False



##################   Public functions start here   ##################


def create_cfl(name, dims):
    """ Shortcut for CflFile.create() """
    return CflFile.create(name, dims)


def writecfl(name, array):
    """ Writes array to name.hdr/name.cfl in one go """
    array = np.asarray(array)
    dims = list(array.shape) + [1] * (constants.DIMS - array.ndim)

    with CflFile.create(name, dims) as cfl:
        cfl.data[...] = np.reshape(array, dims, order='F')


def readcfl(name):
    """
    Reads name.hdr/name.cfl and returns a complex64 numpy array with all
    the dimensions listed in the header, trailing singletons included.

    """
    name = _base_name(name)

    dims = read_header(name + Cfl.HEADER_SUFFIX)

    try:
        data = np.fromfile(name + Cfl.DATA_SUFFIX, dtype=constants.NUMPY_DATA_TYPE)
    except OSError as e:
        raise TwixIOError("reading '%s': %s" % (name + Cfl.DATA_SUFFIX, e)) from e

    expected = multind.md_calc_size(dims)
    if data.size != expected:
        msg = "CFL size mismatch for %s: have %d elements, header says %d" % (name, data.size, expected)
        raise TwixFormatError(msg)

    return np.reshape(data, dims, order='F')


def read_header(filename):
    """ returns the dims listed in a .hdr file """
    try:
        with open(filename, 'r') as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise TwixIOError("reading '%s': %s" % (filename, e)) from e

    if len(lines) < 2 or not lines[0].startswith("#"):
        raise TwixFormatError("malformed CFL header '%s'" % filename)

    try:
        dims = [int(item) for item in lines[1].split()]
    except ValueError as e:
        raise TwixFormatError("malformed CFL header '%s': %s" % (filename, e)) from e

    if not dims or any(dim < 1 for dim in dims):
        raise TwixFormatError("malformed CFL header '%s': bad dims %s" % (filename, dims))

    return dims



##################   "Private" functions start here   ##################

def _base_name(name):
    """ strips a .cfl or .hdr suffix if there is one """
    base, ext = os.path.splitext(name)
    if ext in (Cfl.HEADER_SUFFIX, Cfl.DATA_SUFFIX):
        return base
    return name


def _remove_files(name):
    """ deletes name.hdr and name.cfl where they are regular files """
    for suffix in (Cfl.HEADER_SUFFIX, Cfl.DATA_SUFFIX):
        if os.path.isfile(name + suffix):
            os.remove(name + suffix)


def _write_header(filename, dims):
    with open(filename, 'w') as f:
        f.write(Cfl.DIMENSIONS_LINE + "\n")
        f.write("".join("%d " % dim for dim in dims) + "\n")
