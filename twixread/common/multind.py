"""
Helpers for dense multidimensional arrays described by a list of dimension
sizes. The names follow the BART md_* functions so code that sets up BART
style dims reads the same here. Arrays are numpy arrays in Fortran order,
which is how a .cfl file is laid out on disk.
"""

# Python modules
import functools
import logging
import operator

# 3rd party modules
import numpy as np

# Our modules
import twixread.common.constants as constants

from twixread.common.constants import MD_BIT


logger = logging.getLogger(__name__)



def md_singleton_dims(n=constants.DIMS):
    """ returns a list of n dims all set to 1 """
    return [1] * n


def md_select_dims(flags, dims):
    """
    Returns a copy of dims where every dimension whose bit is not set in
    flags is reduced to 1. For example, md_select_dims(READ_FLAG | COIL_FLAG,
    dims) gives the shape of a single ADC's worth of data.

    """
    return [dim if (flags & MD_BIT(i)) else 1 for i, dim in enumerate(dims)]


def md_calc_size(dims):
    """ total number of elements in an array of shape dims """
    return functools.reduce(operator.mul, dims, 1)


def md_is_index(pos, dims):
    """ True if pos is a valid index into an array of shape dims """
    if len(pos) != len(dims):
        return False

    return all(0 <= p < d for p, d in zip(pos, dims))


def md_alloc(dims, dtype=constants.NUMPY_DATA_TYPE):
    """ zero filled array of shape dims, Fortran order """
    return np.zeros(dims, dtype=dtype, order='F')


def md_copy_block(pos, odims, out, idims, in_):
    """
    Copies the array in_ (shape idims) into out (shape odims) so that its
    first element lands at index pos. The block must fit completely inside
    out; dimensions where idims equals odims must have pos 0 there.

    in_ may be any array with the right number of elements laid out in
    Fortran order, it is reshaped to idims before the copy.

    """
    if not (len(pos) == len(odims) == len(idims)):
        msg = "rank mismatch: pos %d, odims %d, idims %d" % (len(pos), len(odims), len(idims))
        raise ValueError(msg)

    for i, (p, odim, idim) in enumerate(zip(pos, odims, idims)):
        if p < 0 or p + idim > odim:
            msg = "block of size %d at %d does not fit in dimension %d of size %d" % (idim, p, i, odim)
            raise ValueError(msg)

    index = tuple(slice(p, p + idim) for p, idim in zip(pos, idims))

    out[index] = np.reshape(in_, idims, order='F')


def debug_print_dims(level, dims):
    """ logs dims as a single line at the given logging level """
    if logger.isEnabledFor(level):
        logger.log(level, "[%s]", " ".join("%3d" % dim for dim in dims))
