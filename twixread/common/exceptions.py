# Python modules


class TwixError(Exception):
    """ Base class for everything that can go wrong while converting a twix
    file. None of these are recoverable; the twix layout has no markers to
    resynchronize on, so one bad record spoils the rest of the file.
    """
    pass


class TwixIOError(TwixError):
    """ Raised on a short read, a failed seek or an input file that can't be
    opened.
    """
    pass


class TwixFormatError(TwixError):
    """ Raised when the data read doesn't agree with the dimensions the caller
    asked for, e.g. the wrong number of samples in an ADC or loop counters that
    point outside of the output array. Also raised for malformed CFL headers.
    """
    pass
