# Python modules

import datetime

# 3rd party modules

# Our modules


def now():
    """Returns the current local date & time as a datetime object, accurate
    to the microsecond.
    """
    return datetime.datetime.now()


def filename_timestamp():
    """Returns a timestamp appropriate for inclusion as part of a filename.
    The timestamp includes microseconds, and so subsequent calls to this
    function are guaranteed to return different filenames.
    """
    # The format alone has no sub-second part, so it can't make unique names;
    # the microseconds get added below.
    FILENAME_TIMESTAMP_FORMAT = "%Y%m%d.%H%M%S"

    current = now()

    return current.strftime(FILENAME_TIMESTAMP_FORMAT) + ".%06d" % current.microsecond
