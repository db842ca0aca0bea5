# Python modules
import logging
import os
import sys

# 3rd party modules

# Our modules
import twixread.common.util.time_ as util_time
import twixread.common.util.misc as util_misc

# Set up the package-wide logger. Modules log to children of this one via
# logging.getLogger(__name__).
logger = logging.getLogger("twixread")
logger.setLevel(logging.WARNING)

_FORMAT = '%(asctime)s %(levelname)-8s: %(message)s'

# Handlers installed by setup_logging(), so calling it twice doesn't double up
_installed_handlers = [ ]


class Log(object):
    # Level names accepted in the config file and on the command line
    LEVELS = { "debug"    : logging.DEBUG,
               "info"     : logging.INFO,
               "warning"  : logging.WARNING,
               "error"    : logging.ERROR,
               "critical" : logging.CRITICAL,
             }


# Below are handler classes for different logs. They mostly use the default
# behavior of logging.FileHandler and mainly exist to control the name of
# the log file.

class ConversionFileHandler(logging.FileHandler):
    def __init__(self, filename=None):
        if filename is None:
            # Create a unique filename for this conversion.
            filename = "twixread_convert."
            filename += util_time.filename_timestamp()
            filename += ".txt"

            filename = os.path.join(util_misc.get_data_dir(), "logs", filename)

        path = os.path.dirname(filename)
        if path and not os.path.exists(path):
            os.makedirs(path)

        self._filename = filename

        logging.FileHandler.__init__(self, self._filename)

        formatter = logging.Formatter(_FORMAT)
        self.setFormatter(formatter)

    def __get_filename(self): return self._filename
    filename = property(__get_filename)



def level_from_name(name):
    """ converts a level name like "debug" to a logging level, case ignored """
    try:
        return Log.LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError("unknown log level '%s'" % name)


def setup_logging(level=logging.WARNING, log_to_file=False, filename=None):
    """
    Sends the package log to stderr at the given level, and also to a file if
    log_to_file is True or a filename is given. Returns the file handler, or
    None if there isn't one.

    """
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    del _installed_handlers[:]

    logger.setLevel(level)

    # stops here, root handlers would print every record a second time
    logger.propagate = False

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(stream)
    _installed_handlers.append(stream)

    file_handler = None
    if log_to_file or filename:
        file_handler = ConversionFileHandler(filename)
        logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    return file_handler
