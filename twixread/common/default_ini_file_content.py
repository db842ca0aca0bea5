# Python modules


"""When twixread needs to create its INI file, this is the content it uses.
This could be part of constants.py, but the long triple-quoted strings make
it really hard to read so it's easier if this is isolated in its own module.

This module contains just one object which is a dict called
DEFAULT_INI_FILE_CONTENT. The dict has a key for each INI file and associated
with that key is the default content for that INI file.
"""


DEFAULT_INI_FILE_CONTENT = {

###############################      twixread

    "twixread" : """
# The twixread config file.

# Default output dimensions, used for any option not given on the command
# line. adcs = 0 means phase1 * phase2 * slice.
[dims]
read = 1
phase1 = 1
phase2 = 1
slice = 1
coil = 1
adcs = 0

[logging]
# One of debug, info, warning, error, critical
level = warning
# When yes, each conversion also writes a log file to the logs folder in the
# twixread data directory.
log_to_file = no

""",

}
