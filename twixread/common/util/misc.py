"""Miscellaneous utilities"""

# Python modules

import os
import sys
import importlib.metadata

# Beware -- lots of other twixread modules import this one. If you import
# other twixread modules here you will almost certainly create circular imports!

APP_NAME = "Twixread"

# Setting this environment variable points get_data_dir() somewhere else,
# handy for tests and for machines where $HOME isn't writable.
DATA_DIR_ENVIRONMENT_VARIABLE = "TWIXREAD_DATA_DIR"


def get_data_dir():
    r"""Returns the path to the user's data folder which is where we store our
    config file and conversion logs. The path depends on the user name and
    operating system, unless $TWIXREAD_DATA_DIR is set in which case that
    wins.

    You can expect data dir names something like this:
      * Windows: C:\Users\%USERNAME%\AppData\Local\Twixread
      * Linux:   ~/.Twixread
      * OS X:    ~/Library/Application Support/Twixread
    """
    data_dir = os.getenv(DATA_DIR_ENVIRONMENT_VARIABLE, "")
    if data_dir:
        return data_dir

    home = os.path.expanduser("~")

    platform = get_platform()

    if platform == "osx":
        data_dir = os.path.join(home, "Library/Application Support", APP_NAME)
    elif platform == "windows":
        # Note that we use the local (non-roaming) application data directory.
        data_dir = os.getenv("LOCALAPPDATA", home)
        data_dir = os.path.join(data_dir, APP_NAME)
    else:
        data_dir = os.path.join(home, "." + APP_NAME)

        if not os.path.exists(data_dir):
            # Respect the XDG standard on machines where the old style dot
            # directory doesn't exist yet.
            xdg_dir = os.getenv("XDG_DATA_HOME", "")
            if xdg_dir and os.path.exists(xdg_dir):
                data_dir = os.path.join(xdg_dir, APP_NAME)

    return data_dir


def get_platform():
    """Returns the current platform/operating system as one of "osx", "linux"
    or "windows". The function is intentionally coarse-grained and doesn't
    differentiate between different versions of these operating systems.

    If the platform can't be determined, this function returns None.
    """
    platform = sys.platform.lower()

    if "linux" in platform:
        simple_platform = "linux"
    # Beware! If you simply test for ("win" in platform) you will get a
    # surprise when "darwin" is identified as Windows.
    elif platform.startswith("win"):
        simple_platform = "windows"
    elif "darwin" in platform:
        simple_platform = "osx"
    else:
        simple_platform = None

    return simple_platform


def get_install_directory():
    """Returns the fully-qualified name of the directory in which the
    twixread package has been installed.
    """
    import twixread
    path = os.path.abspath(twixread.__file__)

    return os.path.dirname(path)


def get_twixread_version():
    """Returns twixread's version as a string, e.g. "0.1.0"."""
    path = os.path.join(get_install_directory(), '..', 'VERSION')

    if os.path.exists(path):
        # The VERSION file isn't installed with the package, so if I can see
        # it, this must be a development install.
        with open(path) as f:
            version = f.read().strip()
    else:
        version = importlib.metadata.version('twixread')

    return version
