# Python modules

import os

# 3rd party modules
import configobj

# Our modules
import twixread.common.util.misc as util_misc
import twixread.common.util.logging_ as util_logging
import twixread.common.default_ini_file_content as default_ini_file_content


class BaseConfig(configobj.ConfigObj):
    """This abstract base class is a special purpose version of a
    configobj.ConfigObj which is a 3rd party INI file parser that we've
    adopted. It's a lot nicer than the Python standard library's ConfigParser.

    There's documentation for ConfigObj here:
    https://configobj.readthedocs.io/

    Note that this class doesn't automatically save changes to disk. It's
    up to the caller to call the .write() method.

    Subclasses first read the default INI file content and then update
    (override) that with whatever settings the user provides.
    """
    def __init__(self, filename):
        """ Constructor. The filename should be something like "twixread.ini".
        It will be prefixed with the user's data directory unless it's
        already an absolute path.
        """
        # I build my initial/base config from the the default INI content
        ini_name = os.path.basename(filename)
        ini_name, _ = os.path.splitext(ini_name)
        default = default_ini_file_content.DEFAULT_INI_FILE_CONTENT[ini_name]
        default = default.split("\n")
        configobj.ConfigObj.__init__(self, infile=default, encoding="utf-8")

        # Since I initialized my base class with a list instead of providing
        # a filename, self.filename is still None. That needs to be corrected.
        if not os.path.isabs(filename):
            filename = os.path.join(util_misc.get_data_dir(), filename)
        self.filename = filename

        # Any settings the user provides trump the defaults
        user_config = configobj.ConfigObj(infile=filename, encoding="utf-8")

        self.merge(user_config)



class TwixreadConfig(BaseConfig):
    """Config for the twix converter. Holds default dims and logging
    settings that the command line can override.
    """
    DIMS_KEYS = ("read", "phase1", "phase2", "slice", "coil", "adcs")

    def __init__(self, filename="twixread.ini"):
        BaseConfig.__init__(self, filename)


    def get_dims_defaults(self):
        """Returns a dict of int values keyed by DIMS_KEYS. Values that are
        missing or not integers fall back to 1 (0 for adcs).
        """
        section = self.get("dims", { })

        defaults = { }
        for key in self.DIMS_KEYS:
            fallback = 0 if key == "adcs" else 1
            try:
                defaults[key] = int(section.get(key, fallback))
            except (TypeError, ValueError):
                defaults[key] = fallback

        return defaults


    def get_log_level(self):
        """Returns the logging level named in the config, WARNING if the name
        is missing or not recognized.
        """
        name = self.get("logging", { }).get("level", "warning")
        try:
            return util_logging.level_from_name(name)
        except ValueError:
            return util_logging.Log.LEVELS["warning"]


    def get_log_to_file(self):
        """Returns True if the log_to_file flag is set, False otherwise."""
        log_to_file = False

        # The flag might not be present, or it might contain a non-boolean
        # value. Neither of these are fatal errors.
        try:
            log_to_file = self["logging"].as_bool("log_to_file")
        except (KeyError, ValueError):
            pass

        return log_to_file
