# Python modules


# 3rd party modules
import setuptools


with open("VERSION") as f:
    VERSION = f.read().strip()

NAME = "twixread"

DESCRIPTION = """Convert Siemens twix (.dat) raw MRI data into BART .cfl/.hdr arrays."""

LONG_DESCRIPTION = """twixread reads the raw k-space samples out of a Siemens twix
measurement file, written by either VB or VD/VE scanner software, and places
every ADC into a dense multidimensional complex array saved in the BART CFL
format. The ADC loop counters (line, slice, partition, echo, repetition, set)
decide where each ADC lands. The output dimensions are given by the user on
the command line or in the twixread.ini config file."""

# http://pypi.python.org/pypi?:action=list_classifiers
CLASSIFIERS = [ "Development Status :: 4 - Beta",
                "Intended Audience :: Science/Research",
                "Intended Audience :: Healthcare Industry",
                "License :: OSI Approved :: BSD License",
                "Operating System :: MacOS :: MacOS X",
                "Operating System :: POSIX :: Linux",
                "Operating System :: Microsoft :: Windows",
                "Programming Language :: Python :: 3",
                "Topic :: Scientific/Engineering :: Medical Science Apps.",
              ]
LICENSE = "BSD"
PLATFORMS = 'Linux, OS X, Windows, POSIX'
KEYWORDS = "mri, siemens, twix, raw data, k-space, bart, cfl"

packages = setuptools.find_packages(exclude=("tests", "tests.*"))

setuptools.setup(name=NAME,
                 version=VERSION,
                 packages=packages,
                 zip_safe=False,
                 include_package_data=True,
                 classifiers=CLASSIFIERS,
                 license=LICENSE,
                 description=DESCRIPTION,
                 long_description=LONG_DESCRIPTION,
                 platforms=PLATFORMS,
                 keywords=KEYWORDS,
                 python_requires=">=3.7",
                 install_requires=['numpy', 'configobj'],
                 extras_require={'test': ['pytest']},
                 entry_points={
                     'console_scripts': [
                         'twixread = twixread.interfaces.cli_batch.twixread_cli:main',
                     ],
                 },
                 )
