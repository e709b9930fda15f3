"""
Build script for xmlrules.

The tokenizer and the location stack run once per XML event, so they can
optionally be compiled with mypyc:

    XMLRULES_USE_MYPYC=1 pip install .
"""

import os
import sys

from setuptools import setup

COMPILED_MODULES = [
    "src/xmlrules/location.py",
    "src/xmlrules/tokenizer.py",
]


def compiled_extensions() -> list:
    if os.environ.get("XMLRULES_USE_MYPYC", "0") != "1":
        return []
    try:
        from mypyc.build import mypycify
    except ImportError:
        sys.exit("XMLRULES_USE_MYPYC=1 needs mypyc: pip install xmlrules[mypyc]")
    return mypycify(COMPILED_MODULES, opt_level="3")


setup(ext_modules=compiled_extensions())
