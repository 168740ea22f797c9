# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""
Configurable parameters via environment variables
"""

import os

USER_HOME = os.path.expanduser("~")

BKSPELL_CONFIG_DIR = os.environ.get("BKSPELL_CONFIG_DIR", os.path.join(USER_HOME, ".config", "bkspell"))

BKSPELL_CACHE_DIR = os.environ.get("BKSPELL_CACHE_DIR", os.path.join(USER_HOME, ".cache", "bkspell"))
BKSPELL_CLIENT_CONFIG = os.environ.get("BKSPELL_CLIENT_CONFIG", os.path.join(BKSPELL_CONFIG_DIR, "bkspell.json"))
BKSPELL_DICTIONARY = os.environ.get("BKSPELL_DICTIONARY", os.path.join(BKSPELL_CONFIG_DIR, "dictionary.txt"))
