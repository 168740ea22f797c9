# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations


class Error(Exception):
    """Spell checker error"""


class DecodeError(Error):
    """Persisted index is missing, truncated or invalid"""


class CapacityError(Error):
    """Index configuration cannot hold the given word"""


class VocabularyError(Error):
    """Dictionary cannot be loaded or does not fit the alphabet"""
