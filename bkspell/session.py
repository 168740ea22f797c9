# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""HTTP session used for downloading word lists"""
from __future__ import annotations

from requests import adapters, models, Session
from requests.structures import CaseInsensitiveDict
from typing import Any
from urllib3.util.retry import Retry

try:
    from .version import __version__
except ImportError:
    __version__ = "UNKNOWN"

# word lists are fetched with GET only, which is safe to repeat
DEFAULT_RETRIES = Retry(total=3, backoff_factor=0.2, allowed_methods=frozenset({"GET", "HEAD"}))


class WordListAdapter(adapters.HTTPAdapter):
    def __init__(self, *args: Any, timeout: int | None = None, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, *args: Any, **kwargs: Any) -> models.Response:
        if not kwargs.get("timeout"):
            kwargs["timeout"] = self.timeout
        return super().send(*args, **kwargs)


def get_requests_session(*, timeout: int | None = None, retries: Retry | int = DEFAULT_RETRIES) -> Session:
    adapter = WordListAdapter(timeout=timeout, max_retries=retries)

    session = Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = True
    session.headers = CaseInsensitiveDict(
        {
            "accept": "text/plain",
            "user-agent": "bkspell/" + __version__,
        }
    )

    return session
