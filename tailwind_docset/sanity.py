"""Checking a finished index for entries every good build must contain."""

import logging
from typing import Mapping, Sequence

from .errors import SanityCheckError
from .index import SearchIndex

log = logging.getLogger(__name__)


def sanity_check(index: SearchIndex, expectations: Mapping[str, Sequence[str]]) -> None:
    """
    Raise ``SanityCheckError`` for the first (type, name) in *expectations*
    that has no entry in *index*.
    """
    log.info("Performing sanity check")
    checked = 0
    for entry_type, names in expectations.items():
        for name in names:
            if index.count(type=entry_type, name=name) == 0:
                raise SanityCheckError(entry_type, name)
            checked += 1
    log.info("Sanity check passed (%d entries)", checked)
