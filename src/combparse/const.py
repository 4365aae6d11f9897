"""
General use constants.
"""

from __future__ import annotations
from typing import Final

DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})

UNSIGNED_MAX: Final[int] = 2**32 - 1
"""The largest value `general.unsigned()` accepts."""
