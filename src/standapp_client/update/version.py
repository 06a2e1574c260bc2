"""Dotted version string parsing and comparison."""

from __future__ import annotations

import re
from itertools import zip_longest

_NON_VERSION_CHARS = re.compile(r"[^0-9.]")


def parse_version(text: str) -> tuple[int, ...]:
    """Parse ``"v1.10.0"`` into ``(1, 10, 0)``.

    Everything except digits and dots is stripped first, so ``"2.0.0-beta"``
    parses as ``(2, 0, 0)``. Empty segments become 0.
    """
    cleaned = _NON_VERSION_CHARS.sub("", text or "")
    return tuple(int(segment) if segment else 0 for segment in cleaned.split("."))


def compare_versions(a: str, b: str) -> int:
    """Return 1 if ``a`` is newer than ``b``, -1 if older, 0 if equal.

    The shorter tuple is padded with trailing zeros, so ``"2.0"`` equals
    ``"2.0.0"``.
    """
    for left, right in zip_longest(parse_version(a), parse_version(b), fillvalue=0):
        if left != right:
            return 1 if left > right else -1
    return 0


def is_newer(latest: str, current: str) -> bool:
    return compare_versions(latest, current) > 0
