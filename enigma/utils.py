"""
Utility functions
"""
from typing import Iterable, List


def hash_string_to_int(value: str) -> int:
    """
    Hash a string to a non-negative 32-bit integer

    Classic ``h = h * 31 + ord(c)`` hash wrapped to a signed 32-bit int,
    then made positive. Used to derive a team's question seed from its
    access code, so every team on the same code gets the same board.

    Example:
        >>> hash_string_to_int("abc")
        96354
    """
    h = 0
    for ch in value:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def merge_names(current: Iterable[str], incoming: Iterable[str]) -> List[str]:
    """
    Append names from ``incoming`` not already present (case-insensitive)

    Existing order is kept; blank names are dropped.
    """
    merged = [name for name in current]
    seen = {name.lower() for name in merged}
    for name in incoming:
        clean = name.strip()
        if not clean or clean.lower() in seen:
            continue
        merged.append(clean)
        seen.add(clean.lower())
    return merged
