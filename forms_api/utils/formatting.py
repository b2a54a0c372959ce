"""Human-readable formatting helpers"""
from typing import Sequence

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: int) -> str:
    """
    Format a byte count the way the upload form displays it

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 5242880 -> "5 MB"
    """
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def human_join(items: Sequence[str], conjunction: str = "or") -> str:
    """Join items as "A, B, or C" """
    items = list(items)
    if len(items) <= 1:
        return "".join(items)
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"
