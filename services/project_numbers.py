"""Project number allocation and ordering.

Project numbers look like ``YY-MMNNN``: two-digit year, two-digit month and a
sequence zero-padded to at least three digits (``24-01003``).
"""

import re
from datetime import datetime
from typing import Iterable

PROJECT_NUMBER_RE = re.compile(r"^(\d{2})-(\d{2})(\d{3,})$")

# Unparsable numbers get this key so they land after every valid number
# when sorting descending.
_INVALID_KEY = (-1, -1, -1)


def parse_project_number(project_number: str | None) -> tuple[int, int, int] | None:
    """
    Parse a project number into its numeric parts.

    Returns:
        (year, month, sequence), or None when the number is malformed
    """
    if not project_number:
        return None
    match = PROJECT_NUMBER_RE.match(project_number.strip())
    if not match:
        return None
    year, month, sequence = (int(part) for part in match.groups())
    return year, month, sequence


def project_number_sort_key(project_number: str | None) -> tuple[int, int, int]:
    parsed = parse_project_number(project_number)
    return parsed if parsed is not None else _INVALID_KEY


def sort_project_numbers(numbers: Iterable[str], descending: bool = True) -> list[str]:
    return sorted(numbers, key=project_number_sort_key, reverse=descending)


def prefix_for(now: datetime) -> str:
    """The ``YY-MM`` prefix for a point in time."""
    return now.strftime("%y-%m")


def format_project_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:03d}"


def next_project_number(existing: Iterable[str], now: datetime | None = None) -> str:
    """
    Allocate the next project number for the month of ``now``.

    The first unused sequence starting at 1 is returned, so gaps left by
    deleted projects are reused.

    Args:
        existing: Project numbers already in use (any month)
        now: Allocation time, defaults to the current UTC time

    Returns:
        The new project number
    """
    now = now or datetime.utcnow()
    prefix = prefix_for(now)

    used = set()
    for number in existing:
        parsed = parse_project_number(number)
        if parsed and number.startswith(prefix):
            used.add(parsed[2])

    sequence = 1
    while sequence in used:
        sequence += 1
    return format_project_number(prefix, sequence)
