"""Delay-window indexing shared by every DSM constraint family."""

from typing import List, Tuple


def delay_window(t: int, delay_hours: int, horizon_hours: int) -> range:
    """
    Hours ``[max(1, t - L), min(T, t + L)]`` as an inclusive range.

    The window is symmetric: ``tt in delay_window(t)`` iff ``t in delay_window(tt)``.
    """
    return range(max(1, t - delay_hours), min(horizon_hours, t + delay_hours) + 1)


def shift_pairs(delay_hours: int, horizon_hours: int) -> List[Tuple[int, int]]:
    """All ``(origin, recovery)`` hour pairs a downward shift may take."""
    return [
        (t, tt)
        for t in range(1, horizon_hours + 1)
        for tt in delay_window(t, delay_hours, horizon_hours)
    ]
