"""
Primitive operations on lists of half-open time ranges.

All functions are pure and return new lists; inputs are never mutated.
"""

from typing import Iterable, List, Sequence

from .models import TimeRange


def merge(intervals: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or touching ranges into a minimal sorted disjoint list.

    Example: [10:00-11:00, 10:30-12:00, 12:00-13:00] -> [10:00-13:00]
    """
    sorted_ranges = sorted(intervals, key=lambda r: (r.start, r.end))
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeRange(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


def subtract(window: TimeRange, busy: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Remove busy ranges from a window, yielding the free gaps.

    Busy ranges may start before or end after the window; they are clipped
    first. Zero-length gaps are dropped.

    Example:
    Window: 09:00 - 17:00
    Busy: [10:00-11:00, 14:00-15:00]
    Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
    """
    clipped = [
        clipped_range
        for clipped_range in (window.intersect(b) for b in busy)
        if clipped_range is not None
    ]

    free_ranges: List[TimeRange] = []
    current_start = window.start

    for blocked in merge(clipped):
        if current_start < blocked.start:
            free_ranges.append(TimeRange(start=current_start, end=blocked.start))
        current_start = max(current_start, blocked.end)

    if current_start < window.end:
        free_ranges.append(TimeRange(start=current_start, end=window.end))

    return free_ranges


def intersect(first: Sequence[TimeRange], second: Sequence[TimeRange]) -> List[TimeRange]:
    """
    Intersect two sorted, disjoint range lists with a two-pointer sweep.

    Commutative and associative, so a multi-way intersection can be folded
    left to right.
    """
    intersections: List[TimeRange] = []
    i = j = 0

    while i < len(first) and j < len(second):
        a = first[i]
        b = second[j]

        start = max(a.start, b.start)
        end = min(a.end, b.end)
        if start < end:
            intersections.append(TimeRange(start=start, end=end))

        # Advance whichever range closes first; both when they close together
        if a.end < b.end:
            i += 1
        elif b.end < a.end:
            j += 1
        else:
            i += 1
            j += 1

    return intersections
