"""
Sequence primitives
===================

Small, explicit algorithms used by the discovery pipeline:

- Merge sort: stable, O(n log n). Stability matters here because records
  that tie on every sort field must keep their filtered (catalog) order, which
  makes every view reproducible.
- Two-pointer intersection / union over sorted position lists, used to
  combine index lookups (AND across filter dimensions, OR within one).
"""

from __future__ import annotations
from typing import Callable, Iterable, List, Sequence, TypeVar

T = TypeVar("T")


def merge_sort(items: Sequence[T], key: Callable[[T], object]) -> List[T]:
    """Return a new, stably sorted list. `items` is left untouched."""
    if len(items) <= 1:
        return list(items)
    keyed = [(key(x), x) for x in items]
    return [x for _, x in _sort_keyed(keyed)]


def _sort_keyed(pairs: List[tuple]) -> List[tuple]:
    if len(pairs) <= 1:
        return pairs
    mid = len(pairs) // 2
    left = _sort_keyed(pairs[:mid])
    right = _sort_keyed(pairs[mid:])
    out: List[tuple] = []
    i = j = 0
    while i < len(left) and j < len(right):
        # `<=` keeps the left element first on ties (stability)
        if left[i][0] <= right[j][0]:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out


def intersect_sorted(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Two-pointer intersection for sorted integer lists."""
    i = j = 0
    out: List[int] = []
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            out.append(a[i]); i += 1; j += 1
        elif a[i] < b[j]:
            i += 1
        else:
            j += 1
    return out


def union_sorted(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Merge two sorted integer lists, dropping duplicates."""
    i = j = 0
    out: List[int] = []
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            out.append(a[i]); i += 1; j += 1
        elif a[i] < b[j]:
            out.append(a[i]); i += 1
        else:
            out.append(b[j]); j += 1
    out.extend(a[i:])
    out.extend(b[j:])
    return out


def union_many(lists: Iterable[Sequence[int]]) -> List[int]:
    out: List[int] = []
    for ids in lists:
        out = union_sorted(out, ids)
    return out
