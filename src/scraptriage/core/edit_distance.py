from __future__ import annotations

from typing import List


def distance(a: str, b: str) -> int:
    """
    Levenshtein edit distance between two strings.

    Unit cost for insert, delete and substitute; full DP table, so
    O(len(a) * len(b)) time and space.
    """
    rows = len(a) + 1
    cols = len(b) + 1
    table: List[List[int]] = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        ca = a[i - 1]
        prev_row = table[i - 1]
        row = table[i]
        for j in range(1, cols):
            if ca == b[j - 1]:
                row[j] = prev_row[j - 1]
            else:
                row[j] = 1 + min(
                    prev_row[j - 1],  # substitution
                    row[j - 1],  # insertion
                    prev_row[j],  # deletion
                )
    return table[-1][-1]


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1]; 1.0 means identical.

    Two empty strings are considered identical.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - distance(a, b) / longest
