from __future__ import annotations

from dataclasses import dataclass

NGRAM = 3


@dataclass(frozen=True)
class InputStats:
    size: int
    longest_run: int
    distinct_ngrams: int
    distinct_bytes: int


def longest_run(data: bytes) -> int:
    """Length of the longest run of identical consecutive bytes (0 for empty)."""
    if not data:
        return 0
    best = 1
    cur = 1
    for i in range(1, len(data)):
        if data[i] == data[i - 1]:
            cur += 1
            if cur > best:
                best = cur
        else:
            cur = 1
    return best


def distinct_ngrams(data: bytes, n: int = NGRAM) -> int:
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    return len({data[i : i + n] for i in range(len(data) - n + 1)})


def stats_bytes(data: bytes) -> InputStats:
    b = bytes(data)
    return InputStats(
        size=len(b),
        longest_run=longest_run(b),
        distinct_ngrams=distinct_ngrams(b),
        distinct_bytes=len(set(b)),
    )
