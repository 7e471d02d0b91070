"""
Point formulas.

Quick and full scans weigh activity differently on purpose; both formulas
are kept as separate modes.
"""

from __future__ import annotations

from enum import Enum


class ScanMode(str, Enum):
    QUICK = "quick"
    FULL = "full"


QUICK_REPO_WEIGHT = 5
QUICK_COMMIT_WEIGHT = 2
FULL_REPO_WEIGHT = 10
FULL_COMMIT_WEIGHT = 3


def quick_score(repo_count: int, commit_count: int) -> int:
    return repo_count * QUICK_REPO_WEIGHT + commit_count * QUICK_COMMIT_WEIGHT


def full_score(repo_count: int, commit_count: int) -> int:
    return repo_count * FULL_REPO_WEIGHT + commit_count * FULL_COMMIT_WEIGHT


def score(mode: ScanMode, repo_count: int, commit_count: int) -> int:
    if repo_count < 0 or commit_count < 0:
        raise ValueError("counts must be non-negative")
    if mode == ScanMode.QUICK:
        return quick_score(repo_count, commit_count)
    return full_score(repo_count, commit_count)
