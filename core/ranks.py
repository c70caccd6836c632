"""Rank ladder and the credit limit attached to each rank."""

from enum import Enum
from typing import Dict, List

MAX_RANK_PROGRESS = 10


class Rank(str, Enum):
    """Borrower ranks, declared lowest first."""

    STANDARD = "standard"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"


RANK_ORDER: List[Rank] = list(Rank)

RANK_LIMITS: Dict[Rank, int] = {
    Rank.STANDARD: 2_000_000,
    Rank.BRONZE: 3_000_000,
    Rank.SILVER: 4_000_000,
    Rank.GOLD: 5_000_000,
    Rank.DIAMOND: 10_000_000,
}


def rank_index(rank) -> int:
    return RANK_ORDER.index(Rank(rank))


def limit_for(rank) -> int:
    """Credit limit for a rank. Accepts a Rank or its string value."""
    return RANK_LIMITS[Rank(rank)]


def step_down(rank) -> Rank:
    """One rank lower; standard stays standard."""
    idx = rank_index(rank)
    return RANK_ORDER[idx - 1] if idx > 0 else RANK_ORDER[0]
