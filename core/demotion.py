"""Rank demotion walk.

Overdue days are spent first against the user's rank progress. When the
progress cannot absorb what is left, one extra day pays for dropping a rank
and the user lands on the lower rank with a full progress buffer. Standard is
the floor: days left over there only erode progress, down to 0.
"""

import logging
from typing import Tuple

from core.ranks import MAX_RANK_PROGRESS, Rank, step_down

logger = logging.getLogger(__name__)


def demote(rank, progress: int, days: int) -> Tuple[Rank, int]:
    current_rank = Rank(rank)
    current_progress = progress
    remaining = days

    if remaining <= 0:
        return current_rank, current_progress

    # Diamond carries no buffer of its own: the first day always costs the tier.
    if current_rank is Rank.DIAMOND:
        current_rank = Rank.GOLD
        current_progress = MAX_RANK_PROGRESS
        remaining -= 1

    while remaining > 0 and current_rank is not Rank.STANDARD:
        if current_progress >= remaining:
            current_progress -= remaining
            remaining = 0
        else:
            remaining -= current_progress + 1
            current_rank = step_down(current_rank)
            current_progress = MAX_RANK_PROGRESS

    if current_rank is Rank.STANDARD and remaining > 0:
        current_progress = max(0, current_progress - remaining)

    logger.debug(
        f"Demotion walk {Rank(rank).value}/{progress} over {days} days "
        f"-> {current_rank.value}/{current_progress}"
    )
    return current_rank, current_progress
