"""
XP and level arithmetic for task completion.

The result is computed on the client and sent to PATCH /auth/me, which stores
it without checking. Any client can therefore report arbitrary progression;
moving this computation into the service would close that gap.
"""
from typing import NamedTuple, Optional

from .models import PRIORITY_HIGH, PRIORITY_MEDIUM

XP_PER_PRIORITY = {PRIORITY_HIGH: 50, PRIORITY_MEDIUM: 30}
DEFAULT_XP = 10
XP_PER_LEVEL = 100


class Award(NamedTuple):
    xp: int
    level: int
    xp_gain: int
    leveled_up: bool

    @property
    def message(self) -> str:
        if self.leveled_up:
            return f"Level Up! You are now Level {self.level}!"
        return f"+{self.xp_gain} XP gained!"


def xp_for_priority(priority: Optional[str]) -> int:
    return XP_PER_PRIORITY.get(priority, DEFAULT_XP)


def level_threshold(level: int) -> int:
    return level * XP_PER_LEVEL


def award_completion(xp: int, level: int, priority: Optional[str]) -> Award:
    """Add the XP for completing a task of the given priority.

    Overflow past the level threshold carries into the next level. The carry
    repeats until xp is below the current threshold, so xp < level * 100
    always holds afterwards.
    """
    xp_gain = xp_for_priority(priority)
    new_xp = xp + xp_gain
    new_level = level
    while new_xp >= level_threshold(new_level):
        new_xp -= level_threshold(new_level)
        new_level += 1
    return Award(xp=new_xp, level=new_level, xp_gain=xp_gain, leveled_up=new_level > level)
