from __future__ import annotations

import re

MIN_FENCE_LENGTH = 3
_BACKTICK_RUN = re.compile(r"`+")


def longest_backtick_run(content: str) -> int:
    """Length of the longest run of consecutive backticks in `content` (0 if none)."""
    return max((len(m.group()) for m in _BACKTICK_RUN.finditer(content)), default=0)


def allocate_fence(content: str) -> str:
    """Return a backtick fence that cannot collide with any run inside `content`.

    The fence is one backtick longer than the longest run found, and never shorter
    than the conventional three.

    Args:
        content (str): the text that will be placed inside the fenced block

    Returns:
        str: a run of backticks of length `max(longest + 1, 3)`
    """
    return "`" * max(longest_backtick_run(content) + 1, MIN_FENCE_LENGTH)
