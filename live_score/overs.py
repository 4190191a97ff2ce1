# live_score/overs.py
from __future__ import annotations

from typing import Union

OversLike = Union[str, int, float]

MAX_WICKETS = 10


def overs_to_balls(overs: OversLike) -> int:
    """
    Converts cricket overs notation to balls.

    Supported inputs:
    - "20.0", "19.4", "7.2" (string overs notation)
    - 20 (int overs)
    - 19.4 (float) -> treated as "19.4"

    Rule: ".x" means x balls (0-5). Example: 19.4 = 19*6 + 4 = 118 balls.
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    s = str(overs).strip()
    if not s:
        raise ValueError("Overs cannot be empty")

    if "." not in s:
        ov_i = int(s)
        if ov_i < 0:
            raise ValueError(f"Invalid overs: {overs}")
        return ov_i * 6

    ov_part, ball_part = s.split(".", 1)
    ov_i = int(ov_part) if ov_part else 0

    ball_part = ball_part.strip()
    balls_i = int(ball_part) if ball_part else 0

    if ov_i < 0:
        raise ValueError(f"Invalid overs: {overs}")
    if balls_i < 0 or balls_i > 5:
        raise ValueError(f"Invalid overs format: {overs} (balls part must be 0-5)")

    return ov_i * 6 + balls_i


def is_valid_overs(overs: OversLike) -> bool:
    try:
        overs_to_balls(overs)
    except ValueError:
        return False
    return True


def format_run_rate(runs: float, overs: float) -> str:
    """
    Runs per over as the feed shows it: runs / overs (decimal overs value
    taken as-is), two decimals, "0.00" when no overs have been bowled.
    """
    if not overs or overs <= 0:
        return "0.00"
    return f"{runs / overs:.2f}"
