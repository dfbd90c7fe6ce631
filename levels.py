# levels.py
"""
Level conversions between the roster classification and the selection tier.

The roster classifies players by a major level (Newbie ... Advance) and, for
all but Newbie, a sub level (Low, Mid, High). Together they map onto a 0-9
skill bracket. The selection core only understands the four-tier Level
(A < B < C < D); each major level maps onto exactly one tier.
"""

from app_types import Level, MajorLevel, SubLevel
from constants import MAX_SKILL_BRACKET
from exceptions import ValidationError

_MAJOR_TO_LEVEL: dict[MajorLevel, Level] = {
    MajorLevel.NEWBIE: Level.A,
    MajorLevel.BEGINNER: Level.B,
    MajorLevel.INTERMEDIATE: Level.C,
    MajorLevel.ADVANCE: Level.D,
}

# First bracket of each banded major level; Low/Mid/High add 0/1/2
_MAJOR_BASE_BRACKET: dict[MajorLevel, int] = {
    MajorLevel.BEGINNER: 1,
    MajorLevel.INTERMEDIATE: 4,
    MajorLevel.ADVANCE: 7,
}

_SUB_OFFSET: dict[SubLevel, int] = {
    SubLevel.LOW: 0,
    SubLevel.MID: 1,
    SubLevel.HIGH: 2,
}


def bracket_from_major_sub(major: MajorLevel, sub: SubLevel | None = None) -> int:
    """Compute the 0-9 skill bracket for a major/sub classification.

    Newbie is always 0. Banded majors without a recognised sub level also
    fall back to 0.
    """
    base = _MAJOR_BASE_BRACKET.get(major)
    if base is None or sub is None:
        return 0
    return base + _SUB_OFFSET[sub]


def major_sub_from_bracket(bracket: int) -> tuple[MajorLevel, SubLevel | None]:
    """Inverse of bracket_from_major_sub.

    Raises:
        ValidationError: If the bracket is outside 0-9.
    """
    if not 0 <= bracket <= MAX_SKILL_BRACKET:
        raise ValidationError(f"Skill bracket must be 0-{MAX_SKILL_BRACKET}, got {bracket}")
    if bracket == 0:
        return MajorLevel.NEWBIE, None

    for major, base in _MAJOR_BASE_BRACKET.items():
        offset = bracket - base
        if 0 <= offset <= 2:
            sub = next(s for s, o in _SUB_OFFSET.items() if o == offset)
            return major, sub

    raise ValidationError(f"Unmapped skill bracket {bracket}")


def level_from_major(major: MajorLevel) -> Level:
    return _MAJOR_TO_LEVEL[major]


def level_from_bracket(bracket: int) -> Level:
    major, _ = major_sub_from_bracket(bracket)
    return level_from_major(major)


def level_display(major: MajorLevel, sub: SubLevel | None, bracket: int) -> str:
    """Human readable label, e.g. 'Newbie' or 'Beginner Mid (2)'."""
    if bracket == 0:
        return MajorLevel.NEWBIE.value
    if sub is not None:
        return f"{major.value} {sub.value} ({bracket})"
    return f"{major.value} ({bracket})"


def parse_level(value) -> Level:
    """Coerce a Level, a letter A-D (any case) or an int 0-3 into a Level.

    Raises:
        ValidationError: If the value does not name a tier.
    """
    if isinstance(value, Level):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in Level.__members__:
            return Level[key]
    elif isinstance(value, int) and not isinstance(value, bool):
        try:
            return Level(value)
        except ValueError:
            pass
    raise ValidationError(f"Invalid level: {value!r}")
