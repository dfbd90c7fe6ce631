# fair_selector.py
"""
Fair match selection for the game queue.

Picks the four players of the next doubles match from a roster snapshot:
players with the fewest games go first (name breaks ties), at most two
players of any tier share a court, and the A and D tiers never meet. The
selected four are then split into the two most even pairs.

Both functions are pure: they never mutate the players they are given.
"""

import logging
from collections import Counter
from typing import Protocol

from app_types import (
    GameMatch,
    GamePair,
    Level,
    PairType,
    PlayerId,
    PlayerStatus,
    SelectionFailure,
    SelectionResult,
)
from constants import (
    BALANCED_PAIR_MAX_LEVEL_DIFF,
    MAX_PAIR_AVERAGE_DIFF,
    MAX_PLAYERS_PER_LEVEL,
    PLAYERS_PER_MATCH,
)
from exceptions import ValidationError
from logger import log_selection_debug

logger = logging.getLogger("app.fair_selector")

# Tiers that may never share a court
_EXCLUSIVE_LEVELS = {Level.A: Level.D, Level.D: Level.A}

FAILURE_MESSAGES = {
    SelectionFailure.INSUFFICIENT_PLAYERS: (
        "Not enough players: need at least 4 available players to form a match."
    ),
    SelectionFailure.CANNOT_FORM_FAIR_TEAM: (
        "Cannot form fair match: unable to form a balanced match with current players."
    ),
}

# The three ways to split four players into two pairs
_SPLITS = (((0, 1), (2, 3)), ((0, 2), (1, 3)), ((0, 3), (1, 2)))


class PlayerLike(Protocol):
    """Protocol for objects with the attributes the selector reads."""

    id: PlayerId
    name: str
    level: Level
    games_played: int
    eligible: bool
    status: PlayerStatus
    bracket: int | None


def is_candidate(player: PlayerLike) -> bool:
    return player.eligible and player.status == PlayerStatus.AVAILABLE


def priority_order(players: list[PlayerLike]) -> list[PlayerLike]:
    """Sort players by games played, then by name (case-sensitive)."""
    return sorted(players, key=lambda p: (p.games_played, p.name))


def select_fair_match(players: list[PlayerLike]) -> SelectionResult:
    """Select four players for the next match.

    Args:
        players: Roster snapshot; only eligible, available players are considered

    Returns:
        SelectionResult holding the four players in admission order, or the
        failure reason. Constraints are never relaxed.
    """
    candidates = [p for p in players if is_candidate(p)]

    if len(candidates) < PLAYERS_PER_MATCH:
        logger.warning(
            "Not enough players: %d available, %d needed",
            len(candidates),
            PLAYERS_PER_MATCH,
        )
        return SelectionResult(None, SelectionFailure.INSUFFICIENT_PLAYERS)

    ordered = priority_order(candidates)
    admitted: list[PlayerLike] = []
    level_counts: Counter = Counter()
    skipped: dict[str, str] = {}

    for player in ordered:
        if len(admitted) == PLAYERS_PER_MATCH:
            break
        if level_counts[player.level] >= MAX_PLAYERS_PER_LEVEL:
            skipped[player.name] = "level cap"
            continue
        excluded = _EXCLUSIVE_LEVELS.get(player.level)
        if excluded is not None and level_counts[excluded] > 0:
            skipped[player.name] = f"excluded by level {excluded.name}"
            continue
        admitted.append(player)
        level_counts[player.level] += 1

    log_selection_debug(logger, ordered, admitted, skipped)

    if len(admitted) < PLAYERS_PER_MATCH:
        logger.warning(
            "Cannot form fair match from %d candidates (admitted %d)",
            len(ordered),
            len(admitted),
        )
        return SelectionResult(None, SelectionFailure.CANNOT_FORM_FAIR_TEAM)

    logger.info("Selected %s", ", ".join(p.name for p in admitted))
    return SelectionResult(admitted)


def uses_skill_brackets(players: list[PlayerLike]) -> bool:
    """Pairs are scored on the 0-9 skill bracket only when every player has one."""
    return all(p.bracket is not None for p in players)


def create_pair(
    player_1: PlayerLike, player_2: PlayerLike, use_bracket: bool = False
) -> GamePair:
    """Types and averages a pair on the skill bracket or, by default, the tier."""
    if use_bracket:
        value_1, value_2 = player_1.bracket, player_2.bracket
    else:
        value_1, value_2 = int(player_1.level), int(player_2.level)
    level_diff = abs(value_1 - value_2)
    pair_type = (
        PairType.BALANCED if level_diff <= BALANCED_PAIR_MAX_LEVEL_DIFF else PairType.MIXED
    )
    average_level = (value_1 + value_2) / 2
    return GamePair(
        players=(player_1, player_2),
        average_level=average_level,
        pair_type=pair_type,
    )


def can_pair_match(pair_1: GamePair, pair_2: GamePair) -> bool:
    """Whether two pairs make an acceptable match.

    Averages must be within 0.5 of each other. A Mixed pair may only face a
    Balanced pair whose average is not higher than its own.
    """
    if abs(pair_1.average_level - pair_2.average_level) > MAX_PAIR_AVERAGE_DIFF:
        return False
    if pair_1.pair_type == pair_2.pair_type:
        return True
    mixed, balanced = (
        (pair_1, pair_2) if pair_1.pair_type == PairType.MIXED else (pair_2, pair_1)
    )
    return mixed.average_level >= balanced.average_level


def form_match(players: list[PlayerLike]) -> GameMatch:
    """Split four players into the two most even pairs.

    Pairs are scored on skill brackets when all four players have one, on
    tiers otherwise. Splits satisfying can_pair_match are preferred; among
    those (or among all splits when none qualifies) the smallest
    average-level difference wins and ties keep the earlier split.

    Raises:
        ValidationError: If not given exactly four players.
    """
    if len(players) != PLAYERS_PER_MATCH:
        raise ValidationError(
            f"A match needs exactly {PLAYERS_PER_MATCH} players, got {len(players)}"
        )

    use_bracket = uses_skill_brackets(players)
    options = []
    for (a, b), (c, d) in _SPLITS:
        pair_1 = create_pair(players[a], players[b], use_bracket)
        pair_2 = create_pair(players[c], players[d], use_bracket)
        options.append(GameMatch(pair_1, pair_2))

    valid = [m for m in options if can_pair_match(m.pair_1, m.pair_2)]
    if not valid:
        logger.debug("No split satisfies the pairing rules; using the closest one")
    return min(
        valid or options,
        key=lambda m: abs(m.pair_1.average_level - m.pair_2.average_level),
    )
