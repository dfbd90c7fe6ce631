# bracket_planner.py
"""
Single elimination bracket planning.

Computes the sequence of rounds that reduces a field of any size (2-128) to
a single winner. Fields that are not a canonical power of two first play a
pre-round that trims them to the largest canonical size below them; the
named rounds (Round of 64 ... Championship) follow.

Also provides seeding and per-round pairing helpers used by the tournament
state machine.
"""

import logging

from app_types import (
    BracketFailure,
    BracketMatch,
    BracketPlan,
    MatchStatus,
    PairingPolicy,
    Participant,
    ParticipantId,
    Round,
)
from constants import (
    CANONICAL_BRACKET_SIZES,
    MAX_BRACKET_FIELD,
    MIN_BRACKET_FIELD,
    PRE_ROUND_NAME,
    ROUND_NAMES,
)
from exceptions import ValidationError

logger = logging.getLogger("app.bracket_planner")

FAILURE_MESSAGES = {
    BracketFailure.TOO_FEW_PARTICIPANTS: (
        f"A bracket needs at least {MIN_BRACKET_FIELD} participants."
    ),
    BracketFailure.UNSUPPORTED_FIELD_SIZE: (
        f"Brackets support at most {MAX_BRACKET_FIELD} participants."
    ),
}


def get_round_name(player_count: int) -> str:
    """Get the name of a named round based on its number of entrants."""
    return ROUND_NAMES.get(player_count, f"Round of {player_count}")


def target_size(field_size: int) -> int:
    """Largest canonical bracket size not above the field.

    Fields above the largest canonical size target the largest one.
    """
    for size in CANONICAL_BRACKET_SIZES:
        if size <= field_size:
            return size
    return CANONICAL_BRACKET_SIZES[-1]


def plan_bracket(participant_count: int) -> BracketPlan:
    """Compute the rounds needed to reduce a field to a single winner.

    Args:
        participant_count: Number of entrants (players or pairs)

    Returns:
        BracketPlan with the ordered rounds, or the failure reason.
    """
    if participant_count < MIN_BRACKET_FIELD:
        return BracketPlan(participant_count, None, BracketFailure.TOO_FEW_PARTICIPANTS)
    if participant_count > MAX_BRACKET_FIELD:
        logger.warning(
            "Field of %d exceeds the supported maximum of %d",
            participant_count,
            MAX_BRACKET_FIELD,
        )
        return BracketPlan(participant_count, None, BracketFailure.UNSUPPORTED_FIELD_SIZE)

    rounds: list[Round] = []
    field_size = participant_count
    while field_size > 1:
        number = len(rounds) + 1
        target = target_size(field_size)
        if field_size > target:
            rounds.append(
                Round(
                    number=number,
                    name=f"{PRE_ROUND_NAME} {number}",
                    player_count=field_size,
                    match_count=field_size - target,
                    advancing_count=target,
                    is_pre_round=True,
                )
            )
            field_size = target
        else:
            half = field_size // 2
            rounds.append(
                Round(
                    number=number,
                    name=get_round_name(field_size),
                    player_count=field_size,
                    match_count=half,
                    advancing_count=half,
                )
            )
            field_size = half

    logger.debug(
        "Planned %d round(s) for %d participants: %s",
        len(rounds),
        participant_count,
        [r.name for r in rounds],
    )
    return BracketPlan(participant_count, rounds)


# =============================================================================
# Seeding and pairing
# =============================================================================


def seed_participants(entries: list[tuple[ParticipantId, str]]) -> list[Participant]:
    """Assign 1-based seed numbers in input order."""
    ids = [entry_id for entry_id, _ in entries]
    if len(ids) != len(set(ids)):
        raise ValidationError("Duplicate participant ids in seeding list")
    return [
        Participant(id=entry_id, name=name, seed_number=index + 1)
        for index, (entry_id, name) in enumerate(entries)
    ]


def generate_bracket_order(bracket_size: int) -> list[int]:
    """
    Generate the standard tournament bracket order.
    If all higher seeds win, seeds 1 and 2 can only meet in the final.

    For 8 entrants: [1, 8, 4, 5, 2, 7, 3, 6]
    """
    order = [1]
    while len(order) < bracket_size:
        mirror = len(order) * 2 + 1
        order = [seed for s in order for seed in (s, mirror - s)]
    return order


def pair_entrants(
    entrants: list[ParticipantId],
    match_count: int,
    policy: PairingPolicy = PairingPolicy.ADJACENT,
) -> tuple[list[ParticipantId], list[tuple[ParticipantId, ParticipantId]]]:
    """Decide the byes and pairings of one round.

    The highest seeds (front of the list) receive the byes. The rest meet
    adjacently under ADJACENT. Under STANDARD a full round follows the
    classic bracket order and a pre-round pairs the remaining entrants
    outside-in (highest remaining seed against the lowest).

    Returns:
        Tuple of (entrants with a bye, list of pairings)

    Raises:
        ValidationError: If the round needs more entrants than supplied.
    """
    bye_count = len(entrants) - 2 * match_count
    if match_count < 1 or bye_count < 0:
        raise ValidationError(
            f"Cannot play {match_count} match(es) with {len(entrants)} entrants"
        )

    byes = list(entrants[:bye_count])
    playing = list(entrants[bye_count:])

    if policy == PairingPolicy.ADJACENT:
        pairings = [(playing[i], playing[i + 1]) for i in range(0, len(playing), 2)]
    elif bye_count == 0 and len(playing) in CANONICAL_BRACKET_SIZES:
        order = generate_bracket_order(len(playing))
        pairings = [
            (playing[order[i] - 1], playing[order[i + 1] - 1])
            for i in range(0, len(order), 2)
        ]
    else:
        pairings = [(playing[i], playing[-1 - i]) for i in range(match_count)]

    return byes, pairings


def build_round_matches(
    round_: Round,
    entrants: list[ParticipantId],
    policy: PairingPolicy = PairingPolicy.ADJACENT,
) -> list[BracketMatch]:
    """Create the matches of a planned round, byes first.

    Bye holders get a decided BYE match so they carry forward in position.
    """
    if len(entrants) != round_.player_count:
        raise ValidationError(
            f"{round_.name} expects {round_.player_count} entrants, got {len(entrants)}"
        )

    byes, pairings = pair_entrants(entrants, round_.match_count, policy)
    matches: list[BracketMatch] = []
    for participant in byes:
        matches.append(
            BracketMatch(
                id=f"r{round_.number}m{len(matches) + 1}",
                round_number=round_.number,
                match_number=len(matches) + 1,
                round_name=round_.name,
                participant_1=participant,
                winner_id=participant,
                status=MatchStatus.BYE,
            )
        )
    for participant_1, participant_2 in pairings:
        matches.append(
            BracketMatch(
                id=f"r{round_.number}m{len(matches) + 1}",
                round_number=round_.number,
                match_number=len(matches) + 1,
                round_name=round_.name,
                participant_1=participant_1,
                participant_2=participant_2,
            )
        )
    return matches


def next_round_entrants(matches: list[BracketMatch]) -> list[ParticipantId]:
    """Winners of a round in match order (bye holders first).

    Raises:
        ValidationError: If any match is still undecided.
    """
    undecided = [m.id for m in matches if not m.is_decided]
    if undecided:
        raise ValidationError(f"Matches without a winner: {', '.join(undecided)}")
    return [m.winner_id for m in sorted(matches, key=lambda m: m.match_number)]
