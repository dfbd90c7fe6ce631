"""
Service layer for tournaments.

Applies tournament state changes and mirrors them to the database when the
tournament is recorded, and renders bracket plans as tables.
"""

import logging

import pandas as pd

from app_types import BracketMatch, BracketPlan, PairingPolicy, ParticipantId
from bracket_planner import FAILURE_MESSAGES
from database import TournamentDB
from tournament_logic import Tournament

logger = logging.getLogger("app.tournament_service")

PLAN_COLUMNS = ["Round", "Name", "Players", "Matches", "Advancing"]


def create_plan_dataframe(plan: BracketPlan) -> pd.DataFrame:
    """Creates a DataFrame describing each round of a plan.

    Raises:
        ValueError: If the plan is a failure.
    """
    if not plan.success:
        raise ValueError(FAILURE_MESSAGES[plan.failure])
    return pd.DataFrame(
        [
            (r.number, r.name, r.player_count, r.match_count, r.advancing_count)
            for r in plan.rounds
        ],
        columns=PLAN_COLUMNS,
    )


def _match_row(match: BracketMatch) -> dict:
    return {
        "stage": "elimination_stage",
        "bracket_position": match.id,
        "round_number": match.round_number,
        "match_number": match.match_number,
        "participant1_id": match.participant_1,
        "participant2_id": match.participant_2,
        "participant1_score": match.score_1,
        "participant2_score": match.score_2,
        "winner_id": match.winner_id,
        "status": match.status.value,
    }


def create_tournament(
    name: str,
    entries: list[tuple[ParticipantId, str]],
    event_id: str | None = None,
    policy: PairingPolicy = PairingPolicy.ADJACENT,
    is_recorded: bool = True,
) -> Tournament:
    """
    Creates a tournament in its setup stage with the given seeding order.

    1. Creates the tournament record (if recorded)
    2. Seeds the participants in input order
    3. Stores the participants with their seed numbers (if recorded)

    Raises:
        DatabaseError: If the tournament cannot be stored.
        ValidationError: If a participant id is duplicated.
    """
    tournament = Tournament(name=name, policy=policy, event_id=event_id)
    tournament.add_participants(entries)

    if is_recorded:
        tournament.database_id = TournamentDB.create_tournament(
            event_id, name, tournament.policy.value
        )
        TournamentDB.add_participants(
            tournament.database_id,
            [
                {"player_id": p.id, "seed_number": p.seed_number}
                for p in tournament.participants
            ],
        )
    return tournament


def generate_and_store_bracket(tournament: Tournament) -> BracketPlan:
    """
    Generates the bracket, then stores the first round and the stage change.

    Raises:
        TournamentError: If the bracket cannot be generated.
        DatabaseError: If storing fails.
    """
    plan = tournament.generate_bracket()
    if tournament.database_id is not None:
        TournamentDB.save_matches(
            tournament.database_id, [_match_row(m) for m in tournament.matches]
        )
        TournamentDB.update_stage(tournament.database_id, tournament.stage.value)
    return plan


def submit_match_result(
    tournament: Tournament,
    match_id: str,
    score_1: int,
    score_2: int,
    winner_id: ParticipantId,
) -> BracketMatch:
    """
    Records a result, then stores the match and any round it unlocked.

    Raises:
        TournamentError, ValidationError: If the result is not acceptable.
        DatabaseError: If storing fails.
    """
    round_before = tournament.current_round_number
    stage_before = tournament.stage
    match = tournament.record_result(match_id, score_1, score_2, winner_id)

    if tournament.database_id is None:
        return match

    changed = [match]
    if tournament.current_round_number != round_before:
        changed.extend(tournament.current_round_matches())
        logger.info(
            f"'{tournament.name}' advanced to {tournament.current_round().name}"
        )
    TournamentDB.save_matches(tournament.database_id, [_match_row(m) for m in changed])
    if tournament.stage != stage_before:
        TournamentDB.update_stage(tournament.database_id, tournament.stage.value)
    return match
