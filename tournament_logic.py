# tournament_logic.py
"""
Single elimination tournament state machine.

A Tournament moves from setup (participants are added and their seeding
order adjusted) through the elimination stage (rounds are opened one at a
time as results come in) to completed (a champion is known). Round structure
comes from the bracket planner; this module only tracks results.
"""

import logging

from app_types import (
    BracketMatch,
    BracketPlan,
    MatchStatus,
    PairingPolicy,
    Participant,
    ParticipantId,
    Round,
    TournamentStage,
)
from bracket_planner import (
    FAILURE_MESSAGES,
    build_round_matches,
    next_round_entrants,
    plan_bracket,
    seed_participants,
)
from exceptions import TournamentError, ValidationError

logger = logging.getLogger("app.tournament_logic")


class Tournament:
    """Tracks seeding, matches and advancement for one elimination tournament."""

    def __init__(
        self,
        name: str,
        policy: PairingPolicy = PairingPolicy.ADJACENT,
        event_id: str | None = None,
    ):
        self.name = name
        self.policy = PairingPolicy(policy)
        self.event_id = event_id
        self.database_id: str | None = None

        self.stage = TournamentStage.SETUP
        self.participants: list[Participant] = []
        self.plan: BracketPlan | None = None
        self.matches: list[BracketMatch] = []
        self.current_round_number = 0
        self.champion_id: ParticipantId | None = None

    @property
    def rounds(self) -> list[Round]:
        if self.plan is None or not self.plan.success:
            return []
        return self.plan.rounds

    def _require_stage(self, stage: TournamentStage, action: str) -> None:
        if self.stage != stage:
            raise TournamentError(
                f"Cannot {action} while tournament is in stage '{self.stage.value}'"
            )

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_participants(self, entries: list[tuple[ParticipantId, str]]) -> list[Participant]:
        """Appends entrants to the seeding list. Seeds follow list order."""
        self._require_stage(TournamentStage.SETUP, "add participants")
        existing = [(p.id, p.name) for p in self.participants]
        self.participants = seed_participants(existing + list(entries))
        logger.info("%d participant(s) added to '%s'", len(entries), self.name)
        return self.participants

    def move_participant(self, index: int, direction: str) -> None:
        """Swaps a participant with its neighbour ('up' or 'down'). Out-of-range moves are ignored."""
        self._require_stage(TournamentStage.SETUP, "reorder participants")
        if direction not in ("up", "down"):
            raise ValidationError(f"Invalid direction: {direction!r}")

        new_index = index - 1 if direction == "up" else index + 1
        if not (0 <= index < len(self.participants)) or not (0 <= new_index < len(self.participants)):
            return

        entries = [(p.id, p.name) for p in self.participants]
        entries[index], entries[new_index] = entries[new_index], entries[index]
        self.participants = seed_participants(entries)

    def participant_name(self, participant_id: ParticipantId) -> str:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant.name
        raise ValidationError(f"Unknown participant '{participant_id}'")

    # ------------------------------------------------------------------
    # Elimination stage
    # ------------------------------------------------------------------

    def generate_bracket(self) -> BracketPlan:
        """Plans the bracket and opens the first round.

        Raises:
            TournamentError: If not in setup, or the field cannot be planned.
        """
        self._require_stage(TournamentStage.SETUP, "generate the bracket")

        plan = plan_bracket(len(self.participants))
        if not plan.success:
            logger.warning("Bracket planning failed for '%s': %s", self.name, plan.failure.value)
            raise TournamentError(FAILURE_MESSAGES[plan.failure])

        self.plan = plan
        self.stage = TournamentStage.ELIMINATION_STAGE
        self._open_round(1, [p.id for p in self.participants])
        logger.info(
            "Bracket generated for '%s': %s",
            self.name,
            " -> ".join(r.name for r in plan.rounds),
        )
        return plan

    def _policy_for(self, round_: Round) -> PairingPolicy:
        # Once a named round has been played, winners are already in bracket position
        first_named = next(r.number for r in self.rounds if not r.is_pre_round)
        if round_.is_pre_round or round_.number == first_named:
            return self.policy
        return PairingPolicy.ADJACENT

    def _open_round(self, number: int, entrants: list[ParticipantId]) -> None:
        round_ = self.rounds[number - 1]
        self.matches.extend(build_round_matches(round_, entrants, self._policy_for(round_)))
        self.current_round_number = number

    def current_round(self) -> Round | None:
        if not self.current_round_number:
            return None
        return self.rounds[self.current_round_number - 1]

    def current_round_matches(self) -> list[BracketMatch]:
        return [m for m in self.matches if m.round_number == self.current_round_number]

    def get_match(self, match_id: str) -> BracketMatch:
        for match in self.matches:
            if match.id == match_id:
                return match
        raise ValidationError(f"Unknown match '{match_id}'")

    def record_result(
        self,
        match_id: str,
        score_1: int,
        score_2: int,
        winner_id: ParticipantId,
    ) -> BracketMatch:
        """Records a match result and advances the bracket when the round is complete.

        Raises:
            TournamentError: If the tournament is not in the elimination stage,
                or the match is not open for a result.
            ValidationError: If the winner did not play the match, a score is
                negative, or the winner has the lower score.
        """
        self._require_stage(TournamentStage.ELIMINATION_STAGE, "record results")
        match = self.get_match(match_id)

        if match.round_number != self.current_round_number:
            raise TournamentError(f"Match '{match_id}' is not in the current round")
        if match.status != MatchStatus.SCHEDULED:
            raise TournamentError(f"Match '{match_id}' is already {match.status.value}")
        if winner_id not in (match.participant_1, match.participant_2):
            raise ValidationError(f"'{winner_id}' did not play match '{match_id}'")
        if score_1 < 0 or score_2 < 0:
            raise ValidationError("Scores cannot be negative")
        winner_score, loser_score = (
            (score_1, score_2) if winner_id == match.participant_1 else (score_2, score_1)
        )
        if winner_score < loser_score:
            raise ValidationError(
                f"'{winner_id}' cannot win match '{match_id}' with {winner_score}-{loser_score}"
            )

        match.score_1 = score_1
        match.score_2 = score_2
        match.winner_id = winner_id
        match.status = MatchStatus.COMPLETED

        round_matches = self.current_round_matches()
        if all(m.is_decided for m in round_matches):
            self._advance(round_matches)
        return match

    def _advance(self, round_matches: list[BracketMatch]) -> None:
        winners = next_round_entrants(round_matches)
        if self.current_round_number == len(self.rounds):
            self.champion_id = winners[0]
            self.stage = TournamentStage.COMPLETED
            logger.info("'%s' completed, champion: %s", self.name, self.participant_name(self.champion_id))
            return
        self._open_round(self.current_round_number + 1, winners)
