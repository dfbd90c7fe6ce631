# app_types.py
"""
Type aliases and data classes for the Badminton Club App.

This module defines the shared vocabulary of the queue and tournament core:
player tiers and statuses, match shapes and the result objects returned by
the selection and bracket planning functions.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum

# =============================================================================
# Basic Type Aliases
# =============================================================================

# A player's unique identifier
PlayerId = str

# A tournament participant's unique identifier (player id or pair id)
ParticipantId = str


class Level(IntEnum):
    """Canonical skill tier used by the selection core. Ordered A < B < C < D."""

    A = 0
    B = 1
    C = 2
    D = 3


class MajorLevel(str, Enum):
    """Major level of the richer roster classification."""

    NEWBIE = "Newbie"
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCE = "Advance"


class SubLevel(str, Enum):
    """Sub level, only meaningful for Beginner, Intermediate and Advance."""

    LOW = "Low"
    MID = "Mid"
    HIGH = "High"


class PlayerStatus(str, Enum):
    """Queue status of a player within an event."""

    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    WAITING = "waiting"
    PAUSED = "paused"
    DONE = "done"


class PairType(str, Enum):
    BALANCED = "Balanced"
    MIXED = "Mixed"


class TeamSide(str, Enum):
    TEAM_1 = "team1"
    TEAM_2 = "team2"


class TournamentStage(str, Enum):
    SETUP = "setup"
    ELIMINATION_STAGE = "elimination_stage"
    COMPLETED = "completed"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    BYE = "bye"


class PairingPolicy(str, Enum):
    """How entrants of a round are paired.

    ADJACENT pairs neighbours in the supplied order (1v2, 3v4, ...).
    STANDARD uses the classic bracket order that keeps top seeds apart.
    """

    ADJACENT = "adjacent"
    STANDARD = "standard"


class SelectionFailure(str, Enum):
    """Reasons the fair selector could not produce a match."""

    INSUFFICIENT_PLAYERS = "insufficient_players"
    CANNOT_FORM_FAIR_TEAM = "cannot_form_fair_team"


class BracketFailure(str, Enum):
    """Reasons the bracket planner could not produce a plan."""

    TOO_FEW_PARTICIPANTS = "too_few_participants"
    UNSUPPORTED_FIELD_SIZE = "unsupported_field_size"


# =============================================================================
# Match Data Classes
# =============================================================================


@dataclass
class GamePair:
    """One side of a doubles match.

    Attributes:
        players: The two players of the pair
        average_level: Mean tier value of the two players
        pair_type: Balanced if the tiers differ by at most one, else Mixed
    """

    players: tuple  # tuple[Player, Player]
    average_level: float
    pair_type: PairType


@dataclass
class GameMatch:
    """A doubles match of two pairs."""

    pair_1: GamePair
    pair_2: GamePair

    @property
    def players(self) -> list:
        return [*self.pair_1.players, *self.pair_2.players]

    @property
    def player_ids(self) -> list[PlayerId]:
        return [p.id for p in self.players]


# =============================================================================
# Tournament Data Classes
# =============================================================================


@dataclass
class Participant:
    """A tournament entrant. seed_number is 1-based and follows input order."""

    id: ParticipantId
    name: str
    seed_number: int


@dataclass(frozen=True)
class Round:
    """One round of an elimination plan.

    Attributes:
        number: 1-based position in the plan
        name: Human-readable label ("Pre-Round 1", "Semi Finals", ...)
        player_count: Entrants at the start of the round
        match_count: Matches played in the round
        advancing_count: Entrants who proceed to the next round
        is_pre_round: True for rounds that only trim the field to a canonical size
    """

    number: int
    name: str
    player_count: int
    match_count: int
    advancing_count: int
    is_pre_round: bool = False

    @property
    def bye_count(self) -> int:
        """Entrants that skip the round and advance directly."""
        return self.player_count - 2 * self.match_count


@dataclass
class BracketMatch:
    """A scheduled, completed or bye match in an elimination bracket."""

    id: str
    round_number: int
    match_number: int
    round_name: str
    participant_1: ParticipantId | None
    participant_2: ParticipantId | None = None
    score_1: int | None = None
    score_2: int | None = None
    winner_id: ParticipantId | None = None
    status: MatchStatus = MatchStatus.SCHEDULED

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class SelectionResult:
    """Result from the fair selector.

    Attributes:
        players: The four selected players in admission order, or None
        failure: Why selection failed, or None on success
        success: Whether a match could be formed
    """

    players: list | None
    failure: SelectionFailure | None = None
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.players is not None


@dataclass
class BracketPlan:
    """Result from the bracket planner.

    Attributes:
        participant_count: The field size that was planned
        rounds: Ordered rounds from the first round to the final, or None
        failure: Why planning failed, or None on success
        success: Whether a plan was produced
    """

    participant_count: int
    rounds: list[Round] | None
    failure: BracketFailure | None = None
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.rounds is not None

    @property
    def total_matches(self) -> int:
        return sum(r.match_count for r in self.rounds or [])
