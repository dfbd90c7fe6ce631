# session_logic.py
import logging
import os
import pickle
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from app_types import GameMatch, Level, PlayerId, PlayerStatus, SelectionResult, TeamSide
from constants import DEFAULT_COURT_COUNT, PLAYERS_PER_MATCH, SESSIONS_DIR
from exceptions import SessionError, ValidationError
from fair_selector import create_pair, form_match, select_fair_match, uses_skill_brackets
from levels import parse_level

logger = logging.getLogger("app.session_logic")


@dataclass
class Player:
    """A roster entry as seen by one event.

    level accepts anything parse_level understands and is normalised to a
    Level. bracket is the optional 0-9 skill bracket from the roster.
    """

    id: PlayerId
    name: str
    level: Level = Level.A
    games_played: int = 0
    eligible: bool = True
    status: PlayerStatus = PlayerStatus.AVAILABLE
    game_penalty_bonus: int = 0
    match_history: list[str] = field(default_factory=list)
    bracket: int | None = None

    def __post_init__(self):
        self.level = parse_level(self.level)
        try:
            self.status = PlayerStatus(self.status)
        except ValueError:
            raise ValidationError(f"Invalid status {self.status!r} for {self.name}") from None
        if self.games_played < 0:
            raise ValidationError(f"games_played cannot be negative for {self.name}")


@dataclass
class Game:
    """A match on court (or finished)."""

    id: str
    match: GameMatch
    game_number: int
    court: int
    started_at: datetime
    completed: bool = False
    winner: TeamSide | None = None
    database_id: str | None = None

    @property
    def player_ids(self) -> list[PlayerId]:
        return self.match.player_ids


class SessionManager:
    """Stores named event sessions as pickle files under SESSIONS_DIR."""

    SUFFIX = ".pkl"

    @classmethod
    def path_for(cls, session_name: str) -> str:
        return os.path.join(SESSIONS_DIR, session_name + cls.SUFFIX)

    @classmethod
    def save(cls, session: "EventSession", session_name: str) -> None:
        """Writes to a temporary file first, then renames it over the old one."""
        os.makedirs(SESSIONS_DIR, exist_ok=True)
        path = cls.path_for(session_name)
        tmp_path = path + ".tmp"
        with open(tmp_path, "wb") as f:
            pickle.dump(session, f)
        os.replace(tmp_path, path)
        logger.debug("Session '%s' saved to %s", session_name, path)

    @classmethod
    def load(cls, session_name: str) -> "EventSession | None":
        """
        Returns the saved session, or None if there is none.
        An unreadable file is renamed to <name>.pkl.corrupt and treated as missing.
        """
        path = cls.path_for(session_name)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                session = pickle.load(f)
        except (pickle.UnpicklingError, EOFError) as e:
            logger.warning("Session '%s' is unreadable (%s); moved aside", session_name, e)
            os.replace(path, path + ".corrupt")
            return None
        logger.info("Session '%s' loaded", session_name)
        return session

    @classmethod
    def clear(cls, session_name: str) -> None:
        try:
            os.remove(cls.path_for(session_name))
        except FileNotFoundError:
            return
        logger.info("Session '%s' cleared", session_name)


class EventSession:
    """
    Orchestrates the game queue of one club event.
    Selection is delegated to the fair selector; this class owns the status
    and games-played mutations that follow. It contains no persistence code.
    """

    def __init__(self, players, court_count=DEFAULT_COURT_COUNT, event_id=None, is_recorded=False):
        if isinstance(players, dict):
            players = players.values()
        self.player_pool: dict[PlayerId, Player] = {p.id: p for p in players}
        self.court_count = court_count
        self.event_id = event_id
        self.is_recorded = is_recorded

        self.active_games: dict[str, Game] = {}
        self.completed_games: list[Game] = []
        self.waiting_matches: list[GameMatch] = []
        self.game_counter = 1
        self.queued_removals: set[PlayerId] = set()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def roster_snapshot(self) -> list[Player]:
        """Copies of the current roster, safe to hand to pure functions."""
        return [
            replace(p, match_history=list(p.match_history))
            for p in self.player_pool.values()
        ]

    def select_next_match(self) -> SelectionResult:
        """Runs the fair selector on a snapshot and maps the result back to live players."""
        result = select_fair_match(self.roster_snapshot())
        if result.success:
            result.players = [self.player_pool[p.id] for p in result.players]
        return result

    def free_courts(self) -> list[int]:
        busy = {g.court for g in self.active_games.values()}
        return [c for c in range(1, self.court_count + 1) if c not in busy]

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------

    def _resolve_players(self, players, allowed_statuses) -> list[Player]:
        ids = [p if isinstance(p, str) else p.id for p in players]
        if len(ids) != PLAYERS_PER_MATCH or len(set(ids)) != PLAYERS_PER_MATCH:
            raise SessionError(f"A game needs {PLAYERS_PER_MATCH} distinct players")

        resolved = []
        for player_id in ids:
            player = self.player_pool.get(player_id)
            if player is None:
                raise SessionError(f"Player '{player_id}' is not part of this event")
            if player.status not in allowed_statuses:
                raise SessionError(
                    f"Player '{player.name}' is {player.status.value}, not available"
                )
            resolved.append(player)
        return resolved

    def _claim_court(self, court: int | None) -> int:
        free = self.free_courts()
        if not free:
            raise SessionError(f"All {self.court_count} courts are in use")
        if court is None:
            return free[0]
        if court not in free:
            raise SessionError(f"Court {court} is not free")
        return court

    def _start(self, match: GameMatch, court: int | None) -> Game:
        court = self._claim_court(court)
        game = Game(
            id=uuid.uuid4().hex,
            match=match,
            game_number=self.game_counter,
            court=court,
            started_at=datetime.now(timezone.utc),
        )
        for player in match.players:
            player.status = PlayerStatus.IN_PROGRESS
            player.match_history.append(game.id)

        self.active_games[game.id] = game
        self.game_counter += 1
        logger.info(
            "Game #%d started on court %d: %s",
            game.game_number,
            court,
            ", ".join(p.name for p in match.players),
        )
        return game

    def start_game(self, players, court: int | None = None) -> Game:
        """
        Starts a game with four available players.
        Args:
            players: Four Player objects or player ids, e.g. a selection result.
            court: Court number to use, or None for the lowest free court.
        """
        resolved = self._resolve_players(players, {PlayerStatus.AVAILABLE})
        return self._start(form_match(resolved), court)

    def _get_active_game(self, game_id: str) -> Game:
        game = self.active_games.get(game_id)
        if game is None:
            raise SessionError(f"No active game with id '{game_id}'")
        return game

    def _release(self, player_ids) -> None:
        for player_id in player_ids:
            player = self.player_pool.get(player_id)
            if player is not None:
                player.status = PlayerStatus.AVAILABLE
            if player_id in self.queued_removals:
                self._remove_player_now(player_id)

    def complete_game(self, game_id: str, winner: TeamSide | None = None) -> Game:
        """Marks a game as done and credits a game to each of its players."""
        game = self._get_active_game(game_id)
        del self.active_games[game_id]

        for player_id in game.player_ids:
            if player_id in self.player_pool:
                self.player_pool[player_id].games_played += 1
        self._release(game.player_ids)

        game.completed = True
        game.winner = TeamSide(winner) if winner is not None else None
        self.completed_games.append(game)
        logger.info("Game #%d completed", game.game_number)
        return game

    def cancel_game(self, game_id: str) -> Game:
        """Removes an active game without crediting any games played."""
        game = self._get_active_game(game_id)
        del self.active_games[game_id]
        self._release(game.player_ids)
        logger.info("Game #%d cancelled", game.game_number)
        return game

    def rollback_game(self, game_id: str) -> None:
        """Undoes a start that could not be persisted, as if it never happened."""
        game = self.cancel_game(game_id)
        for player_id in game.player_ids:
            player = self.player_pool.get(player_id)
            if player is not None and game.id in player.match_history:
                player.match_history.remove(game.id)
        if game.game_number == self.game_counter - 1:
            self.game_counter -= 1

    def replace_player_in_game(self, game_id: str, old_player_id: PlayerId, new_player_id: PlayerId) -> Game:
        """Substitutes a player in an active game and rebuilds the affected pair."""
        game = self._get_active_game(game_id)
        if old_player_id not in game.player_ids:
            raise SessionError(f"Player '{old_player_id}' is not in game #{game.game_number}")

        new_player = self.player_pool.get(new_player_id)
        if new_player is None:
            raise SessionError(f"Player '{new_player_id}' is not part of this event")
        if new_player.status != PlayerStatus.AVAILABLE:
            raise SessionError(f"Player '{new_player.name}' is not available")

        match = game.match
        # Both pairs are rebuilt so they are scored on the same scale
        sides = [
            [new_player if p.id == old_player_id else p for p in pair.players]
            for pair in (match.pair_1, match.pair_2)
        ]
        use_bracket = uses_skill_brackets(sides[0] + sides[1])
        match.pair_1 = create_pair(*sides[0], use_bracket=use_bracket)
        match.pair_2 = create_pair(*sides[1], use_bracket=use_bracket)

        new_player.status = PlayerStatus.IN_PROGRESS
        new_player.match_history.append(game.id)
        self._release([old_player_id])
        logger.info("Player '%s' substituted into game #%d", new_player.name, game.game_number)
        return game

    # ------------------------------------------------------------------
    # Waiting queue
    # ------------------------------------------------------------------

    def queue_match(self, players) -> GameMatch:
        """Queues a match for the next free court. Its players become waiting."""
        resolved = self._resolve_players(players, {PlayerStatus.AVAILABLE})
        match = form_match(resolved)
        for player in resolved:
            player.status = PlayerStatus.WAITING
        self.waiting_matches.append(match)
        return match

    def start_waiting_match(self, court: int | None = None) -> Game:
        """Starts the match at the head of the waiting queue."""
        if not self.waiting_matches:
            raise SessionError("No waiting matches")
        match = self.waiting_matches[0]
        game = self._start(match, court)
        self.waiting_matches.pop(0)
        return game

    def remove_waiting_match(self, index: int) -> GameMatch:
        if not 0 <= index < len(self.waiting_matches):
            raise SessionError(f"No waiting match at position {index}")
        match = self.waiting_matches.pop(index)
        self._release(match.player_ids)
        return match

    # ------------------------------------------------------------------
    # Roster management
    # ------------------------------------------------------------------

    def reset_all_players(self):
        """Makes everyone available again and clears games, queue and counter."""
        self.active_games.clear()
        self.waiting_matches.clear()
        self.game_counter = 1
        for player in self.player_pool.values():
            player.status = PlayerStatus.AVAILABLE
        for player_id in list(self.queued_removals):
            self._remove_player_now(player_id)

    def update_courts(self, new_court_count: int):
        """Updates available courts mid event; busy courts above the new count finish normally."""
        new_court_count = int(new_court_count)
        if new_court_count < 1:
            raise ValueError("Number of courts must be at least 1.")
        self.court_count = new_court_count

    def add_player(self, player: Player) -> bool:
        """
        Adds a player mid-event.
        Returns True if added, False if the id already exists.
        """
        if player.id in self.player_pool:
            return False
        self.player_pool[player.id] = player
        return True

    def remove_player(self, player_id: PlayerId) -> tuple[bool, str]:
        """
        Removes a player from the event.
        - If the player is on court, queues them for removal after their game
        - If the player is waiting, drops their waiting match first
        - Otherwise removes immediately

        Returns (success, status) where status is 'immediate', 'queued', or 'not_found'.
        """
        player = self.player_pool.get(player_id)
        if player is None:
            return False, "not_found"

        if player.status == PlayerStatus.IN_PROGRESS:
            self.queued_removals.add(player_id)
            return True, "queued"

        for index, match in enumerate(self.waiting_matches):
            if player_id in match.player_ids:
                self.remove_waiting_match(index)
                break

        self._remove_player_now(player_id)
        return True, "immediate"

    def _remove_player_now(self, player_id: PlayerId):
        """Internal method to actually remove a player from all structures."""
        self.player_pool.pop(player_id, None)
        self.queued_removals.discard(player_id)
