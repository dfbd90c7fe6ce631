"""
Service layer for orchestrating event session operations that involve both
domain logic and database interactions.

This module sits between the entry points and the lower-level logic/database
modules, ensuring that business rules are applied consistently regardless of
where the operation is initiated (UI or Tests).
"""

import logging

from app_types import PlayerStatus, TeamSide
from constants import DEFAULT_COURT_COUNT
from database import GameDB, PlayerDB
from exceptions import DatabaseError
from fair_selector import FAILURE_MESSAGES
from player_service import rows_to_players
from session_logic import EventSession, Game, SessionManager

logger = logging.getLogger("app.session_service")


def load_event_session(
    event_id: str, court_count: int = DEFAULT_COURT_COUNT
) -> EventSession:
    """
    Builds a recorded session from the event roster stored in the database.

    Raises:
        DatabaseError: If the roster cannot be fetched.
        ValidationError: If a roster row has an unknown status.
    """
    players = rows_to_players(PlayerDB.get_event_players(event_id))
    logger.info(f"Loaded {len(players)} player(s) for event {event_id}")
    return EventSession(
        players=players,
        court_count=court_count,
        event_id=event_id,
        is_recorded=True,
    )


def resume_session(session_name: str) -> EventSession | None:
    """Returns the locally saved session, or None if there is nothing to resume."""
    return SessionManager.load(session_name)


def end_session(session: EventSession, session_name: str) -> None:
    """
    Ends an event: active and waiting games are dropped, everyone is made
    available again and the local save is removed.

    Raises:
        DatabaseError: If resetting player statuses in the database fails.
            The local save is kept in that case.
    """
    player_ids = list(session.player_pool)
    session.reset_all_players()
    if session.is_recorded:
        PlayerDB.update_status(player_ids, PlayerStatus.AVAILABLE)
    SessionManager.clear(session_name)
    logger.info(f"Session '{session_name}' ended")


def _delete_orphaned_game(database_id: str) -> None:
    try:
        GameDB.delete_game(database_id)
    except DatabaseError:
        # The start is rolled back regardless; the row needs manual cleanup
        logger.exception(f"Could not delete orphaned game {database_id}")


def start_next_game(
    session: EventSession, session_name: str, court: int | None = None
) -> tuple[Game | None, str | None]:
    """
    Selects the next fair match, starts it and persists the change.

    1. Runs the fair selector on the session roster
    2. Starts the game (players become in progress)
    3. Records the game and player statuses (if recorded)
    4. Saves the session to disk

    Returns:
        Tuple of (game, error_message). When no court is free or selection
        fails, game is None and error_message is the user-facing reason. If
        recording fails the start is rolled back, including any game row
        already inserted, and the error message describes the failure.
    """
    free = session.free_courts()
    if not free:
        return None, f"All {session.court_count} courts are in use."
    if court is not None and court not in free:
        return None, f"Court {court} is not free."

    result = session.select_next_match()
    if not result.success:
        return None, FAILURE_MESSAGES[result.failure]

    game = session.start_game(result.players, court)

    if session.is_recorded:
        try:
            game.database_id = GameDB.create_game(
                session.event_id, game.player_ids, game.court
            )
            PlayerDB.update_status(game.player_ids, PlayerStatus.IN_PROGRESS)
        except DatabaseError as e:
            logger.error(f"Failed to record game #{game.game_number}: {e}. Rolling back.")
            if game.database_id is not None:
                _delete_orphaned_game(game.database_id)
            session.rollback_game(game.id)
            return None, f"Failed to sync to database: {e}"

    SessionManager.save(session, session_name)
    return game, None


def finish_game(
    session: EventSession,
    session_name: str,
    game_id: str,
    winner: TeamSide | None = None,
) -> Game:
    """
    Completes a game, records it and persists state.

    Raises:
        SessionError: If the game is not active.
        DatabaseError: If recording the result fails. The in-memory completion
            stands and is saved, so the result is not lost.
    """
    game = session.complete_game(game_id, winner)
    try:
        if session.is_recorded and game.database_id is not None:
            GameDB.complete_game(game.database_id, game.winner)
            PlayerDB.record_game_played(
                {
                    pid: session.player_pool[pid].games_played
                    for pid in game.player_ids
                    if pid in session.player_pool
                }
            )
    finally:
        SessionManager.save(session, session_name)
    return game


def cancel_game(session: EventSession, session_name: str, game_id: str) -> Game:
    """
    Cancels an active game; nobody is credited with a game.

    Raises:
        SessionError: If the game is not active.
        DatabaseError: If the database update fails.
    """
    game = session.cancel_game(game_id)
    try:
        if session.is_recorded and game.database_id is not None:
            GameDB.delete_game(game.database_id)
            PlayerDB.update_status(game.player_ids, PlayerStatus.AVAILABLE)
    finally:
        SessionManager.save(session, session_name)
    return game


def substitute_player(
    session: EventSession,
    session_name: str,
    game_id: str,
    old_player_id: str,
    new_player_id: str,
) -> Game:
    """
    Replaces a player in an active game and persists the change.

    Raises:
        SessionError: If the substitution is not allowed.
        DatabaseError: If the database update fails.
    """
    game = session.replace_player_in_game(game_id, old_player_id, new_player_id)
    try:
        if session.is_recorded and game.database_id is not None:
            GameDB.update_players(game.database_id, game.player_ids)
            PlayerDB.update_status([old_player_id], PlayerStatus.AVAILABLE)
            PlayerDB.update_status([new_player_id], PlayerStatus.IN_PROGRESS)
    finally:
        SessionManager.save(session, session_name)
    return game


def update_court_count(
    session: EventSession, session_name: str, new_count: int
) -> None:
    """
    Updates the number of courts and persists the change.
    """
    session.update_courts(new_count)
    SessionManager.save(session, session_name)
