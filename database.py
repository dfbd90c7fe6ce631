# database.py
"""
Database operations for the Badminton Club App.

This module handles all Supabase interactions for event rosters, games and
tournaments. All methods translate Supabase exceptions to DatabaseError for
consistent error handling.
"""

import logging

import streamlit as st
from supabase import create_client, Client

from app_types import PlayerStatus, TeamSide
from exceptions import DatabaseError

logger = logging.getLogger("app.database")


# Initialize Supabase client
@st.cache_resource
def get_supabase_client() -> Client:
    url = st.secrets["SUPABASE_URL"]
    key = st.secrets["SUPABASE_KEY"]
    return create_client(url, key)


class PlayerDB:
    """Handles roster persistence in Supabase."""

    @staticmethod
    def get_event_players(event_id: str) -> list[dict]:
        """Fetches the roster rows of every player registered for an event.

        Returns:
            List of player rows (id, name, major_level, sub_level, games_played, ...).

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            supabase = get_supabase_client()
            response = (
                supabase.table("event_players")
                .select("player_id, players(*)")
                .eq("event_id", event_id)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: get_event_players '{event_id}'")
            raise DatabaseError(f"Failed to fetch players for event '{event_id}'") from e

        return [row["players"] for row in response.data or [] if row.get("players")]

    @staticmethod
    def update_status(player_ids: list[str], status: PlayerStatus) -> None:
        """Sets the queue status of several players.

        Raises:
            DatabaseError: If the update fails.
        """
        if not player_ids:
            return

        try:
            supabase = get_supabase_client()
            supabase.table("players").update({"status": status.value}).in_(
                "id", player_ids
            ).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: update_status")
            raise DatabaseError("Failed to update player status") from e

    @staticmethod
    def record_game_played(games_played_by_id: dict[str, int]) -> None:
        """Stores new games-played counts and makes the players available again.

        Args:
            games_played_by_id: Mapping of player id to the updated games_played count

        Raises:
            DatabaseError: If any update fails.
        """
        try:
            supabase = get_supabase_client()
            for player_id, games_played in games_played_by_id.items():
                supabase.table("players").update(
                    {
                        "games_played": games_played,
                        "status": PlayerStatus.AVAILABLE.value,
                    }
                ).eq("id", player_id).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: record_game_played")
            raise DatabaseError("Failed to record games played") from e


class GameDB:
    """Handles game persistence in Supabase."""

    @staticmethod
    def create_game(event_id: str | None, player_ids: list[str], court: int) -> str:
        """Creates a game record in Supabase.

        Args:
            event_id: Event the game belongs to
            player_ids: The four players, team 1 first
            court: Court number the game is played on

        Returns:
            The game ID from the database

        Raises:
            DatabaseError: If the game could not be created
        """
        data = {
            "event_id": event_id,
            "player1_id": player_ids[0],
            "player2_id": player_ids[1],
            "player3_id": player_ids[2],
            "player4_id": player_ids[3],
            "court_id": court,
            "completed": False,
        }

        try:
            supabase = get_supabase_client()
            response = supabase.table("games").insert(data).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: create_game")
            raise DatabaseError("Failed to create game in database") from e

        if response.data:
            return response.data[0]["id"]

        logger.error("Game creation returned empty data")
        raise DatabaseError("Failed to create game - No ID returned")

    @staticmethod
    def complete_game(game_id: str, winner: TeamSide | None) -> None:
        """Marks a game as completed.

        Raises:
            DatabaseError: If the update fails.
        """
        try:
            supabase = get_supabase_client()
            supabase.table("games").update(
                {"completed": True, "winner": winner.value if winner else None}
            ).eq("id", game_id).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: complete_game '{game_id}'")
            raise DatabaseError(f"Failed to complete game '{game_id}'") from e

    @staticmethod
    def update_players(game_id: str, player_ids: list[str]) -> None:
        """Rewrites the four player columns of a game after a substitution.

        Raises:
            DatabaseError: If the update fails.
        """
        data = {f"player{i + 1}_id": player_id for i, player_id in enumerate(player_ids)}
        try:
            supabase = get_supabase_client()
            supabase.table("games").update(data).eq("id", game_id).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: update_players '{game_id}'")
            raise DatabaseError(f"Failed to update players of game '{game_id}'") from e

    @staticmethod
    def delete_game(game_id: str) -> None:
        """Deletes a cancelled game.

        Raises:
            DatabaseError: If the delete fails.
        """
        try:
            supabase = get_supabase_client()
            supabase.table("games").delete().eq("id", game_id).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: delete_game '{game_id}'")
            raise DatabaseError(f"Failed to delete game '{game_id}'") from e


class TournamentDB:
    """Handles tournament persistence in Supabase."""

    @staticmethod
    def create_tournament(event_id: str | None, name: str, policy: str) -> str:
        """Creates a tournament record in its setup stage.

        Returns:
            The tournament ID from the database

        Raises:
            DatabaseError: If the tournament could not be created
        """
        data = {
            "event_id": event_id,
            "name": name,
            "tournament_type": "single_stage",
            "stage_config": {"format": "single_elimination", "pairing": policy},
            "current_stage": "setup",
        }

        try:
            supabase = get_supabase_client()
            response = supabase.table("tournaments").insert(data).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: create_tournament '{name}'")
            raise DatabaseError(f"Failed to create tournament '{name}'") from e

        if response.data:
            return response.data[0]["id"]

        logger.error(f"Tournament creation returned empty data for '{name}'")
        raise DatabaseError(f"Failed to create tournament '{name}' - No ID returned")

    @staticmethod
    def add_participants(tournament_id: str, participants: list[dict]) -> None:
        """Inserts participants with their seed numbers.

        Args:
            tournament_id: Tournament the participants join
            participants: Dicts with player_id and seed_number

        Raises:
            DatabaseError: If the insert fails.
        """
        rows = [{"tournament_id": tournament_id, **p} for p in participants]
        try:
            supabase = get_supabase_client()
            supabase.table("tournament_participants").insert(rows).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: add_participants")
            raise DatabaseError("Failed to add tournament participants") from e

    @staticmethod
    def update_stage(tournament_id: str, stage: str) -> None:
        """Moves a tournament to a new stage.

        Raises:
            DatabaseError: If the update fails.
        """
        try:
            supabase = get_supabase_client()
            supabase.table("tournaments").update({"current_stage": stage}).eq(
                "id", tournament_id
            ).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: update_stage")
            raise DatabaseError(f"Failed to update stage of tournament '{tournament_id}'") from e

    @staticmethod
    def save_matches(tournament_id: str, matches: list[dict]) -> None:
        """Upserts bracket matches keyed by tournament and bracket position.

        Raises:
            DatabaseError: If the upsert fails.
        """
        if not matches:
            return

        rows = [{"tournament_id": tournament_id, **m} for m in matches]
        try:
            supabase = get_supabase_client()
            supabase.table("tournament_matches").upsert(
                rows, on_conflict="tournament_id,bracket_position"
            ).execute()
        except Exception as e:
            logger.exception("Supabase API call failed: save_matches")
            raise DatabaseError("Failed to save tournament matches") from e
