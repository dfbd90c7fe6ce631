"""
Service layer for roster conversions.

This module converts between the roster rows stored in Supabase, the pandas
DataFrames used for roster tables and reports, and the Player snapshots the
queue core works with.
"""

import logging
import pandas as pd

from app_types import MajorLevel, PlayerStatus, SubLevel
from exceptions import ValidationError
from levels import bracket_from_major_sub, level_from_major, parse_level
from session_logic import Player

logger = logging.getLogger("app.player_service")

ROSTER_COLUMNS = [
    "#",
    "Player ID",
    "Player Name",
    "Level",
    "Games Played",
    "Eligible",
    "Status",
    "Penalty Bonus",
]

# Statuses the roster store writes that the queue core names differently
STORE_STATUS_ALIASES = {"queued": PlayerStatus.WAITING}


def status_from_store(value: str | None, player_name: str) -> PlayerStatus:
    """
    Reads a roster store status. Missing values mean available.

    Raises:
        ValidationError: If the status is not known, naming the player.
    """
    if not value:
        return PlayerStatus.AVAILABLE
    if value in STORE_STATUS_ALIASES:
        return STORE_STATUS_ALIASES[value]
    try:
        return PlayerStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown status {value!r} for player '{player_name}'"
        ) from None


def rows_to_players(rows: list[dict]) -> dict[str, Player]:
    """
    Converts Supabase player rows into Player objects.

    Rows carry the richer major/sub classification; the selection tier is
    derived from the major level and the skill bracket is kept alongside.

    Args:
        rows: Player rows as returned by PlayerDB.get_event_players

    Returns:
        Dictionary mapping player ids to Player objects
    """
    players = {}
    for row in rows:
        major = MajorLevel(row.get("major_level") or MajorLevel.NEWBIE.value)
        sub = SubLevel(row["sub_level"]) if row.get("sub_level") else None
        players[row["id"]] = Player(
            id=row["id"],
            name=row["name"],
            level=level_from_major(major),
            games_played=row.get("games_played") or 0,
            eligible=row.get("eligible", True),
            status=status_from_store(row.get("status"), row["name"]),
            game_penalty_bonus=row.get("penalty_bonus") or 0,
            bracket=bracket_from_major_sub(major, sub),
        )
    return players


def create_roster_dataframe(players: dict[str, Player]) -> pd.DataFrame:
    """Creates a DataFrame of the event roster, in priority order for the queue."""
    ordered = sorted(players.values(), key=lambda p: (p.games_played, p.name))
    return pd.DataFrame(
        {
            "#": range(1, len(ordered) + 1),
            "Player ID": [p.id for p in ordered],
            "Player Name": [p.name for p in ordered],
            "Level": [p.level.name for p in ordered],
            "Games Played": [p.games_played for p in ordered],
            "Eligible": [p.eligible for p in ordered],
            "Status": [p.status.value for p in ordered],
            "Penalty Bonus": [p.game_penalty_bonus for p in ordered],
        },
        columns=ROSTER_COLUMNS,
    )


def dataframe_to_players(edited_df: pd.DataFrame) -> dict[str, Player]:
    """
    Converts an edited roster DataFrame into a Player dict.

    Rows without a name are dropped. Missing games played, eligibility and
    status fall back to a fresh player's values.

    Args:
        edited_df: DataFrame with the roster columns

    Returns:
        Dictionary mapping player ids to Player objects
    """
    players = {}
    for _, row in edited_df.dropna(subset=["Player Name"]).iterrows():
        # New rows have no id yet; the name stands in until the roster is synced
        raw_id = row.get("Player ID")
        player_id = str(row["Player Name"]) if pd.isna(raw_id) else str(raw_id)
        games_played = 0 if pd.isna(row.get("Games Played")) else int(row["Games Played"])
        eligible = True if pd.isna(row.get("Eligible")) else bool(row["Eligible"])
        status = "available" if pd.isna(row.get("Status")) else row["Status"]
        bonus = 0 if pd.isna(row.get("Penalty Bonus")) else int(row["Penalty Bonus"])

        players[player_id] = Player(
            id=player_id,
            name=row["Player Name"],
            level=parse_level(row["Level"]),
            games_played=games_played,
            eligible=eligible,
            status=status,
            game_penalty_bonus=bonus,
        )

    logger.debug(f"Converted {len(players)} roster row(s)")
    return players
