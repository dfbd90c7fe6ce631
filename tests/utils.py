import random
from typing import Generator

from app_types import Level, SelectionResult
from session_logic import EventSession, Player


def make_player(name, games_played=0, level=Level.A, **kwargs):
    """Builds a player whose id is its lower-cased name."""
    return Player(
        id=kwargs.pop("id", name.lower()),
        name=name,
        level=level,
        games_played=games_played,
        **kwargs,
    )


def generate_random_players(n, seed=None):
    """
    Generates N players with names P1 to Pn, random levels and game counts.

    Args:
        n: Number of players to generate
        seed: Optional seed for reproducible rosters

    Returns:
        List of Player objects.
    """
    rng = random.Random(seed)
    return [
        make_player(f"P{i}", rng.randint(0, 5), rng.choice(list(Level)))
        for i in range(1, n + 1)
    ]


def run_queue_games(
    session: EventSession, num_games: int = 10
) -> Generator[tuple[int, SelectionResult], None, None]:
    """
    Generator that plays games one after another on a session.

    Each successful selection is started and immediately completed, so the
    next selection sees the updated games played.

    Yields:
        tuple: (game_index, SelectionResult)
    """
    for index in range(num_games):
        result = session.select_next_match()
        yield index, result
        if result.success:
            game = session.start_game(result.players)
            session.complete_game(game.id)
