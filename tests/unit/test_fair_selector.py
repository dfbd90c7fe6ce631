import random
from collections import Counter

import pytest

from app_types import Level, PairType, PlayerStatus, SelectionFailure
from exceptions import ValidationError
from fair_selector import (
    FAILURE_MESSAGES,
    can_pair_match,
    create_pair,
    form_match,
    select_fair_match,
)
from tests.utils import generate_random_players, make_player


def names(players):
    return [p.name for p in players]


class TestSelectFairMatch:
    """Tests for the greedy four-player selection."""

    def test_fewer_than_four_players_is_insufficient(self):
        players = [make_player(n, 0, Level.B) for n in ("A1", "A2", "A3")]

        result = select_fair_match(players)

        assert result.success is False
        assert result.players is None
        assert result.failure == SelectionFailure.INSUFFICIENT_PLAYERS

    def test_ineligible_and_busy_players_do_not_count(self, balanced_players):
        balanced_players[0].eligible = False
        balanced_players[1].status = PlayerStatus.IN_PROGRESS
        extra = make_player("P5", 0, Level.B, status=PlayerStatus.WAITING)

        result = select_fair_match(balanced_players + [extra])

        assert result.failure == SelectionFailure.INSUFFICIENT_PLAYERS

    def test_picks_lowest_games_first(self, sample_players):
        result = select_fair_match(sample_players)

        assert result.success is True
        assert names(result.players) == ["Alice", "Bob", "Charlie", "Dave"]

    def test_level_a_and_d_never_meet(self):
        """Diana (D) is skipped because Alice (A) is already in; Eva fills the slot."""
        players = [
            make_player("Alice", 0, Level.A),
            make_player("Bob", 0, Level.B),
            make_player("Charlie", 0, Level.C),
            make_player("Diana", 0, Level.D),
            make_player("Eva", 1, Level.A),
        ]

        result = select_fair_match(players)

        assert names(result.players) == ["Alice", "Bob", "Charlie", "Eva"]

    def test_level_d_first_excludes_later_level_a(self):
        players = [
            make_player("Dan", 0, Level.D),
            make_player("Dot", 0, Level.D),
            make_player("Al", 1, Level.A),
            make_player("Bo", 1, Level.B),
            make_player("Cy", 1, Level.C),
        ]

        result = select_fair_match(players)

        assert names(result.players) == ["Dan", "Dot", "Bo", "Cy"]

    def test_at_most_two_players_per_level(self):
        players = [
            make_player("Amy", 0, Level.A),
            make_player("Ann", 0, Level.A),
            make_player("Art", 0, Level.A),
            make_player("Ben", 1, Level.B),
            make_player("Cat", 1, Level.C),
        ]

        result = select_fair_match(players)

        assert names(result.players) == ["Amy", "Ann", "Ben", "Cat"]

    def test_single_level_pool_cannot_form_fair_team(self):
        players = [make_player(f"P{i}", 0, Level.A) for i in range(5)]

        result = select_fair_match(players)

        assert result.success is False
        assert result.failure == SelectionFailure.CANNOT_FORM_FAIR_TEAM

    def test_extremes_only_pool_cannot_form_fair_team(self):
        players = [
            make_player("A1", 0, Level.A),
            make_player("A2", 0, Level.A),
            make_player("D1", 0, Level.D),
            make_player("D2", 0, Level.D),
        ]

        result = select_fair_match(players)

        assert result.failure == SelectionFailure.CANNOT_FORM_FAIR_TEAM

    def test_name_tie_break_is_case_sensitive(self):
        players = [
            make_player("bob", 0, Level.B),
            make_player("Zed", 0, Level.C),
            make_player("Amy", 0, Level.B),
            make_player("Cal", 0, Level.C),
            make_player("dan", 0, Level.B),
        ]

        result = select_fair_match(players)

        assert names(result.players) == ["Amy", "Cal", "Zed", "bob"]

    def test_input_order_does_not_matter(self, sample_players):
        expected = names(select_fair_match(sample_players).players)

        for seed in range(5):
            shuffled = list(sample_players)
            random.Random(seed).shuffle(shuffled)
            assert names(select_fair_match(shuffled).players) == expected

    def test_does_not_mutate_players(self, sample_players):
        before = [(p.status, p.games_played) for p in sample_players]

        select_fair_match(sample_players)

        assert [(p.status, p.games_played) for p in sample_players] == before

    def test_failures_have_distinct_messages(self):
        messages = {FAILURE_MESSAGES[f] for f in SelectionFailure}
        assert len(messages) == len(SelectionFailure)


@pytest.mark.parametrize("seed", range(40))
def test_random_rosters_respect_constraints(seed):
    """Any successful selection obeys every constraint; any failure is explained."""
    players = generate_random_players(9, seed=seed)
    players[seed % 9].eligible = False

    result = select_fair_match(players)

    if not result.success:
        assert result.failure == SelectionFailure.CANNOT_FORM_FAIR_TEAM
        return

    selected = result.players
    assert len({p.id for p in selected}) == 4
    assert all(p.eligible and p.status == PlayerStatus.AVAILABLE for p in selected)

    level_counts = Counter(p.level for p in selected)
    assert max(level_counts.values()) <= 2
    assert not (Level.A in level_counts and Level.D in level_counts)


class TestFormMatch:
    """Tests for splitting four players into two pairs."""

    def test_create_pair_types(self):
        a, b, c = (make_player(n, 0, lvl) for n, lvl in (("A", Level.A), ("B", Level.B), ("C", Level.C)))

        assert create_pair(a, b).pair_type == PairType.BALANCED
        assert create_pair(a, c).pair_type == PairType.MIXED
        assert create_pair(a, c).average_level == 1.0

    def test_mixed_pair_cannot_face_stronger_balanced_pair(self):
        mixed = create_pair(make_player("A", 0, Level.A), make_player("C", 0, Level.C))
        balanced = create_pair(make_player("B", 0, Level.B), make_player("C2", 0, Level.C))

        assert can_pair_match(mixed, balanced) is False
        assert can_pair_match(balanced, mixed) is False

    def test_mixed_pair_may_face_equal_balanced_pair(self):
        mixed = create_pair(make_player("A", 0, Level.A), make_player("D", 0, Level.D))
        balanced = create_pair(make_player("B", 0, Level.B), make_player("C", 0, Level.C))

        assert can_pair_match(balanced, mixed) is True

    def test_averages_too_far_apart(self):
        low = create_pair(make_player("B1", 0, Level.B), make_player("B2", 0, Level.B))
        high = create_pair(make_player("C1", 0, Level.C), make_player("C2", 0, Level.C))

        assert can_pair_match(low, high) is False

    def test_picks_most_even_split(self, balanced_players):
        match = form_match(balanced_players)

        assert [p.id for p in match.pair_1.players] == ["p1", "p3"]
        assert [p.id for p in match.pair_2.players] == ["p2", "p4"]
        assert match.pair_1.average_level == match.pair_2.average_level

    def test_falls_back_to_closest_split(self):
        players = [
            make_player("A1", 0, Level.A),
            make_player("A2", 0, Level.A),
            make_player("A3", 0, Level.A),
            make_player("D1", 0, Level.D),
        ]

        match = form_match(players)

        assert [p.id for p in match.pair_1.players] == ["a1", "a2"]
        assert len(match.players) == 4

    def test_requires_four_players(self, balanced_players):
        with pytest.raises(ValidationError):
            form_match(balanced_players[:3])

    def test_skill_brackets_refine_pair_types(self):
        newbie = make_player("N", 0, Level.A, bracket=0)
        beginner = make_player("B", 0, Level.B, bracket=3)

        by_tier = create_pair(newbie, beginner)
        by_bracket = create_pair(newbie, beginner, use_bracket=True)

        assert by_tier.pair_type == PairType.BALANCED
        assert by_bracket.pair_type == PairType.MIXED
        assert by_bracket.average_level == 1.5

    def test_split_uses_brackets_when_everyone_has_one(self):
        def roster(brackets):
            levels = (Level.A, Level.B, Level.B, Level.B)
            return [
                make_player(f"P{i}", 0, level, bracket=bracket)
                for i, (level, bracket) in enumerate(zip(levels, brackets), start=1)
            ]

        by_bracket = form_match(roster([0, 1, 2, 3]))
        by_tier = form_match(roster([0, 1, 2, None]))

        assert [p.id for p in by_bracket.pair_1.players] == ["p1", "p4"]
        assert by_bracket.pair_1.average_level == by_bracket.pair_2.average_level == 1.5
        assert [p.id for p in by_tier.pair_1.players] == ["p1", "p2"]
