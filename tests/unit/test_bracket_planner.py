"""
Unit tests for bracket planning, seeding and pairing.
"""

import pytest

from app_types import BracketFailure, MatchStatus, PairingPolicy
from bracket_planner import (
    build_round_matches,
    generate_bracket_order,
    get_round_name,
    next_round_entrants,
    pair_entrants,
    plan_bracket,
    seed_participants,
)
from exceptions import ValidationError


def shape(plan):
    """(name, players, matches, advancing) for every round of a plan."""
    return [(r.name, r.player_count, r.match_count, r.advancing_count) for r in plan.rounds]


class TestRoundNames:
    def test_canonical_names(self):
        assert get_round_name(2) == "Championship"
        assert get_round_name(4) == "Semi Finals"
        assert get_round_name(8) == "Quarter Finals"
        assert get_round_name(16) == "Round of 16"
        assert get_round_name(32) == "Round of 32"
        assert get_round_name(64) == "Round of 64"

    def test_generic_name(self):
        assert get_round_name(12) == "Round of 12"


class TestPlanBracket:
    """Tests for plan_bracket."""

    def test_eight_participants(self):
        plan = plan_bracket(8)

        assert plan.success is True
        assert shape(plan) == [
            ("Quarter Finals", 8, 4, 4),
            ("Semi Finals", 4, 2, 2),
            ("Championship", 2, 1, 1),
        ]

    def test_five_participants_play_a_pre_round(self):
        plan = plan_bracket(5)

        assert shape(plan) == [
            ("Pre-Round 1", 5, 1, 4),
            ("Semi Finals", 4, 2, 2),
            ("Championship", 2, 1, 1),
        ]
        assert plan.rounds[0].is_pre_round is True
        assert plan.rounds[0].bye_count == 3
        assert plan.rounds[1].is_pre_round is False

    def test_two_participants(self):
        assert shape(plan_bracket(2)) == [("Championship", 2, 1, 1)]

    def test_three_participants(self):
        assert shape(plan_bracket(3)) == [
            ("Pre-Round 1", 3, 1, 2),
            ("Championship", 2, 1, 1),
        ]

    def test_twelve_participants(self):
        plan = plan_bracket(12)

        assert [r.name for r in plan.rounds] == [
            "Pre-Round 1",
            "Quarter Finals",
            "Semi Finals",
            "Championship",
        ]
        assert plan.rounds[0].match_count == 4
        assert [r.number for r in plan.rounds] == [1, 2, 3, 4]

    def test_sixty_four_participants(self):
        plan = plan_bracket(64)

        assert [r.name for r in plan.rounds] == [
            "Round of 64",
            "Round of 32",
            "Round of 16",
            "Quarter Finals",
            "Semi Finals",
            "Championship",
        ]

    def test_fields_above_sixty_four_pre_round_to_sixty_four(self):
        plan = plan_bracket(100)

        assert shape(plan)[0] == ("Pre-Round 1", 100, 36, 64)
        assert plan.rounds[1].name == "Round of 64"
        assert len(plan.rounds) == 7

    def test_largest_supported_field(self):
        plan = plan_bracket(128)

        first = plan.rounds[0]
        assert first.is_pre_round is True
        assert (first.match_count, first.advancing_count, first.bye_count) == (64, 64, 0)

    def test_field_too_large(self):
        plan = plan_bracket(129)

        assert plan.success is False
        assert plan.rounds is None
        assert plan.failure == BracketFailure.UNSUPPORTED_FIELD_SIZE

    @pytest.mark.parametrize("count", [1, 0, -3])
    def test_field_too_small(self, count):
        assert plan_bracket(count).failure == BracketFailure.TOO_FEW_PARTICIPANTS

    def test_every_plan_ends_with_a_single_winner(self):
        for count in range(2, 129):
            plan = plan_bracket(count)
            assert plan.rounds[-1].advancing_count == 1
            assert plan.rounds[-1].name == "Championship"
            # Every match eliminates exactly one entrant
            assert plan.total_matches == count - 1
            for previous, following in zip(plan.rounds, plan.rounds[1:]):
                assert previous.advancing_count == following.player_count

    def test_planning_is_repeatable(self):
        assert plan_bracket(23) == plan_bracket(23)


class TestSeedingAndPairing:
    """Tests for seeding, pairing and advancement helpers."""

    def test_seed_numbers_follow_input_order(self):
        participants = seed_participants([("x", "Xavier"), ("a", "Alice"), ("m", "Mia")])

        assert [(p.id, p.seed_number) for p in participants] == [("x", 1), ("a", 2), ("m", 3)]

    def test_duplicate_participants_rejected(self):
        with pytest.raises(ValidationError):
            seed_participants([("a", "Alice"), ("a", "Alice again")])

    def test_standard_bracket_order(self):
        assert generate_bracket_order(2) == [1, 2]
        assert generate_bracket_order(4) == [1, 4, 2, 3]
        assert generate_bracket_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]

    def test_adjacent_pairing_full_round(self):
        byes, pairings = pair_entrants(["a", "b", "c", "d"], 2)

        assert byes == []
        assert pairings == [("a", "b"), ("c", "d")]

    def test_adjacent_pre_round_gives_top_seeds_byes(self):
        byes, pairings = pair_entrants(["a", "b", "c", "d", "e"], 1)

        assert byes == ["a", "b", "c"]
        assert pairings == [("d", "e")]

    def test_standard_pairing_full_round(self):
        byes, pairings = pair_entrants(["a", "b", "c", "d"], 2, PairingPolicy.STANDARD)

        assert byes == []
        assert pairings == [("a", "d"), ("b", "c")]

    def test_standard_pre_round_pairs_outside_in(self):
        byes, pairings = pair_entrants(list("abcdef"), 2, PairingPolicy.STANDARD)

        assert byes == ["a", "b"]
        assert pairings == [("c", "f"), ("d", "e")]

    def test_too_many_matches_rejected(self):
        with pytest.raises(ValidationError):
            pair_entrants(["a", "b"], 2)

    def test_build_round_matches_records_byes(self):
        first_round = plan_bracket(5).rounds[0]

        matches = build_round_matches(first_round, list("abcde"))

        assert [m.id for m in matches] == ["r1m1", "r1m2", "r1m3", "r1m4"]
        assert [m.status for m in matches[:3]] == [MatchStatus.BYE] * 3
        assert [m.winner_id for m in matches[:3]] == ["a", "b", "c"]
        assert (matches[3].participant_1, matches[3].participant_2) == ("d", "e")
        assert matches[3].winner_id is None
        assert all(m.round_name == "Pre-Round 1" for m in matches)

    def test_build_round_matches_checks_entrant_count(self):
        with pytest.raises(ValidationError):
            build_round_matches(plan_bracket(4).rounds[0], ["a", "b"])

    def test_next_round_entrants_in_match_order(self):
        matches = build_round_matches(plan_bracket(5).rounds[0], list("abcde"))
        matches[3].winner_id = "e"

        assert next_round_entrants(matches) == ["a", "b", "c", "e"]

    def test_next_round_entrants_needs_all_winners(self):
        matches = build_round_matches(plan_bracket(4).rounds[0], list("abcd"))

        with pytest.raises(ValidationError):
            next_round_entrants(matches)
