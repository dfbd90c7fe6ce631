# Match Constants
PLAYERS_PER_MATCH = 4
MAX_PLAYERS_PER_LEVEL = 2

# Pairing Constants
BALANCED_PAIR_MAX_LEVEL_DIFF = 1
MAX_PAIR_AVERAGE_DIFF = 0.5

# Event Constants
DEFAULT_COURT_COUNT = 4
SESSIONS_DIR = "sessions"

# Bracket Constants
CANONICAL_BRACKET_SIZES = (64, 32, 16, 8, 4, 2)
# A pre-round to the largest canonical size can at most halve the field
MAX_BRACKET_FIELD = 2 * CANONICAL_BRACKET_SIZES[0]
MIN_BRACKET_FIELD = 2
PRE_ROUND_NAME = "Pre-Round"
ROUND_NAMES = {
    2: "Championship",
    4: "Semi Finals",
    8: "Quarter Finals",
    16: "Round of 16",
    32: "Round of 32",
    64: "Round of 64",
}

# Level Constants
MAX_SKILL_BRACKET = 9
