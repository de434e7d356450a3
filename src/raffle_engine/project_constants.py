"""
Fixed rules of the raffle.

These values define how points turn into chances.
Changing them changes every participant's odds and MUST be announced.
"""

# Points needed for one ticket
POINTS_PER_TICKET = 100

# Independent shuffle passes over the entrant order before each weighted draw
DEFAULT_SHUFFLE_PASSES = 10

# Used when no round configuration is supplied
DEFAULT_NUMBER_OF_ROUNDS = 5
DEFAULT_ROUND_THRESHOLDS = (0, 250, 500, 750, 1000)

# Upper bound for evenly spaced thresholds when no roster is known yet
DEFAULT_THRESHOLD_SPAN = 1000

# Audit metadata
TOOL_NAME = "raffle-engine"
TOOL_VERSION = "1.0.0"
