"""Exception classes raised by the raffle engine."""

from __future__ import annotations


class RaffleError(Exception):
    """Base exception for all raffle engine errors."""


class ParticipantDataError(RaffleError, ValueError):
    """Raised when a participant record is malformed."""


class InvalidRoundConfigurationError(RaffleError, ValueError):
    """Raised when a round list has negative thresholds or clashing ids."""


class UnknownRoundError(RaffleError, KeyError):
    """Raised when a round id is not part of the configured rounds."""


class UnknownRaffleModelError(RaffleError, KeyError):
    """Raised when a raffle model identifier is not registered."""


class InvalidTransitionError(RaffleError):
    """Raised when an action is not valid in the current raffle stage."""


class IneligibleParticipantError(RaffleError):
    """Raised when a participant cannot be drawn in the current round."""


class RoundsExhaustedError(RaffleError):
    """Raised when a batch run is asked for a round past the last one."""


class NoWinnerPossibleError(RaffleError):
    """Raised when a draw is attempted over an empty pool or zero tickets."""


class AuditVerificationError(RaffleError):
    """Raised when replaying an audit does not reproduce its results."""
