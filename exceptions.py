# exceptions.py
"""
Custom exceptions for the Badminton Club App.

This module defines domain-specific exceptions for misuse of the session and
tournament objects and for infrastructure failures. Expected outcomes of the
selection and bracket planning core (not enough players, unsupported field
sizes) are returned as result values instead.
"""


class ClubAppError(Exception):
    """Base exception for all application errors."""

    pass


class DatabaseError(ClubAppError):
    """Raised when a database operation fails."""

    pass


class SessionError(ClubAppError):
    """Raised when an event session operation fails."""

    pass


class TournamentError(ClubAppError):
    """Raised when a tournament operation is not allowed in its current state."""

    pass


class ValidationError(ClubAppError):
    """Raised when input validation fails."""

    pass
