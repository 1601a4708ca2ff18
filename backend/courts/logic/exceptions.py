"""Typed domain exceptions for court rule violations.

Every rejected command raises a subclass of CourtRuleError from the pure
transition functions. The court service catches them at its boundary and
turns them into failed ActionResults, leaving the stored state untouched.
"""

from courts.logic.enums import CourtErrorCode


class CourtRuleError(Exception):
    """Base exception for court rule violations.

    Attributes:
        message: Human-readable reason, suitable for a transient notice.
        code: Machine-readable category of the failure.

    """

    code: CourtErrorCode = CourtErrorCode.INVALID_INPUT

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(CourtRuleError):
    """Player already assigned elsewhere, or slot already taken."""

    code = CourtErrorCode.CONFLICT


class GuardViolation(CourtRuleError):
    """Mutation attempted on an active, unpaused session."""

    code = CourtErrorCode.GUARD_VIOLATION


class IncompleteStateError(CourtRuleError):
    """Session is not in the phase the command requires (e.g. empty slots on start)."""

    code = CourtErrorCode.INCOMPLETE_STATE


class InsufficientResourceError(CourtRuleError):
    """Not enough available players to fill the requested slots."""

    code = CourtErrorCode.INSUFFICIENT_PLAYERS


class NotFoundError(CourtRuleError):
    """Referenced court, player or session does not exist."""

    code = CourtErrorCode.NOT_FOUND


class InvalidInputError(CourtRuleError):
    """Command arguments are malformed (blank names, negative counts)."""

    code = CourtErrorCode.INVALID_INPUT


class UnsupportedSettingsError(CourtRuleError):
    """Engine settings contain values the engine cannot honour."""
