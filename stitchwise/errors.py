"""
Error taxonomy for Stitchwise.

Two families:
- MasteryError: raised by the MasteryTracker (not-found, validation, persistence)
- ScoringError: raised by the SessionScorer and its standalone primitives

Every error carries a stable string `code` so callers can branch on the kind
without importing the class.
"""


class StorageError(Exception):
    """Raised by storage implementations when the backend fails."""


# -----------------------------------------------------------------------------
# Mastery tracking
# -----------------------------------------------------------------------------

class MasteryError(Exception):
    """Base class for MasteryTracker errors."""
    code = "MASTERY_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class UserNotFound(MasteryError, LookupError):
    code = "USER_NOT_FOUND"


class ContentNotFound(MasteryError, LookupError):
    code = "CONTENT_NOT_FOUND"


class LearningPathNotFound(MasteryError, LookupError):
    code = "LEARNING_PATH_NOT_FOUND"


class NoProgressData(MasteryError, LookupError):
    """User exists but no progress record has been created yet."""
    code = "NO_PROGRESS_DATA"


class NoMasteryData(MasteryError, LookupError):
    """User and content exist but the user never attempted (or initialized) it."""
    code = "NO_MASTERY_DATA"


class InvalidSessionResult(MasteryError, ValueError):
    code = "INVALID_SESSION_RESULT"


class UpdateFailed(MasteryError):
    code = "UPDATE_FAILED"


class AlreadyInitialized(MasteryError):
    code = "ALREADY_INITIALIZED"


class InitializationFailed(MasteryError):
    code = "INITIALIZATION_FAILED"


# -----------------------------------------------------------------------------
# Session scoring
# -----------------------------------------------------------------------------

class ScoringError(ValueError):
    """Base class for SessionScorer validation errors."""
    code = "SCORING_ERROR"


class InvalidSessionData(ScoringError):
    code = "INVALID_SESSION_DATA"


class InvalidCount(ScoringError):
    code = "INVALID_COUNT"


class InvalidScore(ScoringError):
    """A 0-1 score or a multiplier is out of range."""
    code = "INVALID_SCORE"


class InvalidDuration(ScoringError):
    code = "INVALID_DURATION"


class DivisionByZero(ScoringError, ZeroDivisionError):
    """Only raised by the standalone evolution primitive."""
    code = "DIVISION_BY_ZERO"
