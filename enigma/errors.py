"""
Error taxonomy for the game core

AlreadySolved is deliberately absent: it is a SubmissionOutcome, not a failure.
"""


class EnigmaError(Exception):
    """Base class for every error raised by the game core"""


class InvalidCode(EnigmaError):
    """Access code missing or inactive"""


class TeamNotFound(EnigmaError):
    """Team row could not be fetched"""


class SessionStale(TeamNotFound):
    """Local session points at no recoverable team; the user must join again"""


class TransientStoreError(EnigmaError):
    """Store read/write failed; safe to retry"""


class GameOver(EnigmaError):
    """Action attempted after the session ended"""


class HintCooldown(EnigmaError):
    """Hint requested before the cooldown elapsed"""

    def __init__(self, retry_after: float):
        super().__init__(f"Next hint available in {retry_after:.0f}s")
        self.retry_after = retry_after
