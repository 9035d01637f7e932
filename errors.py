"""
Error taxonomy for the goal and challenge tracking logic.

Errors are raised at the point of detection and never retried here. The
FastAPI layer in main.py maps them onto HTTP responses.
"""


class FitnessCheckError(Exception):
    """Base class for domain errors."""


class ValidationError(FitnessCheckError):
    """A record or request breaks a domain invariant (blank text, non-positive target, ...)."""


class NotFoundError(FitnessCheckError):
    """An operation referenced a challenge, achievement or session id that does not exist."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id
