"""
Challenge progress engine.

Creates challenges, applies clamped progress changes and derives completion.
Every function returns a new Challenge; inputs are never mutated.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from errors import NotFoundError, ValidationError
from schemas import Challenge, ChallengeStatus, ChallengeType, ChallengeTypeDisplay

logger = logging.getLogger(__name__)

CHALLENGE_TYPE_DISPLAY: dict[ChallengeType, ChallengeTypeDisplay] = {
    ChallengeType.STEPS: ChallengeTypeDisplay(emoji="🚶", label="Steps"),
    ChallengeType.WATER: ChallengeTypeDisplay(emoji="💧", label="Water"),
    ChallengeType.SLEEP: ChallengeTypeDisplay(emoji="😴", label="Sleep"),
    ChallengeType.MEDITATION: ChallengeTypeDisplay(emoji="🧘", label="Meditation"),
    ChallengeType.MIXED: ChallengeTypeDisplay(emoji="🎯", label="Mixed"),
}

_missing = set(ChallengeType) - set(CHALLENGE_TYPE_DISPLAY)
if _missing:
    raise RuntimeError(f"No display metadata for challenge types: {sorted(_missing)}")


def challenge_type_display(challenge_type: ChallengeType) -> ChallengeTypeDisplay:
    return CHALLENGE_TYPE_DISPLAY[challenge_type]


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def create_challenge(
    title: str,
    description: str,
    type: ChallengeType,
    duration_label: str,
    participant_ids: Iterable[str] = (),
    prize_text: Optional[str] = None,
    max_progress: float = 100.0,
    challenge_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Challenge:
    """Create an active challenge with zero progress."""
    challenge = Challenge(
        id=challenge_id or str(uuid.uuid4()),
        title=_require_text("title", title),
        description=_require_text("description", description),
        type=type,
        duration_label=_require_text("duration_label", duration_label),
        participant_ids=frozenset(participant_ids),
        active=True,
        prize_text=prize_text or None,
        progress=0.0,
        max_progress=max_progress,
        created_at=created_at or datetime.now(timezone.utc),
    )
    logger.debug("Created challenge %s (%s)", challenge.id, challenge.type.value)
    return challenge


def _clamp(value: float, upper: float) -> float:
    if not math.isfinite(value):
        raise ValidationError(f"progress change must be a finite number, got {value}")
    return min(max(value, 0.0), upper)


def apply_progress_delta(challenge: Challenge, delta: float) -> Challenge:
    """Add ``delta`` (may be negative) to the progress, clamped to [0, max_progress]."""
    progress = _clamp(challenge.progress + delta, challenge.max_progress)
    return challenge.model_copy(update={"progress": progress})


def set_progress(challenge: Challenge, value: float) -> Challenge:
    """Set the progress to an absolute value, clamped to [0, max_progress]."""
    return challenge.model_copy(update={"progress": _clamp(value, challenge.max_progress)})


def set_active(challenge: Challenge, active: bool) -> Challenge:
    return challenge.model_copy(update={"active": active})


def delete_challenge(challenges: Iterable[Challenge], challenge_id: str) -> list[Challenge]:
    """Return the challenges without ``challenge_id``; raise NotFoundError if it is absent."""
    existing = list(challenges)
    remaining = [c for c in existing if c.id != challenge_id]
    if len(remaining) == len(existing):
        raise NotFoundError("Challenge", challenge_id)
    return remaining


def completion_percentage(challenge: Challenge) -> int:
    # Round half up; progress is never negative
    return math.floor(challenge.progress / challenge.max_progress * 100 + 0.5)


def is_complete(challenge: Challenge) -> bool:
    return challenge.progress >= challenge.max_progress


def challenge_status(challenge: Challenge) -> ChallengeStatus:
    """
    Derived display state. Reaching max progress reports COMPLETED but leaves
    the stored ``active`` flag untouched.
    """
    if is_complete(challenge):
        return ChallengeStatus.COMPLETED
    if challenge.active:
        return ChallengeStatus.ACTIVE
    return ChallengeStatus.INACTIVE
