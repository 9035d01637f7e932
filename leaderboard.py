"""Leaderboard ranking for friends taking part in challenges."""

from typing import Iterable

from schemas import LeaderboardEntry, LeaderboardParticipant

STREAK_BONUS_POINTS = 100


def score(participant: LeaderboardParticipant) -> int:
    return participant.primary_score + participant.streak_length * STREAK_BONUS_POINTS


def rank(participants: Iterable[LeaderboardParticipant]) -> list[LeaderboardEntry]:
    """
    Rank participants by score, highest first.

    The sort is stable so equal scores keep their input order, and ranks run
    1..N without shared positions.
    """
    scored = [(p, score(p)) for p in participants]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [
        LeaderboardEntry(
            participant_id=p.id,
            display_name=p.display_name,
            score=s,
            rank=position,
        )
        for position, (p, s) in enumerate(scored, start=1)
    ]
