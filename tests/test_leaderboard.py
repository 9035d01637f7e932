from __future__ import annotations

from leaderboard import rank
from schemas import LeaderboardParticipant


def _p(pid: str, primary: int, streak: int) -> LeaderboardParticipant:
    return LeaderboardParticipant(
        id=pid, display_name=f"Friend {pid}", primary_score=primary, streak_length=streak
    )


def test_friends_ranked_by_score_with_streak_bonus() -> None:
    friends = [
        _p("1", 8750, 15),
        _p("2", 12340, 8),
        _p("3", 6500, 22),
        _p("4", 9800, 5),
        _p("5", 11200, 12),
    ]

    entries = rank(friends)

    assert [(e.participant_id, e.score, e.rank) for e in entries] == [
        ("2", 13140, 1),
        ("5", 12400, 2),
        ("4", 10300, 3),
        ("1", 10250, 4),
        ("3", 8700, 5),
    ]


def test_equal_scores_keep_input_order() -> None:
    a, b, c = _p("a", 500, 0), _p("b", 400, 1), _p("c", 900, 0)

    first = rank([a, b, c])
    second = rank([b, a, c])

    assert [e.participant_id for e in first] == ["c", "a", "b"]
    assert [e.participant_id for e in second] == ["c", "b", "a"]
    # Ties still get sequential ranks
    assert [e.rank for e in first] == [1, 2, 3]


def test_empty_leaderboard() -> None:
    assert rank([]) == []
