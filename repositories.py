"""
Repositories: the storage collaborator.

Each repository wraps one collection of the database handle it is given and
round-trips records through the schemas models. The domain modules never see
raw documents.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from achievements import default_catalog
from database import create_document, get_documents, strip_id
from errors import NotFoundError
from goals import update_goals
from schemas import (
    Achievement,
    Challenge,
    DailyMeasurement,
    MeditationSession,
    UserProfile,
)
from tracking import apply_tracking_update, empty_measurement

logger = logging.getLogger(__name__)

PROFILE_KEY = {"profile_id": 1}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProfileRepository:
    """The single user profile, stored as a fixed-key row."""

    collection_name = "userprofile"

    def __init__(self, db):
        self._col = db[self.collection_name]

    def get(self) -> Optional[UserProfile]:
        doc = strip_id(self._col.find_one(PROFILE_KEY))
        return UserProfile(**doc) if doc else None

    def save(self, profile: UserProfile) -> UserProfile:
        profile = profile.model_copy(update={"updated_at": _now()})
        doc = {**profile.model_dump(mode="json"), **PROFILE_KEY}
        self._col.replace_one(PROFILE_KEY, doc, upsert=True)
        return profile

    def get_or_create_default(self) -> UserProfile:
        profile = self.get()
        if profile is None:
            logger.info("No profile stored, creating default profile")
            profile = self.save(UserProfile())
        return profile

    def update(
        self,
        name: Optional[str] = None,
        profile_picture_index: Optional[int] = None,
        step_goal: Optional[int] = None,
        water_goal_liters: Optional[float] = None,
        sleep_goal_hours: Optional[float] = None,
    ) -> UserProfile:
        current = self.get_or_create_default()
        goals = update_goals(
            current.goals,
            step_goal=step_goal,
            water_goal_liters=water_goal_liters,
            sleep_goal_hours=sleep_goal_hours,
        )
        data = current.model_dump()
        data["goals"] = goals
        if name is not None:
            data["name"] = name
        if profile_picture_index is not None:
            data["profile_picture_index"] = profile_picture_index
        return self.save(UserProfile(**data))

    def reset_to_default(self) -> UserProfile:
        return self.save(UserProfile())


class TrackingRepository:
    """One DailyMeasurement per calendar date, keyed by ISO date string."""

    collection_name = "dailytracking"

    def __init__(self, db):
        self._col = db[self.collection_name]

    def get(self, day: date) -> Optional[DailyMeasurement]:
        doc = strip_id(self._col.find_one({"day": day.isoformat()}))
        return DailyMeasurement(**doc) if doc else None

    def get_or_empty(self, day: date) -> DailyMeasurement:
        return self.get(day) or empty_measurement(day)

    def save(self, measurement: DailyMeasurement) -> DailyMeasurement:
        doc = measurement.model_dump(mode="json")
        doc["updated_at"] = _now()
        self._col.replace_one({"day": doc["day"]}, doc, upsert=True)
        return measurement

    def update(self, day: date, **values) -> DailyMeasurement:
        """Partially update a day's measurement, creating it if needed."""
        return self.save(apply_tracking_update(self.get_or_empty(day), **values))

    def list_range(self, start: date, end: date) -> list[DailyMeasurement]:
        cursor = self._col.find(
            {"day": {"$gte": start.isoformat(), "$lte": end.isoformat()}}
        ).sort("day", 1)
        return [DailyMeasurement(**strip_id(doc)) for doc in cursor]


class ChallengeRepository:
    collection_name = "challenge"

    def __init__(self, db):
        self._db = db
        self._col = db[self.collection_name]

    @staticmethod
    def _to_doc(challenge: Challenge) -> dict:
        doc = challenge.model_dump(mode="json")
        doc["participant_ids"] = sorted(challenge.participant_ids)
        return doc

    def insert(self, challenge: Challenge) -> Challenge:
        create_document(self._db, self.collection_name, self._to_doc(challenge))
        return challenge

    def get(self, challenge_id: str) -> Challenge:
        doc = strip_id(self._col.find_one({"id": challenge_id}))
        if not doc:
            raise NotFoundError("Challenge", challenge_id)
        return Challenge(**doc)

    def _list(self, filter_dict: dict) -> list[Challenge]:
        cursor = self._col.find(filter_dict).sort("created_at", -1)
        return [Challenge(**strip_id(doc)) for doc in cursor]

    def list_all(self) -> list[Challenge]:
        return self._list({})

    def list_active(self) -> list[Challenge]:
        return self._list({"active": True})

    def save(self, challenge: Challenge) -> Challenge:
        doc = self._to_doc(challenge)
        doc["updated_at"] = _now()
        res = self._col.update_one({"id": challenge.id}, {"$set": doc})
        if res.matched_count == 0:
            raise NotFoundError("Challenge", challenge.id)
        return challenge

    def delete(self, challenge_id: str) -> None:
        res = self._col.delete_one({"id": challenge_id})
        if res.deleted_count == 0:
            raise NotFoundError("Challenge", challenge_id)


class AchievementRepository:
    collection_name = "achievement"

    def __init__(self, db):
        self._col = db[self.collection_name]

    def seed_defaults(self) -> int:
        """Insert catalog entries that are not stored yet. Returns how many were added."""
        added = 0
        for achievement in default_catalog():
            if self._col.find_one({"id": achievement.id}) is None:
                self._col.insert_one(achievement.model_dump(mode="json"))
                added += 1
        if added:
            logger.info("Seeded %d achievement(s)", added)
        return added

    def list_all(self) -> list[Achievement]:
        return [Achievement(**strip_id(doc)) for doc in self._col.find({}).sort("id", 1)]

    def get(self, achievement_id: str) -> Achievement:
        doc = strip_id(self._col.find_one({"id": achievement_id}))
        if not doc:
            raise NotFoundError("Achievement", achievement_id)
        return Achievement(**doc)

    def save(self, achievement: Achievement) -> Achievement:
        res = self._col.replace_one({"id": achievement.id}, achievement.model_dump(mode="json"))
        if res.matched_count == 0:
            raise NotFoundError("Achievement", achievement.id)
        return achievement


class MeditationRepository:
    collection_name = "meditationsession"

    def __init__(self, db):
        self._db = db
        self._col = db[self.collection_name]

    def start(self, duration_minutes: int) -> MeditationSession:
        session = MeditationSession(id=uuid.uuid4().hex, duration_minutes=duration_minutes)
        create_document(self._db, self.collection_name, session)
        return session

    def complete(self, session_id: str) -> MeditationSession:
        doc = strip_id(self._col.find_one({"id": session_id}))
        if not doc:
            raise NotFoundError("MeditationSession", session_id)
        session = MeditationSession(**doc)
        if session.completed:
            return session
        session = session.model_copy(update={"completed": True, "completed_at": _now()})
        self._col.update_one(
            {"id": session_id},
            {"$set": {"completed": True, "completed_at": session.completed_at.isoformat()}},
        )
        return session

    def count_completed(self) -> int:
        return self._col.count_documents({"completed": True})

    def list_sessions(self, limit: Optional[int] = None) -> list[MeditationSession]:
        docs = get_documents(self._db, self.collection_name, limit=limit)
        return sorted((MeditationSession(**d) for d in docs), key=lambda s: s.started_at, reverse=True)
