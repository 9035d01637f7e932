"""
Fitness data sync from the Google Fit REST API.

Read-only aggregate queries (steps, calories, distance) bucketed by day.
Every query fails soft: missing permission, HTTP errors and malformed payloads
all yield zero/empty values and a logged warning, never an exception.
"""

import logging
import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

import requests

import config
from schemas import DailyMeasurement, FitnessData
from tracking import apply_tracking_update

logger = logging.getLogger(__name__)

STEP_COUNT = "com.google.step_count.delta"
CALORIES_EXPENDED = "com.google.calories.expended"
DISTANCE_DELTA = "com.google.distance.delta"

DAY_MILLIS = 24 * 60 * 60 * 1000


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class GoogleFitClient:
    def __init__(
        self,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: str = config.GOOGLE_FIT_BASE_URL,
        timeout: float = config.GOOGLE_FIT_TIMEOUT,
        tz: tzinfo = timezone.utc,
    ):
        self._token = access_token
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._tz = tz

    def has_permissions(self) -> bool:
        return bool(self._token)

    def _day_range(self, start: date, end: date) -> tuple[int, int]:
        start_dt = datetime.combine(start, time.min, tzinfo=self._tz)
        end_dt = datetime.combine(end + timedelta(days=1), time.min, tzinfo=self._tz)
        return _millis(start_dt), _millis(end_dt)

    def _aggregate(self, data_type: str, start: date, end: date) -> list[dict]:
        """POST a dataset:aggregate request and return its buckets."""
        start_ms, end_ms = self._day_range(start, end)
        body = {
            "aggregateBy": [{"dataTypeName": data_type}],
            "bucketByTime": {"durationMillis": DAY_MILLIS},
            "startTimeMillis": start_ms,
            "endTimeMillis": end_ms,
        }
        resp = self._session.post(
            f"{self._base_url}/dataset:aggregate",
            json=body,
            headers={"Authorization": f"Bearer {self._token}"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json().get("bucket", [])

    @staticmethod
    def _sum_bucket(bucket: dict, value_key: str) -> float:
        total = 0
        for dataset in bucket.get("dataset", []):
            for point in dataset.get("point", []):
                for value in point.get("value", []):
                    total += value.get(value_key, 0)
        if not math.isfinite(total) or total < 0:
            raise ValueError(f"implausible {value_key} total {total}")
        return total

    def _read_total(self, data_type: str, value_key: str, day: date) -> float:
        if not self.has_permissions():
            logger.warning("No Google Fit permissions, %s reads as 0", data_type)
            return 0
        try:
            buckets = self._aggregate(data_type, day, day)
            return sum(self._sum_bucket(b, value_key) for b in buckets)
        except (requests.RequestException, ValueError, AttributeError, TypeError) as e:
            logger.warning("Error reading %s for %s: %s", data_type, day, e)
            return 0

    def get_steps_for_date(self, day: date) -> int:
        return int(self._read_total(STEP_COUNT, "intVal", day))

    def get_calories_for_date(self, day: date) -> float:
        return float(self._read_total(CALORIES_EXPENDED, "fpVal", day))

    def get_distance_for_date(self, day: date) -> float:
        """Distance walked in meters."""
        return float(self._read_total(DISTANCE_DELTA, "fpVal", day))

    def get_steps_history(self, days: int, end: date) -> dict[date, int]:
        """Steps per day for ``end - days`` through ``end``."""
        if not self.has_permissions():
            logger.warning("No Google Fit permissions, step history is empty")
            return {}
        try:
            buckets = self._aggregate(STEP_COUNT, end - timedelta(days=days), end)
            history = {}
            for bucket in buckets:
                started = datetime.fromtimestamp(int(bucket["startTimeMillis"]) / 1000, tz=self._tz)
                history[started.date()] = int(self._sum_bucket(bucket, "intVal"))
        except (requests.RequestException, ValueError, KeyError, AttributeError, TypeError) as e:
            logger.warning("Error getting steps history: %s", e)
            return {}
        logger.debug("Retrieved %d days of step data", len(history))
        return history


class FitnessDataSync:
    def __init__(self, client: GoogleFitClient):
        self._client = client

    @property
    def can_sync(self) -> bool:
        return self._client.has_permissions()

    def sync_day(self, day: date) -> FitnessData:
        """Steps, calories and distance for ``day``; all zero without permission."""
        return FitnessData(
            day=day,
            steps=self._client.get_steps_for_date(day),
            calories=self._client.get_calories_for_date(day),
            distance_meters=self._client.get_distance_for_date(day),
        )

    def sync_history(self, days: int, end: date) -> list[FitnessData]:
        history = self._client.get_steps_history(days, end)
        return [FitnessData(day=d, steps=steps) for d, steps in sorted(history.items())]


def merge_into_measurement(data: FitnessData, measurement: DailyMeasurement) -> DailyMeasurement:
    """Copy synced steps, calories and distance into the day's measurement."""
    return apply_tracking_update(
        measurement,
        steps=data.steps,
        calories=data.calories,
        distance_meters=data.distance_meters,
    )
