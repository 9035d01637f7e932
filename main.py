from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

import config
from achievements import current_streak, evaluate_all
from calendar_stats import DEFAULT_WINDOW_DAYS, calendar_window, summarize
from challenges import (
    apply_progress_delta,
    challenge_status,
    challenge_type_display,
    completion_percentage,
    create_challenge,
    set_active,
)
from database import get_db
from errors import NotFoundError, ValidationError
from fitness_sync import FitnessDataSync, GoogleFitClient, merge_into_measurement
from goals import goal_progress_percent
from leaderboard import rank
from repositories import (
    AchievementRepository,
    ChallengeRepository,
    MeditationRepository,
    ProfileRepository,
    TrackingRepository,
)
from schemas import Challenge, ChallengeType, LeaderboardParticipant
from tracking import aggregate, aggregate_history, is_perfect_day, overall_completion_ratio

app = FastAPI(title="Fitness Check API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Helpers ----------

def today() -> date:
    return datetime.now(timezone.utc).date()


def get_database():
    return get_db()


def get_fitness_sync() -> FitnessDataSync:
    return FitnessDataSync(GoogleFitClient(access_token=config.GOOGLE_FIT_ACCESS_TOKEN))


def challenge_out(challenge: Challenge) -> dict:
    display = challenge_type_display(challenge.type)
    out = challenge.model_dump(mode="json")
    out["participant_ids"] = sorted(challenge.participant_ids)
    out["emoji"] = display.emoji
    out["type_label"] = display.label
    out["completion_pct"] = completion_percentage(challenge)
    out["status"] = challenge_status(challenge).value
    return out


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------- Models (request/response) ----------
class RequestModel(BaseModel):
    # JSON bodies may carry NaN or Infinity; reject them before they reach the domain
    model_config = ConfigDict(allow_inf_nan=False)


class UpdateProfileRequest(RequestModel):
    name: Optional[str] = None
    profile_picture_index: Optional[int] = None
    step_goal: Optional[int] = None
    water_goal_liters: Optional[float] = None
    sleep_goal_hours: Optional[float] = None


class TrackingUpdateRequest(RequestModel):
    steps: Optional[int] = Field(None, ge=0)
    water_liters: Optional[float] = Field(None, ge=0)
    sleep_hours: Optional[float] = Field(None, ge=0)
    mood_score: Optional[float] = Field(None, ge=1, le=10)


class CreateChallengeRequest(RequestModel):
    title: str
    description: str
    type: ChallengeType
    duration_label: str
    participant_ids: list[str] = []
    prize_text: Optional[str] = None
    max_progress: float = 100.0


class ProgressRequest(RequestModel):
    delta: float


class ActiveRequest(RequestModel):
    active: bool


class LeaderboardRequest(RequestModel):
    participants: list[LeaderboardParticipant]


class StartMeditationRequest(RequestModel):
    duration_minutes: int = Field(..., ge=1, le=180)


# ---------- Routes ----------
@app.get("/")
def root():
    return {"message": "Fitness Check API running"}


@app.get("/test")
def test_database():
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if config.DATABASE_URL else "❌ Not Set",
        "database_name": "✅ Set" if config.DATABASE_NAME else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        db = get_db()
        resp["database"] = "✅ Available"
        resp["connection_status"] = "Connected"
        try:
            resp["collections"] = db.list_collection_names()[:10]
            resp["database"] = "✅ Connected & Working"
        except Exception as e:
            resp["database"] = f"⚠️ Connected but error: {str(e)[:80]}"
    except Exception as e:
        resp["database"] = f"❌ Error: {str(e)[:80]}"
    return resp


# Profile
@app.get("/api/profile")
def get_profile(db=Depends(get_database)):
    return ProfileRepository(db).get_or_create_default().model_dump(mode="json")


@app.put("/api/profile")
def update_profile(payload: UpdateProfileRequest, db=Depends(get_database)):
    profile = ProfileRepository(db).update(**payload.model_dump(exclude_unset=True))
    return profile.model_dump(mode="json")


@app.post("/api/profile/reset")
def reset_profile(db=Depends(get_database)):
    return ProfileRepository(db).reset_to_default().model_dump(mode="json")


# Tracking
def _day_view(measurement, goals) -> dict:
    status = aggregate(measurement, goals)
    return {
        "measurement": measurement.model_dump(mode="json"),
        "status": status.model_dump(mode="json"),
        "completion_ratio": overall_completion_ratio(status),
        "perfect_day": is_perfect_day(status),
    }


@app.get("/api/tracking/{day}")
def get_tracking(day: date, db=Depends(get_database)):
    goals = ProfileRepository(db).get_or_create_default().goals
    return _day_view(TrackingRepository(db).get_or_empty(day), goals)


@app.put("/api/tracking/{day}")
def update_tracking(day: date, payload: TrackingUpdateRequest, db=Depends(get_database)):
    goals = ProfileRepository(db).get_or_create_default().goals
    measurement = TrackingRepository(db).update(day, **payload.model_dump(exclude_none=True))
    return _day_view(measurement, goals)


@app.get("/api/dashboard")
def dashboard(day: Optional[date] = None, db=Depends(get_database)):
    day = day or today()
    profile = ProfileRepository(db).get_or_create_default()
    goals = profile.goals
    tracking = TrackingRepository(db)
    measurement = tracking.get_or_empty(day)
    history = aggregate_history(
        tracking.list_range(day - timedelta(days=DEFAULT_WINDOW_DAYS), day), goals
    )
    view = _day_view(measurement, goals)
    view.update({
        "name": profile.name,
        "goals": goals.model_dump(),
        "progress_pct": {
            "steps": goal_progress_percent(measurement.steps, goals.step_goal),
            "water": goal_progress_percent(measurement.water_liters, goals.water_goal_liters),
            "sleep": goal_progress_percent(measurement.sleep_hours, goals.sleep_goal_hours),
        },
        "streak": current_streak(history, as_of=day),
        "active_challenges": [challenge_out(c) for c in ChallengeRepository(db).list_active()],
    })
    return view


@app.get("/api/calendar")
def calendar(end: Optional[date] = None, days: int = DEFAULT_WINDOW_DAYS, db=Depends(get_database)):
    if days < 0 or days > 365:
        raise HTTPException(400, "days must be between 0 and 365")
    end = end or today()
    goals = ProfileRepository(db).get_or_create_default().goals
    statuses = aggregate_history(
        TrackingRepository(db).list_range(end - timedelta(days=days), end), goals
    )
    return {
        "days": [d.model_dump(mode="json") for d in calendar_window(statuses, end, days)],
        "summary": summarize(statuses).model_dump(),
    }


# Challenges
@app.get("/api/challenges")
def list_challenges(active_only: bool = False, db=Depends(get_database)):
    repo = ChallengeRepository(db)
    items = repo.list_active() if active_only else repo.list_all()
    return {"items": [challenge_out(c) for c in items]}


@app.post("/api/challenges")
def add_challenge(payload: CreateChallengeRequest, db=Depends(get_database)):
    challenge = create_challenge(**payload.model_dump())
    ChallengeRepository(db).insert(challenge)
    return challenge_out(challenge)


@app.post("/api/challenges/{challenge_id}/progress")
def add_progress(challenge_id: str, payload: ProgressRequest, db=Depends(get_database)):
    repo = ChallengeRepository(db)
    challenge = apply_progress_delta(repo.get(challenge_id), payload.delta)
    return challenge_out(repo.save(challenge))


@app.put("/api/challenges/{challenge_id}/active")
def update_challenge_status(challenge_id: str, payload: ActiveRequest, db=Depends(get_database)):
    repo = ChallengeRepository(db)
    challenge = set_active(repo.get(challenge_id), payload.active)
    return challenge_out(repo.save(challenge))


@app.delete("/api/challenges/{challenge_id}")
def remove_challenge(challenge_id: str, db=Depends(get_database)):
    ChallengeRepository(db).delete(challenge_id)
    return {"deleted": True}


# Leaderboard
@app.post("/api/leaderboard")
def leaderboard(payload: LeaderboardRequest):
    return {"items": [e.model_dump() for e in rank(payload.participants)]}


# Achievements
@app.get("/api/achievements")
def list_achievements(db=Depends(get_database)):
    repo = AchievementRepository(db)
    repo.seed_defaults()
    return {"items": [a.model_dump(mode="json") for a in repo.list_all()]}


@app.post("/api/achievements/evaluate")
def evaluate_achievements(as_of: Optional[date] = None, db=Depends(get_database)):
    as_of = as_of or today()
    repo = AchievementRepository(db)
    repo.seed_defaults()
    goals = ProfileRepository(db).get_or_create_default().goals
    history = aggregate_history(TrackingRepository(db).list_range(date.min, as_of), goals)
    _, unlocked = evaluate_all(
        repo.list_all(),
        history,
        meditation_sessions=MeditationRepository(db).count_completed(),
        as_of=as_of,
    )
    for achievement in unlocked:
        repo.save(achievement)
    return {"unlocked": [a.model_dump(mode="json") for a in unlocked]}


# Meditation
@app.get("/api/meditation/sessions")
def list_meditation_sessions(limit: Optional[int] = None, db=Depends(get_database)):
    sessions = MeditationRepository(db).list_sessions(limit)
    return {"items": [s.model_dump(mode="json") for s in sessions]}


@app.post("/api/meditation/sessions")
def start_meditation(payload: StartMeditationRequest, db=Depends(get_database)):
    session = MeditationRepository(db).start(payload.duration_minutes)
    return session.model_dump(mode="json")


@app.post("/api/meditation/sessions/{session_id}/complete")
def complete_meditation(session_id: str, db=Depends(get_database)):
    return MeditationRepository(db).complete(session_id).model_dump(mode="json")


# Fitness sync
@app.post("/api/sync")
def sync_fitness(
    day: Optional[date] = None,
    db=Depends(get_database),
    sync: FitnessDataSync = Depends(get_fitness_sync),
):
    day = day or today()
    tracking = TrackingRepository(db)
    if not sync.can_sync:
        return {"synced": None, "measurement": tracking.get_or_empty(day).model_dump(mode="json")}
    data = sync.sync_day(day)
    measurement = tracking.save(merge_into_measurement(data, tracking.get_or_empty(day)))
    return {
        "synced": data.model_dump(mode="json"),
        "distance_km": data.distance_km,
        "measurement": measurement.model_dump(mode="json"),
    }


if __name__ == "__main__":
    import uvicorn
    config.configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
