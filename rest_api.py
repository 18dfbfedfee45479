import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Body, APIRouter, Header, Depends, Request
from fastapi.responses import JSONResponse

from algorithms import MathTools
from db import (
    MetricsRepository,
    LoadSeriesRepository,
    PRRepository,
    MuscleLoadRepository,
    ProtocolRepository,
    SessionRepository,
    FinisherAssignmentRepository,
    NotificationRepository,
)
from errors import NotFoundError, UnauthorizedError
from events import CompositePublisher, NotificationPublisher, WebhookPublisher
from finisher_service import FinisherService
from load_service import LoadService
from models import MuscleLoadEntry, ProtocolStep
from pr_service import PRService
from readiness_service import ReadinessService
from settings_schema import EngineSettings, load_settings
from config import APP_VERSION

logger = logging.getLogger(__name__)


def current_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")
) -> str:
    """Resolve the calling athlete from the ``X-User-Id`` header."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("missing X-User-Id header")
    return x_user_id.strip()


class ReadinessAPI:
    """Provides REST endpoints over the readiness and load engine."""

    def __init__(
        self,
        db_path: Optional[str] = None,
        yaml_path: str = "settings.yaml",
        *,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.settings = settings or load_settings(yaml_path)
        self.db_path = db_path or self.settings.db_path
        logger.info("using database %s", self.db_path)
        self.metrics = MetricsRepository(self.db_path)
        self.loads = LoadSeriesRepository(self.db_path)
        self.prs = PRRepository(self.db_path)
        self.muscle_loads = MuscleLoadRepository(self.db_path)
        self.protocols = ProtocolRepository(self.db_path)
        self.sessions = SessionRepository(self.db_path)
        self.finishers = FinisherAssignmentRepository(self.db_path)
        self.notifications = NotificationRepository(self.db_path)
        publishers = [NotificationPublisher(self.notifications)]
        if self.settings.event_webhook_url:
            publishers.append(
                WebhookPublisher(
                    self.settings.event_webhook_url,
                    self.settings.event_webhook_token,
                    self.settings.event_timeout,
                )
            )
        self.publisher = CompositePublisher(publishers)
        self.readiness = ReadinessService(self.metrics)
        self.load_service = LoadService(self.loads, self.settings)
        self.pr_service = PRService(self.prs, self.publisher)
        self.finisher_service = FinisherService(
            self.sessions,
            self.muscle_loads,
            self.protocols,
            self.finishers,
            self.publisher,
        )
        self.app = FastAPI(
            title="Readiness API",
            description="REST API for athlete readiness, training load and records",
            version=APP_VERSION,
        )
        self.app.exception_handler(UnauthorizedError)(self._unauthorized)
        self._setup_routes()

    @staticmethod
    async def _unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": str(exc)})

    def _setup_routes(self) -> None:
        loads_router = APIRouter(prefix="/loads", tags=["Training Load"])
        sessions_router = APIRouter(prefix="/sessions", tags=["Sessions"])
        protocols_router = APIRouter(prefix="/protocols", tags=["Protocols"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.protocols.list_protocols()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/readiness")
        def get_readiness(date: str = None, user_id: str = Depends(current_user)):
            try:
                return self.readiness.today(user_id, date).to_dict()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/readiness/composite")
        def composite_readiness(
            hrv: float = None,
            resting_hr: float = None,
            sleep_score: float = None,
            soreness: float = None,
            motivation: float = None,
            user_id: str = Depends(current_user),
        ):
            try:
                return self.readiness.composite(
                    hrv, resting_hr, sleep_score, soreness, motivation
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/readiness/score")
        def score_readiness(
            hrv_rmssd: float = None,
            sleep_minutes: float = None,
            soreness: float = None,
            jump_cm: float = None,
            resting_hr: float = None,
            sleep_score: float = None,
            motivation: float = None,
            user_id: str = Depends(current_user),
        ):
            try:
                return self.readiness.score(
                    hrv_rmssd=hrv_rmssd,
                    sleep_minutes=sleep_minutes,
                    soreness=soreness,
                    jump_cm=jump_cm,
                    resting_hr=resting_hr,
                    sleep_score=sleep_score,
                    motivation=motivation,
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/metrics/daily")
        def log_daily_metric(
            date: str,
            hrv_rmssd: float = None,
            sleep_minutes: float = None,
            user_id: str = Depends(current_user),
        ):
            try:
                self.readiness.log_daily_metric(user_id, date, hrv_rmssd, sleep_minutes)
                return {"status": "saved"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/soreness", status_code=201)
        def log_soreness(date: str, score: int, user_id: str = Depends(current_user)):
            try:
                entry = self.readiness.log_soreness(user_id, date, score)
                return {"date": entry.date, "score": entry.score}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/soreness")
        def soreness_history(
            start_date: str = None,
            end_date: str = None,
            user_id: str = Depends(current_user),
        ):
            try:
                return self.readiness.soreness_history(user_id, start_date, end_date)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/jump_tests", status_code=201)
        def log_jump_test(
            date: str, height_cm: float = None, user_id: str = Depends(current_user)
        ):
            try:
                jid = self.readiness.log_jump_test(user_id, date, height_cm)
                return {"id": jid}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @loads_router.post("")
        def log_load(date: str, daily_load: float, user_id: str = Depends(current_user)):
            try:
                self.loads.log(user_id, date, daily_load)
                return {"status": "saved"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @loads_router.get("/windows")
        def load_windows(
            start_date: str = None,
            end_date: str = None,
            user_id: str = Depends(current_user),
        ):
            try:
                return self.load_service.report_rows(user_id, start_date, end_date)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @loads_router.get("/acwr")
        def latest_acwr(
            start_date: str = None,
            end_date: str = None,
            user_id: str = Depends(current_user),
        ):
            try:
                result = self.load_service.latest_acwr(user_id, start_date, end_date)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            if result is None:
                raise HTTPException(status_code=404, detail="no load data")
            return result

        @loads_router.get("/chart")
        def load_chart(
            kind: str = "acwr",
            start_date: str = None,
            end_date: str = None,
            user_id: str = Depends(current_user),
        ):
            try:
                return self.load_service.chart(user_id, start_date, end_date, kind=kind)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.post("/sets", status_code=201)
        def log_set(
            exercise: str,
            weight: float = None,
            reps: int = None,
            velocity: float = None,
            rpe: float = None,
            timestamp: str = None,
            user_id: str = Depends(current_user),
        ):
            try:
                records = self.pr_service.log_set(
                    user_id, exercise, weight, reps, velocity, rpe, timestamp
                )
                tonnage = MathTools.tonnage([(reps, weight)]) if weight and reps else 0.0
                return {"new_prs": [r.to_dict() for r in records], "tonnage": tonnage}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/prs")
        def list_prs(exercise: str = None, user_id: str = Depends(current_user)):
            return [r.to_dict() for r in self.pr_service.best_records(user_id, exercise)]

        @self.app.post("/muscle_loads")
        def log_muscle_load(
            date: str,
            muscle: str,
            load_score: float,
            user_id: str = Depends(current_user),
        ):
            try:
                self.muscle_loads.log(MuscleLoadEntry(user_id, date, muscle, load_score))
                return {"status": "saved"}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @protocols_router.get("")
        def list_protocols():
            return [p.to_dict() for p in self.protocols.list_protocols()]

        @protocols_router.post("", status_code=201)
        def add_protocol(
            name: str,
            muscles: str,
            duration_minutes: int = 0,
            steps: list[dict] = Body(default=None),
        ):
            try:
                parsed = [
                    ProtocolStep(s["step"], int(s.get("duration_seconds", 0)))
                    for s in steps or []
                ]
                pid = self.protocols.add(name, muscles.split("|"), parsed, duration_minutes)
                return {"id": pid}
            except (KeyError, TypeError) as e:
                raise HTTPException(status_code=400, detail=f"invalid step: {e}")
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @protocols_router.get("/{protocol_id}")
        def get_protocol(protocol_id: int):
            protocol = self.protocols.fetch(protocol_id)
            if protocol is None:
                raise HTTPException(status_code=404, detail="protocol not found")
            return protocol.to_dict()

        @sessions_router.post("", status_code=201)
        def create_session(started_at: str = None, user_id: str = Depends(current_user)):
            try:
                sid = self.sessions.create(user_id, started_at)
                return {"id": sid}
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @sessions_router.post("/{session_id}/finisher/generate")
        def generate_finisher(session_id: int, user_id: str = Depends(current_user)):
            try:
                return self.finisher_service.generate(user_id, session_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.put("/{session_id}/finisher")
        def assign_finisher(
            session_id: int, protocol_id: int, user_id: str = Depends(current_user)
        ):
            try:
                return self.finisher_service.assign(user_id, session_id, protocol_id).to_dict()
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @sessions_router.get("/{session_id}/finisher")
        def get_finisher(session_id: int, user_id: str = Depends(current_user)):
            try:
                assignment = self.finisher_service.current(user_id, session_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            if assignment is None:
                raise HTTPException(status_code=404, detail="no finisher assigned")
            return assignment.to_dict()

        @self.app.get("/notifications")
        def get_notifications(unread_only: bool = False, user_id: str = Depends(current_user)):
            return self.notifications.fetch_all(user_id, unread_only)

        @self.app.put("/notifications/{nid}/read")
        def mark_notification_read(nid: int, user_id: str = Depends(current_user)):
            if not self.notifications.mark_read(nid, user_id):
                raise HTTPException(status_code=404, detail="notification not found")
            return {"status": "read"}

        @self.app.get("/notifications/unread_count")
        def unread_count(user_id: str = Depends(current_user)):
            return {"count": self.notifications.unread_count(user_id)}

        self.app.include_router(loads_router)
        self.app.include_router(sessions_router)
        self.app.include_router(protocols_router)


api = ReadinessAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
