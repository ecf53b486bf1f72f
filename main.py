"""FastAPI application for the clinic room queue.

The app is a thin layer over ``QueueEngine``: each endpoint hands plain ids
and values to one engine operation or read-only view and returns the result
as JSON.  Configuration comes from environment variables (see
``config.py``).  Redis is optional and used only to broadcast queue calls and
cache the dashboard.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from announcements import RedisCallPublisher, cache_dashboard, get_cached_dashboard, get_redis
from config import CLINIC_NAME, LOG_LEVEL, PORT, SEED_DEMO_DATA
from errors import ConflictError, InvalidStateError, NotFoundError, QueueError
from lookup import find_patient_by_code, search_doctors, search_patients, search_rooms
from schemas import (
    ActiveRequest,
    AddQueueRequest,
    AssignDoctorRequest,
    CallQueueRequest,
    DoctorCreate,
    DoctorUpdate,
    MoveQueueRequest,
    PatientCreate,
    RoomCreate,
    RoomUpdate,
)
from seed import load_demo_data
from services import QueueEngine
from views import available_rooms_for_doctor, dashboard_stats, room_cards, room_queue

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: 404,
    InvalidStateError: 400,
    ConflictError: 409,
}


def _dump(entity) -> Dict[str, Any]:
    return entity.model_dump(mode="json")


def create_app(
    engine: Optional[QueueEngine] = None,
    seed: bool = SEED_DEMO_DATA,
    redis_client=None,
) -> FastAPI:
    """Build the app around one explicitly owned engine."""
    engine = engine if engine is not None else QueueEngine()
    if seed:
        load_demo_data(engine)
        logger.info("Demo data loaded")

    app = FastAPI(title=CLINIC_NAME)
    app.state.engine = engine
    app.state.redis = redis_client
    if redis_client is not None:
        engine.subscribe(RedisCallPublisher(redis_client))

    @app.on_event("startup")
    def on_startup() -> None:
        if app.state.redis is None:
            client = get_redis()
            if client is not None:
                app.state.redis = client
                engine.subscribe(RedisCallPublisher(client))
                logger.info("Broadcasting queue calls via Redis")

    @app.exception_handler(QueueError)
    async def queue_error_handler(request: Request, exc: QueueError) -> JSONResponse:
        status = ERROR_STATUS.get(type(exc), 400)
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": exc.message},
        )

    @app.get("/")
    def root() -> Dict[str, Any]:
        return {"status": "running", "service": CLINIC_NAME}

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": CLINIC_NAME,
            "redis": app.state.redis is not None,
        }

    # ===== DASHBOARD =====

    @app.get("/api/dashboard")
    def dashboard(use_cache: bool = False) -> Dict[str, Any]:
        client = app.state.redis
        if use_cache and client is not None:
            cached = get_cached_dashboard(client)
            if cached:
                return cached

        snapshot = engine.store.snapshot()
        payload = {
            "rooms": [_dump(r) for r in snapshot.rooms],
            "doctors": [_dump(d) for d in snapshot.doctors],
            "patients": [_dump(p) for p in snapshot.patients],
            "stats": dashboard_stats(snapshot),
            "cards": room_cards(snapshot),
            "taken_at": snapshot.taken_at.isoformat(),
        }
        if client is not None:
            cache_dashboard(client, payload)
        return payload

    @app.get("/api/events")
    def events(limit: int = 50) -> Dict[str, Any]:
        return {"events": [_dump(e) for e in engine.store.recent_events(limit)]}

    # ===== PATIENTS =====

    @app.get("/api/patients")
    def list_patients(q: str = "") -> Dict[str, Any]:
        snapshot = engine.store.snapshot()
        return {"patients": [_dump(p) for p in search_patients(snapshot, q)]}

    @app.get("/api/patients/search")
    def find_patient(code: str) -> Dict[str, Any]:
        patient = find_patient_by_code(engine.store.snapshot(), code)
        return {"patient": _dump(patient) if patient else None}

    @app.post("/api/patients", status_code=201)
    def add_patient(body: PatientCreate) -> Dict[str, Any]:
        return _dump(engine.add_patient(body.hn, body.name, body.arrival_time))

    @app.delete("/api/patients/{patient_id}")
    def remove_patient(patient_id: str) -> Dict[str, Any]:
        engine.remove_patient(patient_id)
        return {"ok": True}

    # ===== QUEUES =====

    @app.post("/api/queues", status_code=201)
    def add_queue(body: AddQueueRequest) -> Dict[str, Any]:
        return _dump(engine.add_queue(body.patient, body.room_id))

    @app.post("/api/queues/move")
    def move_queue(body: MoveQueueRequest) -> Dict[str, Any]:
        return _dump(engine.move_queue(body.patient_id, body.room_id))

    @app.delete("/api/queues/{patient_id}")
    def delete_queue(patient_id: str) -> Dict[str, Any]:
        return _dump(engine.delete_queue(patient_id))

    @app.post("/api/queues/call")
    def call_queue(body: CallQueueRequest) -> Dict[str, Any]:
        return _dump(engine.call_queue(body.room_id, body.queue_number))

    # ===== ROOMS =====

    @app.get("/api/rooms")
    def list_rooms(q: str = "", available: bool = False) -> Dict[str, Any]:
        snapshot = engine.store.snapshot()
        rooms = available_rooms_for_doctor(snapshot) if available else search_rooms(snapshot, q)
        return {"rooms": [_dump(r) for r in rooms]}

    @app.get("/api/rooms/{room_id}/queue")
    def get_room_queue(room_id: str) -> Dict[str, Any]:
        snapshot = engine.store.snapshot()
        if not any(r.id == room_id for r in snapshot.rooms):
            raise NotFoundError(f"Room {room_id} not found")
        return {"patients": [_dump(p) for p in room_queue(snapshot, room_id)]}

    @app.post("/api/rooms", status_code=201)
    def add_room(body: RoomCreate) -> Dict[str, Any]:
        return _dump(engine.add_room(body.name, body.floor, body.department))

    @app.patch("/api/rooms/{room_id}")
    def update_room(room_id: str, body: RoomUpdate) -> Dict[str, Any]:
        return _dump(engine.update_room(room_id, body.name, body.floor, body.department))

    @app.post("/api/rooms/{room_id}/active")
    def set_room_active(room_id: str, body: ActiveRequest) -> Dict[str, Any]:
        return _dump(engine.set_room_active(room_id, body.active))

    @app.delete("/api/rooms/{room_id}")
    def delete_room(room_id: str) -> Dict[str, Any]:
        engine.delete_room(room_id)
        return {"ok": True}

    # ===== DOCTORS =====

    @app.get("/api/doctors")
    def list_doctors(q: str = "") -> Dict[str, Any]:
        snapshot = engine.store.snapshot()
        return {"doctors": [_dump(d) for d in search_doctors(snapshot, q)]}

    @app.post("/api/doctors", status_code=201)
    def add_doctor(body: DoctorCreate) -> Dict[str, Any]:
        doctor = engine.add_doctor(
            body.name,
            specialization=body.specialization,
            license_number=body.license_number,
            room_id=body.room_id,
        )
        return _dump(doctor)

    @app.patch("/api/doctors/{doctor_id}")
    def update_doctor(doctor_id: str, body: DoctorUpdate) -> Dict[str, Any]:
        doctor = engine.update_doctor(
            doctor_id,
            name=body.name,
            specialization=body.specialization,
            license_number=body.license_number,
        )
        return _dump(doctor)

    @app.post("/api/doctors/{doctor_id}/assign")
    def assign_doctor(doctor_id: str, body: AssignDoctorRequest) -> Dict[str, Any]:
        return _dump(engine.assign_doctor(doctor_id, body.room_id))

    @app.post("/api/doctors/{doctor_id}/active")
    def set_doctor_active(doctor_id: str, body: ActiveRequest) -> Dict[str, Any]:
        return _dump(engine.set_doctor_active(doctor_id, body.active))

    @app.delete("/api/doctors/{doctor_id}")
    def remove_doctor(doctor_id: str) -> Dict[str, Any]:
        engine.remove_doctor(doctor_id)
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
