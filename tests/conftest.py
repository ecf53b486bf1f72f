from __future__ import annotations

import pytest

from services import QueueEngine
from store import EntityStore


@pytest.fixture()
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture()
def engine(store: EntityStore) -> QueueEngine:
    return QueueEngine(store)


@pytest.fixture()
def clinic(engine: QueueEngine) -> QueueEngine:
    """Two active rooms with ids "1" and "2", and three unqueued patients."""
    engine.add_room("Room 1", floor="1", department="Internal Medicine")
    engine.add_room("Room 2", floor="1", department="Pediatrics")
    engine.add_patient("HN001", "Somsak Jaidee")
    engine.add_patient("HN002", "Suphap Dingam")
    engine.add_patient("HN003", "Praphan Rakrian")
    return engine


def patient_by_hn(engine: QueueEngine, hn: str):
    return next(p for p in engine.store.list_patients() if p.hn == hn)


def assert_invariants(engine: QueueEngine) -> None:
    patients = engine.store.list_patients()
    for room in engine.store.list_rooms():
        queued = [p for p in patients if p.room_id == room.id and p.status != "completed"]
        numbers = [p.queue_number for p in queued]
        assert len(numbers) == len(set(numbers))
        assert sum(1 for p in queued if p.status == "active") <= 1
    for patient in patients:
        assert (patient.room_id is None) == (patient.queue_number is None)
    active_rooms = [d.room_id for d in engine.store.list_doctors() if d.is_active and d.room_id]
    assert len(active_rooms) == len(set(active_rooms))


def dumps(entities):
    return [e.model_dump() for e in entities]
