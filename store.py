"""In-memory entity store.

The store is the single holder of rooms, doctors and patients.  It does not
check business rules; the queue engine in ``services.py`` does that and is
the only caller of the ``put_*``/``remove_*`` mutators.  Everything handed
out by the public getters is a deep copy, so presentation code cannot change
stored entities behind the engine's back.
"""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime
from itertools import count
from typing import Deque, Dict, Iterator, List, NamedTuple, Optional

from config import EVENT_LOG_LIMIT
from models import Doctor, Patient, QueueEvent, Room


class DashboardSnapshot(NamedTuple):
    rooms: List[Room]
    doctors: List[Doctor]
    patients: List[Patient]
    taken_at: datetime


class EntityStore:
    def __init__(self, event_limit: int = EVENT_LOG_LIMIT) -> None:
        # Re-entrant so engine operations can call the locked getters.
        self.lock = threading.RLock()
        self._event_limit = event_limit
        self.reset()

    def reset(self) -> None:
        """Drop every entity and event and restart id numbering."""
        with self.lock:
            self._rooms: Dict[str, Room] = {}
            self._doctors: Dict[str, Doctor] = {}
            self._patients: Dict[str, Patient] = {}
            self._events: Deque[QueueEvent] = deque(maxlen=self._event_limit)
            self._counters: Dict[str, Iterator[int]] = {}

    def next_id(self, kind: str) -> str:
        """Return an unused id for ``kind`` ("room", "doctor" or "patient")."""
        with self.lock:
            table = self._table(kind)
            counter = self._counters.setdefault(kind, count(1))
            while True:
                candidate = str(next(counter))
                if candidate not in table:
                    return candidate

    def _table(self, kind: str) -> Dict:
        tables = {"room": self._rooms, "doctor": self._doctors, "patient": self._patients}
        if kind not in tables:
            raise ValueError(f"Unknown entity kind: {kind}")
        return tables[kind]

    # ----- reads -----

    def get_room(self, room_id: str) -> Optional[Room]:
        with self.lock:
            room = self._rooms.get(room_id)
            return room.model_copy(deep=True) if room else None

    def get_doctor(self, doctor_id: str) -> Optional[Doctor]:
        with self.lock:
            doctor = self._doctors.get(doctor_id)
            return doctor.model_copy(deep=True) if doctor else None

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        with self.lock:
            patient = self._patients.get(patient_id)
            return patient.model_copy(deep=True) if patient else None

    def list_rooms(self) -> List[Room]:
        with self.lock:
            return [r.model_copy(deep=True) for r in self._rooms.values()]

    def list_doctors(self) -> List[Doctor]:
        with self.lock:
            return [d.model_copy(deep=True) for d in self._doctors.values()]

    def list_patients(self) -> List[Patient]:
        with self.lock:
            return [p.model_copy(deep=True) for p in self._patients.values()]

    def recent_events(self, limit: int = 50) -> List[QueueEvent]:
        """Return up to ``limit`` events, newest first."""
        with self.lock:
            events = list(self._events)
        events.reverse()
        return [e.model_copy() for e in events[:limit]]

    def snapshot(self) -> DashboardSnapshot:
        with self.lock:
            return DashboardSnapshot(
                rooms=self.list_rooms(),
                doctors=self.list_doctors(),
                patients=self.list_patients(),
                taken_at=datetime.utcnow(),
            )

    # ----- engine-only mutators -----

    def put_room(self, room: Room) -> None:
        with self.lock:
            self._rooms[room.id] = room

    def put_doctor(self, doctor: Doctor) -> None:
        with self.lock:
            self._doctors[doctor.id] = doctor

    def put_patient(self, patient: Patient) -> None:
        with self.lock:
            self._patients[patient.id] = patient

    def remove_room(self, room_id: str) -> None:
        with self.lock:
            self._rooms.pop(room_id, None)

    def remove_doctor(self, doctor_id: str) -> None:
        with self.lock:
            self._doctors.pop(doctor_id, None)

    def remove_patient(self, patient_id: str) -> None:
        with self.lock:
            self._patients.pop(patient_id, None)

    def append_event(self, event: QueueEvent) -> None:
        with self.lock:
            self._events.append(event)
