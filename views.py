"""Read-only aggregates for the dashboard.

Every function takes a ``DashboardSnapshot`` (see ``store.py``) and never
changes it, so they are safe to run from any thread.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import Doctor, Patient, PatientStatus, Room, RoomStatus
from store import DashboardSnapshot


def total_rooms(snapshot: DashboardSnapshot) -> int:
    return len(snapshot.rooms)


def active_doctor_count(snapshot: DashboardSnapshot) -> int:
    return sum(1 for d in snapshot.doctors if d.is_active)


def total_current_queue_sum(snapshot: DashboardSnapshot) -> int:
    """Sum of every room's current queue number, counting unset as 0."""
    return sum(r.current_queue_number or 0 for r in snapshot.rooms)


def _find_room(snapshot: DashboardSnapshot, room_id: str) -> Optional[Room]:
    return next((r for r in snapshot.rooms if r.id == room_id), None)


def current_patient_for_room(snapshot: DashboardSnapshot, room_id: str) -> Optional[Patient]:
    room = _find_room(snapshot, room_id)
    if room is None or room.current_queue_number is None:
        return None
    for patient in snapshot.patients:
        if patient.room_id == room_id and patient.queue_number == room.current_queue_number:
            return patient
    return None


def doctor_for_room(snapshot: DashboardSnapshot, room_id: str) -> Optional[Doctor]:
    return next(
        (d for d in snapshot.doctors if d.room_id == room_id and d.is_active),
        None,
    )


def room_queue(snapshot: DashboardSnapshot, room_id: str) -> List[Patient]:
    """Non-completed patients of a room in serving order."""
    queued = [
        p for p in snapshot.patients
        if p.room_id == room_id and p.status != PatientStatus.completed
    ]
    return sorted(queued, key=lambda p: p.queue_number or 0)


def available_rooms_for_doctor(snapshot: DashboardSnapshot) -> List[Room]:
    staffed = {d.room_id for d in snapshot.doctors if d.is_active and d.room_id}
    return [
        r for r in snapshot.rooms
        if r.status == RoomStatus.active and r.id not in staffed
    ]


def room_cards(snapshot: DashboardSnapshot) -> List[Dict[str, Any]]:
    cards = []
    for room in snapshot.rooms:
        doctor = doctor_for_room(snapshot, room.id)
        current = current_patient_for_room(snapshot, room.id)
        waiting = [
            p for p in room_queue(snapshot, room.id)
            if p.status == PatientStatus.waiting
        ]
        cards.append({
            "room": room.model_dump(mode="json"),
            "doctor": doctor.model_dump(mode="json") if doctor else None,
            "current_patient": current.model_dump(mode="json") if current else None,
            "waiting_count": len(waiting),
        })
    return cards


def dashboard_stats(snapshot: DashboardSnapshot) -> Dict[str, int]:
    return {
        "total_rooms": total_rooms(snapshot),
        "active_doctors": active_doctor_count(snapshot),
        "current_queues": total_current_queue_sum(snapshot),
    }
