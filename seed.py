"""Demo data for local runs (``SEED_DEMO_DATA=true``).

Everything is created through the engine so the seeded state obeys the same
rules as live data.
"""

from __future__ import annotations

from services import QueueEngine

DEMO_ROOMS = [
    ("Room 1", "1", "Internal Medicine"),
    ("Room 2", "1", "Pediatrics"),
    ("Room 3", "2", "Surgery"),
    ("Room 4", "2", "Obstetrics"),
]

DEMO_DOCTORS = [
    ("Dr. Somchai Jaidee", "Internal Medicine"),
    ("Dr. Somsai Suayngam", "Pediatrics"),
    ("Dr. Wichan Rumak", "Surgery"),
    ("Dr. Jinda Chuailuea", "Obstetrics"),
]

# (hn, name, room index)
DEMO_PATIENTS = [
    ("HN001234", "Somsak Jaidee", 0),
    ("HN001235", "Suphap Dingam", 0),
    ("HN001236", "Praphan Rakrian", 1),
    ("HN001237", "Wilai Jaisue", 1),
    ("HN001238", "Somchai Hankla", 2),
    ("HN001239", "Manee Onwan", 3),
]


def load_demo_data(engine: QueueEngine) -> None:
    rooms = [engine.add_room(name, floor, dept) for name, floor, dept in DEMO_ROOMS]
    for room, (name, specialization) in zip(rooms, DEMO_DOCTORS):
        engine.add_doctor(name, specialization=specialization, room_id=room.id)

    first_in_room = {}
    for hn, name, room_index in DEMO_PATIENTS:
        patient = engine.add_patient(hn, name)
        queued = engine.add_queue(patient.hn, rooms[room_index].id)
        first_in_room.setdefault(room_index, queued.queue_number)

    for room_index, number in first_in_room.items():
        engine.call_queue(rooms[room_index].id, number)
