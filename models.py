"""Entity models for the clinic room queue.

We use SQLModel to define the shapes.  Rooms are the examination rooms,
doctors staff rooms, and patients hold a room-local queue number while they
wait.  Events are kept to provide an audit trail.  None of these are table
models: the entity store keeps them in memory.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class RoomStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class PatientStatus(str, Enum):
    """Possible statuses for a patient."""

    waiting = "waiting"
    active = "active"
    completed = "completed"


class Room(SQLModel):
    id: str
    name: str
    floor: Optional[str] = None
    department: Optional[str] = None
    current_queue_number: Optional[int] = None
    status: RoomStatus = Field(default=RoomStatus.active)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Doctor(SQLModel):
    id: str
    name: str
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    room_id: Optional[str] = None  # room currently staffed, if any
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Patient(SQLModel):
    id: str
    hn: str
    name: str
    arrival_time: datetime = Field(default_factory=datetime.utcnow)
    room_id: Optional[str] = None
    queue_number: Optional[int] = None  # only meaningful together with room_id
    status: PatientStatus = Field(default=PatientStatus.waiting)


class EventType(str, Enum):
    joined = "joined"
    moved = "moved"
    completed = "completed"
    called = "called"
    doctor_assigned = "doctor_assigned"
    doctor_activated = "doctor_activated"
    doctor_deactivated = "doctor_deactivated"


class QueueEvent(SQLModel):
    event_type: EventType
    room_id: Optional[str] = None
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    queue_number: Optional[int] = None
    at: datetime = Field(default_factory=datetime.utcnow)
