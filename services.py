"""Queue assignment engine.

Every change to rooms, doctors and patients goes through ``QueueEngine``.
Each operation takes the store lock, loads copies of the entities it needs,
validates them, and only then writes the changed copies back.  A rejected
operation therefore leaves the store exactly as it was.

Queue numbers are room-local: a newly queued patient gets one more than the
highest number held by a non-completed patient in that room, or 1 when the
room has nobody left.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from errors import ConflictError, InvalidStateError, NotFoundError
from models import (
    Doctor,
    EventType,
    Patient,
    PatientStatus,
    QueueEvent,
    Room,
    RoomStatus,
)
from store import EntityStore

logger = logging.getLogger(__name__)

QueueCalledListener = Callable[[str, int], None]


class QueueEngine:
    def __init__(self, store: Optional[EntityStore] = None) -> None:
        self.store = store if store is not None else EntityStore()
        self._listeners: List[QueueCalledListener] = []

    # ===== EVENT SUBSCRIPTION =====

    def subscribe(self, listener: QueueCalledListener) -> Callable[[], None]:
        """Register ``listener(room_id, queue_number)`` for successful calls.

        Listeners run in subscription order after the call is committed.  A
        listener that raises is logged and the rest still run.  Returns a
        callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ===== LOOKUP HELPERS =====

    def _require_room(self, room_id: str) -> Room:
        room = self.store.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def _require_active_room(self, room_id: str) -> Room:
        room = self._require_room(room_id)
        if room.status != RoomStatus.active:
            raise InvalidStateError(f"Room {room_id} is inactive")
        return room

    def _require_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.store.get_doctor(doctor_id)
        if doctor is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        return doctor

    def _require_patient(self, patient_id: str) -> Patient:
        patient = self.store.get_patient(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    def _resolve_patient(self, identifier: str) -> Patient:
        """Find a patient by id, falling back to an exact HN match."""
        patient = self.store.get_patient(identifier)
        if patient is not None:
            return patient
        for candidate in self.store.list_patients():
            if candidate.hn == identifier:
                return candidate
        raise NotFoundError(f"Patient {identifier} not found")

    def _queued_in(self, room_id: str) -> List[Patient]:
        return [
            p for p in self.store.list_patients()
            if p.room_id == room_id and p.status != PatientStatus.completed
        ]

    def _next_queue_number(self, room_id: str, exclude_patient_id: Optional[str] = None) -> int:
        numbers = [
            p.queue_number for p in self._queued_in(room_id)
            if p.id != exclude_patient_id and p.queue_number is not None
        ]
        return max(numbers) + 1 if numbers else 1

    def _release_current(self, room_id: Optional[str], queue_number: Optional[int]) -> None:
        """Clear the room's current number if it belongs to a leaving patient."""
        if room_id is None or queue_number is None:
            return
        room = self.store.get_room(room_id)
        if room is not None and room.current_queue_number == queue_number:
            room.current_queue_number = None
            self.store.put_room(room)

    def _active_doctor_in(self, room_id: str, exclude_doctor_id: Optional[str] = None) -> Optional[Doctor]:
        for doctor in self.store.list_doctors():
            if doctor.room_id == room_id and doctor.is_active and doctor.id != exclude_doctor_id:
                return doctor
        return None

    def _check_staffable(self, doctor_id: Optional[str], room_id: str) -> None:
        self._require_active_room(room_id)
        holder = self._active_doctor_in(room_id, exclude_doctor_id=doctor_id)
        if holder is not None:
            raise ConflictError(
                f"Room {room_id} is already staffed by active doctor {holder.id}"
            )

    def _record(self, event_type: EventType, **fields) -> None:
        self.store.append_event(QueueEvent(event_type=event_type, **fields))

    # ===== QUEUE OPERATIONS =====

    def add_queue(self, patient_identifier: str, room_id: str) -> Patient:
        """Put a patient at the back of a room's queue."""
        with self.store.lock:
            patient = self._resolve_patient(patient_identifier)
            self._require_active_room(room_id)
            if patient.room_id is not None:
                raise InvalidStateError(
                    f"Patient {patient.hn} is already queued in room {patient.room_id}"
                )
            patient.room_id = room_id
            patient.queue_number = self._next_queue_number(room_id)
            patient.status = PatientStatus.waiting
            self.store.put_patient(patient)
            self._record(
                EventType.joined,
                room_id=room_id,
                patient_id=patient.id,
                queue_number=patient.queue_number,
            )
        logger.info(f"Patient {patient.hn} queued in room {room_id} as #{patient.queue_number}")
        return patient

    def move_queue(self, patient_identifier: str, new_room_id: str) -> Patient:
        """Move a queued patient to the back of another room's queue."""
        with self.store.lock:
            patient = self._resolve_patient(patient_identifier)
            if patient.room_id is None:
                raise InvalidStateError(f"Patient {patient.hn} is not in any room queue")
            self._require_active_room(new_room_id)
            old_room_id, old_number = patient.room_id, patient.queue_number
            patient.queue_number = self._next_queue_number(new_room_id, exclude_patient_id=patient.id)
            patient.room_id = new_room_id
            self._release_current(old_room_id, old_number)
            patient.status = PatientStatus.waiting
            self.store.put_patient(patient)
            self._record(
                EventType.moved,
                room_id=new_room_id,
                patient_id=patient.id,
                queue_number=patient.queue_number,
            )
        logger.info(
            f"Patient {patient.hn} moved from room {old_room_id} to room {new_room_id} "
            f"as #{patient.queue_number}"
        )
        return patient

    def delete_queue(self, patient_identifier: str) -> Patient:
        """Take a patient out of their queue and mark them completed.

        Calling this on an already completed patient changes nothing.
        """
        with self.store.lock:
            patient = self._resolve_patient(patient_identifier)
            if patient.status == PatientStatus.completed and patient.room_id is None:
                return patient
            room_id, number = patient.room_id, patient.queue_number
            patient.room_id = None
            patient.queue_number = None
            patient.status = PatientStatus.completed
            self._release_current(room_id, number)
            self.store.put_patient(patient)
            self._record(
                EventType.completed,
                room_id=room_id,
                patient_id=patient.id,
                queue_number=number,
            )
        logger.info(f"Patient {patient.hn} completed")
        return patient

    def call_queue(self, room_id: str, queue_number: int) -> Patient:
        """Call ``queue_number`` in ``room_id`` and notify listeners once."""
        with self.store.lock:
            room = self._require_room(room_id)
            queued = self._queued_in(room_id)
            called = next((p for p in queued if p.queue_number == queue_number), None)
            if called is None:
                raise NotFoundError(f"No queued patient #{queue_number} in room {room_id}")
            room.current_queue_number = queue_number
            called.status = PatientStatus.active
            demoted = [
                p for p in queued
                if p.status == PatientStatus.active and p.id != called.id
            ]
            for other in demoted:
                other.status = PatientStatus.waiting
            self.store.put_room(room)
            self.store.put_patient(called)
            for other in demoted:
                self.store.put_patient(other)
            self._record(
                EventType.called,
                room_id=room_id,
                patient_id=called.id,
                queue_number=queue_number,
            )
        logger.info(f"Room {room_id} called #{queue_number}")
        for listener in list(self._listeners):
            try:
                listener(room_id, queue_number)
            except Exception:
                # the call is already committed; remaining listeners still run
                logger.exception(f"Queue-call listener {listener!r} failed for room {room_id} #{queue_number}")
        return called

    # ===== DOCTOR STAFFING =====

    def assign_doctor(self, doctor_id: str, room_id: Optional[str]) -> Doctor:
        """Point a doctor at a room, or unassign them with ``room_id=None``.

        An active doctor already staffing the room is never displaced; they
        have to be deactivated or moved first.
        """
        with self.store.lock:
            doctor = self._require_doctor(doctor_id)
            if room_id is not None:
                self._check_staffable(doctor.id, room_id)
            doctor.room_id = room_id
            self.store.put_doctor(doctor)
            self._record(EventType.doctor_assigned, room_id=room_id, doctor_id=doctor.id)
        logger.info(f"Doctor {doctor.id} assigned to room {room_id}")
        return doctor

    def set_doctor_active(self, doctor_id: str, active: bool) -> Doctor:
        with self.store.lock:
            doctor = self._require_doctor(doctor_id)
            if active and doctor.room_id is not None:
                holder = self._active_doctor_in(doctor.room_id, exclude_doctor_id=doctor.id)
                if holder is not None:
                    raise ConflictError(
                        f"Room {doctor.room_id} is already staffed by active doctor {holder.id}"
                    )
            doctor.is_active = active
            self.store.put_doctor(doctor)
            self._record(
                EventType.doctor_activated if active else EventType.doctor_deactivated,
                room_id=doctor.room_id,
                doctor_id=doctor.id,
            )
        logger.info(f"Doctor {doctor.id} is_active={active}")
        return doctor

    def add_doctor(
        self,
        name: str,
        specialization: Optional[str] = None,
        license_number: Optional[str] = None,
        room_id: Optional[str] = None,
    ) -> Doctor:
        if not name or not name.strip():
            raise InvalidStateError("Doctor name is required")
        with self.store.lock:
            if room_id is not None:
                self._check_staffable(None, room_id)
            doctor = Doctor(
                id=self.store.next_id("doctor"),
                name=name.strip(),
                specialization=specialization,
                license_number=license_number,
                room_id=room_id,
            )
            self.store.put_doctor(doctor)
        logger.info(f"Doctor {doctor.id} added")
        return doctor

    def update_doctor(
        self,
        doctor_id: str,
        name: Optional[str] = None,
        specialization: Optional[str] = None,
        license_number: Optional[str] = None,
    ) -> Doctor:
        with self.store.lock:
            doctor = self._require_doctor(doctor_id)
            if name is not None:
                if not name.strip():
                    raise InvalidStateError("Doctor name is required")
                doctor.name = name.strip()
            if specialization is not None:
                doctor.specialization = specialization
            if license_number is not None:
                doctor.license_number = license_number
            self.store.put_doctor(doctor)
        return doctor

    def remove_doctor(self, doctor_id: str) -> None:
        with self.store.lock:
            self._require_doctor(doctor_id)
            self.store.remove_doctor(doctor_id)
        logger.info(f"Doctor {doctor_id} removed")

    # ===== ROOMS =====

    def add_room(self, name: str, floor: Optional[str] = None, department: Optional[str] = None) -> Room:
        if not name or not name.strip():
            raise InvalidStateError("Room name is required")
        with self.store.lock:
            room = Room(
                id=self.store.next_id("room"),
                name=name.strip(),
                floor=floor,
                department=department,
            )
            self.store.put_room(room)
        logger.info(f"Room {room.id} added")
        return room

    def update_room(
        self,
        room_id: str,
        name: Optional[str] = None,
        floor: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Room:
        with self.store.lock:
            room = self._require_room(room_id)
            if name is not None:
                if not name.strip():
                    raise InvalidStateError("Room name is required")
                room.name = name.strip()
            if floor is not None:
                room.floor = floor
            if department is not None:
                room.department = department
            self.store.put_room(room)
        return room

    def set_room_active(self, room_id: str, active: bool) -> Room:
        with self.store.lock:
            room = self._require_room(room_id)
            room.status = RoomStatus.active if active else RoomStatus.inactive
            self.store.put_room(room)
        logger.info(f"Room {room_id} status={room.status.value}")
        return room

    def delete_room(self, room_id: str) -> None:
        with self.store.lock:
            self._require_room(room_id)
            if self._queued_in(room_id):
                raise InvalidStateError(f"Room {room_id} still has queued patients")
            if any(d.room_id == room_id for d in self.store.list_doctors()):
                raise InvalidStateError(f"Room {room_id} still has doctors assigned")
            self.store.remove_room(room_id)
        logger.info(f"Room {room_id} deleted")

    # ===== PATIENTS =====

    def add_patient(self, hn: str, name: str, arrival_time: Optional[datetime] = None) -> Patient:
        if not hn or not hn.strip():
            raise InvalidStateError("HN is required")
        if not name or not name.strip():
            raise InvalidStateError("Patient name is required")
        hn = hn.strip()
        with self.store.lock:
            if any(p.hn == hn for p in self.store.list_patients()):
                raise ConflictError(f"HN {hn} already exists")
            patient = Patient(
                id=self.store.next_id("patient"),
                hn=hn,
                name=name.strip(),
                arrival_time=arrival_time or datetime.utcnow(),
            )
            self.store.put_patient(patient)
        logger.info(f"Patient {hn} registered")
        return patient

    def remove_patient(self, patient_id: str) -> None:
        with self.store.lock:
            patient = self._require_patient(patient_id)
            self._release_current(patient.room_id, patient.queue_number)
            self.store.remove_patient(patient_id)
        logger.info(f"Patient {patient_id} removed")
