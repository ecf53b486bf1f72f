"""Patient, room and doctor search.

A search that matches nothing is a normal outcome: these functions return
``None`` or an empty list rather than raising.
"""

from __future__ import annotations

from typing import List, Optional

from models import Doctor, Patient, Room
from store import DashboardSnapshot


def find_patient_by_code(snapshot: DashboardSnapshot, code: str) -> Optional[Patient]:
    """Find one patient by HN.

    An exact HN match wins, then an exact id, then the first patient whose
    HN contains ``code`` (case-insensitive).
    """
    code = (code or "").strip()
    if not code:
        return None
    for patient in snapshot.patients:
        if patient.hn == code:
            return patient
    for patient in snapshot.patients:
        if patient.id == code:
            return patient
    needle = code.lower()
    for patient in snapshot.patients:
        if needle in patient.hn.lower():
            return patient
    return None


def search_patients(snapshot: DashboardSnapshot, term: str) -> List[Patient]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(snapshot.patients)
    return [
        p for p in snapshot.patients
        if needle in p.hn.lower() or needle in p.name.lower()
    ]


def search_rooms(snapshot: DashboardSnapshot, term: str) -> List[Room]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(snapshot.rooms)
    return [
        r for r in snapshot.rooms
        if any(needle in (value or "").lower() for value in (r.name, r.floor, r.department))
    ]


def search_doctors(snapshot: DashboardSnapshot, term: str) -> List[Doctor]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(snapshot.doctors)
    return [
        d for d in snapshot.doctors
        if needle in d.name.lower() or needle in (d.specialization or "").lower()
    ]
