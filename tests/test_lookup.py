from __future__ import annotations

from lookup import find_patient_by_code, search_doctors, search_patients, search_rooms
from services import QueueEngine


def test_exact_hn_beats_substring(engine: QueueEngine) -> None:
    engine.add_patient("HN0012", "Long Code")
    engine.add_patient("HN001", "Short Code")
    assert find_patient_by_code(engine.store.snapshot(), "HN001").name == "Short Code"


def test_substring_match_is_case_insensitive(clinic: QueueEngine) -> None:
    assert find_patient_by_code(clinic.store.snapshot(), "n003").hn == "HN003"


def test_lookup_by_patient_id(clinic: QueueEngine) -> None:
    assert find_patient_by_code(clinic.store.snapshot(), "2").hn == "HN002"


def test_not_found_is_none(clinic: QueueEngine) -> None:
    snapshot = clinic.store.snapshot()
    assert find_patient_by_code(snapshot, "HN999") is None
    assert find_patient_by_code(snapshot, "   ") is None


def test_search_filters(clinic: QueueEngine) -> None:
    clinic.add_doctor("Dr. Wichan", specialization="Surgery")
    snapshot = clinic.store.snapshot()

    assert [p.hn for p in search_patients(snapshot, "jaidee")] == ["HN001"]
    assert len(search_patients(snapshot, "")) == 3
    assert [r.id for r in search_rooms(snapshot, "pediatrics")] == ["2"]
    assert [d.name for d in search_doctors(snapshot, "surg")] == ["Dr. Wichan"]
    assert search_doctors(snapshot, "cardio") == []
