from datetime import datetime
from typing import Callable, Dict, List

from core.storage import StoredPatient


def search(patients: List[StoredPatient], query: str) -> List[StoredPatient]:
    q = (query or "").strip().lower()
    if not q:
        return list(patients)
    return [p for p in patients if q in p.record.personal_info.full_name.lower()]


def _ts(p: StoredPatient) -> float:
    return datetime.fromisoformat(p.timestamp).timestamp()


SORT_KEYS: Dict[str, Callable[[StoredPatient], object]] = {
    "name": lambda p: p.record.personal_info.full_name.lower(),
    "age": lambda p: p.record.personal_info.age,
    "timestamp": _ts,
    "risk": lambda p: p.score,
}


def sort_patients(patients: List[StoredPatient], field: str = "timestamp", descending: bool = True) -> List[StoredPatient]:
    key = SORT_KEYS.get(field)
    if key is None:
        return list(patients)
    return sorted(patients, key=key, reverse=descending)


def risk_badge(p: StoredPatient) -> str:
    # stored tier comes from the scorer, no recomputation from the score
    return f"{p.tier.capitalize()} Risk"
