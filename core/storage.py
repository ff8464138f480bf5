"""
Patient submission storage.

Submissions are kept as one ordered list of JSON objects. The app talks to a
``PatientRepository`` so the scoring code never touches storage directly;
``JsonFileRepository`` backs the Streamlit app and ``InMemoryRepository``
backs tests and throwaway sessions.
"""
import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from core.types import (
    LabAnalysis, LabResults, MedicalHistory, PatientRecord, PersonalInfo,
    PredictionResult, Symptoms,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the data file cannot be read or holds malformed records."""


@dataclass
class StoredPatient:
    id: str
    record: PatientRecord
    timestamp: str
    prediction_result: str  # "low_risk" | "moderate_risk" | "high_risk"
    prediction_score: str
    risk_factors: List[str] = field(default_factory=list)
    lab_analysis: LabAnalysis = field(default_factory=lambda: LabAnalysis(False, ()))

    @property
    def tier(self) -> str:
        return self.prediction_result.replace("_risk", "")

    @property
    def score(self) -> float:
        return float(self.prediction_score)

    def result(self) -> PredictionResult:
        return PredictionResult(
            score=int(self.score),
            tier=self.tier,
            factors=tuple(self.risk_factors),
            lab_analysis=self.lab_analysis,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "personal_info": asdict(self.record.personal_info),
            "medical_history": asdict(self.record.medical_history),
            "symptoms": asdict(self.record.symptoms),
            "lab_results": asdict(self.record.lab_results),
            "timestamp": self.timestamp,
            "prediction_result": self.prediction_result,
            "prediction_score": self.prediction_score,
            "risk_factors": list(self.risk_factors),
            "lab_analysis": {
                "abnormal": self.lab_analysis.abnormal,
                "details": list(self.lab_analysis.details),
            },
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StoredPatient":
        # history sorting and result() read these later
        float(d["prediction_score"])
        datetime.fromisoformat(d["timestamp"])
        la = d.get("lab_analysis") or {}
        return cls(
            id=str(d["id"]),
            record=PatientRecord(
                personal_info=PersonalInfo(**d.get("personal_info", {})),
                medical_history=MedicalHistory(**d.get("medical_history", {})),
                symptoms=Symptoms(**d.get("symptoms", {})),
                lab_results=LabResults(**d.get("lab_results", {})),
            ),
            timestamp=d["timestamp"],
            prediction_result=d["prediction_result"],
            prediction_score=str(d["prediction_score"]),
            risk_factors=list(d.get("risk_factors", [])),
            lab_analysis=LabAnalysis(bool(la.get("abnormal", False)), tuple(la.get("details", []))),
        )


def new_submission(patient_id: str, record: PatientRecord, result: PredictionResult,
                   timestamp: Optional[datetime] = None) -> StoredPatient:
    ts = timestamp or datetime.now(timezone.utc)
    return StoredPatient(
        id=patient_id,
        record=record,
        timestamp=ts.isoformat(),
        prediction_result=f"{result.tier}_risk",
        prediction_score=str(result.score),
        risk_factors=list(result.factors),
        lab_analysis=result.lab_analysis,
    )


class PatientRepository(Protocol):
    def create(self, record: PatientRecord, result: PredictionResult) -> StoredPatient: ...
    def list(self) -> List[StoredPatient]: ...
    def get(self, patient_id: str) -> Optional[StoredPatient]: ...
    def delete(self, patient_id: str) -> bool: ...
    def clear(self) -> None: ...


class InMemoryRepository:
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self._rows: List[Dict[str, Any]] = list(rows or [])

    # subclasses swap these two for real storage
    def _load(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def _save(self, rows: List[Dict[str, Any]]) -> None:
        self._rows = list(rows)

    def _checked_rows(self) -> List[Dict[str, Any]]:
        rows = self._load()
        for i, r in enumerate(rows):
            if not isinstance(r, dict):
                raise StorageError(f"Malformed patient record at index {i}: expected an object, got {type(r).__name__}")
        return rows

    def _new_id(self, taken: set) -> str:
        while True:
            pid = uuid.uuid4().hex[:8]
            if pid not in taken:
                return pid

    def create(self, record: PatientRecord, result: PredictionResult) -> StoredPatient:
        rows = self._checked_rows()
        pid = self._new_id({str(r.get("id")) for r in rows})
        stored = new_submission(pid, record, result)
        rows.append(stored.to_dict())
        self._save(rows)
        logger.info("Stored patient %s (%s, score %s)", pid, stored.prediction_result, stored.prediction_score)
        return stored

    def list(self) -> List[StoredPatient]:
        rows = self._checked_rows()
        try:
            return [StoredPatient.from_dict(r) for r in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed patient record: {e}") from e

    def get(self, patient_id: str) -> Optional[StoredPatient]:
        for p in self.list():
            if p.id == str(patient_id):
                return p
        return None

    def delete(self, patient_id: str) -> bool:
        rows = self._checked_rows()
        kept = [r for r in rows if str(r.get("id")) != str(patient_id)]
        if len(kept) == len(rows):
            return False
        self._save(kept)
        logger.info("Deleted patient %s", patient_id)
        return True

    def clear(self) -> None:
        self._save([])
        logger.info("Cleared all patient records")


class JsonFileRepository(InMemoryRepository):
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(rows, list):
            raise StorageError(f"{self.path} does not hold a list of patients")
        return rows

    def _save(self, rows: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)
