import math
import re
from typing import Callable, Dict, List, Optional, Tuple
from core.types import (
    LabAnalysis, LabResults, MedicalHistory, PatientRecord, PersonalInfo,
    PredictionResult, ReferenceRange, Symptoms,
)

# Reference ranges, in report order
REFERENCE_RANGES: Dict[str, ReferenceRange] = {
    "tsh": ReferenceRange(0.4, 4.0, "mIU/L"),
    "t3": ReferenceRange(80, 200, "ng/dL"),
    "t4": ReferenceRange(5.0, 12.0, "µg/dL"),
    "thyroglobulin": ReferenceRange(3, 40, "ng/mL"),
    "calcitonin": ReferenceRange(0, 10, "pg/mL"),
}

FACTOR_POINTS = 10
LAB_POINTS = 15
SEVERE_CALCITONIN = 20.0
SEVERE_POINTS = 30
SEVERE_LABEL = "Significantly elevated calcitonin levels"

Predicate = Callable[[PersonalInfo, MedicalHistory, Symptoms], bool]

# Checked in this order; every check runs
RISK_FACTORS: Tuple[Tuple[Predicate, str], ...] = (
    (lambda p, h, s: p.age > 60, "Age over 60"),
    (lambda p, h, s: h.family_history_thyroid == "yes", "Family history of thyroid disease"),
    (lambda p, h, s: h.radiation_exposure == "yes", "Prior radiation exposure to neck/head"),
    (lambda p, h, s: h.previous_thyroid_issues == "yes", "Previous thyroid issues"),
    (lambda p, h, s: h.smoking == "current", "Current smoker"),
    (lambda p, h, s: s.neck_swelling == "yes", "Neck swelling or lump"),
    (lambda p, h, s: s.difficulty_swallowing == "yes", "Difficulty swallowing"),
    (lambda p, h, s: s.voice_changes == "yes", "Voice changes or hoarseness"),
    (lambda p, h, s: s.neck_pain == "yes", "Neck pain"),
    (lambda p, h, s: s.swollen_lymph_nodes == "yes", "Swollen lymph nodes"),
)

RECOMMENDATIONS: Dict[str, str] = {
    "high": "Immediate further evaluation is recommended, including ultrasound and possible biopsy.",
    "moderate": "Further evaluation is suggested, consider scheduling an ultrasound.",
    "low": "Regular monitoring advised. Schedule a follow-up in 6-12 months.",
}

# --- helpers ---

# leading number only, so "25 pg/mL" reads as 25; "Infinity" is a number too
_NUMBER = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_lab_value(value: Optional[str]) -> Optional[float]:
    """Read a lab form value. Returns None when blank or not a number."""
    if value is None or str(value).strip() == "":
        return None
    m = _NUMBER.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def format_number(x: float) -> str:
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if math.isfinite(x) and float(x).is_integer():
        return str(int(x))
    return repr(float(x))


def _is_abnormal(x: float, rng: ReferenceRange) -> bool:
    return x < rng.min or x > rng.max


def tier_for_score(score: float) -> str:
    if score < 30:
        return "low"
    if score < 70:
        return "moderate"
    return "high"


def has_lab_values(labs: LabResults) -> bool:
    return any((getattr(labs, k) or "").strip() for k in REFERENCE_RANGES)

# --- lab analysis ---

def lab_details(labs: LabResults) -> List[str]:
    details: List[str] = []
    for key, rng in REFERENCE_RANGES.items():
        x = parse_lab_value(getattr(labs, key))
        if x is None or not _is_abnormal(x, rng):
            continue
        side = "below" if x < rng.min else "above"
        details.append(
            f"{key.upper()}: {format_number(x)} {rng.unit} is {side} normal range "
            f"({format_number(rng.min)}-{format_number(rng.max)} {rng.unit})"
        )
    return details


def analyze_labs(labs: LabResults) -> Optional[LabAnalysis]:
    """Lab-only check behind the intake form's "Analyze lab values" button.

    Returns None when nothing has been entered, so the caller can tell
    "no values" apart from "all values in range".
    """
    if not has_lab_values(labs):
        return None
    details = lab_details(labs)
    return LabAnalysis(abnormal=bool(details), details=tuple(details))

# --- risk score ---

def risk_factors(p: PersonalInfo, h: MedicalHistory, s: Symptoms) -> List[str]:
    return [label for check, label in RISK_FACTORS if check(p, h, s)]


def evaluate(
    personal_info: PersonalInfo,
    medical_history: MedicalHistory,
    symptoms: Symptoms,
    lab_results: LabResults,
) -> PredictionResult:
    """Score one intake submission.

    10 points per risk factor, 15 per out-of-range lab value, and 30 more
    (plus a dedicated factor) when calcitonin is out of range and above 20.
    Capped at 100. Lab values that cannot be read as numbers are ignored.
    """
    details = lab_details(lab_results)
    factors = risk_factors(personal_info, medical_history, symptoms)

    base = len(factors) * FACTOR_POINTS
    if details:
        base += len(details) * LAB_POINTS

    calcitonin = parse_lab_value(lab_results.calcitonin)
    if (
        calcitonin is not None
        and _is_abnormal(calcitonin, REFERENCE_RANGES["calcitonin"])
        and calcitonin > SEVERE_CALCITONIN
    ):
        base += SEVERE_POINTS
        factors.append(SEVERE_LABEL)

    score = max(0, min(int(round(base)), 100))
    return PredictionResult(
        score=score,
        tier=tier_for_score(score),
        factors=tuple(factors),
        lab_analysis=LabAnalysis(abnormal=bool(details), details=tuple(details)),
    )


def evaluate_record(record: PatientRecord) -> PredictionResult:
    return evaluate(record.personal_info, record.medical_history, record.symptoms, record.lab_results)
