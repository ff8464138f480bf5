from typing import List
import streamlit as st
from core.types import (
    LabResults, MedicalHistory, PatientRecord, PersonalInfo, PredictionResult,
    ResultItem, Symptoms,
)
from core.report import risk_chart_svg
from core.utils import color_box, RISK_LABELS
from .scores import REFERENCE_RANGES, RECOMMENDATIONS, SEVERE_LABEL, analyze_labs, evaluate_record, format_number

id = "thyroid"
title = "Thyroid: Cancer Risk Screening (0–100)"

LAB_NAMES = {
    "tsh": "TSH",
    "t3": "T3",
    "t4": "T4",
    "thyroglobulin": "Thyroglobulin",
    "calcitonin": "Calcitonin",
}

SMOKING = {
    "never": "Never Smoked",
    "former": "Former Smoker",
    "current": "Current Smoker",
}

HISTORY_FIELDS = [
    ("family_history_thyroid", "Family History of Thyroid Disease"),
    ("radiation_exposure", "Radiation Exposure to Head/Neck"),
    ("previous_thyroid_issues", "Previous Thyroid Issues"),
]

SYMPTOM_FIELDS = [
    ("neck_swelling", "Neck Swelling or Lump"),
    ("difficulty_swallowing", "Difficulty Swallowing"),
    ("voice_changes", "Voice Changes or Hoarseness"),
    ("neck_pain", "Neck Pain"),
    ("swollen_lymph_nodes", "Swollen Lymph Nodes"),
]

# ---------- helpers ----------
def _yes_no(label: str, key: str, current: str) -> str:
    return st.radio(label, ["no", "yes"], index=1 if current == "yes" else 0,
                    format_func=str.capitalize, horizontal=True, key=key)

def _yn(v: str) -> str:
    return "Yes" if v == "yes" else "No"

# ---------- UI inputs ----------
def inputs(record: PatientRecord) -> PatientRecord:
    p, h, s, labs = record.personal_info, record.medical_history, record.symptoms, record.lab_results
    t1, t2, t3, t4 = st.tabs(["Personal Info", "Medical History", "Symptoms", "Lab Results"])

    with t1:
        c1, c2 = st.columns(2)
        with c1:
            first = st.text_input("First Name", value=p.first_name, key="thyroid_first")
            age = st.number_input("Age (years)", min_value=1, max_value=120, value=min(max(int(p.age or 40), 1), 120), step=1, key="thyroid_age")
        with c2:
            last = st.text_input("Last Name", value=p.last_name, key="thyroid_last")
            gender = st.selectbox("Gender", ["male", "female"], index=1 if p.gender == "female" else 0,
                                  format_func=str.capitalize, key="thyroid_gender")

    with t2:
        history = {k: _yes_no(label, f"thyroid_{k}", getattr(h, k)) for k, label in HISTORY_FIELDS}
        smoking = st.selectbox("Smoking Status", list(SMOKING), index=list(SMOKING).index(h.smoking) if h.smoking in SMOKING else 0,
                               format_func=SMOKING.get, key="thyroid_smoking")

    with t3:
        symptoms = {k: _yes_no(label, f"thyroid_{k}", getattr(s, k)) for k, label in SYMPTOM_FIELDS}

    with t4:
        st.caption("Leave a test blank if it was not measured.")
        cols = st.columns(len(REFERENCE_RANGES))
        lab_values = {}
        for col, (k, rng) in zip(cols, REFERENCE_RANGES.items()):
            with col:
                lab_values[k] = st.text_input(f"{LAB_NAMES[k]} ({rng.unit})", value=getattr(labs, k) or "",
                                              placeholder=f"{format_number(rng.min)}-{format_number(rng.max)}", key=f"thyroid_lab_{k}")

    updated = PatientRecord(
        personal_info=PersonalInfo(first_name=first.strip(), last_name=last.strip(), age=int(age), gender=gender),
        medical_history=MedicalHistory(smoking=smoking, **history),
        symptoms=Symptoms(**symptoms),
        lab_results=LabResults(**{k: (v.strip() or None) for k, v in lab_values.items()}),
    )

    with t4:
        if st.button("Analyze lab values", key="thyroid_analyze"):
            _show_lab_analysis(updated.lab_results)
    return updated


def _show_lab_analysis(labs: LabResults) -> None:
    analysis = analyze_labs(labs)
    if analysis is None:
        st.toast("No lab values entered to analyze")
        return
    if analysis.abnormal:
        st.toast("Abnormal lab results detected", icon="⚠️")
        for d in analysis.details:
            color_box(d, level="high")
    else:
        st.toast("Lab results within normal ranges", icon="✅")
        color_box("No abnormalities detected", level="low")


def validate(record: PatientRecord) -> List[str]:
    p = record.personal_info
    errors = []
    if not p.first_name.strip():
        errors.append("First name is required")
    if not p.last_name.strip():
        errors.append("Last name is required")
    if not isinstance(p.age, int) or p.age <= 0:
        errors.append("Age must be a positive number")
    return errors

# ---------- compute ----------
def compute(record: PatientRecord) -> PredictionResult:
    return evaluate_record(record)


def items(result: PredictionResult) -> List[ResultItem]:
    label = RISK_LABELS[result.tier]
    r = [ResultItem("Risk Score (0–100)", result.score, f"{label} risk. {RECOMMENDATIONS[result.tier]}", result.tier)]
    for f in result.factors:
        r.append(ResultItem("Risk factor", None, f, "high" if f == SEVERE_LABEL else "moderate"))
    if not result.factors:
        r.append(ResultItem("Risk factor", None, "No significant risk factors identified.", "info"))
    for d in result.lab_analysis.details:
        r.append(ResultItem("Lab result", None, d, "high"))
    return r

# ---------- render ----------
def render(result: PredictionResult) -> None:
    st.subheader("Results")
    chart, bar = st.columns([1, 2])
    with chart:
        st.markdown(risk_chart_svg(result.score), unsafe_allow_html=True)
    with bar:
        st.metric("Risk Score", f"{result.score}/100")
        st.progress(result.score, text=f"Risk Level: {RISK_LABELS[result.tier]}")
    for x in items(result):
        if x.value is not None:
            color_box(f"{x.metric}: {x.value} • {x.interpretation}", level=x.severity)
        else:
            color_box(x.interpretation, level=x.severity)

# ---------- pdf rows ----------
def to_pdf(result: PredictionResult) -> List[list[str]]:
    rows = []
    for x in items(result):
        rows.append([x.metric, "—" if x.value is None else str(x.value), x.interpretation])
    return rows


def summary_rows(record: PatientRecord) -> List[list[str]]:
    h, s, labs = record.medical_history, record.symptoms, record.lab_results
    rows = [[label, _yn(getattr(h, k))] for k, label in HISTORY_FIELDS]
    rows.append(["Smoking Status", SMOKING.get(h.smoking, h.smoking)])
    rows += [[label, _yn(getattr(s, k))] for k, label in SYMPTOM_FIELDS]
    for k, rng in REFERENCE_RANGES.items():
        v = getattr(labs, k)
        if v and v.strip():
            rows.append([LAB_NAMES[k], f"{v.strip()} {rng.unit}"])
    return rows
