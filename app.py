import streamlit as st
from core.registry import configure_logging, load_config, load_enabled_modules
from core.types import LabResults, PatientRecord, PersonalInfo
from core.pdf_parser import parse_pdf
from core.report import build_pdf
from core.storage import JsonFileRepository, StorageError, StoredPatient
from core.history import SORT_KEYS, risk_badge, search, sort_patients

cfg = load_config()
configure_logging(cfg["logging"]["level"])

st.set_page_config(page_title=cfg["app"]["title"], layout="wide")
st.title(cfg["app"]["title"])

repo = JsonFileRepository(cfg["storage"]["path"])
modules = load_enabled_modules(cfg)
primary = modules[0]

PAGES = ["New Assessment", "Patient History", "Results"]
if "page" not in st.session_state:
    st.session_state["page"] = PAGES[0]


def _open(patient_id: str):
    st.session_state["patient_id"] = patient_id
    st.session_state["page"] = "Results"


def _pdf_button(stored: StoredPatient):
    pdf_bytes = build_pdf(stored, rows=primary.to_pdf(stored.result()), summary=primary.summary_rows(stored.record))
    st.download_button("Download PDF Report", data=pdf_bytes, file_name=f"thyroid_report_{stored.id}.pdf",
                       mime="application/pdf", key=f"pdf_{stored.id}")


def new_assessment():
    # 1) Parse PDF once (optional)
    parsed = parse_pdf()
    base = PatientRecord(
        personal_info=PersonalInfo(first_name=parsed.first_name, last_name=parsed.last_name,
                                   age=parsed.age or 0, gender=parsed.sex or "male"),
        lab_results=LabResults(**parsed.labs),
    )

    # 2) Intake form per enabled module
    for mod in modules:
        with st.expander(mod.title, expanded=True):
            record = mod.inputs(base)
            if not st.button("Submit", key=f"{mod.id}_submit", type="primary"):
                continue
            errors = mod.validate(record)
            if errors:
                for e in errors:
                    st.error(e)
                continue
            result = mod.compute(record)
            try:
                stored = repo.create(record, result)
            except StorageError as e:
                st.error(f"Could not save patient record: {e}")
                continue
            st.toast("Patient data submitted successfully")
            mod.render(result)
            st.button("View full report", on_click=_open, args=(stored.id,), key=f"{mod.id}_open")


def patient_history():
    try:
        patients = repo.list()
    except StorageError as e:
        st.error(f"Failed to load patient records: {e}")
        return

    c1, c2, c3 = st.columns([3, 2, 1])
    query = c1.text_input("Search by name")
    field = c2.selectbox("Sort by", list(SORT_KEYS), index=list(SORT_KEYS).index("timestamp"), format_func=str.capitalize)
    descending = c3.toggle("Descending", value=True)

    shown = sort_patients(search(patients, query), field, descending)
    if not shown:
        st.info("No patient records found.")
    for p in shown:
        info = p.record.personal_info
        cols = st.columns([3, 1, 2, 2, 1, 1])
        cols[0].write(info.full_name)
        cols[1].write(str(info.age))
        cols[2].write(p.timestamp[:10])
        cols[3].write(f"{risk_badge(p)} ({p.prediction_score})")
        cols[4].button("View", key=f"view_{p.id}", on_click=_open, args=(p.id,))
        if cols[5].button("Delete", key=f"del_{p.id}"):
            repo.delete(p.id)
            st.toast("Patient record deleted successfully")
            st.rerun()

    if patients:
        st.divider()
        confirm = st.checkbox("I understand this removes every stored record")
        if st.button("Delete all records", disabled=not confirm):
            repo.clear()
            st.toast("All patient records deleted successfully")
            st.rerun()


def results():
    patient_id = st.text_input("Patient ID", value=st.session_state.get("patient_id", ""))
    if not patient_id:
        st.info("Select a patient from the history page.")
        return
    try:
        stored = repo.get(patient_id)
    except StorageError as e:
        st.error(f"Error loading patient data: {e}")
        return
    if stored is None:
        st.error("Patient not found")
        return

    info = stored.record.personal_info
    st.header(f"{info.full_name} ({info.gender.capitalize()}, {info.age} years)")
    st.caption(f"Assessed on {stored.timestamp}")
    primary.render(stored.result())
    st.subheader("Patient Data Summary")
    summary = primary.summary_rows(stored.record)
    st.table({"Field": [r[0] for r in summary], "Value": [r[1] for r in summary]})
    _pdf_button(stored)


page = st.sidebar.radio("Navigate", PAGES, key="page")
{"New Assessment": new_assessment, "Patient History": patient_history, "Results": results}[page]()

st.caption("Disclaimer: Screening & education only. Not medical advice.")
