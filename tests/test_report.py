"""
Tests for the thyroid module's report rows and the PDF export.
"""
import pytest
from reportlab.graphics.shapes import Drawing

from core.report import build_pdf, risk_chart, risk_chart_svg
from core.storage import InMemoryRepository
from core.types import LabResults, MedicalHistory, PatientRecord, PersonalInfo, Symptoms
from modules.thyroid import thyroid


@pytest.fixture
def record() -> PatientRecord:
    return PatientRecord(
        personal_info=PersonalInfo(first_name="Ravi", last_name="Kumar", age=66, gender="male"),
        medical_history=MedicalHistory(smoking="current"),
        symptoms=Symptoms(neck_swelling="yes"),
        lab_results=LabResults(tsh="2.1", calcitonin="30"),
    )


class TestValidate:

    def test_valid(self, record):
        assert thyroid.validate(record) == []

    def test_missing_names_and_age(self):
        errors = thyroid.validate(PatientRecord(personal_info=PersonalInfo(first_name=" ", age=0)))
        assert errors == [
            "First name is required",
            "Last name is required",
            "Age must be a positive number",
        ]


class TestRows:

    def test_to_pdf_rows(self, record):
        result = thyroid.compute(record)
        rows = thyroid.to_pdf(result)
        assert rows[0][0] == "Risk Score (0–100)"
        assert rows[0][1] == str(result.score)
        assert rows[0][2].startswith("High risk.")
        assert [r[2] for r in rows if r[0] == "Risk factor"] == list(result.factors)
        assert [r[2] for r in rows if r[0] == "Lab result"] == [
            "CALCITONIN: 30 pg/mL is above normal range (0-10 pg/mL)"
        ]

    def test_severe_factor_is_flagged_high(self, record):
        items = thyroid.items(thyroid.compute(record))
        severe = [x for x in items if x.interpretation == "Significantly elevated calcitonin levels"]
        assert severe and severe[0].severity == "high"

    def test_no_factors_row(self):
        rows = thyroid.to_pdf(thyroid.compute(PatientRecord()))
        assert ["Risk factor", "—", "No significant risk factors identified."] in rows
        assert rows[0][2].startswith("Low risk. Regular monitoring advised.")

    def test_summary_rows(self, record):
        summary = dict(map(tuple, thyroid.summary_rows(record)))
        assert summary["Smoking Status"] == "Current Smoker"
        assert summary["Neck Swelling or Lump"] == "Yes"
        assert summary["Family History of Thyroid Disease"] == "No"
        assert summary["TSH"] == "2.1 mIU/L"
        assert summary["Calcitonin"] == "30 pg/mL"
        assert "T3" not in summary


class TestPdf:

    def test_build_pdf(self, record):
        stored = InMemoryRepository().create(record, thyroid.compute(record))
        pdf = build_pdf(stored, rows=thyroid.to_pdf(stored.result()), summary=thyroid.summary_rows(record))
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    @pytest.mark.parametrize("score", [0, 45, 100])
    def test_risk_chart_edges(self, score):
        assert isinstance(risk_chart(score), Drawing)

    @pytest.mark.parametrize("score", [0, 45, 100])
    def test_risk_chart_svg(self, score):
        """The results page gets the same pie as inline markup."""
        svg = risk_chart_svg(score)
        assert svg.startswith("<svg")
        assert svg.rstrip().endswith("</svg>")
        assert f"Score {score}/100" in svg
