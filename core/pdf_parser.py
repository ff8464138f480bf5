import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

import pdfplumber
import streamlit as st

logger = logging.getLogger(__name__)


@dataclass
class Parsed:
    name: Optional[str] = None
    sex: Optional[str] = None  # "male"/"female"
    age: Optional[int] = None
    labs: Dict[str, str] = field(default_factory=dict)

    @property
    def first_name(self) -> str:
        return (self.name or "").split(" ", 1)[0]

    @property
    def last_name(self) -> str:
        parts = (self.name or "").split(" ", 1)
        return parts[1].strip() if len(parts) > 1 else ""


# ----------------------------
# Patterns that extract values
# ----------------------------
STRICT: Dict[str, str] = {
    # Demographics
    "name": r"(?:Patient\s*Name|Name)\s*[:\-]\s*([A-Za-z][A-Za-z\s\.\-']{1,60}?)(?=\s+(?:barcode|id|patient\s*id|\d)|$)",
    "sex": r"(?:Sex|Gender)\s*[:\-]\s*(Male|Female|M|F)\b",
    "age": r"\b(?:Age)\s*[:\-]\s*(\d{1,3})",
}

# Thyroid labs (value just before the unit the reference table uses)
LABS: Dict[str, str] = {
    "tsh": r"(?:TSH|Thyroid\s+Stimulating\s+Hormone)[^\n]{0,80}?(\d+(?:\.\d+)?)(?=[^\n]{0,20}(?:[mµμu]IU/?m?L))",
    "t3": r"(?:\bT3\b|Triiodothyronine)[^\n]{0,80}?(\d+(?:\.\d+)?)(?=[^\n]{0,20}ng/?dL)",
    "t4": r"(?:\bT4\b|Thyroxine)[^\n]{0,80}?(\d+(?:\.\d+)?)(?=[^\n]{0,20}(?:[µμu]g/?dL|mcg/?dL))",
    "thyroglobulin": r"(?:Thyroglobulin|\bTg\b)[^\n]{0,80}?(\d+(?:\.\d+)?)(?=[^\n]{0,20}ng/?mL)",
    "calcitonin": r"(?:Calcitonin)[^\n]{0,80}?(\d+(?:\.\d+)?)(?=[^\n]{0,20}pg/?mL)",
}

# Fallback (looser) patterns for demographics
LOOSE = {
    "name": r"(?:Patient\s*Name|Name)[^\n]{0,20}([A-Za-z][A-Za-z\s\.\-']{1,60}?)(?=\s+(?:barcode|id|patient\s*id|\d)|$)",
    "sex": r"(?:Sex|Gender)[^\n]{0,20}(Male|Female|M|F)\b",
    "age": r"\b(?:Age)[^\d]{0,20}(\d{1,3})",
}


def _find(pattern: str, text: str):
    m = re.search(pattern, text, flags=re.I | re.M)
    if m:
        value = m.group(1).strip()
        # drop trailing barcode/id from names
        if pattern in (STRICT["name"], LOOSE["name"]):
            value = re.sub(r"\s+(barcode|id|patient\s*id)\b.*$", "", value, flags=re.I).strip()
        return value
    return None


def _sex(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return "female" if value.strip().lower().startswith("f") else "male"


def extract_fields(raw_text: str) -> Parsed:
    """Pull demographics and thyroid lab values out of lab report text."""
    parsed = Parsed()
    if not raw_text:
        return parsed

    # normalise whitespace a bit
    t = re.sub(r"[^\S\r\n]+", " ", raw_text, flags=re.M)

    parsed.name = _find(STRICT["name"], t) or _find(LOOSE["name"], t)
    parsed.sex = _sex(_find(STRICT["sex"], t) or _find(LOOSE["sex"], t))
    a = _find(STRICT["age"], t) or _find(LOOSE["age"], t)
    parsed.age = int(a) if a else None

    for key, pattern in LABS.items():
        value = _find(pattern, t)
        if value is not None:
            parsed.labs[key] = value
    return parsed


def extract_text(source) -> str:
    try:
        with pdfplumber.open(source) as pdf:
            return "\n".join(page.extract_text() or "" for page in pdf.pages)
    except Exception as e:
        logger.warning("Could not read lab PDF: %s", e)
        return ""


def parse_pdf() -> Parsed:
    parsed = Parsed()
    with st.expander("Upload Lab PDF (optional)"):
        up = st.file_uploader("Upload lab PDF (text-based)", type=["pdf"])
        if up is None:
            return parsed

        raw_text = extract_text(up)
        if not raw_text:
            st.warning("No text could be read from this PDF.")
            return parsed

        parsed = extract_fields(raw_text)
        if parsed.name or parsed.sex or parsed.age or parsed.labs:
            st.success("Parsed from PDF:")
            st.json({"name": parsed.name, "sex": parsed.sex, "age": parsed.age, **parsed.labs})
        else:
            st.info("No patient details or thyroid labs found in this PDF.")
    return parsed
