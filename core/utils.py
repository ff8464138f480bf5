import streamlit as st

PALETTE = {
    "low": "#2e7d32",
    "moderate": "#ef6c00",
    "high": "#c62828",
    "info": "#455a64",
}

RISK_LABELS = {
    "low": "Low",
    "moderate": "Moderate",
    "high": "High",
}


def color_box(text: str, level: str = "info"):
    col = PALETTE.get(level, "#455a64")
    st.markdown(
        f"""
        <div style=\"background:{col};padding:12px;border-radius:8px;color:white;font-weight:600;\">{text}</div>
        """,
        unsafe_allow_html=True,
    )
