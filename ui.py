"""UI helpers for consistent styling across pages."""

import streamlit as st

from constants import SEVERITIES, SEVERITY_COLORS, SEVERITY_LABELS


BASE_CSS = """
<style>
    .stApp {
        background-color: #f9fafb;
    }
    h1, h2, h3, h4 {
        color: #1e3a8a !important;
        font-family: 'Segoe UI', sans-serif;
    }
    [data-testid="stSidebar"] {
        background-color: #ffffff;
        border-right: 1px solid #e5e7eb;
    }
    .app-header {
        background: #1e3a8a;
        color: white;
        padding: 16px 24px;
        border-radius: 10px;
        margin-bottom: 12px;
    }
    .app-header p {
        color: #bfdbfe;
        margin: 0;
        font-size: 14px;
    }
    .legend-item {
        display: flex;
        align-items: center;
        margin: 4px 0;
    }
    .legend-color {
        width: 14px;
        height: 14px;
        border-radius: 50%;
        margin-right: 8px;
    }
</style>
"""


def apply_base_styles(extra_css: str = "") -> None:
    """Apply base CSS styles and optional extra CSS overrides."""
    css = BASE_CSS
    if extra_css:
        css = css.replace("</style>", f"\n{extra_css}\n</style>")
    st.markdown(css, unsafe_allow_html=True)


def render_header(title: str, subtitle: str) -> None:
    st.markdown(
        f'<div class="app-header"><h2 style="color:white !important;margin:0">{title}</h2><p>{subtitle}</p></div>',
        unsafe_allow_html=True,
    )


def render_severity_legend() -> None:
    items = "".join(
        f'<div class="legend-item"><div class="legend-color" style="background-color: {SEVERITY_COLORS[s]};"></div>'
        f"<span>{SEVERITY_LABELS[s]}</span></div>"
        for s in SEVERITIES
    )
    st.markdown(f"##### Severity Legend\n{items}", unsafe_allow_html=True)
