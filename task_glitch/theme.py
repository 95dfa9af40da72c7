import logging
from pathlib import Path
from typing import Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

from task_glitch.config import AppConfig, get_config


logger = logging.getLogger(__name__)

THEME_CSS = Path(__file__).resolve().parents[1] / "assets" / "theme.css"


def set_theme(config: Optional[AppConfig] = None, css_path: Path = THEME_CSS) -> None:
    """Page config from ``AppConfig`` plus the ``tg-*`` stylesheet.

    Runs at the top of every rerun. Only the first ``set_page_config`` of a
    page takes effect; the CSS has to be injected each time.
    """
    config = config or get_config()
    try:
        st.set_page_config(
            page_title=config.app_title,
            page_icon=config.app_icon,
            layout="wide",
            initial_sidebar_state="collapsed",
        )
    except StreamlitAPIException:
        logger.debug("Page config already set for this run")

    try:
        css = css_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Stylesheet %s missing; using Streamlit defaults", css_path)
        st.warning("Theme stylesheet not found; using default styling.")
        return
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)
