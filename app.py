import streamlit as st

from task_glitch.config import get_config
from task_glitch.logging_setup import setup_logging
from task_glitch.theme import set_theme
from task_glitch import ui


config = get_config()
setup_logging(config.log_level, log_dir=config.log_dir)
set_theme(config)

st.markdown(
    f"<div class='tg-hero'><h1>{config.app_title}</h1>"
    "<div class='tg-sub'>Sales tasks ranked by return on time invested.</div></div>",
    unsafe_allow_html=True,
)

store = ui.get_store(config)

ui.render_error_banner(store)
ui.render_undo_banner(store)
ui.render_metrics(store.metrics)

filters = ui.render_filters()
visible = ui.apply_filters(store.derived_sorted, filters)

tasks_tab, edit_tab, analytics_tab, io_tab = st.tabs(["Tasks", "Add / Edit", "Analytics", "Import / Export"])

with tasks_tab:
    ui.render_table(visible)

with edit_tab:
    add_col, edit_col = st.columns(2)
    with add_col:
        ui.render_add_form(store)
    with edit_col:
        st.markdown("**Edit or delete**")
        ui.render_edit_form(store, visible)

with analytics_tab:
    ui.render_charts(visible)

with io_tab:
    ex_col, im_col = st.columns(2)
    with ex_col:
        st.markdown("### Export")
        ui.render_export(visible)
    with im_col:
        st.markdown("### Import")
        ui.render_import(store)
