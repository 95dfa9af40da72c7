"""Streamlit rendering for the tracker page.

Every function takes the session's :class:`TaskStore` (or data derived from
it) explicitly. The store lives in ``st.session_state`` and is created once
per browser session by :func:`get_store`.
"""
from __future__ import annotations

import json
from typing import List, Optional

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from task_glitch.config import AppConfig
from task_glitch.export import tasks_to_df, to_csv, to_json
from task_glitch.factory import create_store
from task_glitch.metrics import count_by_status, revenue_by_priority
from task_glitch.models import ALL, PRIORITIES, STATUSES, DerivedTask, Metrics, TaskFilters
from task_glitch.ordering import filter_tasks
from task_glitch.store import LoadPhase, TaskStore


STORE_KEY = "task_store"

PRIORITY_COLORS = {"High": "#e17055", "Medium": "#74b9ff", "Low": "#55efc4"}
STATUS_COLORS = {"Todo": "#0984e3", "In Progress": "#fdcb6e", "Done": "#00b894"}


def get_store(config: AppConfig) -> TaskStore:
    """Session-scoped store; the first call per session triggers the load."""
    store = st.session_state.get(STORE_KEY)
    if store is None:
        store = create_store(config)
        st.session_state[STORE_KEY] = store
    if store.phase is LoadPhase.UNINITIALIZED:
        with st.spinner("Loading tasks…"):
            store.load_sync()
    return store


def _task_label(t: DerivedTask) -> str:
    return f"{t.title or '(untitled)'} · {t.priority} · {t.status} · ROI {t.roi:,.2f}"


# ----- banners -----

def render_error_banner(store: TaskStore) -> None:
    if not store.error:
        return
    c1, c2 = st.columns([6, 1])
    with c1:
        st.error(store.error)
    with c2:
        if st.button("Dismiss", key="dismiss-error"):
            store.dismiss_error()
            st.rerun()


def render_undo_banner(store: TaskStore) -> None:
    deleted = store.last_deleted
    if deleted is None:
        return
    c1, c2, c3 = st.columns([5, 1, 1])
    with c1:
        st.info(f'Deleted "{deleted.title or "(untitled)"}"')
    with c2:
        if st.button("Undo", key="undo-delete"):
            store.undo_delete()
            st.toast("Task restored", icon="↩️")
            st.rerun()
    with c3:
        if st.button("Dismiss", key="clear-last-deleted"):
            store.clear_last_deleted()
            st.rerun()


# ----- KPIs -----

def _kpi(label: str, value: str, extra_cls: str = "") -> str:
    return (
        f"<div class='tg-kpi-box'><div class='tg-kpi-label'>{label}</div>"
        f"<div class='tg-kpi-value {extra_cls}'>{value}</div></div>"
    )


def render_metrics(metrics: Metrics) -> None:
    grade_cls = "tg-grade-" + metrics.performance_grade.replace(" ", "-")
    boxes = [
        _kpi("Total Revenue", f"${metrics.total_revenue:,.0f}"),
        _kpi("Time Taken", f"{metrics.total_time_taken:,.1f} h"),
        _kpi("Efficiency", f"{metrics.time_efficiency_pct:.1f}%"),
        _kpi("Revenue / Hour", f"${metrics.revenue_per_hour:,.2f}"),
        _kpi("Average ROI", f"{metrics.average_roi:,.2f}"),
        _kpi("Grade", metrics.performance_grade, grade_cls),
    ]
    cols = st.columns(len(boxes))
    for col, html in zip(cols, boxes):
        with col:
            st.markdown(html, unsafe_allow_html=True)


# ----- filters / table -----

def render_filters() -> TaskFilters:
    st.markdown('<div class="tg-filters-bar">', unsafe_allow_html=True)
    fc1, fc2, fc3 = st.columns([2.2, 1, 1])
    with fc1:
        query = st.text_input("Search title", placeholder="Type to filter…", key="filter-query")
    with fc2:
        status = st.selectbox("Status", options=[ALL] + STATUSES, index=0, key="filter-status")
    with fc3:
        priority = st.selectbox("Priority", options=[ALL] + PRIORITIES, index=0, key="filter-priority")
    st.markdown("</div>", unsafe_allow_html=True)
    return TaskFilters(query=query or "", status=status, priority=priority)


def apply_filters(tasks: List[DerivedTask], filters: TaskFilters) -> List[DerivedTask]:
    return filter_tasks(tasks, query=filters.query, status=filters.status, priority=filters.priority)


def render_table(tasks: List[DerivedTask]) -> None:
    st.markdown(f"<div class='tg-summary'>Showing <b>{len(tasks)}</b> tasks</div>", unsafe_allow_html=True)
    if not tasks:
        st.info("No tasks match the current filters.")
        return
    df = tasks_to_df(tasks).drop(columns=["id"])
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            "revenue": st.column_config.NumberColumn("Revenue", format="$%.2f"),
            "timeTaken": st.column_config.NumberColumn("Time (h)", format="%.1f"),
            "roi": st.column_config.NumberColumn("ROI", format="%.2f"),
        },
    )


# ----- forms -----

def render_add_form(store: TaskStore) -> None:
    with st.form("add-task", clear_on_submit=True):
        st.markdown("**New task**")
        title = st.text_input("Title")
        c1, c2 = st.columns(2)
        with c1:
            revenue = st.number_input("Revenue", min_value=0.0, value=0.0, step=100.0)
            priority = st.selectbox("Priority", PRIORITIES, index=1)
        with c2:
            time_taken = st.number_input("Time taken (h)", min_value=0.0, value=1.0, step=0.5)
            status = st.selectbox("Status", STATUSES, index=0)
        notes = st.text_area("Notes", height=70)
        if st.form_submit_button("Add task"):
            if not title.strip():
                st.warning("Title is required")
                return
            store.add_task({
                "title": title.strip(),
                "revenue": revenue,
                "timeTaken": time_taken,
                "priority": priority,
                "status": status,
                "notes": notes.strip() or None,
            })
            st.toast("Task added", icon="✅")
            st.rerun()


def render_edit_form(store: TaskStore, tasks: List[DerivedTask]) -> None:
    if not tasks:
        st.caption("Nothing to edit.")
        return
    by_id = {t.id: t for t in tasks}
    selected: Optional[str] = st.selectbox(
        "Task", options=list(by_id), format_func=lambda tid: _task_label(by_id[tid]), key="edit-select"
    )
    if selected is None:
        return
    task = by_id[selected]
    with st.form(f"edit-{task.id}"):
        title = st.text_input("Title", value=task.title)
        c1, c2 = st.columns(2)
        with c1:
            revenue = st.number_input("Revenue", min_value=0.0, value=float(task.revenue), step=100.0)
            priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index(task.priority))
        with c2:
            time_taken = st.number_input("Time taken (h)", min_value=0.0, value=float(task.time_taken), step=0.5)
            status = st.selectbox("Status", STATUSES, index=STATUSES.index(task.status))
        notes = st.text_area("Notes", value=task.notes or "", height=70)
        save, delete = st.columns(2)
        with save:
            saved = st.form_submit_button("Save changes")
        with delete:
            deleted = st.form_submit_button("Delete task")
    if saved:
        store.update_task(task.id, {
            "title": title.strip(),
            "revenue": revenue,
            "timeTaken": time_taken,
            "priority": priority,
            "status": status,
            "notes": notes.strip() or None,
        })
        st.toast("Saved", icon="💾")
        st.rerun()
    if deleted:
        store.delete_task(task.id)
        st.rerun()


# ----- charts -----

def render_charts(tasks: List[DerivedTask]) -> None:
    if not tasks:
        st.info("No tasks available for analytics (after filters).")
        return
    rev = revenue_by_priority(tasks)
    fig_rev = go.Figure()
    fig_rev.add_bar(
        x=list(rev), y=list(rev.values()),
        marker_color=[PRIORITY_COLORS.get(p, "#999") for p in rev],
    )
    fig_rev.update_layout(title="Revenue by priority", template="plotly_white", margin=dict(l=6, r=6, t=40, b=10), height=320)

    counts = count_by_status(tasks)
    fig_status = px.pie(
        names=list(counts), values=list(counts.values()), hole=0.45,
        color=list(counts), color_discrete_map=STATUS_COLORS, title="Tasks by status",
    )
    fig_status.update_layout(margin=dict(l=6, r=6, t=40, b=10), height=320)

    df = tasks_to_df(tasks)
    fig_scatter = px.scatter(
        df, x="timeTaken", y="revenue", color="priority", hover_name="title",
        color_discrete_map=PRIORITY_COLORS, title="Revenue vs time",
    )
    fig_scatter.update_layout(template="plotly_white", margin=dict(l=6, r=6, t=40, b=10), height=320)

    c1, c2, c3 = st.columns(3)
    with c1:
        st.plotly_chart(fig_rev, use_container_width=True)
    with c2:
        st.plotly_chart(fig_status, use_container_width=True)
    with c3:
        st.plotly_chart(fig_scatter, use_container_width=True)


# ----- import / export -----

def render_export(tasks: List[DerivedTask]) -> None:
    st.markdown("Exports contain the tasks currently shown (filters and sort applied).")
    c1, c2 = st.columns(2)
    with c1:
        st.download_button(
            "Download tasks.csv", data=to_csv(tasks).encode("utf-8"),
            file_name="tasks.csv", mime="text/csv", key="dl-csv",
        )
    with c2:
        st.download_button(
            "Download tasks.json", data=to_json(tasks).encode("utf-8"),
            file_name="tasks.json", mime="application/json", key="dl-json",
        )


def render_import(store: TaskStore) -> None:
    st.markdown("Upload a JSON list of tasks. It replaces the current list.")
    up = st.file_uploader("Tasks JSON", type=["json"], key="import-json-uploader")
    if up is None:
        return
    if st.button("Replace tasks with upload", key="import-confirm"):
        try:
            data = json.load(up)
        except ValueError as e:
            st.error(f"Failed to import: {e}")
            return
        if not isinstance(data, list):
            st.error("Invalid JSON: expected a list of task objects")
            return
        imported = store.replace_all(data)
        st.success(f"Imported {imported} tasks")
        st.rerun()
