"""
Annotation Performance Dashboard: Interactive Dashboard

Run with:  streamlit run app.py
"""

import asyncio

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

from annotation_dashboard.config import (
    COLORS,
    DASHBOARD_NAME,
    PROJECTS_FILE,
    VALID_USERS,
)
from annotation_dashboard.dashboard import (
    birthday_message,
    compute_table_totals,
    export_table_csv,
    filter_options,
    filter_table,
    get_metric_cards,
    get_raw_table,
    get_sheet_groups,
    overall_attendance_total,
    todays_birthdays,
)
from annotation_dashboard.ingestion import IngestionMerger
from annotation_dashboard.kpis import rank_quality_performers
from annotation_dashboard.loaders import SheetsClient, discover_sheet_refs
from annotation_dashboard.models import Category
from annotation_dashboard.projects import (
    JsonProjectStore,
    ProjectConfigError,
    add_project,
    new_project,
    projects_by_category,
    remove_project,
    replace_project,
    update_project,
)
from annotation_dashboard.transforms import build_summaries

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=f"{DASHBOARD_NAME} Performance Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

PAGES = [
    "Overview",
    "Raw Data",
    "Annotator Summary",
    "UserName Summary",
    "QC (Annotator)",
    "QC (UserName)",
    "Attendance Summary",
    "Project Setup",
]


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
if "store" not in st.session_state:
    st.session_state.store = JsonProjectStore(PROJECTS_FILE)
    st.session_state.client = SheetsClient()
    st.session_state.projects = st.session_state.store.load()
    st.session_state.merger = IngestionMerger(st.session_state.client, st.session_state.projects)
    st.session_state.authenticated = False


def save_projects(projects):
    st.session_state.projects = projects
    st.session_state.store.save(projects)
    st.session_state.merger.update_projects(projects)
    load_sheet_refs.clear()


def delete_project_and_selection(project_id: str):
    keys = ["selected_prod", "selected_hourly"]
    keys += [k for k in st.session_state if str(k).startswith("sheets-")]
    selections = {k: list(st.session_state.get(k, [])) for k in keys}
    remaining, pruned = remove_project(st.session_state.projects, selections, project_id)
    for key, ids in pruned.items():
        st.session_state[key] = ids
    save_projects(remaining)


@st.cache_data(ttl=300, show_spinner="Discovering sheets...")
def load_sheet_refs(project_ids: tuple[str, ...]):
    projects = [p for p in st.session_state.projects if p.id in project_ids]
    return asyncio.run(discover_sheet_refs(st.session_state.client, projects))


# ---------------------------------------------------------------------------
# Login gate
# ---------------------------------------------------------------------------
if not st.session_state.authenticated:
    st.title(DASHBOARD_NAME)
    st.caption("Secure Portal")
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Access Dashboard"):
            if VALID_USERS.get(username.strip()) == password.strip():
                st.session_state.authenticated = True
                st.session_state.user = username.strip()
                st.rerun()
            else:
                st.error("Invalid username or password.")
    st.stop()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
projects = st.session_state.projects
labels = {p.id: p.name for p in projects}

st.sidebar.title(DASHBOARD_NAME)
page = st.sidebar.radio("Navigate", PAGES)
st.sidebar.divider()

selected_prod = st.sidebar.multiselect(
    "PRODUCTION PROJECTS",
    [p.id for p in projects_by_category(projects, Category.PRODUCTION)],
    format_func=labels.get,
    key="selected_prod",
)
selected_hourly = st.sidebar.multiselect(
    "HOURLY PROJECTS",
    [p.id for p in projects_by_category(projects, Category.HOURLY)],
    format_func=labels.get,
    key="selected_hourly",
)
selected_projects = selected_prod + selected_hourly

refs = load_sheet_refs(tuple(selected_projects)) if selected_projects else []
selected_sheets = []
for group in get_sheet_groups(projects, selected_projects, refs):
    selected_sheets += st.sidebar.multiselect(
        group["title"],
        group["options"],
        format_func=lambda ref_id: ref_id.partition("|")[2],
        key=f"sheets-{group['project_id']}",
    )

if st.sidebar.button("Logout"):
    st.session_state.authenticated = False
    st.rerun()

merger = st.session_state.merger
if tuple(selected_sheets) != merger.published.sheet_ids:
    with st.spinner("Loading sheets..."):
        merger.merge_now(selected_sheets)
rows = merger.published.rows
summaries = build_summaries(rows)

message = birthday_message(todays_birthdays())
if message:
    st.success(f"🎂 {message}")


# ---------------------------------------------------------------------------
# Helper: summary table with totals and CSV download
# ---------------------------------------------------------------------------
def summary_table(df: pd.DataFrame, title: str):
    if df.empty:
        st.info("No data for the selected sheets.")
        return

    search = st.text_input("Search", key=f"search-{title}", placeholder="Search all columns...")
    filters = {}
    with st.expander("Filters"):
        for column, values in filter_options(df).items():
            filters[column] = st.multiselect(str(column), values, key=f"filter-{title}-{column}")
    df = filter_table(df, search, filters)
    st.caption(f"{len(df)} rows")

    st.dataframe(df, use_container_width=True, hide_index=True)

    totals = compute_table_totals(df)
    attendance_total = overall_attendance_total(totals)
    if attendance_total:
        st.caption(
            f"TOTAL P: {attendance_total['present']} | "
            f"TOTAL HD: {attendance_total['half']} | "
            f"TOTAL L: {attendance_total['absent']}"
        )
    else:
        numeric = {c: t["value"] for c, t in totals.items() if t["type"] == "numeric"}
        if numeric:
            st.caption(" | ".join(f"{c}: {v:,.0f}" for c, v in numeric.items()))

    filename, text = export_table_csv(df, title)
    st.download_button("📥 Export CSV", text, filename, "text/csv")


# ===========================================================================
# PAGE: Overview
# ===========================================================================
if page == "Overview":
    st.title("Overview")

    cards = get_metric_cards(rows)
    cols = st.columns(len(cards))
    for col, card in zip(cols, cards):
        with col:
            st.metric(card["label"], card["value"])

    st.divider()

    perf = summaries.combined_performance
    if not perf.empty:
        col1, col2 = st.columns([2, 1])

        with col1:
            st.subheader("Objects by Contributor")
            fig = go.Figure(go.Bar(
                x=perf["value"],
                y=perf["name"],
                orientation="h",
                marker_color=COLORS["primary"],
            ))
            fig.update_layout(
                height=max(300, len(perf) * 28),
                yaxis=dict(autorange="reversed"),
                plot_bgcolor="rgba(0,0,0,0)",
                margin=dict(l=10, r=10, t=10, b=40),
            )
            st.plotly_chart(fig, use_container_width=True)

        with col2:
            st.subheader("Share of Objects")
            fig = px.pie(perf, names="name", values="value", hole=0.5)
            fig.update_layout(height=350, margin=dict(l=10, r=10, t=10, b=10))
            st.plotly_chart(fig, use_container_width=True)

    ranked = rank_quality_performers(summaries.qc_annotators)
    if not ranked.empty:
        st.subheader("High Performance Quality Check")
        fig = go.Figure()
        fig.add_trace(go.Bar(x=ranked["name"], y=ranked["objects"], name="Objects",
                             marker_color=COLORS["accent"]))
        fig.add_trace(go.Bar(x=ranked["name"], y=ranked["errors"], name="Errors",
                             marker_color=COLORS["danger"]))
        fig.add_trace(go.Scatter(x=ranked["name"], y=ranked["quality"], name="Quality Rate",
                                 yaxis="y2", mode="lines+markers",
                                 line=dict(color=COLORS["success"], width=2)))
        fig.update_layout(
            height=350,
            yaxis2=dict(overlaying="y", side="right", range=[0, 100], title="%"),
            plot_bgcolor="rgba(0,0,0,0)",
        )
        st.plotly_chart(fig, use_container_width=True)


# ===========================================================================
# PAGE: Raw Data
# ===========================================================================
elif page == "Raw Data":
    st.title("Raw Data")
    summary_table(get_raw_table(rows), "Raw Data")


# ===========================================================================
# PAGE: Summaries
# ===========================================================================
elif page == "Annotator Summary":
    st.title(page)
    summary_table(summaries.annotators, page)

elif page == "UserName Summary":
    st.title(page)
    summary_table(summaries.users, page)

elif page == "QC (Annotator)":
    st.title(page)
    summary_table(summaries.qc_annotators, page)

elif page == "QC (UserName)":
    st.title(page)
    summary_table(summaries.qc_users, page)

elif page == "Attendance Summary":
    st.title(page)
    summary_table(summaries.attendance, page)


# ===========================================================================
# PAGE: Project Setup
# ===========================================================================
elif page == "Project Setup":
    st.title("Project Setup")
    is_admin = st.session_state.get("user") == "desicrew"

    tab_prod, tab_hourly = st.tabs(["Production", "Hourly"])
    for tab, category in ((tab_prod, Category.PRODUCTION), (tab_hourly, Category.HOURLY)):
        with tab:
            for project in projects_by_category(projects, category):
                with st.expander(project.name):
                    st.code(project.spreadsheet_id)
                    if not is_admin:
                        continue
                    with st.form(f"edit-{project.id}"):
                        name = st.text_input("Project Name", project.name)
                        sid = st.text_input("Spreadsheet ID or URL", project.spreadsheet_id)
                        custom = st.text_input("Custom sheets (comma separated)", project.custom_sheets)
                        save, remove = st.columns(2)
                        if save.form_submit_button("Save"):
                            try:
                                updated = update_project(project, name, sid, custom)
                            except ProjectConfigError as e:
                                st.error(str(e))
                            else:
                                save_projects(replace_project(projects, updated))
                                st.rerun()
                        remove.form_submit_button(
                            "Delete", on_click=delete_project_and_selection, args=(project.id,)
                        )

            if is_admin:
                with st.form(f"add-{category.value}"):
                    name = st.text_input("Project Name")
                    sid = st.text_input("Spreadsheet ID or Full URL")
                    custom = st.text_input("Custom sheets (comma separated)")
                    if st.form_submit_button("Add Project"):
                        try:
                            project = new_project(name, sid, category, custom)
                        except ProjectConfigError as e:
                            st.error(str(e))
                        else:
                            save_projects(add_project(projects, project))
                            st.rerun()
