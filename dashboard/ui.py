import os
import sys
from datetime import date

import pandas as pd
import streamlit as st

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(PROJECT_ROOT)

from dashboard.insights import generate_insights
from flightsla.columns import MissingColumnError, require_columns, resolve_columns
from flightsla.config import column_overrides_from_env, data_file_from_env
from flightsla.kpis import available_years, compute_monthly_aggregate
from flightsla.load import SheetFetchError, load_sheet_table, load_table_from_file
from flightsla.lostfound import summarize_lost_found
from flightsla.report import (
    audit_trail,
    filter_flights,
    flight_table_frame,
    flux_guide,
    flux_metrics_frame,
    lost_found_chart_frame,
    lost_found_table_frame,
    metric_guide,
    search_records,
    sla_chart_frame,
    summary_cards,
)
from flightsla.rules import BAG_RULE, CHECKPOINT_RULES, DURATION_RULES
from flightsla.visualize import plot_lost_found, plot_sla_performance

# --- Page Configuration ---
st.set_page_config(
    page_title="Flight SLA Dashboard",
    page_icon="✈️",
    layout="wide",
    initial_sidebar_state="expanded",
)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
STATUS_LABELS = {"all": "All", "compliant": "Compliant", "non_compliant": "Non-compliant"}


# --- Helper Functions ---

@st.cache_data(show_spinner="Loading operations data...")
def load_table():
    """Loads the operations table from SLA_DATA_FILE when set, else from the sheet."""
    data_file = data_file_from_env()
    if data_file:
        return load_table_from_file(data_file)
    return load_sheet_table()


def status_filter(key: str) -> str:
    return st.radio(
        "Show",
        list(STATUS_LABELS),
        format_func=STATUS_LABELS.get,
        horizontal=True,
        key=key,
    )


# --- Data Loading ---
try:
    table = load_table()
except (SheetFetchError, RuntimeError, FileNotFoundError) as e:
    st.error(f"Could not load the operations data: {e}")
    st.stop()

columns = resolve_columns(table.headers, column_overrides_from_env())
try:
    require_columns(columns)
except MissingColumnError as e:
    st.error(str(e))
    st.info("Set SLA_DATE_COLUMN to the header that holds the landing date.")
    st.stop()


# --- Sidebar Navigation ---
st.sidebar.title("Navigation")
page = st.sidebar.radio("Go to", ["SLA Overview", "Lost & Found", "Data", "AI Insights"])

today = date.today()
years = available_years(table, columns) or [today.year]
default_year = today.year if today.year in years else years[-1]
year = st.sidebar.selectbox("Year", years, index=years.index(default_year))
month = st.sidebar.selectbox(
    "Month",
    list(range(1, 13)),
    index=today.month - 1,
    format_func=lambda m: MONTH_NAMES[m - 1],
)

if st.sidebar.button("Sync"):
    load_table.clear()
    st.rerun()

st.sidebar.caption(f"{len(table)} rows loaded.")

# --- Main App ---

if page == "SLA Overview":
    st.title("✈️ SLA Overview")
    st.markdown(f"Ground handling SLA performance for {MONTH_NAMES[month - 1]} {year}.")

    aggregate = compute_monthly_aggregate(table, month, year, columns=columns)
    for warning in aggregate.warnings:
        st.warning(warning)

    cards = summary_cards(aggregate)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Flights operated", cards["total_flights"], f"of {cards['potential_flights']} potential", delta_color="off")
    col2.metric("Fully compliant", cards["compliant_flights"], f"{cards['compliance_pct']}%", delta_color="off")
    col3.metric("Non-compliant", cards["non_compliant_flights"])
    col4.metric("Orbital / Base punctuality", f"{cards['avg_orbital_punctuality']}% / {cards['avg_base_punctuality']}%")

    st.header("SLA Performance")
    chart_df = sla_chart_frame(aggregate)
    st.plotly_chart(plot_sla_performance(chart_df), use_container_width=True)

    below = chart_df[~chart_df["met"]]
    if below.empty:
        st.success("Every checkpoint met its SLA target this month.")
    else:
        for row in below.itertuples():
            st.error(f"{row.label}: {row.realized:.1f}% ({row.gap:+.1f} pts vs {row.target}% target)")

    st.header("Flow Metrics")
    flux_df = flux_metrics_frame(aggregate)
    flux_cols = st.columns(len(flux_df))
    for col, row in zip(flux_cols, flux_df.itertuples()):
        col.metric(row.label, row.average)
        col.caption(row.formula)

    col1, col2 = st.columns(2)
    col1.metric("Total PAX", f"{cards['total_pax']:,.0f}")
    col2.metric("Total hand bags", f"{cards['total_bags']:,.0f}")
    if cards["potential_flights"]:
        coverage = cards["total_flights"] / cards["potential_flights"] * 100
        st.caption(f"Sample: {cards['total_flights']} flights recorded out of {cards['potential_flights']} scheduled Mon/Wed/Fri operations ({coverage:.0f}%).")

    st.header("Flights")
    status = status_filter("flight_status")
    flights = filter_flights(aggregate.flights, status)
    st.dataframe(flight_table_frame(flights), use_container_width=True)

    if flights:
        st.subheader("Audit Trail")
        col1, col2 = st.columns(2)
        with col1:
            position = st.selectbox(
                "Flight",
                range(len(flights)),
                format_func=lambda i: f"{flights[i].flight_id or '--'} ({flights[i].landing or 'no date'})",
            )
            flight = flights[position]
        with col2:
            check_key = st.selectbox(
                "Checkpoint",
                [c.key for c in flight.checks],
                format_func=lambda k: flight.check(k).label,
            )

        trail = audit_trail(flight, check_key)
        col1, col2, col3 = st.columns(3)
        col1.metric("Actual", trail["real"])
        col2.metric("Target", trail["target"])
        col3.metric("Score", f"{trail['score']}%")
        if not trail["measured"]:
            st.info(trail["logic"])
        elif trail["passed"]:
            st.success(trail["logic"])
        else:
            st.error(trail["logic"])
        st.table(pd.DataFrame(trail["raw_details"]))

    with st.expander("Metric guide"):
        for rule in (*CHECKPOINT_RULES, BAG_RULE):
            guide = metric_guide(rule.key)
            st.markdown(f"**{guide['name']}** (`{guide['source_field']}`)  \n{guide['rule']}  \n{guide['description']}")
        for rule in DURATION_RULES:
            guide = flux_guide(rule.key)
            st.markdown(f"**{guide['name']}**: {guide['formula']}  \n{guide['description']} {guide['importance']}")


elif page == "Lost & Found":
    st.title("🧳 Lost & Found")
    st.markdown(f"Baggage irregularity handling for {MONTH_NAMES[month - 1]} {year}.")

    summary = summarize_lost_found(table, month, year, columns)
    for warning in summary.warnings:
        st.warning(warning)

    col1, col2, col3 = st.columns(3)
    col1.metric("Records", summary.total)
    col2.metric("Compliant", summary.compliant)
    col3.metric("Non-compliant", summary.non_compliant)

    st.plotly_chart(plot_lost_found(lost_found_chart_frame(summary)), use_container_width=True)

    status = status_filter("lost_found_status")
    st.dataframe(lost_found_table_frame(summary, status), use_container_width=True)
    st.info("AHL, OHD and delivery are due within 2h of the cutoff time. The content list is due within 72h of the AHL opening.")


elif page == "Data":
    st.title("📋 Raw Data")
    term = st.text_input("Search")
    matches = search_records(table, term)
    st.caption(f"{len(matches)} of {len(table)} rows")
    st.dataframe(matches.to_dataframe(), use_container_width=True)


elif page == "AI Insights":
    st.title("🤖 AI Insights")
    st.markdown("An executive reading of the operations data, with trends and suggested actions.")

    if st.button("Generate insights"):
        with st.spinner("Analyzing data..."):
            aggregate = compute_monthly_aggregate(table, month, year, columns=columns)
            st.markdown(generate_insights(table.records, aggregate))
