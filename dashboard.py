#!/usr/bin/env python3
"""
Companies House Distress Monitor — Streamlit Dashboard

Read-only view over the findings store written by the daily scan.
Run: streamlit run dashboard.py
"""

import os
import sqlite3
from pathlib import Path

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

from distress_engine.models import DistressSignal
from distress_engine.sic_codes import describe

load_dotenv()

DB_PATH = Path(os.getenv("DATABASE_PATH", str(Path(__file__).parent / "data" / "distress.db")))
DB_URI = f"file:{DB_PATH}?mode=ro"


def get_connection():
    """Open a read-only SQLite connection. Returns None if DB missing."""
    if not DB_PATH.exists():
        return None
    return sqlite3.connect(DB_URI, uri=True)


def table_exists(conn, name: str) -> bool:
    cur = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?", (name,)
    )
    return cur.fetchone() is not None


def query_df(conn, sql: str, params=None) -> pd.DataFrame:
    """Run a SELECT and return a DataFrame. Returns empty DF on error."""
    try:
        return pd.read_sql_query(sql, conn, params=params)
    except (sqlite3.Error, pd.errors.DatabaseError):
        return pd.DataFrame()


def companies_frame(findings: pd.DataFrame) -> pd.DataFrame:
    """Collapse (company, signal) rows to one row per company."""
    if findings.empty:
        return findings
    order = {s.value: i for i, s in enumerate(DistressSignal)}
    findings = findings.assign(_order=findings["signal"].map(order))
    grouped = (
        findings.sort_values("_order")
        .groupby(["company_number", "company_name", "sic_codes"], dropna=False)
        .agg(
            signals=("signal", lambda s: ", ".join(s)),
            signal_count=("signal", "count"),
            first_seen=("first_seen_at", "min"),
            last_seen=("last_seen_at", "max"),
        )
        .reset_index()
    )
    grouped["sectors"] = grouped["sic_codes"].fillna("").map(
        lambda codes: ", ".join(describe(c) for c in codes.split(",") if c)
    )
    return grouped.sort_values(["signal_count", "last_seen"], ascending=False)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Distress Signals", layout="wide", page_icon="📉")

col_title, col_refresh = st.columns([8, 1])
with col_title:
    st.title("Distress Signals")
    st.caption("Companies House · hospitality, leisure and childcare operators")
with col_refresh:
    if st.button("Refresh"):
        st.rerun()

conn = get_connection()
if conn is None or not table_exists(conn, "distress_findings"):
    st.info(f"No findings yet. Run `python main.py` to create {DB_PATH}.")
    st.stop()

findings_df = query_df(conn, """
    SELECT company_number, company_name, sic_codes, signal, first_seen_at, last_seen_at
    FROM distress_findings
""")
runs_df = query_df(conn, """
    SELECT started_at, completed_at, status, total_companies, total_flagged, error_message
    FROM scan_runs
    ORDER BY started_at DESC
    LIMIT 30
""")
conn.close()

# Sidebar filters
signal_options = [s.value for s in DistressSignal]
selected_signals = st.sidebar.multiselect("Signals", signal_options, default=signal_options)
name_query = st.sidebar.text_input("Company name contains", "")

filtered = findings_df[findings_df["signal"].isin(selected_signals)] if not findings_df.empty else findings_df
companies = companies_frame(filtered)
if name_query and not companies.empty:
    companies = companies[companies["company_name"].fillna("").str.contains(name_query, case=False)]

tab_findings, tab_runs = st.tabs(["Findings", "Scan Runs"])

with tab_findings:
    last_run = runs_df.iloc[0] if not runs_df.empty else None
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Companies flagged", len(companies))
    c2.metric("Signals", len(filtered))
    c3.metric(
        "Liquidation / dissolved",
        int(filtered["signal"].isin([
            DistressSignal.IN_LIQUIDATION.value, DistressSignal.DISSOLVED.value,
        ]).sum()) if not filtered.empty else 0,
    )
    c4.metric("Last scan", str(last_run["started_at"])[:16] if last_run is not None else "—")

    if companies.empty:
        st.write("No companies match the current filters.")
    else:
        by_signal = filtered.groupby("signal").size().reindex(signal_options).dropna()
        st.bar_chart(by_signal)
        st.dataframe(
            companies[["company_name", "company_number", "signals", "sectors", "first_seen", "last_seen"]],
            use_container_width=True,
            hide_index=True,
        )

with tab_runs:
    if runs_df.empty:
        st.write("No scan runs recorded.")
    else:
        st.dataframe(runs_df, use_container_width=True, hide_index=True)
