"""Tests for distress_engine.database: SQLite findings store."""

import sqlite3

import pytest

from distress_engine.database import FindingsStore
from distress_engine.models import CompanyFinding, DistressSignal


@pytest.fixture
def store(tmp_path):
    return FindingsStore(str(tmp_path / "data" / "distress.db"))


def make_finding(number="111", *signals, name="Test Ltd"):
    return CompanyFinding(
        company_number=number,
        company_name=name,
        signals=signals or (DistressSignal.DISSOLVED,),
        sic_codes=frozenset({"56101"}),
    )


def test_tables_created(store):
    conn = sqlite3.connect(str(store.db_path))
    names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()
    assert {"distress_findings", "scan_runs"} <= names


def test_reopen_existing_database(tmp_path):
    path = str(tmp_path / "distress.db")
    FindingsStore(path).record_findings([make_finding()])
    assert FindingsStore(path).get_by_company_number("111") is not None


def test_record_findings_returns_new_only(store):
    first = store.record_findings([make_finding("111"), make_finding("222")])
    assert [f.company_number for f in first] == ["111", "222"]

    second = store.record_findings([make_finding("111"), make_finding("333")])
    assert [f.company_number for f in second] == ["333"]


def test_new_signal_for_known_company_is_new(store):
    store.record_findings([make_finding("111", DistressSignal.LATE_ACCOUNTS)])
    new = store.record_findings([
        make_finding("111", DistressSignal.LATE_ACCOUNTS, DistressSignal.IN_LIQUIDATION)
    ])
    assert len(new) == 1


def test_same_company_under_two_codes_reported_once(store):
    new = store.record_findings([make_finding("111"), make_finding("111")])
    assert len(new) == 1


def test_get_by_company_number_keeps_classifier_order(store):
    store.record_findings([make_finding(
        "111",
        DistressSignal.ACTIVE_BUT_INSOLVENT,
        DistressSignal.LATE_ACCOUNTS,
        DistressSignal.INSOLVENCY_HISTORY,
    )])
    finding = store.get_by_company_number("111")
    assert finding.signals == (
        DistressSignal.LATE_ACCOUNTS,
        DistressSignal.INSOLVENCY_HISTORY,
        DistressSignal.ACTIVE_BUT_INSOLVENT,
    )
    assert finding.sic_codes == frozenset({"56101"})


def test_get_by_company_number_missing(store):
    assert store.get_by_company_number("nope") is None


def test_get_latest_groups_by_company(store):
    store.record_findings([
        make_finding("111", DistressSignal.DISSOLVED),
        make_finding("222", DistressSignal.LATE_ACCOUNTS, DistressSignal.INSOLVENCY_HISTORY),
    ])
    latest = store.get_latest(limit=10)
    assert {f.company_number for f in latest} == {"111", "222"}
    assert sum(len(f.signals) for f in latest) == 3


def test_scan_run_lifecycle(store):
    run_id = store.start_scan_run(["56101", "56302"])
    assert store.get_scan_run(run_id)["status"] == "running"

    store.complete_scan_run(run_id, total_companies=40, total_flagged=3)
    run = store.get_scan_run(run_id)
    assert run["status"] == "completed"
    assert run["codes"] == "56101,56302"
    assert run["total_companies"] == 40
    assert run["completed_at"] is not None
