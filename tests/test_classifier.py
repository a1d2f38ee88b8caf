"""Tests for distress_engine.classifier: distress rules and SIC relevance."""

import pytest

from distress_engine.classifier import RULES, classify, is_relevant_sic
from distress_engine.models import NO_FINDINGS, CompanyProfile, DistressSignal

TODAY = "2025-06-15"


def make_profile(**kwargs):
    kwargs.setdefault("company_number", "01234567")
    kwargs.setdefault("company_name", "Test Restaurants Ltd")
    return CompanyProfile(**kwargs)


# ---- Sentinel ----

def test_classify_none_returns_no_findings():
    assert classify(None) is NO_FINDINGS


def test_no_flags_returns_no_findings():
    profile = make_profile(company_status="active", accounts_next_due="2025-12-31")
    result = classify(profile, today=TODAY)
    assert result is NO_FINDINGS
    assert not result
    assert list(result) == []


def test_empty_profile_returns_no_findings():
    """Absent fields never fire a rule."""
    assert classify(make_profile(), today=TODAY) is NO_FINDINGS


# ---- Individual rules ----

def test_late_accounts():
    profile = make_profile(company_status="active", accounts_next_due="2025-06-14")
    assert classify(profile, today=TODAY) == (DistressSignal.LATE_ACCOUNTS,)


def test_accounts_due_today_not_late():
    profile = make_profile(accounts_next_due=TODAY)
    assert classify(profile, today=TODAY) is NO_FINDINGS


def test_confirmation_statement_overdue():
    profile = make_profile(confirmation_statement_overdue=True)
    assert classify(profile, today=TODAY) == ("Confirmation statement overdue",)


def test_confirmation_statement_not_overdue():
    profile = make_profile(confirmation_statement_overdue=False)
    assert classify(profile, today=TODAY) is NO_FINDINGS


def test_dissolved_only():
    profile = make_profile(company_status="dissolved")
    assert classify(profile, today=TODAY) == ("Company dissolved",)


def test_unknown_status_ignored():
    profile = make_profile(company_status="converted-closed")
    assert classify(profile, today=TODAY) is NO_FINDINGS


# ---- Additive rules ----

def test_active_with_insolvency_history_reports_both_labels():
    profile = make_profile(company_status="active", has_insolvency_history=True)
    result = classify(profile, today=TODAY)
    assert "Insolvency filings detected" in result
    assert "Active but insolvent" in result
    assert result == (
        DistressSignal.INSOLVENCY_HISTORY,
        DistressSignal.ACTIVE_BUT_INSOLVENT,
    )


def test_liquidation_with_insolvency_history():
    profile = make_profile(
        company_status="liquidation",
        has_insolvency_history=True,
        sic_codes=frozenset({"56101"}),
    )
    assert is_relevant_sic(profile, ["56101", "56301"]) is True
    assert classify(profile, today=TODAY) == (
        "Insolvency filings detected",
        "Company in liquidation",
    )


def test_all_rules_fire_in_declared_order():
    profile = make_profile(
        company_status="active",
        has_insolvency_history=True,
        accounts_next_due="2024-01-01",
        confirmation_statement_overdue=True,
    )
    assert classify(profile, today=TODAY) == (
        "Late filing of accounts",
        "Insolvency filings detected",
        "Confirmation statement overdue",
        "Active but insolvent",
    )


def test_rule_order_matches_signal_vocabulary():
    assert [signal for _, signal in RULES] == list(DistressSignal)


# ---- Determinism and purity ----

def test_classify_is_deterministic():
    a = make_profile(company_status="dissolved", has_insolvency_history=True)
    b = make_profile(company_status="active")
    first = classify(a, today=TODAY)
    classify(b, today=TODAY)
    assert classify(a, today=TODAY) == first


def test_classify_does_not_mutate_profile():
    profile = make_profile(company_status="liquidation", sic_codes=frozenset({"56101"}))
    before = profile.to_dict()
    classify(profile, today=TODAY)
    assert profile.to_dict() == before


def test_default_today_uses_current_date():
    profile = make_profile(accounts_next_due="1999-01-01")
    assert classify(profile) == (DistressSignal.LATE_ACCOUNTS,)


# ---- SIC relevance ----

@pytest.mark.parametrize("sic_codes", [frozenset(), None])
def test_not_relevant_without_sic_codes(sic_codes):
    profile = make_profile(sic_codes=sic_codes)
    assert is_relevant_sic(profile, {"56101"}) is False


def test_not_relevant_for_none_profile():
    assert is_relevant_sic(None, {"56101"}) is False


def test_relevant_on_any_overlap():
    profile = make_profile(sic_codes=frozenset({"47110", "56302"}))
    assert is_relevant_sic(profile, ("56101", "56302")) is True


def test_not_relevant_without_overlap():
    profile = make_profile(sic_codes=frozenset({"47110"}))
    assert is_relevant_sic(profile, ("56101", "56302")) is False
