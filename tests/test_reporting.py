"""Tests for distress_engine.reporting: JSON export, report text, email."""

import json
import smtplib
from datetime import date
from unittest.mock import MagicMock, patch

from distress_engine.models import CompanyFinding, CompanyProfile, DistressSignal, ScanResult
from distress_engine.reporting import (
    format_alert_plain,
    format_report_plain,
    save_daily_results,
    send_email,
)
from distress_engine.settings import EmailConfig


def make_finding():
    return CompanyFinding(
        company_number="SC090302",
        company_name="Grill House Ltd",
        signals=(DistressSignal.INSOLVENCY_HISTORY, DistressSignal.IN_LIQUIDATION),
        sic_codes=frozenset({"56101"}),
        last_updated="2025-06-15T06:00:00",
    )


def test_save_daily_results_writes_dated_file(tmp_path):
    path = save_daily_results([make_finding()], str(tmp_path / "out"), day=date(2025, 6, 15))
    assert path.name == "distress_2025-06-15.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{
        "companyNumber": "SC090302",
        "name": "Grill House Ltd",
        "sicCodes": ["56101"],
        "distressSignals": ["Insolvency filings detected", "Company in liquidation"],
        "lastUpdated": "2025-06-15T06:00:00",
    }]


def test_save_daily_results_empty_list(tmp_path):
    path = save_daily_results([], str(tmp_path), day=date(2025, 6, 15))
    assert json.loads(path.read_text()) == []


def test_report_lists_codes_in_scan_order_and_failures():
    results = [
        ScanResult(code="56302", total=0, error="HTTP 500"),
        ScanResult(
            code="56101",
            total=10,
            items=[CompanyProfile("SC090302", "Grill House Ltd")],
            findings=[make_finding()],
        ),
    ]
    text = format_report_plain(results)
    assert text.index("[56302]") < text.index("[56101]")
    assert "Failed codes: 56302" in text
    assert "Registry lookup failed: HTTP 500" in text
    assert "Grill House Ltd (SC090302)" in text
    assert "Licensed restaurants" in text


def test_report_includes_watchlist():
    text = format_report_plain([], [make_finding()])
    assert "WATCHLIST (1 flagged)" in text


def test_alert_links_to_company_page():
    body = format_alert_plain([make_finding()])
    assert body.startswith("1 companies with new distress signals")
    assert "/company/SC090302" in body


def test_send_email_skipped_when_not_configured():
    with patch("distress_engine.reporting.smtplib.SMTP_SSL") as mock_smtp:
        assert send_email("s", "b", EmailConfig()) is False
        mock_smtp.assert_not_called()


def _config():
    return EmailConfig(
        sender_email="alerts@example.com",
        sender_password="secret",
        recipient_emails=["a@example.com", "b@example.com"],
    )


def test_send_email_success():
    server = MagicMock()
    with patch("distress_engine.reporting.smtplib.SMTP_SSL") as mock_smtp:
        mock_smtp.return_value.__enter__.return_value = server
        assert send_email("Subject", "Body", _config()) is True
    server.login.assert_called_once_with("alerts@example.com", "secret")
    args = server.sendmail.call_args.args
    assert args[1] == ["a@example.com", "b@example.com"]


def test_send_email_failure_is_logged_not_raised():
    with patch("distress_engine.reporting.smtplib.SMTP_SSL",
               side_effect=smtplib.SMTPConnectError(421, "busy")):
        assert send_email("Subject", "Body", _config()) is False
