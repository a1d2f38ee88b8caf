"""
Output sinks for scan results: daily JSON file, plain-text report, email alert.
"""

import json
import logging
import smtplib
from collections import Counter
from datetime import date, datetime
from email.mime.text import MIMEText
from pathlib import Path
from typing import List, Optional

from distress_engine.models import CompanyFinding, ScanResult
from distress_engine.sic_codes import describe

logger = logging.getLogger(__name__)


def save_daily_results(
    findings: List[CompanyFinding],
    results_dir: str,
    day: Optional[date] = None,
) -> Path:
    """Write findings to ``<results_dir>/distress_YYYY-MM-DD.json``.

    A second run on the same day overwrites the file.
    """
    day = day or date.today()
    path = Path(results_dir) / f"distress_{day.isoformat()}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([finding.to_dict() for finding in findings], f, ensure_ascii=False, indent=2)
    logger.info(f"Distress scan saved to {path}")
    return path


def format_report_plain(
    results: List[ScanResult],
    watchlist_findings: Optional[List[CompanyFinding]] = None,
) -> str:
    """Plain text report, one section per SIC code in scan order."""
    total_companies = sum(len(r.items) for r in results)
    total_flagged = sum(r.flagged for r in results)
    failed = [r.code for r in results if r.error]
    signal_counts = Counter(
        signal.value for r in results for f in r.findings for signal in f.signals
    )

    text = f"""
COMPANIES HOUSE DISTRESS REPORT - {date.today().strftime("%d %B %Y")}
{'=' * 80}

SUMMARY
SIC codes: {len(results)} | Companies checked: {total_companies} | Flagged: {total_flagged}
"""
    if failed:
        text += f"Failed codes: {', '.join(failed)}\n"
    for label, count in signal_counts.most_common():
        text += f"  {label}: {count}\n"

    for result in results:
        text += f"""
{'=' * 80}
[{result.code}] {describe(result.code)} ({result.flagged} flagged of {len(result.items)} / {result.total})
{'=' * 80}
"""
        if result.error:
            text += f"   Registry lookup failed: {result.error}\n"
            continue
        for i, finding in enumerate(result.findings, 1):
            text += f"{i}. {finding.company_name} ({finding.company_number})\n"
            text += f"   Signals: {', '.join(s.value for s in finding.signals)}\n"

    if watchlist_findings:
        text += f"""
{'=' * 80}
WATCHLIST ({len(watchlist_findings)} flagged)
{'=' * 80}
"""
        for i, finding in enumerate(watchlist_findings, 1):
            text += f"{i}. {finding.company_name} ({finding.company_number})\n"
            text += f"   Signals: {', '.join(s.value for s in finding.signals)}\n"

    text += f"""
{'=' * 80}
Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}
Source: Companies House Public Data API
"""
    return text


def format_alert_plain(findings: List[CompanyFinding]) -> str:
    """Short alert body listing newly detected distress."""
    lines = [f"{len(findings)} companies with new distress signals:", ""]
    for finding in findings:
        lines.append(f"- {finding.company_name} ({finding.company_number})")
        lines.append(f"  {', '.join(s.value for s in finding.signals)}")
        lines.append(
            f"  https://find-and-update.company-information.service.gov.uk/company/{finding.company_number}"
        )
    return "\n".join(lines) + "\n"


def send_email(subject: str, body: str, email_config) -> bool:
    """Send a plain text email via SMTP over SSL. Returns True on success."""
    if not email_config.enabled:
        logger.info("Email alert skipped (SENDER_EMAIL/SENDER_PASSWORD/RECIPIENT_EMAILS not set)")
        return False

    msg = MIMEText(body, "plain")
    msg["Subject"] = subject
    msg["From"] = email_config.sender_email
    msg["To"] = ", ".join(email_config.recipient_emails)

    try:
        with smtplib.SMTP_SSL(email_config.smtp_server, email_config.smtp_port) as server:
            server.login(email_config.sender_email, email_config.sender_password)
            server.sendmail(email_config.sender_email, email_config.recipient_emails, msg.as_string())
        logger.info(f"Email sent successfully to {len(email_config.recipient_emails)} recipients")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {e}")
        return False
