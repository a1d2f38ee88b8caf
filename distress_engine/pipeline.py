"""
Scan driver for the Companies House distress monitor.

Provides run_scan() (SIC code sweep), scan_watchlist() (fixed list of
company numbers) and run_daily(), the entry point used by the CLI and the
scheduler: scan -> classify -> store -> export -> alert.

Registry calls are made one at a time with a fixed delay in between to stay
inside the Companies House rate limit (600 requests per 5 minutes).
"""

import logging
import time
from typing import Dict, Iterable, List, Optional

from distress_engine.classifier import classify, is_relevant_sic
from distress_engine.database import FindingsStore
from distress_engine.models import (
    CompanyFinding,
    CompanyProfile,
    LookupOk,
    ScanResult,
)
from distress_engine.registry import RegistryClient
from distress_engine.reporting import format_alert_plain, save_daily_results, send_email
from distress_engine.settings import Settings

logger = logging.getLogger(__name__)


def _full_profile(client, summary: CompanyProfile) -> CompanyProfile:
    """Swap a search summary for the full profile; keep the summary on failure."""
    result = client.fetch_company_profile(summary.company_number)
    if isinstance(result, LookupOk):
        return result.profile
    logger.debug(f"Keeping search summary for {summary.company_number}: {result}")
    return summary


def _unique_findings(findings: Iterable[CompanyFinding]) -> List[CompanyFinding]:
    """First finding per company number, in order."""
    seen = set()
    unique = []
    for finding in findings:
        if finding.company_number not in seen:
            seen.add(finding.company_number)
            unique.append(finding)
    return unique


def run_scan(
    codes: Iterable[str],
    client,
    page_size: int = 20,
    fetch_profiles: bool = False,
    request_delay: float = 1.0,
    today: Optional[str] = None,
) -> List[ScanResult]:
    """Scan each SIC code in order and classify the companies found.

    Args:
        codes: SIC codes, scanned and reported in the given order.
        client: RegistryClient (or anything with the same two methods).
        page_size: Companies requested per code.
        fetch_profiles: Fetch the full profile of every company found.
            Search summaries lack accounts, confirmation statement and
            insolvency history, so only status rules can fire without it.
        request_delay: Seconds to sleep between registry calls.
        today: ISO date for the late-accounts rule (defaults to today).

    Returns:
        One ScanResult per code. A failed code yields total=0, items=[].
    """
    results: List[ScanResult] = []
    # Companies registered under several codes are fetched once per run
    fetched: Dict[str, CompanyProfile] = {}

    for i, code in enumerate(codes):
        if i > 0:
            time.sleep(request_delay)

        page = client.search_by_sic_code(code, size=page_size)
        if not page.ok:
            logger.warning(f"[{code}] Search failed ({page.error}), continuing with next code")
            results.append(ScanResult(code=code, total=0, items=[], error=page.error))
            continue

        items = page.items
        if fetch_profiles:
            profiles = []
            for summary in items:
                number = summary.company_number
                if number not in fetched:
                    time.sleep(request_delay)
                    fetched[number] = _full_profile(client, summary)
                profiles.append(fetched[number])
            items = profiles

        findings = []
        for profile in items:
            signals = classify(profile, today=today)
            if signals:
                findings.append(CompanyFinding.from_profile(profile, signals))

        logger.info(f"[{code}] {len(items)} of {page.total} companies checked, {len(findings)} flagged")
        results.append(ScanResult(code=code, total=page.total, items=items, findings=findings))

    return results


def scan_watchlist(
    company_numbers: Iterable[str],
    client,
    target_codes: Iterable[str],
    request_delay: float = 1.0,
    today: Optional[str] = None,
) -> List[CompanyFinding]:
    """Check a fixed list of operators for distress.

    Companies that cannot be fetched, or whose SIC codes fall outside
    target_codes, are skipped.
    """
    target_codes = frozenset(target_codes)
    findings: List[CompanyFinding] = []

    for i, number in enumerate(company_numbers):
        if i > 0:
            time.sleep(request_delay)

        profile = client.get_company_profile(number)
        if profile is None:
            continue
        if not is_relevant_sic(profile, target_codes):
            logger.debug(f"Watchlist {number}: SIC codes {sorted(profile.sic_codes)} not targeted")
            continue

        signals = classify(profile, today=today)
        if signals:
            findings.append(CompanyFinding.from_profile(profile, signals))

    logger.info(f"Watchlist: {len(findings)} flagged")
    return findings


def run_daily(
    settings: Settings,
    store: Optional[FindingsStore] = None,
    send_alert: bool = True,
    save_results: bool = True,
) -> dict:
    """Full daily run: scan -> classify -> store -> export -> alert.

    Raises:
        ConfigurationError: if the API key or scan scope is missing.
    """
    settings.validate()
    client = RegistryClient.from_settings(settings)
    store = store or FindingsStore(settings.database_path)

    logger.info(
        f"=== Distress scan: {len(settings.sic_codes)} SIC codes, "
        f"{len(settings.watchlist)} watchlist companies ==="
    )
    run_id = store.start_scan_run(settings.sic_codes)

    try:
        results = run_scan(
            settings.sic_codes,
            client,
            page_size=settings.page_size,
            fetch_profiles=settings.fetch_profiles,
            request_delay=settings.request_delay,
        )

        watchlist_findings: List[CompanyFinding] = []
        if settings.watchlist:
            watchlist_findings = scan_watchlist(
                settings.watchlist,
                client,
                settings.sic_codes,
                request_delay=settings.request_delay,
            )

        all_findings = _unique_findings(
            [f for r in results for f in r.findings] + watchlist_findings
        )
        total_companies = len({p.company_number for r in results for p in r.items})
        new_findings = store.record_findings(all_findings)

        results_path = None
        if save_results:
            results_path = save_daily_results(all_findings, settings.results_dir)

        email_sent = False
        if send_alert and new_findings:
            subject = f"Distress alert - {len(new_findings)} companies with new signals"
            email_sent = send_email(subject, format_alert_plain(new_findings), settings.email_config)

        store.complete_scan_run(run_id, total_companies, len(all_findings))

    except Exception as e:
        logger.error(f"Error during distress scan: {e}")
        store.complete_scan_run(run_id, 0, 0, "failed", str(e))
        raise

    failed_codes = [r.code for r in results if r.error]
    if failed_codes:
        logger.warning(f"{len(failed_codes)} SIC codes failed: {', '.join(failed_codes)}")
    logger.info(
        f"Distress scan complete: {total_companies} companies, "
        f"{len(all_findings)} flagged, {len(new_findings)} new"
    )

    return {
        "results": results,
        "watchlist_findings": watchlist_findings,
        "new_findings": new_findings,
        "total_companies": total_companies,
        "total_flagged": len(all_findings),
        "failed_codes": failed_codes,
        "results_path": results_path,
        "email_sent": email_sent,
    }
