"""
Rule-based distress classifier for Companies House records.

Each rule is an independent predicate paired with the signal it raises.
All rules run against the same profile and every match is reported, in
RULES order. New rules are appended so existing signal order never moves.
"""

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from distress_engine.models import (
    NO_FINDINGS,
    CompanyProfile,
    DistressFinding,
    DistressSignal,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[CompanyProfile, str], bool]


# ============================================================================
# RULES
# ============================================================================

def _accounts_overdue(profile: CompanyProfile, today: str) -> bool:
    # Both sides are YYYY-MM-DD so string order is date order
    return bool(profile.accounts_next_due) and profile.accounts_next_due < today


def _insolvency_history(profile: CompanyProfile, today: str) -> bool:
    return profile.has_insolvency_history is True


def _confirmation_overdue(profile: CompanyProfile, today: str) -> bool:
    return profile.confirmation_statement_overdue is True


def _dissolved(profile: CompanyProfile, today: str) -> bool:
    return profile.company_status == "dissolved"


def _in_liquidation(profile: CompanyProfile, today: str) -> bool:
    return profile.company_status == "liquidation"


def _active_but_insolvent(profile: CompanyProfile, today: str) -> bool:
    # Overlaps with _insolvency_history on purpose; both labels are reported.
    return profile.company_status == "active" and profile.has_insolvency_history is True


RULES: Tuple[Tuple[Predicate, DistressSignal], ...] = (
    (_accounts_overdue, DistressSignal.LATE_ACCOUNTS),
    (_insolvency_history, DistressSignal.INSOLVENCY_HISTORY),
    (_confirmation_overdue, DistressSignal.CONFIRMATION_OVERDUE),
    (_dissolved, DistressSignal.DISSOLVED),
    (_in_liquidation, DistressSignal.IN_LIQUIDATION),
    (_active_but_insolvent, DistressSignal.ACTIVE_BUT_INSOLVENT),
)


# ============================================================================
# PUBLIC API
# ============================================================================

def classify(
    profile: Optional[CompanyProfile],
    today: Optional[str] = None,
) -> DistressFinding:
    """Return the distress signals raised by a company profile.

    Args:
        profile: Company record, or None when the lookup failed.
        today: ISO date used for the late-accounts comparison. Defaults to
            the current local date.

    Returns:
        Tuple of DistressSignal in rule order, or NO_FINDINGS when no rule
        fired (also for a None profile).
    """
    if profile is None:
        return NO_FINDINGS

    if today is None:
        today = date.today().isoformat()

    signals: List[DistressSignal] = [
        signal for predicate, signal in RULES if predicate(profile, today)
    ]

    if not signals:
        return NO_FINDINGS

    logger.debug(
        f"{profile.company_number}: {', '.join(s.value for s in signals)}"
    )
    return tuple(signals)


def is_relevant_sic(
    profile: Optional[CompanyProfile],
    target_codes: Iterable[str],
) -> bool:
    """True if the profile shares at least one SIC code with target_codes."""
    if profile is None or not profile.sic_codes:
        return False
    return not profile.sic_codes.isdisjoint(target_codes)
