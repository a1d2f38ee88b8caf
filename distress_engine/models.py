"""
Shared data models for the Companies House distress monitor.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Union


class DistressSignal(str, Enum):
    """Closed vocabulary of distress labels emitted by the classifier."""
    LATE_ACCOUNTS = "Late filing of accounts"
    INSOLVENCY_HISTORY = "Insolvency filings detected"
    CONFIRMATION_OVERDUE = "Confirmation statement overdue"
    DISSOLVED = "Company dissolved"
    IN_LIQUIDATION = "Company in liquidation"
    ACTIVE_BUT_INSOLVENT = "Active but insolvent"


class _NoFindings:
    """Falsy marker for a profile that was evaluated and raised no signal."""

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self):
        return iter(())

    def __repr__(self) -> str:
        return "NO_FINDINGS"


NO_FINDINGS = _NoFindings()

DistressFinding = Union[Tuple[DistressSignal, ...], _NoFindings]


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _format_address(address: Optional[dict]) -> str:
    if not isinstance(address, dict):
        return ""
    parts = [
        address.get("address_line_1"),
        address.get("address_line_2"),
        address.get("locality"),
        address.get("postal_code"),
    ]
    return ", ".join(str(p).strip() for p in parts if p)


@dataclass(frozen=True)
class CompanyProfile:
    """A company record from the registry, full profile or search summary.

    Fields are flat and optional. Whatever the payload lacks stays at its
    default, and the classifier treats a default as "rule does not apply".
    """
    company_number: str
    company_name: str = ""
    company_status: str = ""
    has_insolvency_history: bool = False
    sic_codes: FrozenSet[str] = frozenset()
    accounts_next_due: Optional[str] = None          # YYYY-MM-DD
    confirmation_statement_overdue: Optional[bool] = None
    date_of_creation: Optional[str] = None
    registered_office: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "CompanyProfile":
        """Build a profile from a Companies House JSON payload."""
        accounts = data.get("accounts") or {}
        confirmation = data.get("confirmation_statement") or {}
        sic_codes = data.get("sic_codes") or []
        if isinstance(sic_codes, str):
            sic_codes = [sic_codes]
        elif not isinstance(sic_codes, (list, tuple)):
            sic_codes = []

        next_due = accounts.get("next_due") if isinstance(accounts, dict) else None
        overdue = confirmation.get("overdue") if isinstance(confirmation, dict) else None

        return cls(
            company_number=str(data.get("company_number") or ""),
            company_name=_text(data.get("company_name")) or _text(data.get("title")),
            company_status=_text(data.get("company_status")).lower(),
            has_insolvency_history=data.get("has_insolvency_history") is True,
            sic_codes=frozenset(str(c).strip() for c in sic_codes if c),
            accounts_next_due=_text(next_due)[:10] or None,
            confirmation_statement_overdue=overdue if isinstance(overdue, bool) else None,
            date_of_creation=_text(data.get("date_of_creation")) or None,
            registered_office=_format_address(data.get("registered_office_address")),
        )

    def to_dict(self) -> dict:
        return {
            "company_number": self.company_number,
            "company_name": self.company_name,
            "company_status": self.company_status,
            "has_insolvency_history": self.has_insolvency_history,
            "sic_codes": sorted(self.sic_codes),
            "accounts_next_due": self.accounts_next_due,
            "confirmation_statement_overdue": self.confirmation_statement_overdue,
            "date_of_creation": self.date_of_creation,
            "registered_office": self.registered_office,
        }


@dataclass
class CompanyFinding:
    """Distress signals raised for one company during a scan."""
    company_number: str
    company_name: str
    signals: Tuple[DistressSignal, ...]
    sic_codes: FrozenSet[str] = frozenset()
    last_updated: str = field(default_factory=lambda: datetime.utcnow().isoformat())

    @classmethod
    def from_profile(cls, profile: CompanyProfile, signals) -> "CompanyFinding":
        return cls(
            company_number=profile.company_number,
            company_name=profile.company_name,
            signals=tuple(signals),
            sic_codes=profile.sic_codes,
        )

    def to_dict(self) -> dict:
        return {
            "companyNumber": self.company_number,
            "name": self.company_name,
            "sicCodes": sorted(self.sic_codes),
            "distressSignals": [s.value for s in self.signals],
            "lastUpdated": self.last_updated,
        }


@dataclass
class SearchPage:
    """One page of companies returned by a SIC code search."""
    total: int = 0
    items: List[CompanyProfile] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ScanResult:
    """Outcome of scanning one SIC code."""
    code: str
    total: int = 0
    items: List[CompanyProfile] = field(default_factory=list)
    findings: List[CompanyFinding] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def flagged(self) -> int:
        return len(self.findings)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "totalMatches": self.total,
            "companies": [p.to_dict() for p in self.items],
            "findings": [f.to_dict() for f in self.findings],
            "error": self.error,
        }


# ============================================================================
# REGISTRY LOOKUP RESULTS
# ============================================================================

@dataclass(frozen=True)
class LookupOk:
    profile: CompanyProfile


@dataclass(frozen=True)
class LookupNotFound:
    company_number: str


@dataclass(frozen=True)
class LookupFailed:
    """Transport failure: network error, timeout, non-2xx status or bad JSON."""
    company_number: str
    reason: str
    status_code: Optional[int] = None


LookupResult = Union[LookupOk, LookupNotFound, LookupFailed]
