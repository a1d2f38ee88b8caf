"""
Companies House Distress Monitor
================================

Scans Companies House for hospitality, leisure and childcare operators
showing signs of distress (late accounts, insolvency filings, liquidation,
dissolution) and records the findings.

Usage:
    from distress_engine import Settings, run_daily

    settings = Settings.from_env()
    summary = run_daily(settings)

Submodules:
    distress_engine.models     - CompanyProfile, DistressSignal, ScanResult
    distress_engine.registry   - Companies House API client
    distress_engine.classifier - rule-based distress classifier
    distress_engine.pipeline   - run_scan, scan_watchlist, run_daily
    distress_engine.database   - SQLite findings store
    distress_engine.reporting  - JSON export, text report, email alert
"""

from .models import (
    NO_FINDINGS,
    CompanyFinding,
    CompanyProfile,
    DistressSignal,
    LookupFailed,
    LookupNotFound,
    LookupOk,
    ScanResult,
    SearchPage,
)
from .settings import ConfigurationError, EmailConfig, Settings
from .sic_codes import TARGET_SIC_CODES
from .classifier import classify, is_relevant_sic
from .registry import RegistryClient
from .database import FindingsStore
from .pipeline import run_daily, run_scan, scan_watchlist

__all__ = [
    "NO_FINDINGS",
    "CompanyFinding",
    "CompanyProfile",
    "DistressSignal",
    "LookupFailed",
    "LookupNotFound",
    "LookupOk",
    "ScanResult",
    "SearchPage",
    "ConfigurationError",
    "EmailConfig",
    "Settings",
    "TARGET_SIC_CODES",
    "classify",
    "is_relevant_sic",
    "RegistryClient",
    "FindingsStore",
    "run_daily",
    "run_scan",
    "scan_watchlist",
]

__version__ = "1.0.0"
