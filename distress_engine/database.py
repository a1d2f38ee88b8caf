"""
SQLite store for distress findings and scan runs.

One row per (company_number, signal). A signal seen again on a later scan
only bumps last_seen_at, which is how the daily job tells new distress
apart from distress it has already reported.
"""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from distress_engine.models import CompanyFinding, DistressSignal

logger = logging.getLogger(__name__)


class FindingsStore:
    """SQLite database for distress findings."""

    def __init__(self, db_path: str = "data/distress.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self):
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS distress_findings (
                    company_number TEXT NOT NULL,
                    signal         TEXT NOT NULL,
                    company_name   TEXT,
                    sic_codes      TEXT,
                    first_seen_at  TEXT NOT NULL,
                    last_seen_at   TEXT NOT NULL,
                    PRIMARY KEY (company_number, signal)
                );

                CREATE INDEX IF NOT EXISTS idx_findings_signal ON distress_findings(signal);
                CREATE INDEX IF NOT EXISTS idx_findings_last_seen ON distress_findings(last_seen_at);

                CREATE TABLE IF NOT EXISTS scan_runs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    codes TEXT,
                    total_companies INTEGER DEFAULT 0,
                    total_flagged INTEGER DEFAULT 0,
                    status TEXT DEFAULT 'running',
                    error_message TEXT
                );
            """)

    def record_findings(self, findings: Iterable[CompanyFinding]) -> List[CompanyFinding]:
        """Upsert findings. Returns those carrying at least one new signal.

        A company that appears under several SIC codes in the same scan is
        only reported once.
        """
        now = datetime.utcnow().isoformat()
        new_findings = []
        total = 0

        with self._get_connection() as conn:
            for finding in findings:
                total += 1
                is_new = False
                for signal in finding.signals:
                    cursor = conn.execute(
                        """INSERT OR IGNORE INTO distress_findings (
                            company_number, signal, company_name, sic_codes,
                            first_seen_at, last_seen_at
                        ) VALUES (?, ?, ?, ?, ?, ?)""",
                        (
                            finding.company_number, signal.value, finding.company_name,
                            ",".join(sorted(finding.sic_codes)), now, now,
                        ),
                    )
                    if cursor.rowcount:
                        is_new = True
                    else:
                        conn.execute(
                            """UPDATE distress_findings
                               SET last_seen_at = ?, company_name = ?
                               WHERE company_number = ? AND signal = ?""",
                            (now, finding.company_name, finding.company_number, signal.value),
                        )
                if is_new:
                    new_findings.append(finding)

        logger.info(f"Findings: {len(new_findings)} new, {total - len(new_findings)} already known")
        return new_findings

    def _rows_to_findings(self, rows) -> List[CompanyFinding]:
        """Group (company, signal) rows back into one finding per company."""
        by_company = {}
        for row in rows:
            finding = by_company.get(row["company_number"])
            if finding is None:
                finding = CompanyFinding(
                    company_number=row["company_number"],
                    company_name=row["company_name"] or "",
                    signals=(),
                    sic_codes=frozenset(c for c in (row["sic_codes"] or "").split(",") if c),
                    last_updated=row["last_seen_at"],
                )
                by_company[row["company_number"]] = finding
            finding.signals += (DistressSignal(row["signal"]),)
            finding.last_updated = max(finding.last_updated, row["last_seen_at"])

        # Keep signals in classifier order
        order = list(DistressSignal)
        for finding in by_company.values():
            finding.signals = tuple(sorted(finding.signals, key=order.index))
        return list(by_company.values())

    def get_by_company_number(self, company_number: str) -> Optional[CompanyFinding]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM distress_findings WHERE company_number = ?",
                (company_number,),
            ).fetchall()
        findings = self._rows_to_findings(rows)
        return findings[0] if findings else None

    def get_latest(self, limit: int = 100) -> List[CompanyFinding]:
        """Most recently seen companies first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """SELECT * FROM distress_findings
                   WHERE company_number IN (
                       SELECT company_number FROM distress_findings
                       GROUP BY company_number
                       ORDER BY MAX(last_seen_at) DESC
                       LIMIT ?
                   )
                   ORDER BY last_seen_at DESC""",
                (limit,),
            ).fetchall()
        return self._rows_to_findings(rows)

    def start_scan_run(self, codes: Iterable[str]) -> int:
        """Record the start of a scan run."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO scan_runs (started_at, codes) VALUES (?, ?)",
                (datetime.utcnow().isoformat(), ",".join(codes)),
            )
            return cursor.lastrowid

    def complete_scan_run(
        self,
        run_id: int,
        total_companies: int,
        total_flagged: int,
        status: str = "completed",
        error_message: Optional[str] = None,
    ):
        """Record completion of a scan run."""
        with self._get_connection() as conn:
            conn.execute("""
                UPDATE scan_runs
                SET completed_at = ?, total_companies = ?, total_flagged = ?, status = ?, error_message = ?
                WHERE id = ?
            """, (datetime.utcnow().isoformat(), total_companies, total_flagged, status, error_message, run_id))

    def get_scan_run(self, run_id: int) -> Optional[dict]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM scan_runs WHERE id = ?", (run_id,)).fetchone()
        return dict(row) if row else None
