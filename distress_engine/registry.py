"""
Companies House REST API client.

Endpoints (HTTP Basic auth, API key as username, empty password):
- Company profile: GET /company/{company_number}
- Advanced search: GET /advanced-search/companies?sic_codes={code}&size={n}

Transport failures never leave this module. Profile lookups come back as
LookupOk / LookupNotFound / LookupFailed and searches as a SearchPage with
``error`` set, so the scan loop can keep going.
"""

import base64
import logging
from typing import Optional

import requests

from distress_engine.models import (
    CompanyProfile,
    LookupFailed,
    LookupNotFound,
    LookupOk,
    LookupResult,
    SearchPage,
)
from distress_engine.settings import DEFAULT_BASE_URL, ConfigurationError

logger = logging.getLogger(__name__)


def basic_auth_header(api_key: str) -> str:
    """Return the Authorization header value for an API key."""
    token = base64.b64encode(f"{api_key}:".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def decode_basic_auth(header: str) -> str:
    """Inverse of basic_auth_header(): recover the API key."""
    token = header.split(" ", 1)[1] if header.startswith("Basic ") else header
    decoded = base64.b64decode(token).decode("utf-8")
    username, _, _password = decoded.rpartition(":")
    return username


class RegistryClient:
    """Client for the Companies House public data API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
    ):
        if not api_key or not api_key.strip():
            raise ConfigurationError("Companies House API key is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (api_key, "")
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": "distress-engine/1.0",
        })

    @classmethod
    def from_settings(cls, settings) -> "RegistryClient":
        return cls(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)

    def _get(self, path: str, params: Optional[dict] = None):
        """GET a path. Returns (response, None) or (None, reason)."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            return None, f"{type(e).__name__}: {e}"
        return resp, None

    def fetch_company_profile(self, company_number: str) -> LookupResult:
        """Fetch the full profile for one company.

        Args:
            company_number: Registry identifier, e.g. "00002515"

        Returns:
            LookupOk, LookupNotFound (404) or LookupFailed
        """
        number = (company_number or "").strip().upper()
        if not number:
            return LookupFailed(company_number or "", "empty company number")

        resp, error = self._get(f"/company/{number}")
        if error:
            logger.error(f"Error fetching company {number}: {error}")
            return LookupFailed(number, error)

        if resp.status_code == 404:
            logger.warning(f"Company {number} not found")
            return LookupNotFound(number)

        if not 200 <= resp.status_code < 300:
            logger.warning(f"Companies House returned status {resp.status_code} for company {number}")
            return LookupFailed(number, f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error(f"Invalid JSON in profile for company {number}: {e}")
            return LookupFailed(number, "invalid JSON", status_code=resp.status_code)

        if not isinstance(payload, dict):
            logger.error(f"Unexpected profile payload for company {number}")
            return LookupFailed(number, "unexpected payload", status_code=resp.status_code)

        payload.setdefault("company_number", number)
        return LookupOk(CompanyProfile.from_api(payload))

    def get_company_profile(self, company_number: str) -> Optional[CompanyProfile]:
        """Profile or None. Callers treat None as "skip this company"."""
        result = self.fetch_company_profile(company_number)
        if isinstance(result, LookupOk):
            return result.profile
        return None

    def search_by_sic_code(
        self,
        code: str,
        size: int = 20,
        start_index: int = 0,
    ) -> SearchPage:
        """Search companies registered under a SIC code.

        Args:
            code: SIC 2007 code, e.g. "56101"
            size: Maximum number of items to return
            start_index: Offset for paging through large result sets

        Returns:
            SearchPage; on any failure total=0, items=[] and error is set
        """
        params = {"sic_codes": code, "size": size}
        if start_index:
            params["start_index"] = start_index

        resp, error = self._get("/advanced-search/companies", params=params)
        if error:
            logger.error(f"Error searching SIC code {code}: {error}")
            return SearchPage(error=error)

        if resp.status_code == 404:
            # Advanced search answers 404 when nothing matches
            logger.info(f"No companies found for SIC code {code}")
            return SearchPage()

        if not 200 <= resp.status_code < 300:
            logger.warning(f"Companies House returned status {resp.status_code} for SIC code {code}")
            return SearchPage(error=f"HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error(f"Invalid JSON in search for SIC code {code}: {e}")
            return SearchPage(error="invalid JSON")

        if not isinstance(payload, dict):
            logger.error(f"Unexpected search payload for SIC code {code}")
            return SearchPage(error="unexpected payload")

        items = [
            CompanyProfile.from_api(item)
            for item in payload.get("items") or []
            if isinstance(item, dict) and item.get("company_number")
        ]
        total = payload.get("hits")
        if not isinstance(total, int) or isinstance(total, bool):
            total = len(items)

        logger.debug(f"SIC {code}: {len(items)} items of {total} hits")
        return SearchPage(total=total, items=items)
