"""
Action1 Integration Module
Handles Action1 API interactions: authentication and managed endpoint inventory.

An Action1Client instance is the session context for one run: it carries the
region, the default organization id and the credential pair, and every call
made through it targets that organization.
"""

import logging
import requests
from typing import Dict, List, Optional, Any

from bridge_errors import SetupFailed, TransportError

logger = logging.getLogger(__name__)

DEFAULT_REGION = "NorthAmerica"

REGIONS = {
    "NorthAmerica": {
        "api": "https://app.action1.com/api/3.0",
        "console": "https://app.action1.com/console",
    },
    "Europe": {
        "api": "https://app.eu.action1.com/api/3.0",
        "console": "https://app.eu.action1.com/console",
    },
    "Australia": {
        "api": "https://app.au.action1.com/api/3.0",
        "console": "https://app.au.action1.com/console",
    },
}


def region_urls(region: str) -> Dict[str, str]:
    """Look up API and console base URLs for a region name (case-insensitive)"""
    for name, urls in REGIONS.items():
        if name.lower() == (region or "").strip().lower():
            return urls
    raise SetupFailed(
        f"Unknown Action1 region '{region}'. Valid regions: {', '.join(REGIONS)}"
    )


class Action1Client:
    """Action1 API integration bound to one region and one organization"""

    def __init__(self, region: str, org_id: str, api_key: Optional[str] = None,
                 api_secret: Optional[str] = None, timeout: float = 30):
        """
        Initialize Action1 client

        Args:
            region: NorthAmerica, Europe or Australia
            org_id: Action1 organization id every call is scoped to
            api_key: API client id (only needed for API calls, not console URLs)
            api_secret: API client secret
            timeout: Per-request timeout in seconds
        """
        urls = region_urls(region)
        self.region = region
        self.org_id = str(org_id)
        self.base_url = urls["api"]
        self.console_url = urls["console"]
        self.timeout = timeout
        self._api_key = api_key
        self._api_secret = api_secret
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self.authenticated = False

    def __repr__(self) -> str:
        return f"Action1Client(region={self.region!r}, org_id={self.org_id!r})"

    def authenticate(self) -> None:
        """Exchange the API key/secret for a bearer token"""
        if not self._api_key or not self._api_secret:
            raise SetupFailed("Action1 API key and secret are required to call the Action1 API")

        try:
            response = self.session.post(
                f"{self.base_url}/oauth2/token",
                data={"client_id": self._api_key, "client_secret": self._api_secret},
                timeout=self.timeout,
            )
            response.raise_for_status()
            token = response.json().get("access_token")
        except requests.exceptions.RequestException as e:
            logger.error(f"Action1 authentication failed: {e}")
            raise SetupFailed(f"Action1 authentication failed: {e}") from e
        except ValueError as e:
            raise SetupFailed(f"Action1 authentication returned invalid JSON: {e}") from e

        if not token:
            raise SetupFailed("Action1 authentication response did not contain an access token")

        self.session.headers["Authorization"] = f"Bearer {token}"
        self.authenticated = True
        logger.info(f"Action1 session configured (region={self.region}, org={self.org_id})")

    def _request(self, method: str, url: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """
        Internal method to handle API requests
        """
        if not self.authenticated:
            raise SetupFailed("Action1 session is not authenticated")
        if not url.startswith("http"):
            url = f"{self.base_url}/{url.lstrip('/')}"

        try:
            response = self.session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Action1 API error ({method} {url}): {e}")
            if getattr(e, "response", None) is not None:
                logger.error(f"Response: {e.response.text}")
            raise TransportError(f"Action1 API request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"Action1 API returned invalid JSON: {e}") from e

    # ==================== ENDPOINTS ====================

    def list_endpoints(self, page_size: int = 100) -> List[Dict[str, Any]]:
        """Get every managed endpoint in the session's organization, following next_page links"""
        items: List[Dict[str, Any]] = []
        data = self._request("GET", f"endpoints/managed/{self.org_id}",
                             params={"fields": "*", "limit": page_size})
        while True:
            items.extend(data.get("items", []))
            next_page = data.get("next_page")
            if not next_page:
                break
            data = self._request("GET", next_page)

        logger.info(f"Fetched {len(items)} endpoints from Action1 org {self.org_id}")
        return items
