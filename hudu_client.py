"""
Hudu Integration Module
Handles all Hudu API interactions: company lookup, asset layouts, assets and folders.
Uses requests only to avoid library dependency issues.
"""

import logging
import requests
from typing import Dict, List, Optional, Any

from bridge_errors import TransportError

logger = logging.getLogger(__name__)


class HuduClient:
    """Hudu API integration using direct requests"""

    def __init__(self, base_url: str, api_key: str, timeout: float = 30):
        """
        Initialize Hudu client

        Args:
            base_url: API root, e.g. https://acme.huducloud.com/api/v1
            api_key: Hudu API key (sent as x-api-key, never logged)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "x-api-key": api_key,
            "Accept": "application/json",
        })
        logger.info(f"Hudu client initialized for {self.base_url}")

    def __repr__(self) -> str:
        return f"HuduClient(base_url={self.base_url!r})"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Make request and translate every failure into TransportError"""
        url = f"{self.base_url}{path}"
        if "json" in kwargs:
            headers = kwargs.setdefault("headers", {})
            headers["Content-Type"] = "application/json"

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            if response.status_code >= 400:
                logger.error(f"Hudu API error {response.status_code}: {response.text}")
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Hudu request failed ({method} {path}): {e}")
            raise TransportError(f"Hudu API request failed ({method} {path}): {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Hudu API returned invalid JSON for {method} {path}: {e}") from e

    # ==================== COMPANIES ====================

    def find_companies_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Return every company the server matches for this name.

        requests percent-encodes the query string, so names with spaces or
        ampersands are transmitted safely.
        """
        data = self._request("GET", "/companies", params={"name": name})
        return data.get("companies", [])

    # ==================== ASSET LAYOUTS ====================

    def find_asset_layout(self, name: str) -> Optional[Dict[str, Any]]:
        """Find an asset layout by exact name"""
        data = self._request("GET", "/asset_layouts", params={"name": name})
        for layout in data.get("asset_layouts", []):
            if layout.get("name") == name:
                return layout
        return None

    def create_asset_layout(self, layout: Dict[str, Any]) -> Dict[str, Any]:
        """Create an asset layout"""
        data = self._request("POST", "/asset_layouts", json={"asset_layout": layout})
        return data.get("asset_layout", data)

    # ==================== ASSETS ====================

    def find_assets(self, company_id: int, asset_layout_id: int, name: str) -> List[Dict[str, Any]]:
        """Find assets of one layout in one company with an exact name"""
        params = {"company_id": company_id, "asset_layout_id": asset_layout_id, "name": name}
        data = self._request("GET", "/assets", params=params)
        return [a for a in data.get("assets", []) if a.get("name") == name]

    def create_asset(self, company_id: int, asset_layout_id: int, name: str,
                     custom_fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create an asset under a company"""
        body = {
            "asset": {
                "asset_layout_id": asset_layout_id,
                "name": name,
                "custom_fields": [custom_fields],
            }
        }
        data = self._request("POST", f"/companies/{company_id}/assets", json=body)
        return data.get("asset", data)

    # ==================== FOLDERS ====================

    def find_folders(self, company_id: int, name: str) -> List[Dict[str, Any]]:
        """Find folders in a company by exact name"""
        data = self._request("GET", "/folders", params={"company_id": company_id, "name": name})
        return [f for f in data.get("folders", []) if f.get("name") == name]

    def create_folder(self, company_id: int, name: str, description: str,
                      parent_folder_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Create a folder

        Args:
            company_id: Hudu company the folder belongs to
            name: Folder name
            description: Folder description
            parent_folder_id: Parent folder (creates at company root if None)
        """
        folder = {
            "company_id": company_id,
            "name": name,
            "description": description,
        }
        if parent_folder_id is not None:
            folder["parent_folder_id"] = parent_folder_id

        data = self._request("POST", "/folders", json={"folder": folder})
        return data.get("folder", {})
