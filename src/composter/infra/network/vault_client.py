from __future__ import annotations

"""
Vault Service HTTP Client.

Thin wrapper over the remote component store. Each method maps to a single
endpoint and returns the decoded JSON payload; HTTP and transport failures
are translated into the VaultError hierarchy.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from composter.domain.constants import DEFAULT_TIMEOUT, USER_AGENT
from composter.domain.errors import VaultAuthError, VaultError, VaultNotFoundError
from composter.domain.models import ComponentBundle

logger = logging.getLogger(__name__)


class VaultClient:
    """
    Client for the Vault Service REST API.

    Args:
        base_url: API root, e.g. 'https://composter.vercel.app/api'.
        token: Bearer token; requests are sent anonymously when None.
        timeout: Per-request timeout in seconds.
        session: Optional pre-built requests.Session (used by tests).
    """

    def __init__(
            self,
            base_url: str,
            token: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    # --------------------------------------------------------------------------
    # Components
    # --------------------------------------------------------------------------

    def push_component(self, bundle: ComponentBundle) -> Dict[str, Any]:
        """Create a component; returns the stored record."""
        body = self._request("POST", "/components", json=bundle.to_payload())
        return body.get("component") or {}

    def pull_component(self, category: str, title: str) -> Dict[str, Any]:
        """Fetch one component by category and title."""
        body = self._request("GET", "/components", params={"category": category, "title": title})
        return self._require(body, "component")

    def get_component(self, component_id: str) -> Dict[str, Any]:
        """Fetch one component by id."""
        body = self._request("GET", f"/components/{component_id}")
        return self._require(body, "component")

    def list_components(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/components/list").get("components") or []

    def list_components_by_category(self, category: str) -> List[Dict[str, Any]]:
        body = self._request("GET", "/components/list-by-category", params={"category": category})
        return body.get("components") or []

    def search_components(self, query: str) -> List[Dict[str, Any]]:
        body = self._request("GET", "/components/search", params={"q": query})
        return body.get("components") or []

    # --------------------------------------------------------------------------
    # Categories
    # --------------------------------------------------------------------------

    def list_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories").get("categories") or []

    def create_category(self, name: str) -> Dict[str, Any]:
        body = self._request("POST", "/categories", json={"name": name})
        return body.get("category") or {}

    # --------------------------------------------------------------------------
    # Transport
    # --------------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
            self,
            method: str,
            path: str,
            params: Optional[Mapping[str, str]] = None,
            json: Optional[Any] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise VaultError(f"Vault Service timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise VaultError(f"Network error: {e}") from e

        body = _decode(response)

        if response.status_code == 401:
            raise VaultAuthError("Session expired or invalid", status_code=401)
        if response.status_code == 404:
            raise VaultNotFoundError(_error_message(response, body), status_code=404)
        if not response.ok:
            raise VaultError(_error_message(response, body), status_code=response.status_code)

        return body

    @staticmethod
    def _require(body: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = body.get(key)
        if not isinstance(value, dict):
            raise VaultError(f"Malformed response: missing '{key}'")
        return value


def _decode(response: requests.Response) -> Dict[str, Any]:
    """Decode a JSON object body; anything else decodes to an empty dict."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(response: requests.Response, body: Dict[str, Any]) -> str:
    return str(
        body.get("message")
        or body.get("error")
        or response.reason
        or f"HTTP {response.status_code}"
    )
