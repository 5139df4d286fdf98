from __future__ import annotations

"""
Integration tests for the Vault Service client.

Utilizes a mocked requests.Session to verify request construction,
response decoding and error translation without real network calls.
"""

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from composter.domain.errors import VaultAuthError, VaultError, VaultNotFoundError
from composter.domain.models import ComponentBundle
from composter.infra.network import VaultClient

BASE_URL = "https://vault.test/api"


def _response(status_code: int = 200, body: Any = None, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if body is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


def _client(response: Optional[MagicMock] = None, token: Optional[str] = "jwt-123") -> VaultClient:
    session = MagicMock()
    session.request.return_value = response or _response(body={})
    return VaultClient(BASE_URL + "/", token=token, timeout=5, session=session)


# -----------------------------------------------------------------------------
# REQUEST CONSTRUCTION
# -----------------------------------------------------------------------------

def test_push_component_posts_bundle_payload() -> None:
    """TC-01: Verify push sends the bundle as JSON with a bearer token."""
    stored = {"id": "c1", "title": "Button"}
    client = _client(_response(201, {"component": stored}))
    bundle = ComponentBundle(title="Button", category="ui", code='{"/Button.jsx": "x"}', dependencies={"clsx": "^2"})

    result = client.push_component(bundle)

    assert result == stored
    args, kwargs = client.session.request.call_args
    assert args == ("POST", f"{BASE_URL}/components")
    assert kwargs["json"] == {
        "title": "Button",
        "category": "ui",
        "code": '{"/Button.jsx": "x"}',
        "dependencies": {"clsx": "^2"},
    }
    assert kwargs["headers"]["Authorization"] == "Bearer jwt-123"
    assert kwargs["timeout"] == 5


def test_pull_component_uses_query_params() -> None:
    """TC-02: Verify pull addresses a component by category and title."""
    record = {"title": "Button", "code": "x"}
    client = _client(_response(body={"component": record}))

    assert client.pull_component("ui", "Button") == record

    args, kwargs = client.session.request.call_args
    assert args == ("GET", f"{BASE_URL}/components")
    assert kwargs["params"] == {"category": "ui", "title": "Button"}


def test_anonymous_requests_omit_authorization() -> None:
    """TC-03: Verify no Authorization header is sent without a token."""
    client = _client(token=None)

    client.list_categories()

    headers = client.session.request.call_args.kwargs["headers"]
    assert "Authorization" not in headers
    assert headers["User-Agent"].startswith("Composter-CLI/")


@pytest.mark.parametrize("call, method, path, params, key", [
    (lambda c: c.list_components(), "GET", "/components/list", None, "components"),
    (lambda c: c.list_components_by_category("ui"), "GET", "/components/list-by-category",
     {"category": "ui"}, "components"),
    (lambda c: c.search_components("butt"), "GET", "/components/search", {"q": "butt"}, "components"),
    (lambda c: c.list_categories(), "GET", "/categories", None, "categories"),
])
def test_listing_endpoints(call, method: str, path: str, params: Any, key: str) -> None:
    """TC-04: Verify every listing endpoint and its payload key."""
    client = _client(_response(body={key: [{"name": "x"}]}))

    assert call(client) == [{"name": "x"}]

    args, kwargs = client.session.request.call_args
    assert args == (method, BASE_URL + path)
    assert kwargs["params"] == params


def test_create_category() -> None:
    """TC-05: Verify category creation posts the name."""
    client = _client(_response(201, {"category": {"id": "k1", "name": "forms"}}))

    assert client.create_category("forms") == {"id": "k1", "name": "forms"}
    assert client.session.request.call_args.kwargs["json"] == {"name": "forms"}


def test_get_component_by_id() -> None:
    client = _client(_response(body={"component": {"id": "abc"}}))

    assert client.get_component("abc") == {"id": "abc"}
    assert client.session.request.call_args.args[1] == f"{BASE_URL}/components/abc"


def test_missing_list_key_yields_empty_list() -> None:
    client = _client(_response(body={}))

    assert client.list_components() == []


# -----------------------------------------------------------------------------
# ERROR TRANSLATION
# -----------------------------------------------------------------------------

def test_unauthorized_raises_auth_error() -> None:
    """TC-06: Verify 401 is mapped to VaultAuthError."""
    client = _client(_response(401, {"message": "jwt expired"}, reason="Unauthorized"))

    with pytest.raises(VaultAuthError) as exc_info:
        client.list_categories()

    assert exc_info.value.status_code == 401


def test_not_found_raises_not_found_error() -> None:
    """TC-07: Verify 404 is mapped to VaultNotFoundError with the server message."""
    client = _client(_response(404, {"message": "Component not found"}, reason="Not Found"))

    with pytest.raises(VaultNotFoundError, match="Component not found"):
        client.pull_component("ui", "Ghost")


def test_server_error_falls_back_to_reason() -> None:
    """TC-08: Verify non-JSON failures report the HTTP reason."""
    client = _client(_response(500, None, reason="Internal Server Error"))

    with pytest.raises(VaultError, match="Internal Server Error") as exc_info:
        client.list_components()

    assert exc_info.value.status_code == 500


def test_error_field_is_used_as_message() -> None:
    client = _client(_response(409, {"error": "Category already exists"}, reason="Conflict"))

    with pytest.raises(VaultError, match="Category already exists"):
        client.create_category("ui")


def test_timeout_is_wrapped() -> None:
    """TC-09: Verify transport timeouts surface as VaultError."""
    client = _client()
    client.session.request.side_effect = requests.exceptions.Timeout("slow")

    with pytest.raises(VaultError, match="timed out") as exc_info:
        client.list_categories()

    assert isinstance(exc_info.value.__cause__, requests.exceptions.Timeout)


def test_connection_error_is_wrapped() -> None:
    client = _client()
    client.session.request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(VaultError, match="Network error"):
        client.search_components("x")


def test_malformed_component_response() -> None:
    """TC-10: Verify a success body without a component is rejected."""
    client = _client(_response(body={"components": []}))

    with pytest.raises(VaultError, match="Malformed response"):
        client.pull_component("ui", "Button")
