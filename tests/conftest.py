"""Pytest configuration - loads .env and provides a fake Teamcenter web tier."""

from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv
from pytest_httpserver import HTTPServer

from tc_cli.sdk import TCClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

TC_ROOT = "/tc"
SESSION_COOKIE = "JSESSIONID=4F7A2C; Path=/tc; HttpOnly"
LOGIN_QNAME = "http://teamcenter.com/Schemas/Soa/2011-06/Session.LoginResponse"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer .env settings out of unit tests."""
    for name in ("TC_BASE_URL", "TC_SESSION_ID", "TC_USER", "TC_PASSWORD", "TC_TIMEOUT", "TC_LOCALE", "TC_AWC_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def base_url(httpserver: HTTPServer) -> str:
    return httpserver.url_for(TC_ROOT)


@pytest.fixture
def client(base_url: str) -> TCClient:
    """A client with no session yet."""
    return TCClient(base_url=base_url)


@pytest.fixture
def logged_in(base_url: str) -> TCClient:
    """A client holding a pre-established session."""
    return TCClient(base_url=base_url, session_id="4F7A2C")


def expect_post(httpserver: HTTPServer, path: str, response: Any, status: int = 200, **kwargs: Any) -> None:
    """Register a JSON response for a service path."""
    headers = kwargs.pop("headers", None)
    httpserver.expect_request(f"{TC_ROOT}{path}", method="POST", **kwargs).respond_with_json(
        response, status=status, headers=headers
    )


def login_response(**extra: Any) -> dict[str, Any]:
    return {
        ".QName": LOGIN_QNAME,
        "serverInfo": {"DisplayVersion": "14.1.0.3", "HostName": "plm01", "UserID": "infodba", **extra},
    }


def model_object(uid: str, class_name: str, type: str, **props: str | list[str]) -> dict[str, Any]:
    """A modelObjects entry; each prop value becomes both db and ui value."""
    values = {name: value if isinstance(value, list) else [value] for name, value in props.items()}
    return {
        "objectID": "",
        "uid": uid,
        "className": class_name,
        "type": type,
        "props": {name: {"dbValues": v, "uiValues": v} for name, v in values.items()},
    }
