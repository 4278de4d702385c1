"""
TC CLI Test Suite - Runs the CLI as a subprocess against a fake web tier.

Every command is executed the way a user (or a pipe) would run it, so
output is compact JSON and failures exit non-zero with a JSON error.

Run with: python -m pytest tests/test_cli.py -v
"""

import json
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
from conftest import SESSION_COOKIE, TC_ROOT, expect_post, login_response, model_object
from pytest_httpserver import HTTPServer

from tc_cli.core import endpoints

# =============================================================================
# CLI Runner
# =============================================================================


CLI_TIMEOUT = 60  # Timeout in seconds for CLI commands


@dataclass
class CLITestResult:
    """Result of a single CLI invocation."""

    args: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def json(self) -> Any:
        return json.loads(self.stdout)


def run_cli(*args: str, env: dict[str, str] | None = None, timeout: int = CLI_TIMEOUT) -> CLITestResult:
    """Run the CLI with given arguments and return a CLITestResult."""
    cmd = [sys.executable, "-m", "tc_cli.cli"] + list(args)
    full_env = os.environ.copy()
    full_env.update(env or {})
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        env=full_env,
        timeout=timeout,
        cwd=Path(__file__).resolve().parent.parent,
    )
    return CLITestResult(
        args=list(args),
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def server_env(httpserver: HTTPServer) -> dict[str, str]:
    """Environment pointing the CLI at the fake server with a session."""
    return {"TC_BASE_URL": httpserver.url_for(TC_ROOT), "TC_SESSION_ID": "4F7A2C"}


# =============================================================================
# Help Commands
# =============================================================================


class TestHelpCommands:
    def test_main_help(self):
        result = run_cli("--help")
        assert result.success
        assert "Teamcenter" in result.stdout

    def test_no_command_prints_help(self):
        result = run_cli()
        assert result.success
        assert "usage" in result.stdout

    @pytest.mark.parametrize("group", ["session", "props", "folder", "item", "relation", "queries", "revrules", "bom"])
    def test_group_help(self, group):
        result = run_cli(group, "--help")
        assert result.success
        assert "usage" in result.stdout

    def test_group_without_subcommand_prints_help(self):
        result = run_cli("bom")
        assert result.success
        assert "create" in result.stdout

    def test_bad_reference_argument(self):
        result = run_cli("props", "get", "a:b:c:d", "-a", "object_name")
        assert result.exit_code == 2


# =============================================================================
# Authentication
# =============================================================================


class TestAuthentication:
    def test_login_prints_session_id(self, httpserver):
        expect_post(httpserver, endpoints.LOGIN, login_response(), headers={"Set-Cookie": SESSION_COOKIE})
        result = run_cli(
            "login",
            env={"TC_BASE_URL": httpserver.url_for(TC_ROOT), "TC_USER": "infodba", "TC_PASSWORD": "secret"},
        )
        assert result.success, result.stderr
        data = result.json()
        assert data["session_id"] == "4F7A2C"
        assert data["server_version"] == "14.1.0.3"
        assert data["reused"] is False

    def test_login_without_credentials(self, httpserver):
        result = run_cli("login", env={"TC_BASE_URL": httpserver.url_for(TC_ROOT)})
        assert result.exit_code == 1
        assert result.json()["kind"] == "validation"

    def test_rejected_login(self, httpserver):
        expect_post(
            httpserver,
            endpoints.LOGIN,
            {".QName": "x.InvalidCredentialsException", "code": 515143, "message": "The login attempt failed"},
        )
        result = run_cli(
            "login",
            env={"TC_BASE_URL": httpserver.url_for(TC_ROOT), "TC_USER": "infodba", "TC_PASSWORD": "wrong"},
        )
        assert result.exit_code == 1
        assert result.json() == {
            "error": "The login attempt failed",
            "kind": "server_reported",
            "status": 200,
            "details": {".QName": "x.InvalidCredentialsException", "code": 515143},
        }

    def test_command_logs_in_from_environment(self, httpserver):
        expect_post(httpserver, endpoints.LOGIN, login_response(), headers={"Set-Cookie": SESSION_COOKIE})
        httpserver.expect_request(
            f"{TC_ROOT}{endpoints.GET_PROPERTIES}", headers={"Cookie": "JSESSIONID=4F7A2C"}
        ).respond_with_json({"modelObjects": {"X1": model_object("X1", "Item", "Item", object_name="Bracket")}})
        result = run_cli(
            "props",
            "get",
            "X1:Item",
            "-a",
            "object_name",
            env={"TC_BASE_URL": httpserver.url_for(TC_ROOT), "TC_USER": "infodba", "TC_PASSWORD": "secret"},
        )
        assert result.success, result.stderr
        assert result.json() == {"uid": "X1", "object_name": "Bracket"}

    def test_no_session_and_no_credentials(self, httpserver):
        result = run_cli("queries", "list", env={"TC_BASE_URL": httpserver.url_for(TC_ROOT)})
        assert result.exit_code == 1
        assert "TC_SESSION_ID" in result.json()["error"]


# =============================================================================
# Commands
# =============================================================================


class TestCommands:
    def test_props_get_object_not_returned(self, httpserver, server_env):
        expect_post(httpserver, endpoints.GET_PROPERTIES, {"modelObjects": {}})
        result = run_cli("props", "get", "X1", "-a", "object_name", env=server_env)
        assert result.exit_code == 1
        assert result.json()["kind"] == "decode"
        assert result.json()["details"] == {"uid": "X1"}

    def test_props_get_blank_attribute(self, httpserver, server_env):
        expect_post(httpserver, endpoints.GET_PROPERTIES, {"modelObjects": {"X1": model_object("X1", "Item", "Item")}})
        result = run_cli("props", "get", "X1:Item", "-a", "object_name", env=server_env)
        assert result.success, result.stderr
        assert result.json() == {"uid": "X1", "object_name": ""}

    def test_folder_expand(self, httpserver, server_env):
        expect_post(
            httpserver,
            endpoints.EXPAND_FOLDERS,
            {"output": [], "ServiceData": {"modelObjects": {"F1": model_object("F1", "Folder", "Folder")}}},
        )
        expect_post(
            httpserver,
            endpoints.GET_PROPERTIES,
            {"modelObjects": {"F1": model_object("F1", "Folder", "Folder", object_name="Docs")}},
        )
        result = run_cli("folder", "expand", "HOME", env=server_env)
        assert result.success, result.stderr
        assert result.json() == {
            "data": [{"uid": "F1", "className": "Folder", "type": "Folder", "object_name": "Docs"}],
            "total_count": 1,
        }

    def test_item_get_not_found(self, httpserver, server_env):
        expect_post(httpserver, endpoints.GET_ITEM_FROM_ID, {"output": []})
        result = run_cli("item", "get", "000123", env=server_env)
        assert result.json() == {"found": False}

    def test_queries_find(self, httpserver, server_env):
        expect_post(
            httpserver,
            endpoints.FIND_SAVED_QUERIES,
            {
                "savedQueries": [{"uid": "Q1", "className": "ImanQuery", "type": "ImanQuery"}],
                "ServiceData": {
                    "modelObjects": {
                        "Q1": model_object("Q1", "ImanQuery", "ImanQuery", query_name="Item...", query_desc="Items")
                    }
                },
            },
        )
        result = run_cli("queries", "find", "--name", "Item*", env=server_env)
        assert result.success, result.stderr
        data = result.json()
        assert data["total_count"] == 1
        assert data["data"][0]["objectID"] == "Q1"

    def test_bom_close(self, httpserver, server_env):
        expect_post(httpserver, endpoints.CLOSE_BOM_WINDOWS, {"ServiceData": {"deleted": ["W1"]}})
        result = run_cli("bom", "close", "W1:BOMWindow", env=server_env)
        assert result.json() == {"deleted": ["W1"]}

    def test_http_error_exit_code(self, httpserver, server_env):
        expect_post(httpserver, endpoints.GET_REVISION_RULES, {}, status=500)
        result = run_cli("revrules", "list", env=server_env)
        assert result.exit_code == 1
        assert result.json()["kind"] == "http_status"
        assert result.json()["status"] == 500

    def test_raw_flag_prints_exchanges_to_stderr(self, httpserver, server_env):
        expect_post(httpserver, endpoints.CLOSE_BOM_WINDOWS, {"ServiceData": {}})
        result = run_cli("--raw", "bom", "close", env=server_env)
        assert result.success
        assert "HTTP 200" in result.stderr
        assert result.json() == {"deleted": []}

    def test_open_url(self):
        result = run_cli("open-url", "Q1", "--awc-url", "https://awc.example.com")
        assert result.json()["url"].endswith("showObject?uid=Q1")

    def test_open_url_requires_awc_url(self):
        result = run_cli("open-url", "Q1")
        assert result.exit_code == 1
        assert result.json()["kind"] == "validation"
