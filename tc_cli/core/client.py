"""
Core HTTP client for the Teamcenter JSON REST services.

Handles the transport (one POST per call), session cookie attachment,
raw exchange capture and the error taxonomy shared by every layer.
"""

import http.client
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_TIMEOUT = 60
DEFAULT_COOKIE_NAME = "JSESSIONID"


class CLIError(Exception):
    """Base error class for CLI errors."""

    kind = "error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """API error with status code and message."""

    kind = "api_error"

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""

    kind = "validation"


class InvalidEndpointError(ValidationError):
    """The endpoint address is not an absolute http(s) URL."""

    kind = "invalid_endpoint"


class NotAuthenticatedError(CLIError):
    """An operation was attempted without a session."""

    kind = "not_authenticated"


class TransportError(APIError):
    """Network/IO failure, or the peer did not answer with HTTP."""

    kind = "transport"


class HTTPStatusError(APIError):
    """The server answered with a status outside 2xx."""

    kind = "http_status"


class DecodeError(APIError):
    """The response body does not match the expected structure."""

    kind = "decode"


class ServerReportedError(APIError):
    """A well-formed response that reports a server-side failure."""

    kind = "server_reported"


class SessionNotEstablishedError(APIError):
    """Login succeeded but no session token could be obtained."""

    kind = "session_not_established"


@dataclass
class RawExchange:
    """One request/response pair, kept for diagnostics only."""

    endpoint: str
    status: int
    body: bytes = b""
    headers: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Check if the status is in the 2xx range."""
        return 200 <= self.status <= 299

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (lossy)."""
        return self.body.decode("utf-8", errors="replace")

    def header_values(self, name: str) -> list[str]:
        """All values of a response header, case-insensitive."""
        lowered = name.lower()
        for key, values in self.headers.items():
            if key.lower() == lowered:
                return values
        return []

    def raise_for_status(self) -> None:
        """Raise HTTPStatusError unless the status is 2xx."""
        if not self.ok:
            raise HTTPStatusError(
                f"HTTP {self.status} from {self.endpoint}",
                status=self.status,
                details={"body": self.text[:500]},
            )


def validate_endpoint(url: str) -> str:
    """Ensure url is an absolute http(s) address."""
    try:
        parsed = urllib.parse.urlparse(url)
    except ValueError as e:
        raise InvalidEndpointError(f"Invalid endpoint URL: {url!r} ({e})")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidEndpointError(f"Invalid endpoint URL: {url!r}")
    return url


class APIClient:
    """
    Low-level HTTP client for the Teamcenter JSON REST services.

    Handles:
    - POSTing JSON payloads, one attempt per call
    - Attaching the session cookie
    - Capturing every exchange for diagnostics
    - Mapping network failures to TransportError

    HTTP status validation is left to the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        on_raw: Callable[[RawExchange], None] | None = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Web tier base URL, e.g. http://host:7001/tc (or TC_BASE_URL env var)
            timeout: Request timeout in seconds (or TC_TIMEOUT env var)
            cookie_name: Name of the session cookie
            on_raw: Optional subscriber notified after every exchange

        """
        base = base_url or os.environ.get("TC_BASE_URL") or ""
        self.base_url = base.rstrip("/")
        env_timeout = os.environ.get("TC_TIMEOUT")
        self.timeout = timeout or (float(env_timeout) if env_timeout else DEFAULT_TIMEOUT)
        self.cookie_name = cookie_name
        self.on_raw = on_raw
        self.last_raw: RawExchange | None = None

    def build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return validate_endpoint(path)
        if not self.base_url:
            raise InvalidEndpointError("Base URL required. Set TC_BASE_URL env var or use --url flag")
        return validate_endpoint(f"{self.base_url}{path}")

    def send(self, url: str, payload: bytes, token: str | None = None) -> RawExchange:
        """
        POST a JSON payload and return the raw exchange.

        Args:
            url: Absolute endpoint URL
            payload: Encoded request envelope
            token: Session token to send as cookie

        Returns:
            RawExchange with status, headers and body (any status)

        Raises:
            InvalidEndpointError: On a malformed URL
            TransportError: On network errors or non-HTTP responses

        """
        validate_endpoint(url)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Cookie"] = f"{self.cookie_name}={token}"

        logger.debug(f"POST {url} ({len(payload)} bytes, session={'yes' if token else 'no'})")
        req = urllib.request.Request(url, data=payload, headers=headers, method="POST")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                exchange = RawExchange(
                    endpoint=url,
                    status=response.status,
                    body=response.read(),
                    headers=_collect_headers(response.headers),
                )

        except urllib.error.HTTPError as e:
            # Non-2xx is still a response; status is judged by the caller
            exchange = RawExchange(
                endpoint=url,
                status=e.code,
                body=e.read() or b"",
                headers=_collect_headers(e.headers),
            )

        except urllib.error.URLError as e:
            self._emit(RawExchange(endpoint=url, status=0))
            raise TransportError(f"Connection error: {e.reason}", details={"endpoint": url})

        except TimeoutError:
            self._emit(RawExchange(endpoint=url, status=0))
            raise TransportError(
                f"Request timed out after {self.timeout} seconds",
                details={"endpoint": url},
            )

        except (http.client.HTTPException, OSError) as e:
            self._emit(RawExchange(endpoint=url, status=0))
            raise TransportError(f"Transport error: {e}", details={"endpoint": url})

        logger.debug(f"{url} -> HTTP {exchange.status}")
        self._emit(exchange)
        return exchange

    def _emit(self, exchange: RawExchange) -> None:
        self.last_raw = exchange
        if self.on_raw is None:
            return
        try:
            self.on_raw(exchange)
        except Exception:
            logger.warning("Raw exchange subscriber failed", exc_info=True)


def _collect_headers(message: Any) -> dict[str, list[str]]:
    """Flatten an http.client message into name -> values (keeps repeats)."""
    if message is None:
        return {}
    collected: dict[str, list[str]] = {}
    for name, value in message.items():
        collected.setdefault(name, []).append(value)
    return collected
