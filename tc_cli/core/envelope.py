"""
Request/response envelopes shared by every service operation.

Outbound: {"header": {"state": {...}, "policy": {...}}, "body": {...}}
Inbound:  {".QName": "...", "ServiceData": {...}, <operation fields>}
"""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tc_cli.core.client import DecodeError, ServerReportedError
from tc_cli.core.jsonvalue import normalize_mapping

T = TypeVar("T")

QNAME_KEY = ".QName"
SERVICE_DATA_KEY = "ServiceData"
DEFAULT_LOCALE = "en_US"


def stateful_state(locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    """Header state used by the structure management services."""
    return {
        "formatProperties": True,
        "stateless": True,
        "unloadObjects": False,
        "enableServerStateHeaders": True,
        "locale": locale,
    }


@dataclass
class RequestEnvelope:
    """An outbound request envelope."""

    body: dict[str, Any] | None = None
    state: dict[str, Any] = field(default_factory=dict)
    policy: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for the request body."""
        # The service parser treats a missing state/policy differently from {}
        result: dict[str, Any] = {"header": {"state": dict(self.state), "policy": dict(self.policy)}}
        if self.body is not None:
            result["body"] = self.body
        return result

    def encode(self) -> bytes:
        """Serialize to UTF-8 JSON."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")


def wrap(
    body: Mapping[str, Any] | None = None,
    state: Mapping[str, Any] | None = None,
    policy: Mapping[str, Any] | None = None,
) -> RequestEnvelope:
    """
    Build a request envelope.

    Args:
        body: Operation-specific body fields (omitted from the wire when None)
        state: Header state overrides (locale, formatting flags, ...)
        policy: Header object property policy

    Returns:
        RequestEnvelope whose header always carries state and policy

    Raises:
        ValidationError: If any value is not representable as JSON

    """
    return RequestEnvelope(
        body=normalize_mapping(body) if body is not None else None,
        state=normalize_mapping(state),
        policy=normalize_mapping(policy),
    )


def _load_document(raw: bytes) -> dict[str, Any]:
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON response: {e}")
    if not isinstance(document, dict):
        raise DecodeError(f"Expected a JSON object response, got {type(document).__name__}")
    return document


def peek_qname(raw: bytes) -> tuple[str | None, dict[str, Any]]:
    """
    Loose pass: read only the qualified name.

    Returns:
        (qualified name or None, decoded document)

    Raises:
        DecodeError: If the body is not a JSON object

    """
    document = _load_document(raw)
    qname = document.get(QNAME_KEY)
    return (qname if isinstance(qname, str) else None), document


def is_exception_qname(qname: str | None) -> bool:
    """Check if a qualified name denotes a server exception type."""
    return bool(qname) and "Exception" in qname


def server_error_from(document: dict[str, Any], fallback: str = "Server reported an error") -> ServerReportedError:
    """Build a ServerReportedError from an exception payload."""
    message = document.get("message")
    details = {key: document[key] for key in (QNAME_KEY, "code", "level") if key in document}
    return ServerReportedError(message if isinstance(message, str) and message else fallback, details=details)


def unwrap(raw: bytes, parser: Callable[[dict[str, Any]], T]) -> T:
    """
    Strict pass: decode the body into an operation-specific structure.

    Args:
        raw: Response body
        parser: Typically a response type's from_dict

    Raises:
        ServerReportedError: If the envelope is a server exception
        DecodeError: If the body does not match the expected structure

    """
    qname, document = peek_qname(raw)
    if is_exception_qname(qname):
        raise server_error_from(document, fallback=qname or "")
    try:
        return parser(document)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(
            f"Response does not match {getattr(parser, '__qualname__', 'schema')}: {e!r}",
            details={QNAME_KEY: qname} if qname else None,
        )
