"""
Core layer - Transport, envelopes, session and typed responses.

This layer provides:
- Low-level HTTP client with raw exchange capture and the error taxonomy
- Request/response envelope codec and the JSON value model
- Session manager (login, cookie capture, reuse)
- Typed dataclasses for responses and the response normalizer
"""

from tc_cli.core.client import (
    APIClient,
    APIError,
    CLIError,
    DecodeError,
    HTTPStatusError,
    InvalidEndpointError,
    NotAuthenticatedError,
    RawExchange,
    ServerReportedError,
    SessionNotEstablishedError,
    TransportError,
    ValidationError,
)
from tc_cli.core.envelope import RequestEnvelope, peek_qname, unwrap, wrap
from tc_cli.core.jsonvalue import JSONKind, JSONValue
from tc_cli.core.result import Result
from tc_cli.core.session import SessionManager
from tc_cli.core.types import (
    BOMWindow,
    CreatedItem,
    ItemLookup,
    ModelObject,
    ObjectRef,
    PropertyValue,
    RevisionRuleEntry,
    SavedQueryInfo,
    ServiceData,
    Session,
    SessionInfo,
)

__all__ = [
    "APIClient",
    "APIError",
    "BOMWindow",
    "CLIError",
    "CreatedItem",
    "DecodeError",
    "HTTPStatusError",
    "InvalidEndpointError",
    "ItemLookup",
    "JSONKind",
    "JSONValue",
    "ModelObject",
    "NotAuthenticatedError",
    "ObjectRef",
    "PropertyValue",
    "RawExchange",
    "RequestEnvelope",
    "Result",
    "RevisionRuleEntry",
    "SavedQueryInfo",
    "ServerReportedError",
    "ServiceData",
    "Session",
    "SessionInfo",
    "SessionManager",
    "SessionNotEstablishedError",
    "TransportError",
    "ValidationError",
    "peek_qname",
    "unwrap",
    "wrap",
]
