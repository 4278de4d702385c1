"""
Session lifecycle: login, cookie capture, reuse and attachment.

A SessionManager is an ordinary object owned by whoever creates it; there
is no process-wide session. The current session is replaced on every
successful login (last writer wins, no lock).
"""

import logging

from tc_cli.core import endpoints
from tc_cli.core.client import (
    APIClient,
    DecodeError,
    NotAuthenticatedError,
    RawExchange,
    ServerReportedError,
    SessionNotEstablishedError,
)
from tc_cli.core.envelope import QNAME_KEY, peek_qname
from tc_cli.core.requests import LoginRequest
from tc_cli.core.types import LoginResponse, Session

logger = logging.getLogger(__name__)

LOGIN_SUCCESS_MARKER = "Session.LoginResponse"


def extract_cookie(exchange: RawExchange, cookie_name: str) -> str | None:
    """Find a cookie value in the Set-Cookie headers of an exchange."""
    prefix = f"{cookie_name}="
    for header in exchange.header_values("Set-Cookie"):
        for part in header.split(";"):
            part = part.strip()
            if part.startswith(prefix):
                value = part[len(prefix) :]
                if value:
                    return value
    return None


class SessionManager:
    """Owns the session token and its acquisition."""

    def __init__(self, client: APIClient, allow_reuse: bool = True, session: Session | None = None):
        """
        Args:
            client: Transport used for the login exchange
            allow_reuse: Keep the prior token when a successful login sets no cookie
            session: Pre-existing session (e.g. a JSESSIONID from the environment)

        """
        self._client = client
        self.allow_reuse = allow_reuse
        self.current: Session | None = session

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    def require(self, session: Session | None = None) -> Session:
        """Return the explicit session, else the current one."""
        resolved = session or self.current
        if resolved is None:
            raise NotAuthenticatedError("Not logged in. Run login first or set TC_SESSION_ID")
        return resolved

    def logout(self) -> None:
        """Forget the local session (the server session is left to expire)."""
        self.current = None

    def authenticate(
        self,
        username: str,
        password: str,
        endpoint: str | None = None,
        **credentials: str,
    ) -> Session:
        """
        Log in and make the resulting session current.

        Args:
            username: Login name
            password: Password
            endpoint: Full login URL (defaults to the client's base URL + login path)
            credentials: Optional role, group, locale, descrimator

        Returns:
            The established Session

        Raises:
            InvalidEndpointError: On a malformed URL
            TransportError: On network errors
            HTTPStatusError: On a non-2xx status
            DecodeError: If the body is not a JSON object or lacks a qualified name
            ServerReportedError: If the server rejected the login
            SessionNotEstablishedError: If no session token is obtainable

        """
        url = endpoint or self._client.build_url(endpoints.LOGIN)
        envelope = LoginRequest(user=username, password=password, **credentials).to_envelope()

        exchange = self._client.send(url, envelope.encode())
        exchange.raise_for_status()

        qname, document = peek_qname(exchange.body)
        message = document.get("message")
        if message is not None or (qname is not None and LOGIN_SUCCESS_MARKER not in qname):
            raise ServerReportedError(
                str(message) if message else f"Login failed: {qname}",
                status=exchange.status,
                details={key: document[key] for key in (QNAME_KEY, "code", "level") if key in document},
            )
        if qname is None:
            raise DecodeError(f"Login response has no {QNAME_KEY}", status=exchange.status)

        server_info = LoginResponse.from_dict(document).server_info

        token = extract_cookie(exchange, self._client.cookie_name)
        if token:
            session = Session(token=token, server_info=server_info)
            logger.info(f"Established session for {username}")
        elif self.allow_reuse and self.current is not None:
            # The reused token is not revalidated; callers see reused=True
            logger.warning("Login set no session cookie; reusing the previous session")
            session = Session(
                token=self.current.token,
                established_at=self.current.established_at,
                server_info=server_info or self.current.server_info,
                reused=True,
            )
        else:
            raise SessionNotEstablishedError(
                f"Login returned HTTP {exchange.status} but no {self._client.cookie_name} cookie",
                status=exchange.status,
            )

        self.current = session
        return session
