"""SMTP transport for mail submission.

Wraps :mod:`smtplib` with the three submission stages used by the
composer: connect, authenticate and submit. Each stage translates
``smtplib`` and socket failures into
:class:`~send_mail.exceptions.ProtocolError` tagged with the stage name.

Port and authentication method follow the TLS flag:

============  =========  ==============  ==================
TLS flag      port       credentials     auth method
============  =========  ==============  ==================
False         25         yes             LOGIN
True          587        yes             START_TLS
either        25 / 587   no              NONE
============  =========  ==============  ==================

Examples:
    Send a prepared message::

        transport = select_transport("smtp.example.com", tls=True, username="me", password="secret")
        transport.send(message)
"""

from __future__ import annotations

import io
import logging
import smtplib
import ssl
from contextlib import contextmanager, redirect_stderr
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from send_mail.exceptions import ProtocolError
from send_mail.logging import TRACE_LEVEL

if TYPE_CHECKING:
    from collections.abc import Iterator
    from email.message import EmailMessage

log = logging.getLogger(__name__)

#: Port used for plain SMTP submission.
SMTP_PORT = 25

#: Port used for SMTP submission upgraded with STARTTLS.
SMTP_TLS_PORT = 587

#: Default socket timeout in seconds.
DEFAULT_TIMEOUT = 30.0


class AuthMethod(str, Enum):
    """Authentication method used after connecting.

    Attributes:
        NONE: No authentication.
        LOGIN: Authenticate on the plain connection.
        START_TLS: Upgrade the connection with STARTTLS, then authenticate.
    """

    NONE = "none"
    LOGIN = "login"
    START_TLS = "start_tls"


@dataclass(frozen=True, slots=True)
class SMTPCredentials:
    """Username and password for SMTP authentication."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"SMTPCredentials(username={self.username!r}, password='***')"


class SMTPTransport:
    """Synchronous SMTP transport.

    Args:
        host: SMTP server host name.
        port: SMTP server port.
        auth_method: Authentication method applied after connecting.
        credentials: Credentials for LOGIN and START_TLS.
        timeout: Socket timeout in seconds.
        ssl_context: TLS context for STARTTLS (system defaults if omitted).

    Raises:
        ValueError: If the auth method needs credentials and none are given.
    """

    def __init__(
        self,
        host: str,
        *,
        port: int = SMTP_PORT,
        auth_method: AuthMethod = AuthMethod.NONE,
        credentials: SMTPCredentials | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        if auth_method is not AuthMethod.NONE and credentials is None:
            raise ValueError(f"auth method {auth_method.value!r} requires credentials")
        self.host = host
        self.port = port
        self.auth_method = auth_method
        self.credentials = credentials
        self.timeout = timeout
        self._ssl_context = ssl_context

    def __repr__(self) -> str:
        return f"SMTPTransport(host={self.host!r}, port={self.port}, auth_method={self.auth_method.value!r})"

    def connect(self) -> smtplib.SMTP:
        """Open the connection and greet the server.

        Returns:
            Connected ``smtplib.SMTP`` client, to be released with :meth:`close`.

        Raises:
            ProtocolError: If the server cannot be reached or refuses the greeting.
        """
        log.debug("Connecting to %s:%d", self.host, self.port)
        client = smtplib.SMTP(timeout=self.timeout)
        # starttls() checks the certificate against this name
        client._host = self.host  # pylint: disable=protected-access
        if log.isEnabledFor(TRACE_LEVEL):
            client.set_debuglevel(1)

        try:
            code, reply = client.connect(self.host, self.port)
            if code != 220:
                raise smtplib.SMTPConnectError(code, reply)
            client.ehlo()
        except (smtplib.SMTPException, OSError) as exc:
            client.close()
            raise ProtocolError("connect", str(exc) or type(exc).__name__) from exc
        return client

    def authenticate(self, client: smtplib.SMTP) -> None:
        """Apply the configured authentication method.

        Raises:
            ProtocolError: If STARTTLS is unavailable or the login is rejected.
        """
        if self.auth_method is AuthMethod.NONE:
            log.debug("No SMTP authentication")
            return

        credentials = self.credentials
        if credentials is None:
            raise ProtocolError("authenticate", f"auth method {self.auth_method.value!r} requires credentials")
        try:
            if self.auth_method is AuthMethod.START_TLS:
                if not client.has_extn("STARTTLS"):
                    raise ProtocolError("authenticate", f"{self.host} does not support STARTTLS")
                client.starttls(context=self._ssl_context or ssl.create_default_context())
                client.ehlo()
                log.debug("Connection upgraded with STARTTLS")
            client.login(credentials.username, credentials.password)
        except (smtplib.SMTPException, ssl.SSLError, OSError) as exc:
            raise ProtocolError("authenticate", str(exc) or type(exc).__name__) from exc
        log.debug("Authenticated as %s (%s)", credentials.username, self.auth_method.value)

    def submit(self, client: smtplib.SMTP, message: EmailMessage) -> None:
        """Submit ``message`` on an authenticated connection.

        Raises:
            ProtocolError: If the server rejects the message.
        """
        try:
            client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise ProtocolError("submit", str(exc) or type(exc).__name__) from exc
        log.debug("Message submitted to %s", self.host)

    def close(self, client: smtplib.SMTP) -> None:
        """Say QUIT and close the socket.

        A failing QUIT is logged and ignored: the message, if any, has
        already been accepted at this point.
        """
        try:
            client.quit()
        except (smtplib.SMTPException, OSError) as exc:
            log.debug("QUIT failed on %s: %s", self.host, exc)
        finally:
            client.close()

    def send(self, message: EmailMessage) -> None:
        """Connect, authenticate and submit ``message`` in one go.

        When TRACE logging is enabled, the SMTP dialogue is logged.

        Raises:
            ProtocolError: If any stage fails.
        """
        with session_trace():
            client = self.connect()
            try:
                self.authenticate(client)
                self.submit(client, message)
            finally:
                self.close(client)


def select_transport(
    server: str,
    *,
    tls: bool = False,
    username: str = "",
    password: str = "",
    timeout: float = DEFAULT_TIMEOUT,
) -> SMTPTransport:
    """Build the transport matching the TLS flag and credentials.

    Args:
        server: SMTP server host name.
        tls: Upgrade the connection with STARTTLS on port 587.
        username: SMTP username, may be empty.
        password: SMTP password, may be empty.
        timeout: Socket timeout in seconds.

    Returns:
        Configured transport.

    Examples:
        >>> select_transport("smtp.example.com", tls=True, username="u", password="p")
        SMTPTransport(host='smtp.example.com', port=587, auth_method='start_tls')
        >>> select_transport("smtp.example.com", username="u")
        SMTPTransport(host='smtp.example.com', port=25, auth_method='none')
    """
    port = SMTP_TLS_PORT if tls else SMTP_PORT
    if username and password:
        return SMTPTransport(
            server,
            port=port,
            auth_method=AuthMethod.START_TLS if tls else AuthMethod.LOGIN,
            credentials=SMTPCredentials(username=username, password=password),
            timeout=timeout,
        )
    return SMTPTransport(server, port=port, auth_method=AuthMethod.NONE, timeout=timeout)


# ---------------------------------------------------------------------------
# TRACE helpers
# ---------------------------------------------------------------------------


def _log_smtp_debug_output(buffer: io.StringIO) -> None:
    """Re-log captured ``smtplib`` debug output at TRACE level.

    Lines sent between an AUTH command and its final reply are masked.
    """
    if not log.isEnabledFor(TRACE_LEVEL):
        return

    in_auth = False
    for raw_line in buffer.getvalue().splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("send:"):
            payload = line[len("send:") :].strip()
            if payload.strip("'\"b").upper().startswith("AUTH"):
                in_auth = True
                payload = "AUTH ***"
            elif in_auth:
                payload = "***"
            log.log(TRACE_LEVEL, "[SMTP] >>> %s", payload)
        elif line.startswith("reply:"):
            # smtplib ends each reply with a "retcode (NNN)" summary line
            if "retcode (" in line and "retcode (334)" not in line:
                in_auth = False
            log.log(TRACE_LEVEL, "[SMTP] <<< %s", line[len("reply:") :].strip())
        else:
            log.log(TRACE_LEVEL, "[SMTP] %s", line)


@contextmanager
def session_trace() -> Iterator[None]:
    """Log the SMTP dialogue of the enclosed block when TRACE is enabled.

    ``smtplib`` prints its debug output on stderr; it is captured for the
    duration of the block and logged once the block exits.
    """
    if not log.isEnabledFor(TRACE_LEVEL):
        yield
        return

    buffer = io.StringIO()
    try:
        with redirect_stderr(buffer):
            yield
    finally:
        _log_smtp_debug_output(buffer)


__all__ = [
    "DEFAULT_TIMEOUT",
    "SMTP_PORT",
    "SMTP_TLS_PORT",
    "AuthMethod",
    "SMTPCredentials",
    "SMTPTransport",
    "select_transport",
    "session_trace",
]
