"""Shared pytest fixtures for the send_mail test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

import logging
from collections.abc import Callable, Iterator
from email.message import EmailMessage
from pathlib import Path
from typing import Any, ClassVar

import pytest

from send_mail.logging import LOGGER_NAME
from send_mail.options import Option, OptionId

# pylint: disable=redefined-outer-name


class DummySMTP:
    """Minimal ``smtplib.SMTP`` replacement capturing invocations.

    Class attributes drive failures: ``fail_on`` names the method that
    raises (``"connect"``, ``"ehlo"``, ``"login"``, ``"send_message"``,
    ``"quit"``) and ``error`` is the exception raised.
    ``greeting_code`` is the reply code returned by ``connect``.
    """

    created: ClassVar[list[DummySMTP]] = []
    last_instance: ClassVar[DummySMTP | None] = None
    supports_starttls: ClassVar[bool] = True
    fail_on: ClassVar[str | None] = None
    error: ClassVar[BaseException] = OSError("boom")
    greeting_code: ClassVar[int] = 220

    def __init__(self, **kwargs: Any) -> None:
        """Capture constructor kwargs and initialise tracking state."""
        self.kwargs = kwargs
        self.ehlo_called = 0
        self.starttls_called = False
        self.starttls_context: Any | None = None
        self.login_calls: list[tuple[str, str]] = []
        self.sent_messages: list[EmailMessage] = []
        self.debug_level = 0
        self.debug_level_at_connect: int | None = None
        self.quit_called = False
        self.closed = False
        DummySMTP.created.append(self)
        DummySMTP.last_instance = self

    def _maybe_fail(self, name: str) -> None:
        if DummySMTP.fail_on == name:
            raise DummySMTP.error

    def connect(self, host: str = "localhost", port: int = 0) -> tuple[int, bytes]:
        """Record the address and return the configured greeting."""
        self._maybe_fail("connect")
        self.debug_level_at_connect = self.debug_level
        self.kwargs.update(host=host, port=port)
        return DummySMTP.greeting_code, b"ready"

    def ehlo(self) -> None:
        """Record EHLO invocations."""
        self._maybe_fail("ehlo")
        self.ehlo_called += 1

    def has_extn(self, name: str) -> bool:
        """Report supported SMTP extensions."""
        return name.upper() == "STARTTLS" and DummySMTP.supports_starttls

    def starttls(self, *, context: Any) -> None:
        """Flag that STARTTLS was invoked and capture its context."""
        self.starttls_called = True
        self.starttls_context = context

    def login(self, username: str, password: str) -> None:
        """Track login attempts."""
        self._maybe_fail("login")
        self.login_calls.append((username, password))

    def send_message(self, message: EmailMessage) -> None:
        """Collect outgoing messages for later inspection."""
        self._maybe_fail("send_message")
        self.sent_messages.append(message)

    def set_debuglevel(self, level: int) -> None:
        """Accept debug level setting (used by TRACE logging)."""
        self.debug_level = level

    def quit(self) -> None:
        """Record QUIT."""
        self.quit_called = True
        self._maybe_fail("quit")

    def close(self) -> None:
        """Mark the client as closed."""
        self.closed = True

    @classmethod
    def reset(cls) -> None:
        """Reset class state between tests."""
        cls.created.clear()
        cls.last_instance = None
        cls.supports_starttls = True
        cls.fail_on = None
        cls.error = OSError("boom")
        cls.greeting_code = 220


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from real configuration files."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("SEND_MAIL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` during a test."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def dummy_smtp(monkeypatch: pytest.MonkeyPatch) -> Iterator[type[DummySMTP]]:
    """Replace ``smtplib.SMTP`` with :class:`DummySMTP`."""
    DummySMTP.reset()
    monkeypatch.setattr("send_mail.transport.smtplib.SMTP", DummySMTP)
    yield DummySMTP
    DummySMTP.reset()


@pytest.fixture
def base_values() -> dict[OptionId, Any]:
    """Return the values of a minimal valid send."""
    return {
        OptionId.SMTP_SERVER: "smtp.example.com",
        OptionId.SRC_EMAIL: "a@b.co",
        OptionId.DST_EMAIL: "c@d.co",
        OptionId.EMAIL_TITLE: "Hi",
        OptionId.EMAIL_CONTENT: "Body",
    }


@pytest.fixture
def make_options(base_values: dict[OptionId, Any]) -> Callable[..., list[Option]]:
    """Build an option list from the base values with overrides.

    Keyword arguments are option ids (``smtp_tls=True``); a value of
    ``None`` removes the option.
    """

    def _make(**overrides: Any) -> list[Option]:
        values: dict[OptionId, Any] = dict(base_values)
        for name, value in overrides.items():
            option_id = OptionId(name)
            if value is None:
                values.pop(option_id, None)
            else:
                values[option_id] = value
        return [Option(option_id, value) for option_id, value in values.items()]

    return _make
