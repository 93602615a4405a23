"""Specialized exceptions raised by send_mail.

Exception hierarchy::

    SendMailError (base for all send_mail errors)
        OptionError (invalid option key, also ValueError)
            OptionTypeError (value of the wrong type, also TypeError)
        ValidationError (aggregated mandatory/email syntax failures)
        AttachmentError (attachment missing or unreadable)
        ConfigInvariantError (inconsistent settings, also ValueError)
        ProtocolError (SMTP/TLS failure)
        ConfigError (configuration file errors)
            ConfigFileNotFoundError
            ConfigFormatError
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any


class SendMailError(Exception):
    """Base exception for all send_mail errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error context as key-value pairs.

    Examples:
        >>> raise SendMailError("Something went wrong", details={"stage": "build"})
        Traceback (most recent call last):
        ...
        send_mail.exceptions.SendMailError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize SendMailError.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class OptionError(SendMailError, ValueError):
    """An option key is unknown or supplied more than once."""


class OptionTypeError(OptionError, TypeError):
    """A value does not match the type declared for its option.

    Attributes:
        option: Name of the offending option.
        expected: Name of the expected type.
        actual: Name of the type actually supplied.

    Examples:
        >>> raise OptionTypeError("smtp-tls", "bool", "str")
        Traceback (most recent call last):
        ...
        send_mail.exceptions.OptionTypeError: invalid data type for option 'smtp-tls': expected bool, got str
    """

    def __init__(self, option: str, expected: str, actual: str) -> None:
        """Initialize OptionTypeError.

        Args:
            option: Name of the offending option.
            expected: Name of the expected type.
            actual: Name of the type actually supplied.
        """
        super().__init__(
            f"invalid data type for option '{option}': expected {expected}, got {actual}",
            details={"option": option, "expected": expected, "actual": actual},
        )
        self.option = option
        self.expected = expected
        self.actual = actual


class ValidationError(SendMailError):
    """One or more inputs failed validation.

    The error aggregates every violation found, grouped by field or
    role, so the caller sees the whole picture in one report.

    Attributes:
        problems: Mapping of field/role name to the offending values.
    """

    def __init__(
        self,
        message: str,
        *,
        problems: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable, possibly multi-line report.
            problems: Offending values grouped by field or role.
        """
        grouped = {key: tuple(values) for key, values in (problems or {}).items()}
        super().__init__(message, details={"problems": grouped})
        self.problems: dict[str, tuple[str, ...]] = grouped


class AttachmentError(SendMailError):
    """The attachment does not exist or cannot be read.

    Attributes:
        path: Path of the attachment.
    """

    def __init__(self, message: str, path: Path | str) -> None:
        """Initialize AttachmentError.

        Args:
            message: Human-readable error message.
            path: Path of the attachment.
        """
        super().__init__(message, details={"path": str(path)})
        self.path = Path(path)


class ConfigInvariantError(SendMailError, ValueError):
    """Settings are inconsistent with each other.

    Raised for example when a username is given without a password.
    """


class ProtocolError(SendMailError):
    """The SMTP server or the TLS layer rejected the operation.

    Attributes:
        stage: Name of the stage that failed (connect, authenticate, submit).
        reason: Description of the failure.
    """

    def __init__(self, stage: str, reason: str) -> None:
        """Initialize ProtocolError.

        Args:
            stage: Name of the stage that failed.
            reason: Description of the failure.
        """
        super().__init__(f"SMTP {stage} failed: {reason}", details={"stage": stage, "reason": reason})
        self.stage = stage
        self.reason = reason


class ConfigError(SendMailError):
    """Base exception for configuration file errors."""


class ConfigFileNotFoundError(ConfigError):
    """A configuration file explicitly requested does not exist."""


class ConfigFormatError(ConfigError):
    """A configuration file could not be parsed or has the wrong shape."""


__all__ = [
    "AttachmentError",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigInvariantError",
    "OptionError",
    "OptionTypeError",
    "ProtocolError",
    "SendMailError",
    "ValidationError",
]
