"""Compose and send a single email over SMTP.

Examples:
    >>> from send_mail import Email, Option, OptionId
    >>> mail = Email([
    ...     Option(OptionId.SMTP_SERVER, "smtp.example.com"),
    ...     Option(OptionId.SRC_EMAIL, "alice@example.com"),
    ...     Option(OptionId.DST_EMAIL, ["bob@example.com", "carol@example.com"]),
    ...     Option(OptionId.EMAIL_TITLE, "Hi"),
    ...     Option(OptionId.EMAIL_CONTENT, "Body"),
    ... ])
    >>> result = mail.send()  # doctest: +SKIP
"""

from send_mail.composer import Email, SendResult, SendStage, StageResult, StageStatus
from send_mail.exceptions import (
    AttachmentError,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigInvariantError,
    OptionError,
    OptionTypeError,
    ProtocolError,
    SendMailError,
    ValidationError,
)
from send_mail.meta import __version__
from send_mail.options import Option, OptionId, Options
from send_mail.transport import AuthMethod, SMTPCredentials, SMTPTransport, select_transport
from send_mail.validators import check_email

__all__ = [
    "AttachmentError",
    "AuthMethod",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigInvariantError",
    "Email",
    "Option",
    "OptionError",
    "OptionId",
    "OptionTypeError",
    "Options",
    "ProtocolError",
    "SMTPCredentials",
    "SMTPTransport",
    "SendMailError",
    "SendResult",
    "SendStage",
    "StageResult",
    "StageStatus",
    "ValidationError",
    "__version__",
    "check_email",
    "select_transport",
]
