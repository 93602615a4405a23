"""Email request model and MIME message construction.

The :class:`EmailRequest` is assembled from an options container at send
time and turned into a standard library :class:`~email.message.EmailMessage`
by :func:`build_message`. The optional attachment is added separately by
:func:`attach_file` so that file errors are reported on their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from email.headerregistry import Address
from email.message import EmailMessage
from typing import TYPE_CHECKING

from send_mail.exceptions import AttachmentError
from send_mail.options import OptionId

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from send_mail.options import Options

log = logging.getLogger(__name__)

#: MIME type used for attachments.
ATTACHMENT_MAINTYPE = "application"
ATTACHMENT_SUBTYPE = "octet-stream"


@dataclass(frozen=True, slots=True)
class MailAddress:
    """Display name and address of a mailbox.

    Attributes:
        name: Display name, may be empty.
        email: Email address.

    Examples:
        >>> str(MailAddress("Alice", "alice@example.com"))
        'Alice <alice@example.com>'
        >>> str(MailAddress("", "bob@example.com"))
        'bob@example.com'
    """

    name: str
    email: str

    def to_header(self) -> Address:
        """Return the address as an ``email.headerregistry.Address``."""
        return Address(display_name=self.name, addr_spec=self.email)

    def __str__(self) -> str:
        return str(self.to_header())


def pair_recipients(names: Sequence[str], emails: Sequence[str]) -> tuple[MailAddress, ...]:
    """Pair recipient names with recipient addresses.

    Names are applied only when both lists have exactly the same length.
    On any mismatch every recipient is left without a display name.

    Examples:
        >>> [str(a) for a in pair_recipients(["Bob"], ["bob@example.com"])]
        ['Bob <bob@example.com>']
        >>> [str(a) for a in pair_recipients(["Bob"], ["bob@example.com", "eve@example.com"])]
        ['bob@example.com', 'eve@example.com']
    """
    if len(names) == len(emails):
        return tuple(MailAddress(name, email) for name, email in zip(names, emails))
    if names:
        log.debug("Ignoring %d recipient names for %d addresses", len(names), len(emails))
    return tuple(MailAddress("", email) for email in emails)


@dataclass(frozen=True, slots=True)
class EmailRequest:
    """Everything needed to compose one email.

    Attributes:
        source: Sender identity.
        reply: Explicit reply-to identity, or None to reply to the sender.
        recipients: Destination identities.
        subject: Email subject.
        content: Plain text body.
        attachment: Path of the file to attach, or None.
    """

    source: MailAddress
    reply: MailAddress | None
    recipients: tuple[MailAddress, ...]
    subject: str
    content: str
    attachment: Path | None = None

    @property
    def reply_to(self) -> MailAddress:
        """Return the effective reply-to identity."""
        return self.reply if self.reply is not None else self.source

    @classmethod
    def from_options(cls, options: Options) -> EmailRequest:
        """Extract a request from an options container.

        Absent optional options fall back to their zero values. A reply
        identity is kept only when both reply name and reply email are set.

        Args:
            options: Validated options container.

        Returns:
            The email request.
        """
        reply_name: str = options.get_arg(OptionId.REPLY_NAME)
        reply_email: str = options.get_arg(OptionId.REPLY_EMAIL)
        reply = MailAddress(reply_name, reply_email) if reply_name and reply_email else None

        return cls(
            source=MailAddress(options.get_arg(OptionId.SRC_NAME), options.get_arg(OptionId.SRC_EMAIL)),
            reply=reply,
            recipients=pair_recipients(options.get_arg(OptionId.DST_NAME), options.get_arg(OptionId.DST_EMAIL)),
            subject=options.get_arg(OptionId.EMAIL_TITLE),
            content=options.get_arg(OptionId.EMAIL_CONTENT),
            attachment=options.get_arg(OptionId.EMAIL_FILE),
        )


def build_message(request: EmailRequest) -> EmailMessage:
    """Compose the MIME message for ``request`` without its attachment.

    Args:
        request: Email request.

    Returns:
        A plain text ``EmailMessage`` with From, Reply-To, To and Subject set.
    """
    message = EmailMessage()
    message["From"] = request.source.to_header()
    message["Reply-To"] = request.reply_to.to_header()
    message["To"] = tuple(recipient.to_header() for recipient in request.recipients)
    message["Subject"] = request.subject
    message.set_content(request.content)
    log.debug("Built message for %d recipients", len(request.recipients))
    return message


def attach_file(message: EmailMessage, path: Path) -> None:
    """Attach the file at ``path`` to ``message`` under its file name.

    The file is read in binary mode and closed before returning.

    Args:
        message: Message to extend.
        path: File to attach.

    Raises:
        AttachmentError: If the file cannot be opened or read.
    """
    try:
        with path.open("rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise AttachmentError(f'can\'t attach file: "{path}"', path) from exc

    message.add_attachment(
        data,
        maintype=ATTACHMENT_MAINTYPE,
        subtype=ATTACHMENT_SUBTYPE,
        filename=path.name,
    )
    log.debug("Attached %s (%d bytes)", path.name, len(data))


__all__ = [
    "ATTACHMENT_MAINTYPE",
    "ATTACHMENT_SUBTYPE",
    "EmailRequest",
    "MailAddress",
    "attach_file",
    "build_message",
    "pair_recipients",
]
