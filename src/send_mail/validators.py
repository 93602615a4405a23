"""Input validation for send_mail.

Validation functions raise on failure and report every violation they
find in a single :class:`~send_mail.exceptions.ValidationError`, never
just the first one.
"""

from __future__ import annotations

import logging
import re
from email.errors import HeaderParseError
from email.headerregistry import Address
from pathlib import Path
from typing import TYPE_CHECKING

from send_mail.exceptions import AttachmentError, ConfigInvariantError, ValidationError
from send_mail.options import OptionId

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from send_mail.options import Options

log = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

#: Pattern for accepted email addresses: ``local@label(.label)*.tld`` with a
#: 2 to 4 character top-level label. ASCII word characters only.
EMAIL_PATTERN = re.compile(r"[\w.-]+@(?:[\w-]+\.)+[\w-]{2,4}", re.ASCII)

#: Options that must be present before an email can be sent.
MANDATORY_OPTIONS: tuple[OptionId, ...] = (
    OptionId.SMTP_SERVER,
    OptionId.SRC_EMAIL,
    OptionId.DST_EMAIL,
    OptionId.EMAIL_TITLE,
    OptionId.EMAIL_CONTENT,
)

#: Width of the role column in invalid email reports.
_ROLE_WIDTH = 11


# ============================================================================
# Validation Functions
# ============================================================================


def check_email(email: str) -> bool:
    """Return True if ``email`` is a syntactically valid address.

    Examples:
        >>> check_email("john.doe@mail.example.com")
        True
        >>> check_email("john.doe@example")
        False
        >>> check_email("john@example.museum")
        False
    """
    return EMAIL_PATTERN.fullmatch(email) is not None


def _is_sendable(email: str) -> bool:
    """Return True if ``email`` passes :func:`check_email` and is a valid header address.

    The pattern accepts misplaced dots (``a..b@c.com``, ``.a@c.com``)
    that ``email.headerregistry`` refuses when the message is built.
    """
    if not check_email(email):
        return False
    try:
        Address(addr_spec=email)
    except (ValueError, HeaderParseError):
        return False
    return True


def validate_mandatory(options: Options, required: Iterable[OptionId] = MANDATORY_OPTIONS) -> None:
    """Ensure all required options are present.

    Args:
        options: Options container to inspect.
        required: Options that must be present.

    Raises:
        ValidationError: Listing every missing option, one per line.
    """
    present, missing = options.has_args(required)
    if present:
        return

    flags = [option_id.flag for option_id in missing]
    log.debug("Missing mandatory options: %s", ", ".join(flags))
    lines = ["missing mandatory argument:\n"]
    lines.extend(f"  --{flag}\n" for flag in flags)
    raise ValidationError("".join(lines), problems={"missing": flags})


def validate_emails(src_email: str, reply_email: str, dst_emails: Sequence[str]) -> None:
    """Check every address involved in a send.

    Each address must match :data:`EMAIL_PATTERN` and be accepted as a
    message header address. The reply address is only checked when it
    is not empty. Offending
    addresses are grouped by role and roles are reported in sorted order.

    Args:
        src_email: Sender address.
        reply_email: Reply-to address, may be empty.
        dst_emails: Recipient addresses.

    Raises:
        ValidationError: With one line per role listing every invalid address.

    Examples:
        >>> validate_emails("bad", "", ["ok@example.com", "worse"])
        Traceback (most recent call last):
        ...
        send_mail.exceptions.ValidationError: invalid emails
          dst_email  : ["worse"]
          src_email  : ["bad"]
    """
    invalid: dict[str, list[str]] = {}
    if not _is_sendable(src_email):
        invalid["src_email"] = [src_email]
    if reply_email and not _is_sendable(reply_email):
        invalid["reply_email"] = [reply_email]
    for email in dst_emails:
        if not _is_sendable(email):
            invalid.setdefault("dst_email", []).append(email)

    if not invalid:
        return

    roles = sorted(invalid)
    log.debug("Invalid addresses for roles: %s", ", ".join(roles))
    lines = ["invalid emails"]
    for role in roles:
        quoted = ", ".join(f'"{email}"' for email in invalid[role])
        lines.append(f"  {role:<{_ROLE_WIDTH}}: [{quoted}]")
    raise ValidationError("\n".join(lines), problems={role: invalid[role] for role in roles})


def validate_credentials(username: str | None, password: str | None) -> None:
    """Ensure username and password are given together or not at all.

    Raises:
        ConfigInvariantError: If only one of them is set.
    """
    if bool(username) != bool(password):
        raise ConfigInvariantError("--smtp-username must be defined with --smtp-password")


def validate_attachment(path: Path | str | None) -> None:
    """Ensure an attachment, when given, exists on disk.

    Raises:
        AttachmentError: If ``path`` is set but does not point to a file.
    """
    if not path:
        return
    if not Path(path).is_file():
        raise AttachmentError(f'invalid attached file: "{path}"', path)


__all__ = [
    "EMAIL_PATTERN",
    "MANDATORY_OPTIONS",
    "check_email",
    "validate_attachment",
    "validate_credentials",
    "validate_emails",
    "validate_mandatory",
]
