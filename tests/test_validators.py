"""Tests for send_mail input validators."""

from __future__ import annotations

from pathlib import Path

import pytest

from send_mail.exceptions import AttachmentError, ConfigInvariantError, ValidationError
from send_mail.options import Option, OptionId, Options
from send_mail.validators import (
    MANDATORY_OPTIONS,
    check_email,
    validate_attachment,
    validate_credentials,
    validate_emails,
    validate_mandatory,
)

# ============================================================================
# check_email
# ============================================================================


@pytest.mark.parametrize(
    "email",
    [
        "a@b.co",
        "john.doe@mail.example.com",
        "first-last@sub-domain.example.info",
        "under_score@example.org",
        "x@a.b.c.de",
    ],
)
def test_check_email_accepts_valid_addresses(email: str) -> None:
    """Word characters, dots and hyphens with a 2-4 char TLD are valid."""
    assert check_email(email) is True


@pytest.mark.parametrize(
    "email",
    [
        "plainaddress",
        "@example.com",
        "a@example",
        "a@.com",
        "a@example.c",
        "a@example.museum",
        "a b@example.com",
        "a@b.co\n",
        "",
    ],
    ids=[
        "no at",
        "empty local",
        "no domain label",
        "empty domain label",
        "tld too short",
        "tld too long",
        "space",
        "trailing newline",
        "empty",
    ],
)
def test_check_email_rejects_invalid_addresses(email: str) -> None:
    """Addresses outside the pattern are refused."""
    assert check_email(email) is False


# ============================================================================
# validate_mandatory
# ============================================================================


def test_validate_mandatory_passes_when_complete() -> None:
    """No error when every mandatory option is present."""
    options = Options(
        [
            Option(OptionId.SMTP_SERVER, "smtp.example.com"),
            Option(OptionId.SRC_EMAIL, "a@b.co"),
            Option(OptionId.DST_EMAIL, "c@d.co"),
            Option(OptionId.EMAIL_TITLE, "Hi"),
            Option(OptionId.EMAIL_CONTENT, "Body"),
        ]
    )
    validate_mandatory(options)


def test_validate_mandatory_lists_every_missing_option() -> None:
    """All missing options are reported, not just the first."""
    with pytest.raises(ValidationError) as excinfo:
        validate_mandatory(Options([Option(OptionId.SRC_EMAIL, "a@b.co")]))

    assert str(excinfo.value) == (
        "missing mandatory argument:\n  --smtp-server\n  --dst-email\n  --email-title\n  --email-content\n"
    )
    assert excinfo.value.problems == {"missing": ("smtp-server", "dst-email", "email-title", "email-content")}


def test_mandatory_options_are_fixed() -> None:
    """Server, sender, recipients, title and content are required."""
    assert MANDATORY_OPTIONS == (
        OptionId.SMTP_SERVER,
        OptionId.SRC_EMAIL,
        OptionId.DST_EMAIL,
        OptionId.EMAIL_TITLE,
        OptionId.EMAIL_CONTENT,
    )


# ============================================================================
# validate_emails
# ============================================================================


def test_validate_emails_passes_valid_addresses() -> None:
    """Valid addresses raise nothing."""
    validate_emails("a@b.co", "reply@b.co", ["c@d.co", "e@f.co"])


def test_validate_emails_aggregates_all_roles() -> None:
    """Invalid source, reply and recipient are reported together, by role."""
    with pytest.raises(ValidationError) as excinfo:
        validate_emails("bad-src", "bad-reply", ["ok@d.co", "bad-dst"])

    assert str(excinfo.value) == (
        "invalid emails\n"
        '  dst_email  : ["bad-dst"]\n'
        '  reply_email: ["bad-reply"]\n'
        '  src_email  : ["bad-src"]'
    )
    assert excinfo.value.problems == {
        "dst_email": ("bad-dst",),
        "reply_email": ("bad-reply",),
        "src_email": ("bad-src",),
    }


def test_validate_emails_lists_every_bad_recipient() -> None:
    """Every offending recipient is listed."""
    with pytest.raises(ValidationError) as excinfo:
        validate_emails("a@b.co", "", ["x", "ok@d.co", "y"])

    assert excinfo.value.problems == {"dst_email": ("x", "y")}
    assert '["x", "y"]' in str(excinfo.value)


def test_validate_emails_rejects_header_invalid_addresses() -> None:
    """Addresses matching the pattern but refused in a header are invalid."""
    assert check_email("a..b@c.com") is True

    with pytest.raises(ValidationError) as excinfo:
        validate_emails(".src@b.co", "reply.@b.co", ["a..b@c.com", "ok@d.co"])

    assert excinfo.value.problems == {
        "dst_email": ("a..b@c.com",),
        "reply_email": ("reply.@b.co",),
        "src_email": (".src@b.co",),
    }


def test_validate_emails_ignores_empty_reply() -> None:
    """An empty reply address is not validated."""
    validate_emails("a@b.co", "", ["c@d.co"])


# ============================================================================
# Pre-flight checks
# ============================================================================


@pytest.mark.parametrize(("username", "password"), [("user", ""), ("", "pass"), ("user", None), (None, "pass")])
def test_validate_credentials_rejects_half_pairs(username: str | None, password: str | None) -> None:
    """Username and password go together."""
    with pytest.raises(ConfigInvariantError, match="--smtp-username must be defined with --smtp-password"):
        validate_credentials(username, password)


@pytest.mark.parametrize(("username", "password"), [("user", "pass"), ("", ""), (None, None)])
def test_validate_credentials_accepts_pairs(username: str | None, password: str | None) -> None:
    """Both or neither is fine."""
    validate_credentials(username, password)


def test_validate_attachment_accepts_none() -> None:
    """No attachment, nothing to check."""
    validate_attachment(None)


def test_validate_attachment_accepts_existing_file(tmp_path: Path) -> None:
    """An existing file passes."""
    path = tmp_path / "report.csv"
    path.write_text("data", encoding="utf-8")
    validate_attachment(path)


def test_validate_attachment_rejects_missing_file(tmp_path: Path) -> None:
    """A missing file raises AttachmentError with its path."""
    path = tmp_path / "missing.csv"
    with pytest.raises(AttachmentError, match="invalid attached file") as excinfo:
        validate_attachment(path)
    assert excinfo.value.path == path
