"""Tests for message composition."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from send_mail.exceptions import AttachmentError
from send_mail.message import (
    ATTACHMENT_MAINTYPE,
    ATTACHMENT_SUBTYPE,
    EmailRequest,
    MailAddress,
    attach_file,
    build_message,
    pair_recipients,
)
from send_mail.options import Option, Options

MakeOptions = Callable[..., list[Option]]


class TestMailAddress:
    """Formatting of mailbox identities."""

    def test_with_name(self) -> None:
        """Named addresses use the display-name form."""
        assert str(MailAddress("Alice", "a@b.co")) == "Alice <a@b.co>"

    def test_without_name(self) -> None:
        """An empty name yields the bare address."""
        assert str(MailAddress("", "a@b.co")) == "a@b.co"

    def test_to_header(self) -> None:
        """The header form exposes name and address."""
        header = MailAddress("Alice", "a@b.co").to_header()
        assert header.display_name == "Alice"
        assert header.addr_spec == "a@b.co"


class TestPairRecipients:
    """Pairing of recipient names and addresses."""

    def test_same_length_pairs_in_order(self) -> None:
        """Names are applied positionally."""
        recipients = pair_recipients(["Bob", "Carol"], ["c@d.co", "e@f.co"])
        assert recipients == (MailAddress("Bob", "c@d.co"), MailAddress("Carol", "e@f.co"))

    @pytest.mark.parametrize("names", [["Bob"], ["Bob", "Carol", "Dave"]])
    def test_mismatch_drops_every_name(self, names: list[str]) -> None:
        """Any count mismatch leaves all recipients unnamed."""
        recipients = pair_recipients(names, ["c@d.co", "e@f.co"])
        assert recipients == (MailAddress("", "c@d.co"), MailAddress("", "e@f.co"))

    def test_no_names(self) -> None:
        """Without names every recipient is unnamed."""
        assert pair_recipients((), ["c@d.co"]) == (MailAddress("", "c@d.co"),)


class TestEmailRequest:
    """Extraction of a request from options."""

    def test_minimal_request(self, make_options: MakeOptions) -> None:
        """Optional fields fall back to their zero values."""
        request = EmailRequest.from_options(Options(make_options()))
        assert request.source == MailAddress("", "a@b.co")
        assert request.reply is None
        assert request.reply_to == request.source
        assert request.recipients == (MailAddress("", "c@d.co"),)
        assert request.subject == "Hi"
        assert request.content == "Body"
        assert request.attachment is None

    def test_reply_identity(self, make_options: MakeOptions) -> None:
        """Reply-to is used when both name and address are set."""
        request = EmailRequest.from_options(
            Options(make_options(src_name="Alice", reply_name="Support", reply_email="help@b.co"))
        )
        assert request.reply_to == MailAddress("Support", "help@b.co")

    @pytest.mark.parametrize(
        "overrides",
        [{"reply_email": "help@b.co"}, {"reply_name": "Support"}],
        ids=["address only", "name only"],
    )
    def test_partial_reply_falls_back_to_source(self, make_options: MakeOptions, overrides: dict[str, str]) -> None:
        """A half reply identity is ignored."""
        request = EmailRequest.from_options(Options(make_options(src_name="Alice", **overrides)))
        assert request.reply is None
        assert request.reply_to == MailAddress("Alice", "a@b.co")


class TestBuildMessage:
    """MIME headers and body."""

    def test_headers(self, make_options: MakeOptions) -> None:
        """From, Reply-To, To and Subject are set from the request."""
        request = EmailRequest.from_options(
            Options(
                make_options(
                    src_name="Alice",
                    dst_name=["Bob", "Carol"],
                    dst_email=["c@d.co", "e@f.co"],
                )
            )
        )
        message = build_message(request)

        assert str(message["From"]) == "Alice <a@b.co>"
        assert str(message["Reply-To"]) == "Alice <a@b.co>"
        assert str(message["To"]) == "Bob <c@d.co>, Carol <e@f.co>"
        assert str(message["Subject"]) == "Hi"

    def test_body(self, make_options: MakeOptions) -> None:
        """The content is the plain text body."""
        message = build_message(EmailRequest.from_options(Options(make_options(email_content="Hello there"))))
        assert message.get_content_type() == "text/plain"
        assert message.get_content().strip() == "Hello there"

    def test_unnamed_recipients(self, make_options: MakeOptions) -> None:
        """Mismatched names leave bare addresses in To."""
        request = EmailRequest.from_options(
            Options(make_options(dst_name=["Bob"], dst_email=["c@d.co", "e@f.co"]))
        )
        assert str(build_message(request)["To"]) == "c@d.co, e@f.co"

    def test_explicit_reply_to(self, make_options: MakeOptions) -> None:
        """An explicit reply identity overrides the sender."""
        request = EmailRequest.from_options(Options(make_options(reply_name="Support", reply_email="help@b.co")))
        assert str(build_message(request)["Reply-To"]) == "Support <help@b.co>"


class TestAttachFile:
    """Attachment handling."""

    def test_attach_existing_file(self, make_options: MakeOptions, tmp_path: Path) -> None:
        """The file is attached under its name with its raw bytes."""
        path = tmp_path / "report.csv"
        path.write_bytes(b"a,b\n1,2\n")
        message = build_message(EmailRequest.from_options(Options(make_options())))

        attach_file(message, path)

        attachments = list(message.iter_attachments())
        assert len(attachments) == 1
        part = attachments[0]
        assert part.get_filename() == "report.csv"
        assert part.get_content_type() == f"{ATTACHMENT_MAINTYPE}/{ATTACHMENT_SUBTYPE}"
        assert part.get_content() == b"a,b\n1,2\n"
        assert message.is_multipart()

    def test_missing_file(self, make_options: MakeOptions, tmp_path: Path) -> None:
        """An unreadable file raises AttachmentError naming the path."""
        path = tmp_path / "missing.csv"
        message = build_message(EmailRequest.from_options(Options(make_options())))

        with pytest.raises(AttachmentError) as excinfo:
            attach_file(message, path)

        assert excinfo.value.message == f'can\'t attach file: "{path}"'
        assert excinfo.value.path == path
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_directory_is_rejected(self, make_options: MakeOptions, tmp_path: Path) -> None:
        """A directory cannot be attached."""
        message = build_message(EmailRequest.from_options(Options(make_options())))
        with pytest.raises(AttachmentError):
            attach_file(message, tmp_path)
