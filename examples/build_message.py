"""Compose a message from typed options and print it without sending."""

from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

from send_mail.message import EmailRequest, attach_file, build_message
from send_mail.options import Option, OptionId, Options
from send_mail.validators import validate_emails, validate_mandatory


def build_and_print() -> None:
    """Validate options, build the MIME message with an attachment and print it."""
    with TemporaryDirectory() as tmp_dir:
        report = Path(tmp_dir) / "daily-report.txt"
        report.write_text("Daily metrics: 42 conversions", encoding="utf-8")

        options = Options(
            [
                Option(OptionId.SMTP_SERVER, "smtp.example.com"),
                Option(OptionId.SRC_NAME, "Reports"),
                Option(OptionId.SRC_EMAIL, "reports@example.com"),
                Option(OptionId.DST_NAME, ["Ops", "Finance"]),
                Option(OptionId.DST_EMAIL, ["ops@example.com", "finance@example.com"]),
                Option(OptionId.EMAIL_TITLE, "Daily metrics report"),
                Option(OptionId.EMAIL_CONTENT, "Please find the report attached."),
                Option(OptionId.EMAIL_FILE, report),
            ]
        )
        validate_mandatory(options)

        request = EmailRequest.from_options(options)
        validate_emails(request.source.email, "", [r.email for r in request.recipients])

        message = build_message(request)
        if request.attachment is not None:
            attach_file(message, request.attachment)
        print(message.as_string())


if __name__ == "__main__":  # pragma: no cover - manual example
    build_and_print()
