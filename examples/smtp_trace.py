#!/usr/bin/env python3
"""Demonstrate SMTP TRACE-level logging for debugging.

The SMTP dialogue (EHLO, STARTTLS, AUTH, envelope) is logged with the
``[SMTP]`` prefix; authentication payloads are masked.

Setup:
    1. Go to https://ethereal.email and create a free account
    2. Set environment variables:
       export ETHEREAL_USER="your-user@ethereal.email"
       export ETHEREAL_PASS="your-password"

Usage:
    python examples/smtp_trace.py

The command-line equivalent is ``send-mail -vvv ...``.
"""

from __future__ import annotations

import os
import sys

from send_mail import Email, Option, OptionId
from send_mail.logging import setup_logging

ETHEREAL_HOST = "smtp.ethereal.email"


def main() -> None:
    """Send one email to yourself with TRACE logging enabled."""
    user = os.getenv("ETHEREAL_USER")
    password = os.getenv("ETHEREAL_PASS")
    if not user or not password:
        print("Set ETHEREAL_USER and ETHEREAL_PASS first (see https://ethereal.email).")
        sys.exit(1)

    setup_logging("TRACE")

    result = Email(
        [
            Option(OptionId.SMTP_SERVER, ETHEREAL_HOST),
            Option(OptionId.SMTP_USERNAME, user),
            Option(OptionId.SMTP_PASSWORD, password),
            Option(OptionId.SMTP_TLS, True),
            Option(OptionId.SRC_EMAIL, user),
            Option(OptionId.DST_EMAIL, user),
            Option(OptionId.EMAIL_TITLE, "TRACE logging test from send-mail"),
            Option(OptionId.EMAIL_CONTENT, "Check the console for the SMTP session."),
        ]
    ).send()

    if not result.success:
        print(f"error: {result.error}")
        sys.exit(1)
    print("Email sent. View it at: https://ethereal.email/messages")


if __name__ == "__main__":  # pragma: no cover - manual example
    main()
