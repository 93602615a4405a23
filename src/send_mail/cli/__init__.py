"""Command-line interface for send_mail."""

from send_mail.cli.app import app

__all__ = ["app"]
