"""Entry point for ``python -m send_mail``."""

from send_mail.cli.app import app
from send_mail.meta import __app_name__


def main() -> None:
    """Run the command-line application."""
    app(prog_name=__app_name__)


if __name__ == "__main__":
    main()
