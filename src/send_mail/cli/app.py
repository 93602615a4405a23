"""``send-mail`` command.

Flags override values from the configuration file (see
:mod:`send_mail.config`). Exit codes: 0 when the email was sent, 1 on a
pre-flight or send failure, 2 on a usage error.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer

from send_mail.cli.common import console, exit_error, print_status
from send_mail.composer import Email, StageResult
from send_mail.config import load_config
from send_mail.exceptions import SendMailError
from send_mail.logging import setup_logging, verbosity_to_level
from send_mail.meta import __app_name__, __description__, __version__
from send_mail.options import Options
from send_mail.transport import DEFAULT_TIMEOUT
from send_mail.validators import validate_attachment, validate_credentials

if TYPE_CHECKING:
    from box import Box

log = logging.getLogger(__name__)

app = typer.Typer(
    name=__app_name__,
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print the version and exit when ``--version`` is given."""
    if value:
        console.print(f"{__app_name__} {__version__}", highlight=False)
        raise typer.Exit()


def _log_stage(result: StageResult) -> None:
    """Report each stage of the send in the log."""
    if result.error:
        log.info("Stage %s -> %s (%s)", result.stage.value, result.status.value, result.error_kind)
    else:
        log.info("Stage %s -> %s (%.3fs)", result.stage.value, result.status.value, result.duration)


def _pick(cli_value: Any, config_value: Any) -> Any:
    """Return the command-line value unless it was omitted."""
    return cli_value if cli_value is not None else config_value


def _collect_options(config: Box, **cli: Any) -> dict[str, Any]:
    """Merge command-line values over configuration values."""
    return {
        "smtp_server": _pick(cli["smtp_server"], config.smtp.server),
        "smtp_username": _pick(cli["smtp_username"], config.smtp.username),
        "smtp_password": _pick(cli["smtp_password"], config.smtp.password),
        # The flag can only switch TLS on; the config value is type-checked by Option
        "smtp_tls": True if cli["smtp_tls"] else config.smtp.tls,
        "src_name": _pick(cli["src_name"], config.sender.name),
        "src_email": _pick(cli["src_email"], config.sender.email),
        "reply_name": _pick(cli["reply_name"], config.sender.reply_name),
        "reply_email": _pick(cli["reply_email"], config.sender.reply_email),
        "dst_name": cli["dst_name"] or None,
        "dst_email": cli["dst_email"],
        "email_title": cli["email_title"],
        "email_content": cli["email_content"],
        "email_file": cli["email_file"],
    }


@app.command(name="send", no_args_is_help=True)
def send(  # noqa: PLR0913
    dst_email: Annotated[
        list[str],
        typer.Option("--dst-email", "-d", help="Destination of the email (repeat for several recipients)."),
    ],
    email_title: Annotated[str, typer.Option("--email-title", "-e", help="Set the email title.")],
    email_content: Annotated[str, typer.Option("--email-content", "-c", help="Set the email content.")],
    smtp_server: Annotated[str | None, typer.Option("--smtp-server", "-x", help="SMTP server address.")] = None,
    smtp_username: Annotated[
        str | None, typer.Option("--smtp-username", "-u", help="Username for the SMTP server.")
    ] = None,
    smtp_password: Annotated[
        str | None, typer.Option("--smtp-password", "-p", help="Password for the SMTP server.")
    ] = None,
    smtp_tls: Annotated[bool, typer.Option("--smtp-tls", "-t", help="Activate STARTTLS (port 587).")] = False,
    src_name: Annotated[str | None, typer.Option("--src-name", "-n", help="Name of the source address.")] = None,
    src_email: Annotated[str | None, typer.Option("--src-email", "-s", help="Source of the email.")] = None,
    reply_name: Annotated[str | None, typer.Option("--reply-name", help="Name of the reply-to address.")] = None,
    reply_email: Annotated[str | None, typer.Option("--reply-email", help="Reply-to address.")] = None,
    dst_name: Annotated[
        list[str] | None,
        typer.Option("--dst-name", "-m", help="Name of the destination address (repeat, same order as --dst-email)."),
    ] = None,
    email_file: Annotated[
        Path | None, typer.Option("--email-file", "-f", help="Attach a file to the email content.")
    ] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="Configuration file.")] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase log detail (-v, -vv, -vvv).")
    ] = 0,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Send an email through an SMTP server."""
    try:
        config = load_config(config_path)
        setup_logging(verbosity_to_level(verbose) or config.logging.level or "WARNING")
        timeout = float(config.smtp.timeout or DEFAULT_TIMEOUT)
    except (SendMailError, TypeError, ValueError) as exc:
        exit_error(str(exc))

    values = _collect_options(
        config,
        smtp_server=smtp_server,
        smtp_username=smtp_username,
        smtp_password=smtp_password,
        smtp_tls=smtp_tls,
        src_name=src_name,
        src_email=src_email,
        reply_name=reply_name,
        reply_email=reply_email,
        dst_name=dst_name,
        dst_email=dst_email,
        email_title=email_title,
        email_content=email_content,
        email_file=email_file,
    )

    try:
        validate_credentials(values["smtp_username"], values["smtp_password"])
        validate_attachment(values["email_file"])
        options = Options.from_mapping(values)
    except SendMailError as exc:
        exit_error(exc.message)

    result = Email(options, timeout=timeout, on_stage=_log_stage).send()
    print_status("sending email", result.success)
    if not result.success:
        exit_error(result.error)


__all__ = ["app", "send"]
