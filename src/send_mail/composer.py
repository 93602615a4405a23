"""Mail composer: validate, build and submit exactly one email.

:class:`Email` runs a fixed sequence of stages::

    validate_mandatory -> validate_syntax -> build -> attach
        -> connect -> authenticate -> submit

Each executed stage produces a :class:`StageResult`. The first failing
stage stops the sequence; :meth:`Email.send` never raises and reports
the outcome as a :class:`SendResult`.

Examples:
    >>> from send_mail.options import Option, OptionId
    >>> mail = Email([
    ...     Option(OptionId.SMTP_SERVER, "smtp.example.com"),
    ...     Option(OptionId.SRC_EMAIL, "a@b.co"),
    ...     Option(OptionId.DST_EMAIL, "c@d.co"),
    ...     Option(OptionId.EMAIL_TITLE, "Hi"),
    ...     Option(OptionId.EMAIL_CONTENT, "Body"),
    ... ])
    >>> result = mail.send()  # doctest: +SKIP
    >>> result.success  # doctest: +SKIP
    True
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from send_mail.exceptions import SendMailError
from send_mail.logging import SUCCESS_LEVEL
from send_mail.message import EmailRequest, attach_file, build_message
from send_mail.options import OptionId, Options
from send_mail.transport import DEFAULT_TIMEOUT, SMTPTransport, select_transport, session_trace
from send_mail.validators import validate_emails, validate_mandatory

if TYPE_CHECKING:
    import smtplib
    from collections.abc import Iterable
    from email.message import EmailMessage

    from send_mail.options import Option

log = logging.getLogger(__name__)


class SendStage(str, Enum):
    """Stages of a send, in execution order."""

    VALIDATE_MANDATORY = "validate_mandatory"
    VALIDATE_SYNTAX = "validate_syntax"
    BUILD = "build"
    ATTACH = "attach"
    CONNECT = "connect"
    AUTHENTICATE = "authenticate"
    SUBMIT = "submit"


class StageStatus(str, Enum):
    """Result status of a stage.

    Attributes:
        SUCCESS: Stage completed.
        FAILED: Stage raised an error; later stages do not run.
        SKIPPED: Stage had nothing to do (no attachment).
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class StageResult:
    """Result of a single stage.

    Attributes:
        stage: Stage that ran.
        status: Outcome of the stage.
        duration: Execution duration in seconds.
        error: Error message if the stage failed.
        error_kind: Exception class name if the stage failed.
        exception: The exception raised by the stage, if any.
    """

    stage: SendStage
    status: StageStatus
    duration: float = 0.0
    error: str | None = None
    error_kind: str | None = None
    exception: BaseException | None = field(default=None, repr=False)


@dataclass(slots=True)
class SendResult:
    """Aggregate result of :meth:`Email.send`.

    Attributes:
        results: Results of the executed stages, in order.
        duration: Total duration in seconds.

    Examples:
        >>> SendResult().success
        False
    """

    results: list[StageResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def failed(self) -> StageResult | None:
        """Return the failing stage result, if any."""
        for result in self.results:
            if result.status is StageStatus.FAILED:
                return result
        return None

    @property
    def success(self) -> bool:
        """Whether the message was submitted."""
        return self.failed is None and any(r.stage is SendStage.SUBMIT for r in self.results)

    @property
    def stage(self) -> SendStage | None:
        """Return the stage that failed, if any."""
        failed = self.failed
        return failed.stage if failed is not None else None

    @property
    def error(self) -> str:
        """Return the error message, empty on success."""
        failed = self.failed
        return (failed.error or "") if failed is not None else ""

    @property
    def error_kind(self) -> str | None:
        """Return the exception class name of the failure, if any."""
        failed = self.failed
        return failed.error_kind if failed is not None else None

    def raise_for_error(self) -> None:
        """Re-raise the error captured by the failing stage.

        Raises:
            SendMailError: The captured error, or a generic one wrapping it.
        """
        failed = self.failed
        if failed is None:
            return
        if isinstance(failed.exception, SendMailError):
            raise failed.exception
        raise SendMailError(failed.error or "send failed", details={"stage": failed.stage.value}) from failed.exception


StageObserver = Callable[[StageResult], None]
TransportFactory = Callable[..., SMTPTransport]


@dataclass(slots=True)
class _SendState:
    """Values passed from one stage to the next."""

    request: EmailRequest | None = None
    message: EmailMessage | None = None
    transport: SMTPTransport | None = None
    client: smtplib.SMTP | None = None


class _Skip(Exception):
    """Raised by a stage that has nothing to do."""


def _stage_out_of_order(stage: SendStage) -> SendMailError:
    """Return the error for a stage run before the stages it depends on."""
    return SendMailError(f"stage '{stage.value}' run before its inputs were ready", details={"stage": stage.value})


class Email:
    """Compose and send one email from typed options.

    Args:
        options: Options container, or the options to build it from.
        transport_factory: Builds the transport from the server, TLS flag
            and credentials (see :func:`~send_mail.transport.select_transport`).
        timeout: Socket timeout in seconds passed to the transport.
        on_stage: Observer called with each :class:`StageResult`.

    Raises:
        OptionError: If ``options`` repeats an option.
        OptionTypeError: If an option value has the wrong type.
    """

    def __init__(
        self,
        options: Options | Iterable[Option],
        *,
        transport_factory: TransportFactory = select_transport,
        timeout: float = DEFAULT_TIMEOUT,
        on_stage: StageObserver | None = None,
    ) -> None:
        self._options = options if isinstance(options, Options) else Options(options)
        self._transport_factory = transport_factory
        self._timeout = timeout
        self._on_stage = on_stage

    @property
    def options(self) -> Options:
        """Return the options container."""
        return self._options

    def send(self) -> SendResult:
        """Validate, build and submit the email.

        Never raises: every error, expected or not, is captured in the
        result of the stage that raised it.

        Returns:
            The aggregated result.
        """
        outcome = SendResult()
        state = _SendState()
        start = time.monotonic()
        stages: dict[SendStage, Callable[[_SendState], None]] = {
            SendStage.VALIDATE_MANDATORY: self._validate_mandatory,
            SendStage.VALIDATE_SYNTAX: self._validate_syntax,
            SendStage.BUILD: self._build,
            SendStage.ATTACH: self._attach,
            SendStage.CONNECT: self._connect,
            SendStage.AUTHENTICATE: self._authenticate,
            SendStage.SUBMIT: self._submit,
        }

        try:
            for stage, action in stages.items():
                result = self._run_stage(stage, action, state)
                outcome.results.append(result)
                self._notify(result)
                if result.status is StageStatus.FAILED:
                    break
        finally:
            if state.transport is not None and state.client is not None:
                state.transport.close(state.client)

        outcome.duration = time.monotonic() - start
        if outcome.success:
            log.log(SUCCESS_LEVEL, "Email sent in %.3fs", outcome.duration)
        else:
            log.info("Email not sent: stage '%s' failed", outcome.stage.value if outcome.stage else "?")
        return outcome

    def _run_stage(
        self,
        stage: SendStage,
        action: Callable[[_SendState], None],
        state: _SendState,
    ) -> StageResult:
        """Execute one stage and capture its outcome."""
        start = time.monotonic()
        try:
            action(state)
        except _Skip:
            log.debug("Stage '%s' skipped", stage.value)
            return StageResult(stage=stage, status=StageStatus.SKIPPED)
        except SendMailError as exc:
            duration = time.monotonic() - start
            log.debug("Stage '%s' failed: %s", stage.value, type(exc).__name__)
            return StageResult(
                stage=stage,
                status=StageStatus.FAILED,
                duration=duration,
                error=exc.message,
                error_kind=type(exc).__name__,
                exception=exc,
            )
        except Exception as exc:
            duration = time.monotonic() - start
            log.exception("Stage '%s' unexpected error", stage.value)
            return StageResult(
                stage=stage,
                status=StageStatus.FAILED,
                duration=duration,
                error=str(exc) or type(exc).__name__,
                error_kind=type(exc).__name__,
                exception=exc,
            )

        duration = time.monotonic() - start
        log.debug("Stage '%s' -> success (%.3fs)", stage.value, duration)
        return StageResult(stage=stage, status=StageStatus.SUCCESS, duration=duration)

    def _notify(self, result: StageResult) -> None:
        """Forward ``result`` to the observer; observer errors are only logged."""
        if self._on_stage is None:
            return
        try:
            self._on_stage(result)
        except Exception:  # pylint: disable=broad-except
            log.exception("Stage observer failed for '%s'", result.stage.value)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _validate_mandatory(self, state: _SendState) -> None:
        validate_mandatory(self._options)

    def _validate_syntax(self, state: _SendState) -> None:
        request = EmailRequest.from_options(self._options)
        validate_emails(
            request.source.email,
            self._options.get_arg(OptionId.REPLY_EMAIL),
            [recipient.email for recipient in request.recipients],
        )
        state.request = request

    def _build(self, state: _SendState) -> None:
        if state.request is None:
            raise _stage_out_of_order(SendStage.BUILD)
        state.message = build_message(state.request)

    def _attach(self, state: _SendState) -> None:
        if state.request is None or state.message is None:
            raise _stage_out_of_order(SendStage.ATTACH)
        if state.request.attachment is None:
            raise _Skip
        attach_file(state.message, state.request.attachment)

    def _connect(self, state: _SendState) -> None:
        transport = self._transport_factory(
            self._options.get_arg(OptionId.SMTP_SERVER),
            tls=self._options.get_arg(OptionId.SMTP_TLS),
            username=self._options.get_arg(OptionId.SMTP_USERNAME),
            password=self._options.get_arg(OptionId.SMTP_PASSWORD),
            timeout=self._timeout,
        )
        log.info("Using %r", transport)
        state.transport = transport
        with session_trace():
            state.client = transport.connect()

    def _authenticate(self, state: _SendState) -> None:
        if state.transport is None or state.client is None:
            raise _stage_out_of_order(SendStage.AUTHENTICATE)
        with session_trace():
            state.transport.authenticate(state.client)

    def _submit(self, state: _SendState) -> None:
        if state.transport is None or state.client is None or state.message is None:
            raise _stage_out_of_order(SendStage.SUBMIT)
        with session_trace():
            state.transport.submit(state.client, state.message)


__all__ = [
    "Email",
    "SendResult",
    "SendStage",
    "StageObserver",
    "StageResult",
    "StageStatus",
]
