"""Typed options container for a single email send.

Every option is identified by a member of the closed :class:`OptionId`
enumeration and carries exactly one value type. The type is checked when
the :class:`Option` is built, so a container never holds a value of the
wrong type:

- text: ``smtp_server``, ``smtp_username``, ``smtp_password``, ``src_name``,
  ``src_email``, ``reply_name``, ``reply_email``, ``email_title``,
  ``email_content``
- flag: ``smtp_tls``
- text list: ``dst_name``, ``dst_email`` (a single string is accepted)
- path: ``email_file``

Examples:
    >>> opts = Options([
    ...     Option(OptionId.SMTP_SERVER, "smtp.example.com"),
    ...     Option(OptionId.DST_EMAIL, "user@example.com"),
    ... ])
    >>> opts.has_arg(OptionId.SMTP_SERVER)
    True
    >>> opts.get_arg(OptionId.DST_EMAIL)
    ('user@example.com',)
    >>> opts.get_arg(OptionId.SMTP_TLS)
    False
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from send_mail.exceptions import OptionError, OptionTypeError


class OptionId(str, Enum):
    """Identifier of a send option.

    The value is the Python-side name; :attr:`flag` gives the
    command-line spelling used in error reports.
    """

    SMTP_SERVER = "smtp_server"
    SMTP_USERNAME = "smtp_username"
    SMTP_PASSWORD = "smtp_password"
    SMTP_TLS = "smtp_tls"
    SRC_NAME = "src_name"
    SRC_EMAIL = "src_email"
    REPLY_NAME = "reply_name"
    REPLY_EMAIL = "reply_email"
    DST_NAME = "dst_name"
    DST_EMAIL = "dst_email"
    EMAIL_TITLE = "email_title"
    EMAIL_CONTENT = "email_content"
    EMAIL_FILE = "email_file"

    @property
    def flag(self) -> str:
        """Return the command-line name of the option (``smtp-server``)."""
        return self.value.replace("_", "-")

    @classmethod
    def from_name(cls, name: str | OptionId) -> OptionId:
        """Resolve an option from its id, its value or its flag name.

        Args:
            name: ``OptionId`` member, ``"smtp_server"`` or ``"smtp-server"``.

        Returns:
            The matching option identifier.

        Raises:
            OptionError: If the name does not match any option.

        Examples:
            >>> OptionId.from_name("smtp-tls")
            <OptionId.SMTP_TLS: 'smtp_tls'>
        """
        if isinstance(name, OptionId):
            return name
        try:
            return cls(name.lstrip("-").replace("-", "_"))
        except ValueError:
            raise OptionError(f"unknown option: {name!r}", details={"option": name}) from None


class ValueKind(str, Enum):
    """Value type family of an option."""

    TEXT = "text"
    FLAG = "flag"
    TEXT_LIST = "text list"
    PATH = "path"


OPTION_KINDS: Mapping[OptionId, ValueKind] = MappingProxyType(
    {
        OptionId.SMTP_SERVER: ValueKind.TEXT,
        OptionId.SMTP_USERNAME: ValueKind.TEXT,
        OptionId.SMTP_PASSWORD: ValueKind.TEXT,
        OptionId.SMTP_TLS: ValueKind.FLAG,
        OptionId.SRC_NAME: ValueKind.TEXT,
        OptionId.SRC_EMAIL: ValueKind.TEXT,
        OptionId.REPLY_NAME: ValueKind.TEXT,
        OptionId.REPLY_EMAIL: ValueKind.TEXT,
        OptionId.DST_NAME: ValueKind.TEXT_LIST,
        OptionId.DST_EMAIL: ValueKind.TEXT_LIST,
        OptionId.EMAIL_TITLE: ValueKind.TEXT,
        OptionId.EMAIL_CONTENT: ValueKind.TEXT,
        OptionId.EMAIL_FILE: ValueKind.PATH,
    }
)

#: Value returned by :meth:`Options.get_arg` for an option that was not supplied.
ZERO_VALUES: Mapping[ValueKind, Any] = MappingProxyType(
    {
        ValueKind.TEXT: "",
        ValueKind.FLAG: False,
        ValueKind.TEXT_LIST: (),
        ValueKind.PATH: None,
    }
)


def _coerce(option_id: OptionId, value: Any) -> Any:
    """Check ``value`` against the type of ``option_id`` and normalize it.

    Raises:
        OptionTypeError: If the value has the wrong type.
    """
    kind = OPTION_KINDS[option_id]

    if kind is ValueKind.TEXT:
        if isinstance(value, str):
            return value
    elif kind is ValueKind.FLAG:
        if isinstance(value, bool):
            return value
    elif kind is ValueKind.TEXT_LIST:
        if isinstance(value, str):
            return (value,)
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return tuple(value)
    elif kind is ValueKind.PATH:
        if isinstance(value, (str, os.PathLike)):
            # An empty path means "no attachment"
            return Path(value) if os.fspath(value) else None

    raise OptionTypeError(option_id.flag, kind.value, type(value).__name__)


@dataclass(frozen=True, slots=True)
class Option:
    """A single typed option value.

    Attributes:
        id: Option identifier.
        value: Option value, normalized to the option's type.

    Raises:
        OptionTypeError: If ``value`` does not match the option's type.

    Examples:
        >>> Option(OptionId.DST_EMAIL, "a@b.co").value
        ('a@b.co',)
        >>> Option(OptionId.SMTP_TLS, "yes")
        Traceback (most recent call last):
        ...
        send_mail.exceptions.OptionTypeError: invalid data type for option 'smtp-tls': expected flag, got str
    """

    id: OptionId
    value: Any

    def __post_init__(self) -> None:
        """Validate and normalize the value."""
        object.__setattr__(self, "value", _coerce(self.id, self.value))


class Options(Mapping[OptionId, Any]):
    """Read-only mapping of option identifiers to typed values.

    Built once from a sequence of :class:`Option`; no mutation is
    possible afterwards.

    Args:
        options: Options to register. Each identifier may appear once.

    Raises:
        OptionError: If an identifier is supplied more than once.
    """

    __slots__ = ("_values",)

    def __init__(self, options: Iterable[Option] = ()) -> None:
        values: dict[OptionId, Any] = {}
        for option in options:
            if option.id in values:
                raise OptionError(
                    f"option '--{option.id.flag}' given more than once",
                    details={"option": option.id.flag},
                )
            values[option.id] = option.value
        self._values: Mapping[OptionId, Any] = MappingProxyType(values)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str | OptionId, Any]) -> Options:
        """Build options from a ``{name: value}`` mapping.

        Names may be ``OptionId`` members, ids (``smtp_server``) or flag
        names (``smtp-server``). ``None`` values are skipped.

        Args:
            mapping: Option names and values.

        Returns:
            A new container.

        Raises:
            OptionError: On unknown or duplicated names.
            OptionTypeError: On values of the wrong type.
        """
        return cls(Option(OptionId.from_name(name), value) for name, value in mapping.items() if value is not None)

    def has_arg(self, option_id: OptionId) -> bool:
        """Return True if ``option_id`` was supplied."""
        return option_id in self._values

    def has_args(self, option_ids: Iterable[OptionId]) -> tuple[bool, tuple[OptionId, ...]]:
        """Check that every option in ``option_ids`` was supplied.

        Args:
            option_ids: Options to look for.

        Returns:
            Tuple of (all present, missing options in the requested order).
        """
        missing = tuple(option_id for option_id in option_ids if option_id not in self._values)
        return not missing, missing

    def get_arg(self, option_id: OptionId) -> Any:
        """Return the value of ``option_id``, or its zero value if absent.

        Zero values are ``""`` for text, ``False`` for flags, ``()`` for
        text lists and ``None`` for paths. Presence must be checked
        separately with :meth:`has_arg` or :meth:`has_args`.
        """
        if option_id in self._values:
            return self._values[option_id]
        return ZERO_VALUES[OPTION_KINDS[option_id]]

    def __getitem__(self, option_id: OptionId) -> Any:
        return self._values[option_id]

    def __iter__(self) -> Iterator[OptionId]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        # Never expose the password
        shown = {
            option_id.value: ("***" if option_id is OptionId.SMTP_PASSWORD else value)
            for option_id, value in self._values.items()
        }
        return f"Options({shown!r})"


__all__ = [
    "OPTION_KINDS",
    "ZERO_VALUES",
    "Option",
    "OptionId",
    "Options",
    "ValueKind",
]
