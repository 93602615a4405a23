"""Configuration file support for send_mail.

Settings that rarely change (SMTP server, credentials, sender identity,
log level) can live in a YAML file instead of being repeated on the
command line. The file is located with the following cascade, first
match wins:

1. explicit path (``--config``)
2. ``SEND_MAIL_CONFIG`` environment variable
3. ``./send-mail.conf.yml``
4. ``~/.config/send-mail/send-mail.conf.yml``

Example file::

    smtp:
      server: smtp.example.com
      username: alice
      password: secret
      tls: true
      timeout: 30
    sender:
      name: Alice
      email: alice@example.com
    logging:
      level: INFO
"""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from box import Box

from send_mail.exceptions import ConfigFileNotFoundError, ConfigFormatError

log = logging.getLogger(__name__)

#: Default configuration file name.
CONFIG_FILENAME = "send-mail.conf.yml"

#: Environment variable pointing to a configuration file.
CONFIG_ENV_VAR = "SEND_MAIL_CONFIG"

#: Values used when no configuration file provides them.
DEFAULT_CONFIG: dict[str, Any] = {
    "smtp": {
        "server": None,
        "username": None,
        "password": None,
        "tls": False,
        "timeout": 30.0,
    },
    "sender": {
        "name": None,
        "email": None,
        "reply_name": None,
        "reply_email": None,
    },
    "logging": {
        "level": "WARNING",
    },
}


def user_config_path() -> Path:
    """Return the per-user configuration file path."""
    return Path.home() / ".config" / "send-mail" / CONFIG_FILENAME


def find_config_file(explicit: Path | str | None = None) -> Path | None:
    """Locate the configuration file.

    Args:
        explicit: Path given on the command line, if any.

    Returns:
        Path of the file to load, or None if no file applies.

    Raises:
        ConfigFileNotFoundError: If an explicit or environment path does not exist.
    """
    for source, candidate in (("--config", explicit), (CONFIG_ENV_VAR, os.getenv(CONFIG_ENV_VAR))):
        if candidate:
            path = Path(candidate).expanduser()
            if not path.is_file():
                raise ConfigFileNotFoundError(
                    f"configuration file not found: {path}",
                    details={"path": str(path), "source": source},
                )
            return path

    for path in (Path.cwd() / CONFIG_FILENAME, user_config_path()):
        if path.is_file():
            return path
    return None


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if value is None and isinstance(merged.get(key), Mapping):
            # An empty section keeps its defaults
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | str | None = None) -> Box:
    """Load configuration into a :class:`box.Box` over the defaults.

    Args:
        path: Explicit configuration file, or None to search the cascade.

    Returns:
        Configuration with ``smtp``, ``sender`` and ``logging`` sections.

    Raises:
        ConfigFileNotFoundError: If an explicitly requested file is missing.
        ConfigFormatError: If the file is not valid YAML or not a mapping.

    Examples:
        >>> config = load_config()  # doctest: +SKIP
        >>> config.smtp.timeout  # doctest: +SKIP
        30.0
    """
    config_path = find_config_file(path)
    data: Mapping[str, Any] = {}

    if config_path is not None:
        log.debug("Loading configuration from %s", config_path)
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigFormatError(
                f"invalid YAML in {config_path}: {exc}",
                details={"path": str(config_path)},
            ) from exc
        except OSError as exc:
            raise ConfigFormatError(
                f"cannot read {config_path}: {exc}",
                details={"path": str(config_path)},
            ) from exc

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, Mapping):
            raise ConfigFormatError(
                f"configuration root must be a mapping, got {type(loaded).__name__}",
                details={"path": str(config_path)},
            )
        for section in ("smtp", "sender", "logging"):
            value = loaded.get(section)
            if value is not None and not isinstance(value, Mapping):
                raise ConfigFormatError(
                    f"section '{section}' must be a mapping, got {type(value).__name__}",
                    details={"path": str(config_path), "section": section},
                )
        data = loaded
    else:
        log.debug("No configuration file found, using defaults")

    return Box(_deep_merge(copy.deepcopy(DEFAULT_CONFIG), data), default_box=True, default_box_attr=None)


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "find_config_file",
    "load_config",
    "user_config_path",
]
