"""Root logger setup for the tax calculator client.

Levels come from, in order of precedence:
    1. ``TAXCALC_LOG_LEVEL`` (name such as ``WARNING`` or a number)
    2. ``TAXCALC_DEBUG_LOGGING`` / ``TAXCALC_DEBUG`` set to a truthy value
    3. the saved ``debug_logging`` preference, else ``INFO``

Every handler on the root logger gets a ``RedactingFilter`` so National
Insurance numbers are masked before a record is written anywhere.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LEVEL_ENV = "TAXCALC_LOG_LEVEL"
DEBUG_ENVS = ("TAXCALC_DEBUG_LOGGING", "TAXCALC_DEBUG")
_TRUTHY = frozenset({"1", "true", "yes", "on"})

# Same shape as the identifier accepted by the calculator form.
_NI_PATTERN = re.compile(r"\b([A-Z]{2})[0-9]{6}([A-D])\b")


def parse_level(value: Union[int, str, None]) -> Optional[int]:
    """Return a numeric level for ``value`` (``"debug"``, ``"10"``, ``10``) or ``None``."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when nothing is set."""
    env = os.environ if environ is None else environ
    raw = env.get(LEVEL_ENV, "")
    if raw.strip():
        level = parse_level(raw)
        return logging.INFO if level is None else level
    if any(env.get(name, "").strip().lower() in _TRUTHY for name in DEBUG_ENVS):
        return logging.DEBUG
    return None


def env_requests_debug() -> bool:
    """Whether the environment forces DEBUG (or lower) logging."""
    level = env_level()
    return level is not None and level <= logging.DEBUG


def redact(text: str) -> str:
    """Mask National Insurance numbers in free text: ``AB123456C`` -> ``AB******C``."""
    return _NI_PATTERN.sub(r"\1******\2", text)


class RedactingFilter(logging.Filter):
    """Rewrite log records so raw identifiers never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        rendered = record.getMessage()
        masked = redact(rendered)
        if masked != rendered:
            record.msg, record.args = masked, None
        return True


def install_redaction(logger: Optional[logging.Logger] = None) -> None:
    """Attach one ``RedactingFilter`` to each handler of ``logger`` (root by default)."""
    for handler in (logger or logging.getLogger()).handlers:
        if not any(isinstance(existing, RedactingFilter) for existing in handler.filters):
            handler.addFilter(RedactingFilter())


def configure_root(default_level: Union[int, str] = logging.INFO) -> int:
    """Install a stream handler on first use, set the level, and enable redaction.

    Returns:
        int: The level applied to the root logger.
    """
    level = env_level()
    if level is None:
        level = parse_level(default_level)
    if level is None:
        level = logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    install_redaction(root)
    return level


def apply_preferences(debug_enabled: bool) -> int:
    """Apply the saved debug preference unless the environment pins a level."""
    forced = env_level()
    if forced is not None:
        level = forced
    else:
        level = logging.DEBUG if debug_enabled else logging.INFO
    logging.getLogger().setLevel(level)
    return level


__all__ = [
    "RedactingFilter",
    "apply_preferences",
    "configure_root",
    "env_level",
    "env_requests_debug",
    "install_redaction",
    "parse_level",
    "redact",
]
