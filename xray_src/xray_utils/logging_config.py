import logging
import os
import re
import sys
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

_console = Console(stderr=True)

QUIET_LOGGERS = [
    "kaleido",
    "choreographer",
    "matplotlib",
    "urllib3",
    "asyncio",
    "fsspec",
]


class AmountFilter(logging.Filter):
    """Redacts monetary amounts from log messages.

    Enabled with XRAY_REDACT_AMOUNTS=1 so logs can be shared without
    revealing portfolio size. Weights and percentages are left alone.
    """

    PATTERNS = [
        (r"(?i)(amount|value|total)(\s*[:=]?\s*)[€$£]?\s?-?[0-9][0-9,]*(?:\.[0-9]+)?", r"\1\2[AMOUNT]"),
        (r"[€$£]\s?-?[0-9][0-9,]*(?:\.[0-9]+)?", "[AMOUNT]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        for pattern, replacement in self.PATTERNS:
            msg = re.sub(pattern, replacement, msg)

        record.msg = msg
        record.args = None
        return True


class XRayFormatter(logging.Formatter):
    PREFIX = "  \033[90mXRAY\033[0m > "

    COLORS = {
        "DEBUG": "\033[90mDEBUG\033[0m",
        "INFO": "\033[34mINFO \033[0m",
        "WARNING": "\033[33mWARN \033[0m",
        "ERROR": "\033[31mERROR\033[0m",
        "CRITICAL": "\033[31mFATAL\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        color_level = self.COLORS.get(level_name, level_name)

        log_fmt = f"{self.PREFIX}{color_level} {record.name}: {record.getMessage()}"

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
            if record.exc_text:
                log_fmt += f"\n{record.exc_text}"

        return log_fmt


def parse_level(level: Union[int, str]) -> int:
    """Accept either a logging constant or a name like 'debug'."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_root_logger(
    level: Union[int, str] = logging.INFO,
    rich: bool = False,
    redact_amounts: Optional[bool] = None,
):
    root = logging.getLogger()
    root.setLevel(parse_level(level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for h in root.handlers[:]:
        root.removeHandler(h)

    if rich:
        handler: logging.Handler = RichHandler(
            console=_console, show_path=False, markup=False
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(XRayFormatter())

    if redact_amounts is None:
        redact_amounts = os.getenv("XRAY_REDACT_AMOUNTS", "") not in ("", "0")
    if redact_amounts:
        handler.addFilter(AmountFilter())

    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a named logger.
    Assumes configure_root_logger() has been called.
    """
    return logging.getLogger(name)
