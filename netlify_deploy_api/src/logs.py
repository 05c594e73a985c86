"""Logging setup with the Netlify token scrubbed from every record."""

import logging
import re
import sys
from typing import Iterable, Optional

MIN_TOKEN_LENGTH = 8
MASK = "***"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class TokenRedactingFilter(logging.Filter):
    """
    Mask API tokens in the final log line.

    The record is rendered once (msg % args), masked, and stored back with
    no args, so %-style and f-string calls are treated the same way.
    """

    def __init__(self, tokens: Iterable[Optional[str]] = ()):
        super().__init__()
        tokens = sorted({t for t in tokens if t and len(t) >= MIN_TOKEN_LENGTH}, key=len, reverse=True)
        self.pattern = re.compile("|".join(map(re.escape, tokens))) if tokens else None

    def redact(self, text: str) -> str:
        if self.pattern is None:
            return text
        return self.pattern.sub(MASK, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if self.pattern is not None:
            record.msg = self.redact(record.getMessage())
            record.args = None
        return True


def setup_logging(level: str = "INFO", tokens: Iterable[Optional[str]] = ()):
    """Configure the root logger: one stdout handler, tokens masked."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(TokenRedactingFilter(tokens))
    root.addHandler(handler)
