"""Secret redaction for the on-disk log file."""

import copy
import logging
import re

_MIN_SECRET_LENGTH = 8  # skip short values to avoid false positives

# Secrets generated or loaded during this process
_secret_values: set[str] = set()

# Lazy-initialized module cache, reset whenever a secret is registered
_patterns: list[re.Pattern] | None = None


def register_secret(value: str) -> None:
    """Remember a secret value so it is masked in redacted output."""
    global _patterns
    if value and len(value) >= _MIN_SECRET_LENGTH and value not in _secret_values:
        _secret_values.add(value)
        _patterns = None


def clear_secrets() -> None:
    global _patterns
    _secret_values.clear()
    _patterns = None


def _build_patterns(values: set[str]) -> list[re.Pattern]:
    # Sort by length descending so longer values match first
    return [re.compile(re.escape(v)) for v in sorted(values, key=len, reverse=True)]


def _get_patterns() -> list[re.Pattern]:
    global _patterns
    if _patterns is None:
        _patterns = _build_patterns(_secret_values)
    return _patterns


def _apply(text: str, patterns: list[re.Pattern]) -> str:
    for p in patterns:
        text = p.sub("***", text)
    return text


def redact_secrets(text: str) -> str:
    """Replace registered secret values with '***'."""
    return _apply(text, _get_patterns())


class SecretRedactingFilter(logging.Filter):
    """Logging filter that replaces secret values in log records with '***'.

    Attached to the log file handler only: credentials are shown once on the
    console after an install but never written to the daily log. The record
    is copied so other handlers still see the original message.
    Handles both f-string messages (msg is pre-formatted) and
    %-style messages (msg + args).
    """

    def filter(self, record: logging.LogRecord) -> logging.LogRecord:
        patterns = _get_patterns()
        if patterns:
            record = copy.copy(record)
            record.msg = _apply(str(record.msg), patterns)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: _apply(v, patterns) if isinstance(v, str) else v for k, v in record.args.items()}
                elif isinstance(record.args, tuple):
                    record.args = tuple(_apply(a, patterns) if isinstance(a, str) else a for a in record.args)
        return record
