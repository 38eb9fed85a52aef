"""Error message sanitization for span recording.

Importers may load stylesheets from remote URLs, and their error messages
can echo those URLs back, credentials included. Messages are scrubbed
before they are attached to spans.
"""

from __future__ import annotations

import re

_URL_CREDENTIAL_PATTERN = re.compile(r"://[^@/\s]+:[^@/\s]+@")
_SENSITIVE_QUERY_PATTERN = re.compile(
    r"([?&](?:token|access_token|api_key|key|signature|sig)=)[^&\s'\"]+",
    re.IGNORECASE,
)


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """Redact credentials in ``msg`` and truncate it.

    Args:
        msg: Raw error message.
        max_length: Maximum length of the result.

    Returns:
        The sanitized message.

    Example:
        >>> sanitize_error_message("Can't load https://user:pw@cdn.example/a.scss?token=abc")
        "Can't load https://<REDACTED>@cdn.example/a.scss?token=<REDACTED>"
    """
    sanitized = _URL_CREDENTIAL_PATTERN.sub("://<REDACTED>@", msg)
    sanitized = _SENSITIVE_QUERY_PATTERN.sub(r"\1<REDACTED>", sanitized)
    return sanitized[:max_length]


__all__ = ["sanitize_error_message"]
