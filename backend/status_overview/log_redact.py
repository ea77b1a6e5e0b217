"""Secret redaction for log records and outbound Jenkins request logging."""

from __future__ import annotations

import logging
import re
import traceback
from urllib.parse import urlsplit, urlunsplit

import httpx

_AUTH_HEADER_PATTERN = re.compile(r"(?i)\b(Basic|Bearer)\s+[A-Za-z0-9._~+\-/]+=*")
_KV_SECRET_PATTERN = re.compile(
    r"(?i)(\b(?:token|api_token|apitoken|password|crumb|jenkins-crumb)\b[ \t]*[=:][ \t]*)([^&\s,;\"'<>]+)"
)
_URL_PATTERN = re.compile(r"(?i)https?://[^\s\"'<>]+")

_FILTER_LOGGERS = (
    "",
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "httpx",
    "status_overview",
)
_HTTP_LOGGER = logging.getLogger("status_overview.http")


def strip_userinfo(url: str) -> str:
    """Drop ``user:password@`` from a URL and keep host/path visible."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return url
    if "@" not in parsed.netloc:
        return url
    host = parsed.netloc.rsplit("@", 1)[1]
    return urlunsplit((parsed.scheme, f"***@{host}", parsed.path, parsed.query, parsed.fragment))


def redact_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = _URL_PATTERN.sub(lambda match: strip_userinfo(match.group(0)), str(value))
    text = _AUTH_HEADER_PATTERN.sub(lambda match: f"{match.group(1)} ***", text)
    return _KV_SECRET_PATTERN.sub(r"\1***", text)


class SecretRedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            message = str(record.msg)

        record.msg = redact_text(message) or ""
        record.args = ()
        if record.exc_info:
            record.exc_text = redact_text("".join(traceback.format_exception(*record.exc_info)))
        return True


def install_log_redaction() -> None:
    """Attach the redaction filter process-wide and quiet httpx request lines."""
    redaction_filter = SecretRedactionFilter()
    for logger_name in _FILTER_LOGGERS:
        logger = logging.getLogger(logger_name)
        if not any(isinstance(existing, SecretRedactionFilter) for existing in logger.filters):
            logger.addFilter(redaction_filter)
        for handler in logger.handlers:
            if not any(isinstance(existing, SecretRedactionFilter) for existing in handler.filters):
                handler.addFilter(redaction_filter)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _log_http_response(response: httpx.Response) -> None:
    request = response.request
    _HTTP_LOGGER.debug(
        "Jenkins %s %s -> %d",
        request.method,
        strip_userinfo(str(request.url)),
        response.status_code,
    )


def httpx_event_hooks() -> dict[str, list]:
    return {"response": [_log_http_response]}
