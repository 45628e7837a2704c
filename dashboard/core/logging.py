import json
import logging
import re
import sys
from datetime import datetime, timezone

from dashboard.core.request_context import guild_id_ctx, request_id_ctx

_TEXT_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "[req=%(request_id)s guild=%(guild_id)s] %(message)s"
)

# Discord credentials that can surface in upstream error text.
_SECRET_PATTERNS = (
    re.compile(r"(Bearer|Bot)\s+[\w.~+/=-]{20,}"),
    re.compile(r"\b((?:access_token|refresh_token|client_secret|code)=)[^&\s\"']+"),
)


def redact_secrets(message: str) -> str:
    message = _SECRET_PATTERNS[0].sub(r"\1 [redacted]", message)
    return _SECRET_PATTERNS[1].sub(r"\1[redacted]", message)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        record.guild_id = guild_id_ctx.get()
        return True


class SecretRedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "guild_id": getattr(record, "guild_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = redact_secrets(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.addFilter(SecretRedactionFilter())
    if (log_format or "text").strip().lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs full request URLs at INFO, which would include OAuth codes.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
