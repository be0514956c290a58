"""Per-request correlation id, carried through a context variable into log records."""

import logging
import uuid
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> str:
    return request_id_var.get()


def bind_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


class RequestIdLogFilter(logging.Filter):
    """Stamp the active request id on every record that does not already carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or None
        return True
