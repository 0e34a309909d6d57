"""JSON log output for the service."""

from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    """Attach a JSON stream handler to the root logger once per process."""

    global _CONFIGURED
    root = logging.getLogger()
    root.setLevel(level)
    if _CONFIGURED:
        return

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level", "asctime": "timestamp"},
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    _CONFIGURED = True


__all__ = ["setup_logging"]
