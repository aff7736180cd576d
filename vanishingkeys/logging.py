import inspect
import logging
import logging.config
import os

from pythonjsonlogger import jsonlogger

RUNNING_IN_CLOUD_RUN = os.environ.get("K_SERVICE") is not None

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
VANISHINGKEYS_LOG_FILE = os.environ.get("VANISHINGKEYS_LOG_FILE")

LOG_FORMAT_OPEN_TELEMETRY = "open_telemetry"
LOG_FORMAT_DEVELOPMENT_TERMINAL = "dev_terminal"

LOG_FORMAT = os.environ.get("LOG_FORMAT", LOG_FORMAT_OPEN_TELEMETRY)


class DevTerminalFormatter(logging.Formatter):
    def format(self, record):
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"

        message = super().format(record)
        extra_info = ""

        # Use inspect to go up the stack until we find the _log function
        frame = inspect.currentframe()
        while frame:
            if frame.f_code.co_name == "_log":
                # Extract extra from the _log function's local variables
                extra = frame.f_locals.get("extra", {})
                if extra:
                    extra_info = " ".join([f"[{k}: {v}]" for k, v in extra.items()])
                break
            frame = frame.f_back

        return f"{message} {extra_info}".rstrip()


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, rename_fields=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.rename_fields = rename_fields if RUNNING_IN_CLOUD_RUN else {}


CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": CustomJsonFormatter,
            "fmt": "%(asctime)s %(message)s %(levelname)s %(name)s %(filename)s %(threadName)s %(process)s %(module)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
            },
        },
        "dev_terminal": {
            "()": DevTerminalFormatter,
            "format": "%(asctime)s - %(thread)s %(otelTraceID)s %(threadName)s %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "default": {
            "level": LOG_LEVEL,
            "formatter": (
                "json" if LOG_FORMAT == LOG_FORMAT_OPEN_TELEMETRY else "dev_terminal"
            ),
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "": {
            "handlers": ["default"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "botocore": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        },
        "opentelemetry.context": {
            "handlers": [],
            "level": "CRITICAL",
            "propagate": False,
        },
    },
}


def setup_logging(level: str = None, log_format: str = None):
    # explicit arguments win, otherwise LOG_LEVEL / LOG_FORMAT as set now
    level = level or os.environ.get("LOG_LEVEL", "INFO")
    log_format = log_format or os.environ.get(
        "LOG_FORMAT", LOG_FORMAT_OPEN_TELEMETRY
    )
    CONFIG["handlers"]["default"]["level"] = level
    CONFIG["loggers"][""]["level"] = level
    CONFIG["handlers"]["default"]["formatter"] = (
        "json" if log_format == LOG_FORMAT_OPEN_TELEMETRY else "dev_terminal"
    )
    # Add file handler if VANISHINGKEYS_LOG_FILE is set
    if VANISHINGKEYS_LOG_FILE and "file" not in CONFIG["handlers"]:
        CONFIG["handlers"]["file"] = {
            "level": "DEBUG",
            "formatter": ("json"),
            "class": "logging.FileHandler",
            "filename": VANISHINGKEYS_LOG_FILE,
            "mode": "a",
        }
        CONFIG["loggers"][""]["handlers"].append("file")

    logging.config.dictConfig(CONFIG)
