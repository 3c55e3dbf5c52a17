"""
Configuración de logging de la aplicación.

- Consola: formato legible "[fecha] [NIVEL] [logger]: mensaje"
- Archivo (opcional, LOG_FILE): un objeto JSON por línea
"""
import json
import logging
import logging.config
from datetime import datetime, timezone
from core.config import settings


class JsonLineFormatter(logging.Formatter):
    """Formatea cada registro como una línea JSON"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "context": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging() -> None:
    """
    Inicializar logging. Se llama una sola vez al importar main.py.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
        }
    }

    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": settings.LOG_FILE,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s",
            },
            "json": {
                "()": JsonLineFormatter,
            },
        },
        "handlers": handlers,
        "root": {
            "level": settings.LOG_LEVEL.upper(),
            "handlers": list(handlers.keys()),
        },
    })
