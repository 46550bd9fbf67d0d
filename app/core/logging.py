import logging
import os

# Librerías que a nivel DEBUG/INFO loguean cada request al proveedor
_NOISY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3", "cachecontrol")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> None:
    """
    Nivel del logger raíz desde LOG_LEVEL (INFO por defecto). Si uvicorn o pytest ya
    instalaron handlers, solo se ajusta el nivel.
    """
    level = logging.getLevelName((os.getenv("LOG_LEVEL") or "INFO").strip().upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)

    # El cliente HTTP y google-auth solo se escuchan si hay problemas
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
