import logging
import os
import sys
import warnings
from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:
    from filerelay.core.setting import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%d-%m-%Y %I:%M:%S %p"

SUPERVISOR_ENV_KEYS = ("SUPERVISOR_PROCESS_NAME", "SUPERVISOR_ENABLED", "SUPERVISOR_GROUP_NAME")

# pyrogram y uvicorn reportan desconexiones y errores de arranque como WARNING.
THIRD_PARTY_LEVELS: Dict[str, int] = {
    "peewee": logging.CRITICAL,
    "asyncio": logging.WARNING,
    "httpx": logging.WARNING,
    "pyrogram": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
}


def under_supervisord() -> bool:
    return any(key in os.environ for key in SUPERVISOR_ENV_KEYS)


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def build_handlers(settings: "Settings", level: int) -> List[logging.Handler]:
    """
    Bajo supervisord todo va a stdout/stderr (supervisor rota sus propios logs).
    En otro caso: consola con el nivel pedido y archivo `settings.log_path` en DEBUG.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if under_supervisord():
        return [
            _handler(logging.StreamHandler(sys.stdout), level, formatter),
            _handler(logging.StreamHandler(sys.stderr), logging.WARNING, formatter),
        ]

    settings.log_path.parent.mkdir(parents=True, exist_ok=True)
    return [
        _handler(logging.StreamHandler(), level, formatter),
        _handler(logging.FileHandler(settings.log_path, encoding="utf-8"), logging.DEBUG, formatter),
    ]


def setup_logging(settings: "Settings", debug: bool = False, level: int = logging.INFO) -> None:
    """Configura el logging del proceso. `debug` fuerza DEBUG en consola."""
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    console_level = logging.DEBUG if debug else level
    logging.basicConfig(level=logging.DEBUG, handlers=build_handlers(settings, console_level))

    warnings.filterwarnings("ignore", category=DeprecationWarning, module="pyrogram")
    for name, lib_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)
