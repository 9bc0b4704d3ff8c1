import enum
from typing import Optional


class FileType(str, enum.Enum):
    """Tipos de adjunto que el bot acepta y sabe reenviar."""

    DOCUMENT = "document"
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"

    @property
    def send_method(self) -> str:
        """Nombre del método de pyrogram que reenvía este tipo (`send_document`, ...)."""
        return f"send_{self.value}"

    @classmethod
    def parse(cls, value: str) -> Optional["FileType"]:
        """Devuelve el miembro para `value` o None si el valor guardado no es conocido."""
        try:
            return cls(value)
        except ValueError:
            return None


class BatchRestartPolicy(str, enum.Enum):
    """Qué hacer cuando un usuario inicia un lote teniendo otro activo."""

    DISCARD = "discard"  # Se descarta el lote anterior (comportamiento histórico).
    REJECT = "reject"  # Se mantiene el lote anterior y se rechaza el nuevo.

    def __str__(self):
        return self.value


class Resolution(str, enum.Enum):
    WELCOME = "welcome"
    BATCH = "batch"
    SINGLE = "single"
    NOT_FOUND = "not-found"
